"""State checks asserting that a policy attachment matches what IAM reports."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from botocore.exceptions import ClientError

from core.checks.diff import KINDS, AttachmentDiff, ExpectedPrincipals
from core.constants import POLICY_ATTACHMENT_TYPE
from core.iam.inspector import IamInspector, PolicyNotFound
from core.models import ManagedPolicy, PolicyEntities, State

logger = logging.getLogger(__name__)

Check = Callable[[State], None]


class CheckFailure(AssertionError):
    """A verification step observed remote state that differs from the expectation."""


def compose(*checks: Check) -> Check:
    """Run checks in order, stopping at the first failure."""

    def run(state: State) -> None:
        total = len(checks)
        for position, check in enumerate(checks, start=1):
            try:
                check(state)
            except AssertionError as exc:
                raise CheckFailure(f"Check {position}/{total} error: {exc}") from exc

    return run


class AttachmentChecks:
    """Check factories sharing the entities listed by the most recent `exists` check."""

    def __init__(self, inspector: IamInspector | None = None) -> None:
        self.inspector = inspector or IamInspector()
        self.policy: ManagedPolicy | None = None
        self.entities: PolicyEntities | None = None

    def exists(self, address: str, expected_count: int) -> Check:
        def check(state: State) -> None:
            resource = state.root_module().get(address)
            if resource is None:
                raise CheckFailure(f"Not found: {address}")
            if not resource.id:
                raise CheckFailure("No policy name is set")

            policy_arn = str(resource.attributes.get("policy_arn") or "")
            if not policy_arn:
                raise CheckFailure(f"Error: Policy ({address}) has no policy_arn attribute")

            try:
                policy = self.inspector.get_policy(policy_arn)
            except (PolicyNotFound, ClientError) as exc:
                raise CheckFailure(f"Error: Policy ({address}) not found") from exc
            if policy.attachment_count != expected_count:
                raise CheckFailure(
                    f"Error: Policy ({address}) has wrong number of entities attached: "
                    f"expected {expected_count}, found {policy.attachment_count}"
                )

            try:
                entities = self.inspector.list_entities(policy_arn)
            except (PolicyNotFound, ClientError) as exc:
                raise CheckFailure(f"Error: Failed to get entities for Policy ({policy_arn})") from exc
            if entities.total != expected_count:
                raise CheckFailure(
                    f"Error: Policy ({address}) lists {entities.total} entities over {entities.pages} page(s), "
                    f"expected {expected_count}"
                )

            logger.info("%s: %d entities attached to %s", address, entities.total, policy_arn)
            self.policy = policy
            self.entities = entities

        return check

    def attributes(
        self,
        users: Iterable[str] = (),
        roles: Iterable[str] = (),
        groups: Iterable[str] = (),
    ) -> Check:
        expected = ExpectedPrincipals.from_iterables(users, roles, groups)

        def check(state: State) -> None:
            if self.entities is None:
                raise CheckFailure("No attached entities recorded; the exists check must run first")
            diff = AttachmentDiff(expected, self.entities)
            if not diff.matches():
                raise CheckFailure(diff.describe())

        return check

    def destroyed(self, state: State) -> None:
        """Verify every attachment recorded in `state` is gone from IAM."""
        for resource in state.of_type(POLICY_ATTACHMENT_TYPE):
            policy_arn = resource.attributes.get("policy_arn")
            if not policy_arn:
                continue
            try:
                entities = self.inspector.list_entities(str(policy_arn))
            except PolicyNotFound:
                continue

            recorded = ExpectedPrincipals.from_iterables(
                resource.attributes.get("users") or [],
                resource.attributes.get("roles") or [],
                resource.attributes.get("groups") or [],
            )
            diff = AttachmentDiff(recorded, entities)
            leftovers = {
                kind: sorted(recorded.of_kind(kind) & diff.observed_of_kind(kind)) for kind in KINDS
            }
            remaining = [f"{kind}: {', '.join(names)}" for kind, names in leftovers.items() if names]
            if remaining:
                raise CheckFailure(
                    f"Policy attachment ({resource.address}) still present after destroy; " + "; ".join(remaining)
                )


__all__ = ["AttachmentChecks", "Check", "CheckFailure", "compose"]

"""Acceptance scenarios for the policy attachment resource."""

from __future__ import annotations

from typing import Any, Callable

from core.checks.attachment import AttachmentChecks, compose
from core.constants import PAGINATED_USER_COUNT
from core.harness.runner import AcceptanceCase, Step
from core.render.fixtures import (
    basic_attachment_config,
    paginated_attachment_config,
    paginated_user_names,
    rand_int,
    rand_name,
    updated_attachment_config,
)

ATTACH_ADDRESS = "aws_iam_policy_attachment.test-attach"
PAGINATED_ADDRESS = "aws_iam_policy_attachment.test-paginated-attach"


def basic_case(
    checks: AttachmentChecks,
    *,
    region: str | None = None,
    prefix: str = "test-user",
    pre_check: Callable[[], Any] | None = None,
) -> AcceptanceCase:
    """Attach one principal of each kind, then move the attachment to new principals."""
    user1, user2, user3 = (rand_name(prefix) for _ in range(3))
    return AcceptanceCase(
        name="basic",
        pre_check=pre_check,
        check_destroy=checks.destroyed,
        steps=[
            Step(
                config=basic_attachment_config(user1, region=region),
                check=compose(
                    checks.exists(ATTACH_ADDRESS, 3),
                    checks.attributes([user1], ["test-role"], ["test-group"]),
                ),
            ),
            Step(
                config=updated_attachment_config(user1, user2, user3, region=region),
                check=compose(
                    checks.exists(ATTACH_ADDRESS, 6),
                    checks.attributes([user2, user3], ["test-role2", "test-role3"], ["test-group2", "test-group3"]),
                ),
            ),
        ],
    )


def paginated_case(
    checks: AttachmentChecks,
    *,
    count: int = PAGINATED_USER_COUNT,
    region: str | None = None,
    prefix: str = "test-user",
    pre_check: Callable[[], Any] | None = None,
) -> AcceptanceCase:
    """Attach more users than fit on one ListEntitiesForPolicy page."""
    rint = rand_int()
    return AcceptanceCase(
        name="paginated",
        pre_check=pre_check,
        check_destroy=checks.destroyed,
        steps=[
            Step(
                config=paginated_attachment_config(rint, count, region=region),
                check=compose(
                    checks.exists(PAGINATED_ADDRESS, count),
                    checks.attributes(paginated_user_names(rint, count)),
                ),
            ),
        ],
    )


SCENARIOS: dict[str, Callable[..., AcceptanceCase]] = {
    "basic": basic_case,
    "paginated": paginated_case,
}


def build_case(name: str, checks: AttachmentChecks, **kwargs: Any) -> AcceptanceCase:
    try:
        factory = SCENARIOS[name]
    except KeyError:
        raise ValueError(f"Unknown scenario: {name}") from None
    return factory(checks, **kwargs)


__all__ = ["ATTACH_ADDRESS", "PAGINATED_ADDRESS", "SCENARIOS", "basic_case", "build_case", "paginated_case"]

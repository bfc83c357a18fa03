"""Read-only IAM queries used to verify policy attachments."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError

from core.models import ManagedPolicy, PolicyEntities

logger = logging.getLogger(__name__)

ENTITY_FILTERS = {"User", "Role", "Group", "LocalManagedPolicy", "AWSManagedPolicy"}


class PolicyNotFound(LookupError):
    """Raised when IAM reports NoSuchEntity for a policy ARN."""

    def __init__(self, policy_arn: str) -> None:
        super().__init__(f"Policy {policy_arn} does not exist")
        self.policy_arn = policy_arn


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class IamInspector:
    """Look up managed policies and every principal attached to them."""

    def __init__(self, client: Any | None = None, *, page_size: int | None = None) -> None:
        if page_size is not None and page_size < 1:
            raise ValueError("page_size must be a positive integer")
        self._client = client or boto3.client("iam")
        self.page_size = page_size

    @classmethod
    def from_session(cls, session: boto3.session.Session, *, page_size: int | None = None) -> "IamInspector":
        return cls(session.client("iam"), page_size=page_size)

    def get_policy(self, policy_arn: str) -> ManagedPolicy:
        try:
            response = self._client.get_policy(PolicyArn=policy_arn)
        except ClientError as exc:
            if _error_code(exc) == "NoSuchEntity":
                raise PolicyNotFound(policy_arn) from exc
            raise
        return ManagedPolicy.model_validate(response["Policy"])

    def policy_exists(self, policy_arn: str) -> bool:
        try:
            self.get_policy(policy_arn)
        except PolicyNotFound:
            return False
        return True

    def list_entities(self, policy_arn: str, entity_filter: str | None = None) -> PolicyEntities:
        """Return users, roles and groups attached to the policy across every result page."""
        if entity_filter is not None and entity_filter not in ENTITY_FILTERS:
            raise ValueError(f"Unsupported entity filter: {entity_filter}")

        kwargs: dict[str, Any] = {"PolicyArn": policy_arn}
        if entity_filter:
            kwargs["EntityFilter"] = entity_filter
        if self.page_size:
            kwargs["PaginationConfig"] = {"PageSize": self.page_size}

        entities = PolicyEntities(policy_arn=policy_arn)
        paginator = self._client.get_paginator("list_entities_for_policy")
        try:
            for page in paginator.paginate(**kwargs):
                entities.extend_from_page(page)
        except ClientError as exc:
            if _error_code(exc) == "NoSuchEntity":
                raise PolicyNotFound(policy_arn) from exc
            raise
        logger.debug("Listed %d entities for %s over %d page(s)", entities.total, policy_arn, entities.pages)
        return entities


__all__ = ["IamInspector", "PolicyNotFound"]

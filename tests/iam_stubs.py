"""In-memory stand-in for the IAM client used across the test suite."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

ACCOUNT = "123456789012"


def policy_arn(name: str = "test-policy") -> str:
    return f"arn:aws:iam::{ACCOUNT}:policy/{name}"


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised by dummy"}}, operation)


class DummyPaginator:
    def __init__(self, client: "DummyIamClient") -> None:
        self.client = client

    def paginate(self, **kwargs: Any):
        self.client.paginate_calls.append(kwargs)
        arn = kwargs["PolicyArn"]
        if self.client.list_error:
            raise client_error(self.client.list_error, "ListEntitiesForPolicy")
        if arn not in self.client.policies:
            raise client_error("NoSuchEntity", "ListEntitiesForPolicy")
        size = kwargs.get("PaginationConfig", {}).get("PageSize") or self.client.page_limit
        attached = self.client.entities.get(arn, {})
        rows: list[tuple[str, dict[str, str]]] = []
        rows += [("PolicyUsers", {"UserName": name, "UserId": f"AIDA{name}"}) for name in attached.get("users", [])]
        rows += [("PolicyRoles", {"RoleName": name, "RoleId": f"AROA{name}"}) for name in attached.get("roles", [])]
        rows += [("PolicyGroups", {"GroupName": name, "GroupId": f"AGPA{name}"}) for name in attached.get("groups", [])]
        if not rows:
            yield {"PolicyUsers": [], "PolicyRoles": [], "PolicyGroups": [], "IsTruncated": False}
            return
        for start in range(0, len(rows), size):
            chunk = rows[start : start + size]
            page: dict[str, Any] = {"PolicyUsers": [], "PolicyRoles": [], "PolicyGroups": []}
            for key, item in chunk:
                page[key].append(item)
            page["IsTruncated"] = start + size < len(rows)
            yield page


class DummyIamClient:
    """Serves GetPolicy and paginated ListEntitiesForPolicy from dictionaries."""

    def __init__(self, page_limit: int = 100) -> None:
        self.page_limit = page_limit
        self.policies: dict[str, dict[str, Any]] = {}
        self.entities: dict[str, dict[str, list[str]]] = {}
        self.paginate_calls: list[dict[str, Any]] = []
        self.get_error: str | None = None
        self.list_error: str | None = None

    def attach(
        self,
        arn: str,
        users: list[str] | None = None,
        roles: list[str] | None = None,
        groups: list[str] | None = None,
        attachment_count: int | None = None,
    ) -> None:
        users, roles, groups = users or [], roles or [], groups or []
        count = attachment_count if attachment_count is not None else len(users) + len(roles) + len(groups)
        self.policies[arn] = {
            "Arn": arn,
            "PolicyName": arn.rsplit("/", 1)[-1],
            "PolicyId": "ANPA0000",
            "AttachmentCount": count,
            "DefaultVersionId": "v1",
        }
        self.entities[arn] = {"users": users, "roles": roles, "groups": groups}

    def delete(self, arn: str) -> None:
        self.policies.pop(arn, None)
        self.entities.pop(arn, None)

    def get_policy(self, PolicyArn: str):  # noqa: N803
        if self.get_error:
            raise client_error(self.get_error, "GetPolicy")
        if PolicyArn not in self.policies:
            raise client_error("NoSuchEntity", "GetPolicy")
        return {"Policy": dict(self.policies[PolicyArn])}

    def get_paginator(self, name: str) -> DummyPaginator:
        assert name == "list_entities_for_policy"
        return DummyPaginator(self)


def attachment_state(
    address: str = "aws_iam_policy_attachment.test-attach",
    arn: str | None = None,
    *,
    resource_id: str = "test-attachment",
    users: list[str] | None = None,
    roles: list[str] | None = None,
    groups: list[str] | None = None,
) -> dict[str, Any]:
    """Build `terraform show -json` output holding a single attachment."""
    resource_type, name = address.split(".", 1)
    return {
        "format_version": "1.0",
        "terraform_version": "1.6.0",
        "values": {
            "root_module": {
                "resources": [
                    {
                        "address": address,
                        "mode": "managed",
                        "type": resource_type,
                        "name": name,
                        "values": {
                            "id": resource_id,
                            "name": "test-attachment",
                            "policy_arn": arn or policy_arn(),
                            "users": users or [],
                            "roles": roles or [],
                            "groups": groups or [],
                        },
                    }
                ]
            }
        },
    }

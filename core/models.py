"""Data models shared across the harness."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field


class PolicyStatement(BaseModel):
    """IAM policy statement as rendered into configuration documents."""

    sid: str | None = Field(default=None, alias="Sid")
    effect: str = Field(default="Allow", alias="Effect")
    actions: list[str] | str = Field(default_factory=list, alias="Action")
    resources: list[str] | str | None = Field(default=None, alias="Resource")
    principal: dict[str, Any] | None = Field(default=None, alias="Principal")

    model_config = {
        "populate_by_name": True,
    }


class PolicyDoc(BaseModel):
    """Policy document composed of IAM statements."""

    version: str = Field(default="2012-10-17", alias="Version")
    statements: list[PolicyStatement] = Field(default_factory=list, alias="Statement")

    model_config = {
        "populate_by_name": True,
    }

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ManagedPolicy(BaseModel):
    """Subset of the GetPolicy response used for verification."""

    arn: str = Field(..., alias="Arn")
    policy_name: str = Field("", alias="PolicyName")
    policy_id: str = Field("", alias="PolicyId")
    attachment_count: int = Field(0, alias="AttachmentCount")
    default_version_id: Optional[str] = Field(default=None, alias="DefaultVersionId")
    description: Optional[str] = Field(default=None, alias="Description")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class PolicyUser(BaseModel):
    name: str = Field(..., alias="UserName")
    id: str = Field("", alias="UserId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class PolicyRole(BaseModel):
    name: str = Field(..., alias="RoleName")
    id: str = Field("", alias="RoleId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class PolicyGroup(BaseModel):
    name: str = Field(..., alias="GroupName")
    id: str = Field("", alias="GroupId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class PolicyEntities(BaseModel):
    """Principals attached to a managed policy, aggregated across every page."""

    policy_arn: str
    policy_users: list[PolicyUser] = Field(default_factory=list)
    policy_roles: list[PolicyRole] = Field(default_factory=list)
    policy_groups: list[PolicyGroup] = Field(default_factory=list)
    pages: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return len(self.policy_users) + len(self.policy_roles) + len(self.policy_groups)

    def user_names(self) -> list[str]:
        return [user.name for user in self.policy_users]

    def role_names(self) -> list[str]:
        return [role.name for role in self.policy_roles]

    def group_names(self) -> list[str]:
        return [group.name for group in self.policy_groups]

    def extend_from_page(self, page: dict[str, Any]) -> None:
        self.policy_users.extend(PolicyUser.model_validate(item) for item in page.get("PolicyUsers", []))
        self.policy_roles.extend(PolicyRole.model_validate(item) for item in page.get("PolicyRoles", []))
        self.policy_groups.extend(PolicyGroup.model_validate(item) for item in page.get("PolicyGroups", []))
        self.pages += 1


class ResourceInstance(BaseModel):
    """A single resource instance recorded in Terraform state."""

    address: str
    type: str
    name: str
    mode: str = "managed"
    index: int | str | None = None
    module: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        value = self.attributes.get("id")
        return "" if value is None else str(value)

    @property
    def in_root_module(self) -> bool:
        return not self.module


class State(BaseModel):
    """Resources known to Terraform after an apply, keyed by address."""

    terraform_version: str | None = None
    resources: dict[str, ResourceInstance] = Field(default_factory=dict)

    def root_module(self) -> dict[str, ResourceInstance]:
        return {address: res for address, res in self.resources.items() if res.in_root_module}

    def of_type(self, resource_type: str) -> list[ResourceInstance]:
        return [res for res in self.resources.values() if res.type == resource_type and res.mode == "managed"]

    def add(self, instance: ResourceInstance) -> None:
        self.resources[instance.address] = instance


__all__ = [
    "ManagedPolicy",
    "PolicyDoc",
    "PolicyEntities",
    "PolicyGroup",
    "PolicyRole",
    "PolicyStatement",
    "PolicyUser",
    "ResourceInstance",
    "State",
]

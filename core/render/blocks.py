"""Typed resource blocks rendered into Terraform configuration text."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Sequence

from core.constants import GROUP_TYPE, POLICY_ATTACHMENT_TYPE, POLICY_TYPE, ROLE_TYPE, USER_TYPE
from core.models import PolicyDoc

INDENT = "  "


class Expr(str):
    """Raw HCL expression rendered without quoting."""


def ref(resource_type: str, label: str, attribute: str = "name") -> Expr:
    return Expr(f"{resource_type}.{label}.{attribute}")


def splat(resource_type: str, label: str, attribute: str = "name") -> Expr:
    return Expr(f"{resource_type}.{label}[*].{attribute}")


def render_value(value: Any) -> str:
    if isinstance(value, Expr):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [f"{INDENT * 2}{render_value(item)}," for item in value]
        return "[\n" + "\n".join(items) + f"\n{INDENT}]"
    raise TypeError(f"Cannot render value of type {type(value).__name__}")


def render_heredoc(document: PolicyDoc, marker: str = "EOF") -> str:
    body = json.dumps(document.to_document(), indent=2)
    return f"<<{marker}\n{body}\n{marker}"


class ResourceBlock:
    """Base class for `resource "<type>" "<label>"` blocks."""

    resource_type: str = ""
    label: str

    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.label}"

    def attr(self, attribute: str) -> Expr:
        return ref(self.resource_type, self.label, attribute)

    def arguments(self) -> list[tuple[str, Any]]:
        raise NotImplementedError

    def render(self) -> str:
        lines = [f'resource "{self.resource_type}" "{self.label}" {{']
        for key, value in self.arguments():
            if value is None:
                continue
            if isinstance(value, PolicyDoc):
                lines.append(f"{INDENT}{key} = {render_heredoc(value)}")
            else:
                lines.append(f"{INDENT}{key} = {render_value(value)}")
        lines.append("}")
        return "\n".join(lines)


@dataclass(slots=True)
class IamUser(ResourceBlock):
    label: str
    name: str
    count: int | None = None

    resource_type = USER_TYPE

    def arguments(self) -> list[tuple[str, Any]]:
        return [("count", self.count), ("name", self.name)]

    def names(self) -> Expr:
        """Reference to every user name, splatted when the block is counted."""
        if self.count is not None:
            return splat(self.resource_type, self.label)
        return self.attr("name")


@dataclass(slots=True)
class IamRole(ResourceBlock):
    label: str
    name: str
    assume_role_policy: PolicyDoc

    resource_type = ROLE_TYPE

    def arguments(self) -> list[tuple[str, Any]]:
        return [("name", self.name), ("assume_role_policy", self.assume_role_policy)]


@dataclass(slots=True)
class IamGroup(ResourceBlock):
    label: str
    name: str

    resource_type = GROUP_TYPE

    def arguments(self) -> list[tuple[str, Any]]:
        return [("name", self.name)]


@dataclass(slots=True)
class IamPolicy(ResourceBlock):
    label: str
    name: str
    policy: PolicyDoc
    description: str | None = None

    resource_type = POLICY_TYPE

    def arguments(self) -> list[tuple[str, Any]]:
        return [("name", self.name), ("description", self.description), ("policy", self.policy)]


@dataclass(slots=True)
class PolicyAttachment(ResourceBlock):
    label: str
    name: str
    policy_arn: Expr | str
    users: Sequence[Expr | str] | Expr = field(default_factory=list)
    roles: Sequence[Expr | str] | Expr = field(default_factory=list)
    groups: Sequence[Expr | str] | Expr = field(default_factory=list)

    resource_type = POLICY_ATTACHMENT_TYPE

    def arguments(self) -> list[tuple[str, Any]]:
        return [
            ("name", self.name),
            ("users", self._principals(self.users)),
            ("roles", self._principals(self.roles)),
            ("groups", self._principals(self.groups)),
            ("policy_arn", self.policy_arn),
        ]

    @staticmethod
    def _principals(value: Sequence[Expr | str] | Expr) -> Any:
        if isinstance(value, Expr):
            return value
        return list(value) or None


@dataclass(slots=True)
class Configuration:
    """An ordered set of resource blocks with an optional AWS provider block."""

    blocks: list[ResourceBlock] = field(default_factory=list)
    region: str | None = None

    def add(self, *blocks: ResourceBlock) -> "Configuration":
        self.blocks.extend(blocks)
        return self

    def addresses(self) -> list[str]:
        return [block.address for block in self.blocks]

    def render(self) -> str:
        sections: list[str] = []
        if self.region:
            sections.append(f'provider "aws" {{\n{INDENT}region = {render_value(self.region)}\n}}')
        sections.extend(block.render() for block in self.blocks)
        return "\n\n".join(sections) + "\n"

    def __str__(self) -> str:
        return self.render()


__all__ = [
    "Configuration",
    "Expr",
    "IamGroup",
    "IamPolicy",
    "IamRole",
    "IamUser",
    "PolicyAttachment",
    "ResourceBlock",
    "ref",
    "render_value",
    "splat",
]

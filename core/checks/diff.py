"""Compare expected principals with the ones IAM reports as attached."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from core.models import PolicyEntities

KINDS = ("users", "roles", "groups")


@dataclass(slots=True)
class ExpectedPrincipals:
    users: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)

    @classmethod
    def from_iterables(
        cls,
        users: Iterable[str] = (),
        roles: Iterable[str] = (),
        groups: Iterable[str] = (),
    ) -> "ExpectedPrincipals":
        return cls(users=list(users), roles=list(roles), groups=list(groups))

    def of_kind(self, kind: str) -> set[str]:
        return set(getattr(self, kind))


@dataclass(slots=True)
class AttachmentDiff:
    expected: ExpectedPrincipals
    observed: PolicyEntities

    def observed_of_kind(self, kind: str) -> set[str]:
        if kind == "users":
            return set(self.observed.user_names())
        if kind == "roles":
            return set(self.observed.role_names())
        if kind == "groups":
            return set(self.observed.group_names())
        raise ValueError(f"Unknown principal kind: {kind}")

    def missing(self, kind: str) -> list[str]:
        return sorted(self.expected.of_kind(kind) - self.observed_of_kind(kind))

    def unexpected(self, kind: str) -> list[str]:
        return sorted(self.observed_of_kind(kind) - self.expected.of_kind(kind))

    def matches(self) -> bool:
        return all(not self.missing(kind) and not self.unexpected(kind) for kind in KINDS)

    def as_json(self) -> dict[str, Any]:
        report: dict[str, Any] = {}
        for kind in KINDS:
            expected = self.expected.of_kind(kind)
            report[kind] = {
                "expected": len(expected),
                "found": len(expected & self.observed_of_kind(kind)),
                "missing": self.missing(kind),
                "unexpected": self.unexpected(kind),
            }
        return report

    def as_markdown(self) -> str:
        lines = ["| Kind | Expected | Found | Missing | Unexpected |", "| --- | --- | --- | --- | --- |"]
        for kind, row in self.as_json().items():
            lines.append(
                f"| {kind} | {row['expected']} | {row['found']} | "
                f"{', '.join(row['missing']) or '-'} | {', '.join(row['unexpected']) or '-'} |"
            )
        return "\n".join(lines)

    def describe(self) -> str:
        report = self.as_json()
        lines = ["Number of attached users, roles, or groups was incorrect:"]
        for kind in KINDS:
            row = report[kind]
            line = f"expected {row['expected']} {kind} and found {row['found']}"
            if row["missing"]:
                line += f"; missing {', '.join(row['missing'])}"
            if row["unexpected"]:
                line += f"; unexpected {', '.join(row['unexpected'])}"
            lines.append(line)
        return "\n".join(lines)


__all__ = ["AttachmentDiff", "ExpectedPrincipals", "KINDS"]

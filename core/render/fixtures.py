"""Configuration fixtures for the policy attachment scenarios."""

from __future__ import annotations

import random

from core.constants import PAGINATED_USER_COUNT
from core.models import PolicyDoc, PolicyStatement
from core.render.blocks import Configuration, Expr, IamGroup, IamPolicy, IamRole, IamUser, PolicyAttachment

_random = random.SystemRandom()


def rand_int() -> int:
    return _random.randint(0, 2**31 - 1)


def rand_name(prefix: str) -> str:
    return f"{prefix}-{rand_int()}"


def ec2_assume_role_policy() -> PolicyDoc:
    return PolicyDoc(
        statements=[
            PolicyStatement(
                sid="",
                actions="sts:AssumeRole",
                principal={"Service": "ec2.amazonaws.com"},
            )
        ]
    )


def change_password_policy() -> PolicyDoc:
    return PolicyDoc(
        statements=[PolicyStatement(actions=["iam:ChangePassword"], resources="*")],
    )


def _role(label: str, name: str) -> IamRole:
    return IamRole(label=label, name=name, assume_role_policy=ec2_assume_role_policy())


def _policy(name: str = "test-policy") -> IamPolicy:
    return IamPolicy(label="policy", name=name, description="A test policy", policy=change_password_policy())


def basic_attachment_config(user: str, *, region: str | None = None) -> Configuration:
    """One user, one role and one group attached to a single policy."""
    user_block = IamUser(label="user", name=user)
    role = _role("role", "test-role")
    group = IamGroup(label="group", name="test-group")
    policy = _policy()
    attachment = PolicyAttachment(
        label="test-attach",
        name="test-attachment",
        policy_arn=policy.attr("arn"),
        users=[user_block.names()],
        roles=[role.attr("name")],
        groups=[group.attr("name")],
    )
    return Configuration(region=region).add(user_block, role, group, policy, attachment)


def updated_attachment_config(user1: str, user2: str, user3: str, *, region: str | None = None) -> Configuration:
    """Three of each principal declared, the attachment moved to the second and third."""
    users = [
        IamUser(label="user", name=user1),
        IamUser(label="user2", name=user2),
        IamUser(label="user3", name=user3),
    ]
    roles = [_role("role", "test-role"), _role("role2", "test-role2"), _role("role3", "test-role3")]
    groups = [
        IamGroup(label="group", name="test-group"),
        IamGroup(label="group2", name="test-group2"),
        IamGroup(label="group3", name="test-group3"),
    ]
    policy = _policy()
    attachment = PolicyAttachment(
        label="test-attach",
        name="test-attachment",
        policy_arn=policy.attr("arn"),
        users=[block.names() for block in users[1:]],
        roles=[block.attr("name") for block in roles[1:]],
        groups=[block.attr("name") for block in groups[1:]],
    )
    return Configuration(region=region).add(*users, *roles, *groups, policy, attachment)


def paginated_attachment_config(rint: int, count: int = PAGINATED_USER_COUNT, *, region: str | None = None) -> Configuration:
    """Enough counted users to push ListEntitiesForPolicy past a single page."""
    users = IamUser(
        label="user",
        name=Expr(f'format("paged-test-user-{rint}-%d", count.index + 1)'),
        count=count,
    )
    policy = _policy(f"tf-acc-test-policy-{rint}")
    attachment = PolicyAttachment(
        label="test-paginated-attach",
        name="test-attachment",
        policy_arn=policy.attr("arn"),
        users=users.names(),
    )
    return Configuration(region=region).add(users, policy, attachment)


def paginated_user_names(rint: int, count: int = PAGINATED_USER_COUNT) -> list[str]:
    return [f"paged-test-user-{rint}-{index}" for index in range(1, count + 1)]


__all__ = [
    "basic_attachment_config",
    "change_password_policy",
    "ec2_assume_role_policy",
    "paginated_attachment_config",
    "paginated_user_names",
    "rand_int",
    "rand_name",
    "updated_attachment_config",
]

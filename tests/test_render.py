"""Configuration rendering tests."""

from __future__ import annotations

import json

import pytest

from core.render.blocks import Configuration, Expr, IamGroup, PolicyAttachment, render_value
from core.render.fixtures import (
    basic_attachment_config,
    paginated_attachment_config,
    paginated_user_names,
    rand_name,
    updated_attachment_config,
)


def _block(rendered: str, header: str) -> str:
    start = rendered.index(header)
    end = rendered.index("\n}", start)
    return rendered[start : end + 2]


def _heredocs(rendered: str) -> list[dict]:
    documents = []
    for chunk in rendered.split("<<EOF\n")[1:]:
        documents.append(json.loads(chunk.split("\nEOF", 1)[0]))
    return documents


def test_basic_config_declares_all_resources():
    rendered = basic_attachment_config("test-user-1").render()
    assert 'resource "aws_iam_user" "user" {' in rendered
    assert 'name = "test-user-1"' in rendered
    assert 'resource "aws_iam_role" "role" {' in rendered
    assert 'resource "aws_iam_group" "group" {' in rendered
    assert 'resource "aws_iam_policy" "policy" {' in rendered
    assert 'description = "A test policy"' in rendered

    attachment = _block(rendered, 'resource "aws_iam_policy_attachment" "test-attach"')
    assert 'name = "test-attachment"' in attachment
    assert "aws_iam_user.user.name," in attachment
    assert "aws_iam_role.role.name," in attachment
    assert "aws_iam_group.group.name," in attachment
    assert "policy_arn = aws_iam_policy.policy.arn" in attachment


def test_basic_config_embeds_json_documents():
    documents = _heredocs(basic_attachment_config("u").render())
    assume_role, policy = documents
    statement = assume_role["Statement"][0]
    assert statement["Action"] == "sts:AssumeRole"
    assert statement["Principal"] == {"Service": "ec2.amazonaws.com"}
    assert statement["Effect"] == "Allow"
    assert "Resource" not in statement
    assert policy == {
        "Version": "2012-10-17",
        "Statement": [{"Effect": "Allow", "Action": ["iam:ChangePassword"], "Resource": "*"}],
    }


def test_updated_config_moves_attachment_to_new_principals():
    configuration = updated_attachment_config("u1", "u2", "u3")
    assert configuration.addresses().count("aws_iam_user.user") == 1
    assert "aws_iam_role.role3" in configuration.addresses()
    assert "aws_iam_group.group3" in configuration.addresses()

    attachment = _block(configuration.render(), 'resource "aws_iam_policy_attachment" "test-attach"')
    assert "aws_iam_user.user2.name" in attachment
    assert "aws_iam_user.user3.name" in attachment
    assert "aws_iam_user.user.name" not in attachment
    assert "aws_iam_role.role.name" not in attachment
    assert "aws_iam_group.group.name" not in attachment


def test_paginated_config_counts_users_and_splats_names():
    rendered = paginated_attachment_config(42).render()
    users = _block(rendered, 'resource "aws_iam_user" "user"')
    assert "count = 101" in users
    assert 'name = format("paged-test-user-42-%d", count.index + 1)' in users
    assert 'name = "tf-acc-test-policy-42"' in rendered

    attachment = _block(rendered, 'resource "aws_iam_policy_attachment" "test-paginated-attach"')
    assert "users = aws_iam_user.user[*].name" in attachment
    assert "roles" not in attachment
    assert "groups" not in attachment


def test_paginated_user_names_match_rendered_format():
    names = paginated_user_names(7, count=3)
    assert names == ["paged-test-user-7-1", "paged-test-user-7-2", "paged-test-user-7-3"]


def test_configuration_renders_provider_block_first():
    rendered = basic_attachment_config("u", region="eu-west-1").render()
    assert rendered.startswith('provider "aws" {\n  region = "eu-west-1"\n}\n\n')
    assert rendered.endswith("}\n")


def test_configuration_without_blocks_is_empty_line():
    assert Configuration().render() == "\n"


def test_attachment_omits_empty_principal_lists():
    group = IamGroup(label="ops", name="ops")
    attachment = PolicyAttachment(label="a", name="a", policy_arn="arn:aws:iam::aws:policy/ReadOnlyAccess", groups=[group.attr("name")])
    rendered = attachment.render()
    assert "users" not in rendered
    assert 'policy_arn = "arn:aws:iam::aws:policy/ReadOnlyAccess"' in rendered
    assert attachment.address == "aws_iam_policy_attachment.a"


def test_render_value_handles_scalars_and_expressions():
    assert render_value(True) == "true"
    assert render_value(3) == "3"
    assert render_value('say "hi"') == '"say \\"hi\\""'
    assert render_value(Expr("var.name")) == "var.name"
    assert render_value([]) == "[]"
    with pytest.raises(TypeError):
        render_value(object())


def test_rand_name_uses_prefix():
    first = rand_name("test-user")
    assert first.startswith("test-user-")
    assert first.rsplit("-", 1)[1].isdigit()

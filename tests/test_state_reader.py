"""State reader tests."""

from __future__ import annotations

import json

import pytest

from core.state.reader import StateFormatError, StateReader, build_address, load_state
from iam_stubs import attachment_state, policy_arn

STATE_V4 = {
    "version": 4,
    "terraform_version": "1.6.0",
    "serial": 3,
    "resources": [
        {
            "mode": "managed",
            "type": "aws_iam_user",
            "name": "user",
            "provider": 'provider["registry.terraform.io/hashicorp/aws"]',
            "instances": [
                {"index_key": 0, "attributes": {"id": "paged-test-user-1-1", "name": "paged-test-user-1-1"}},
                {"index_key": 1, "attributes": {"id": "paged-test-user-1-2", "name": "paged-test-user-1-2"}},
            ],
        },
        {
            "mode": "data",
            "type": "aws_caller_identity",
            "name": "current",
            "instances": [{"attributes": {"id": "123456789012"}}],
        },
        {
            "module": "module.iam",
            "mode": "managed",
            "type": "aws_iam_group",
            "name": "group",
            "instances": [{"index_key": "ops", "attributes": {"id": "ops"}}],
        },
    ],
}


def test_show_json_root_module_resources():
    state = load_state(attachment_state(users=["alice"]))
    assert state.terraform_version == "1.6.0"
    resource = state.root_module()["aws_iam_policy_attachment.test-attach"]
    assert resource.id == "test-attachment"
    assert resource.attributes["policy_arn"] == policy_arn()
    assert resource.attributes["users"] == ["alice"]


def test_show_json_child_modules_are_not_root():
    payload = attachment_state()
    payload["values"]["root_module"]["child_modules"] = [
        {
            "address": "module.extra",
            "resources": [
                {
                    "address": "module.extra.aws_iam_group.group",
                    "mode": "managed",
                    "type": "aws_iam_group",
                    "name": "group",
                    "values": {"id": "extra"},
                }
            ],
        }
    ]
    state = load_state(json.dumps(payload))
    assert "module.extra.aws_iam_group.group" in state.resources
    assert "module.extra.aws_iam_group.group" not in state.root_module()
    assert state.resources["module.extra.aws_iam_group.group"].module == "module.extra"


def test_state_file_builds_addresses(tmp_path):
    path = tmp_path / "terraform.tfstate"
    path.write_text(json.dumps(STATE_V4), encoding="utf-8")

    state = StateReader(path).load()
    assert sorted(state.resources) == [
        "aws_iam_user.user[0]",
        "aws_iam_user.user[1]",
        "data.aws_caller_identity.current",
        'module.iam.aws_iam_group.group["ops"]',
    ]
    assert state.resources["aws_iam_user.user[1]"].index == 1
    assert [res.address for res in state.of_type("aws_iam_user")] == ["aws_iam_user.user[0]", "aws_iam_user.user[1]"]
    assert state.of_type("aws_caller_identity") == []


def test_empty_show_output_is_empty_state():
    assert load_state('{"format_version": "1.0"}').resources == {}
    assert load_state("").resources == {}


def test_missing_id_is_empty_string():
    payload = attachment_state()
    del payload["values"]["root_module"]["resources"][0]["values"]["id"]
    state = load_state(payload)
    assert state.resources["aws_iam_policy_attachment.test-attach"].id == ""


@pytest.mark.parametrize(
    "payload",
    ["not json", "[1, 2]", '{"unrelated": true}', '{"version": 3, "resources": []}'],
)
def test_invalid_payloads_raise(payload):
    with pytest.raises(StateFormatError):
        load_state(payload)


def test_build_address_variants():
    assert build_address("aws_iam_user", "user") == "aws_iam_user.user"
    assert build_address("aws_iam_user", "user", index=2) == "aws_iam_user.user[2]"
    assert build_address("aws_iam_user", "user", index="a") == 'aws_iam_user.user["a"]'
    assert build_address("aws_region", "current", mode="data") == "data.aws_region.current"

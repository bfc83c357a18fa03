"""Command line interface for IAM policy attachment verification."""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from pathlib import Path
from typing import Any

import boto3

from cli import config, output
from core.checks.attachment import AttachmentChecks, CheckFailure, compose
from core.checks.diff import AttachmentDiff, ExpectedPrincipals
from core.harness.runner import require_credentials, run_case
from core.harness.scenarios import SCENARIOS, build_case
from core.harness.terraform import TerraformWorkspace, find_terraform
from core.iam.inspector import ENTITY_FILTERS, IamInspector, PolicyNotFound
from core.render.fixtures import (
    basic_attachment_config,
    paginated_attachment_config,
    rand_int,
    rand_name,
    updated_attachment_config,
)
from core.state.reader import load_state

CHECK_FAILED = 4

RENDER_SCENARIOS = ("basic", "update", "paginated")


class CLIError(Exception):
    def __init__(self, message: str, exit_code: int = 2) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="attachcheck", description="IAM policy attachment acceptance toolkit")
    parser.add_argument("--config", type=Path, default=Path("attachcheck.yml"), help="Path to CLI configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # render ----------------------------------------------------------------
    render_cmd = subparsers.add_parser("render", help="Render a scenario configuration")
    render_cmd.add_argument("--scenario", choices=RENDER_SCENARIOS, default="basic")
    render_cmd.add_argument("--user", action="append", default=[], help="User name (repeat for the update scenario)")
    render_cmd.add_argument("--seed", type=int, help="Random suffix used by the paginated scenario")
    render_cmd.add_argument("--count", type=int, help="Number of users in the paginated scenario")
    render_cmd.add_argument("--region")
    render_cmd.add_argument("--output", type=Path)

    # inspect ---------------------------------------------------------------
    inspect_cmd = subparsers.add_parser("inspect", help="List every entity attached to a policy")
    inspect_cmd.add_argument("--policy-arn", required=True)
    inspect_cmd.add_argument("--entity-filter", choices=sorted(ENTITY_FILTERS))
    inspect_cmd.add_argument("--page-size", type=int)
    inspect_cmd.add_argument("--region")
    inspect_cmd.add_argument("--output", type=Path)
    inspect_cmd.add_argument("--format", choices=config.FORMATS, help="Output format override")

    # check -----------------------------------------------------------------
    check_cmd = subparsers.add_parser("check", help="Verify an attachment recorded in Terraform state")
    check_cmd.add_argument("--state", type=Path, required=True, help="terraform show -json output or a state file")
    check_cmd.add_argument("--address", required=True)
    check_cmd.add_argument("--count", type=int, required=True, help="Expected attachment count")
    check_cmd.add_argument("--users", help="Comma separated user names expected to be attached")
    check_cmd.add_argument("--roles", help="Comma separated role names expected to be attached")
    check_cmd.add_argument("--groups", help="Comma separated group names expected to be attached")
    check_cmd.add_argument("--page-size", type=int)
    check_cmd.add_argument("--region")
    check_cmd.add_argument("--output", type=Path)
    check_cmd.add_argument("--format", choices=config.FORMATS, help="Output format override")

    # verify-destroy --------------------------------------------------------
    destroy_cmd = subparsers.add_parser("verify-destroy", help="Verify attachments in a state were removed")
    destroy_cmd.add_argument("--state", type=Path, required=True)
    destroy_cmd.add_argument("--region")
    destroy_cmd.add_argument("--output", type=Path)
    destroy_cmd.add_argument("--format", choices=config.FORMATS, help="Output format override")

    # run -------------------------------------------------------------------
    run_cmd = subparsers.add_parser("run", help="Apply, verify and destroy a scenario with Terraform")
    run_cmd.add_argument("--scenario", choices=sorted(SCENARIOS), default="basic")
    run_cmd.add_argument("--workdir", type=Path)
    run_cmd.add_argument("--count", type=int, help="Number of users in the paginated scenario")
    run_cmd.add_argument("--page-size", type=int)
    run_cmd.add_argument("--region")
    run_cmd.add_argument("--output", type=Path)
    run_cmd.add_argument("--format", choices=config.FORMATS, help="Output format override")

    return parser


def app(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        settings = config.load_settings(args.config)
        merged = settings.merge_cli(
            format_override=getattr(args, "format", None),
            region=getattr(args, "region", None),
            page_size=getattr(args, "page_size", None),
        )

        if args.command == "render":
            return _cmd_render(args, merged)
        if args.command == "inspect":
            return _cmd_inspect(args, merged)
        if args.command == "check":
            return _cmd_check(args, merged)
        if args.command == "verify-destroy":
            return _cmd_verify_destroy(args, merged)
        if args.command == "run":
            return _cmd_run(args, merged)
    except CLIError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Command implementations


def _cmd_render(args: argparse.Namespace, settings: config.Settings) -> int:
    users = list(args.user)
    if args.scenario == "basic":
        if len(users) > 1:
            raise CLIError("The basic scenario takes a single --user")
        configuration = basic_attachment_config(users[0] if users else rand_name(settings.name_prefix), region=settings.region)
    elif args.scenario == "update":
        if len(users) > 3:
            raise CLIError("The update scenario takes at most three --user values")
        while len(users) < 3:
            users.append(rand_name(settings.name_prefix))
        configuration = updated_attachment_config(*users, region=settings.region)
    else:
        if users:
            raise CLIError("The paginated scenario generates its own user names")
        seed = args.seed if args.seed is not None else rand_int()
        kwargs: dict[str, Any] = {"region": settings.region}
        if args.count is not None:
            kwargs["count"] = args.count
        configuration = paginated_attachment_config(seed, **kwargs)

    output.write_text(configuration.render(), output_path=args.output)
    return 0


def _cmd_inspect(args: argparse.Namespace, settings: config.Settings) -> int:
    inspector = _inspector(settings)
    try:
        policy = inspector.get_policy(args.policy_arn)
        entities = inspector.list_entities(args.policy_arn, entity_filter=args.entity_filter)
    except PolicyNotFound as exc:
        raise CLIError(str(exc), exit_code=CHECK_FAILED) from exc

    payload = {
        "policyArn": policy.arn,
        "policyName": policy.policy_name,
        "attachmentCount": policy.attachment_count,
        "pages": entities.pages,
        "users": entities.user_names(),
        "roles": entities.role_names(),
        "groups": entities.group_names(),
    }
    output.emit(payload, settings.default_format, output_path=args.output)
    return 0


def _cmd_check(args: argparse.Namespace, settings: config.Settings) -> int:
    state = load_state(args.state)
    checks = AttachmentChecks(_inspector(settings))
    steps = [checks.exists(args.address, args.count)]
    expected: ExpectedPrincipals | None = None
    if args.users is not None or args.roles is not None or args.groups is not None:
        expected = ExpectedPrincipals.from_iterables(
            _split(args.users), _split(args.roles), _split(args.groups)
        )
        steps.append(checks.attributes(expected.users, expected.roles, expected.groups))

    payload: dict[str, Any] = {"address": args.address, "expectedCount": args.count}
    exit_code = 0
    try:
        compose(*steps)(state)
        payload["passed"] = True
    except CheckFailure as exc:
        payload["passed"] = False
        payload["error"] = str(exc)
        exit_code = CHECK_FAILED

    if checks.policy is not None:
        payload["attachmentCount"] = checks.policy.attachment_count
    if checks.entities is not None:
        payload["pages"] = checks.entities.pages
        payload["users"] = checks.entities.user_names()
        payload["roles"] = checks.entities.role_names()
        payload["groups"] = checks.entities.group_names()
        if expected is not None:
            payload["diff"] = AttachmentDiff(expected, checks.entities).as_json()

    output.emit(payload, settings.default_format, output_path=args.output)
    return exit_code


def _cmd_verify_destroy(args: argparse.Namespace, settings: config.Settings) -> int:
    state = load_state(args.state)
    checks = AttachmentChecks(_inspector(settings))
    try:
        checks.destroyed(state)
    except CheckFailure as exc:
        output.emit({"passed": False, "error": str(exc)}, settings.default_format, output_path=args.output)
        return CHECK_FAILED
    output.emit({"passed": True}, settings.default_format, output_path=args.output)
    return 0


def _cmd_run(args: argparse.Namespace, settings: config.Settings) -> int:
    binary = find_terraform(settings.terraform_bin)
    if binary is None:
        raise CLIError(f"Terraform binary '{settings.terraform_bin}' not found on PATH")

    session = _session(settings)
    region = require_credentials(session)
    inspector = IamInspector.from_session(session, page_size=settings.page_size)
    kwargs: dict[str, Any] = {"region": region, "prefix": settings.name_prefix}
    if args.count is not None:
        if args.scenario != "paginated":
            raise CLIError("--count only applies to the paginated scenario")
        kwargs["count"] = args.count
    case = build_case(args.scenario, AttachmentChecks(inspector), **kwargs)

    workdir = args.workdir or settings.workdir or Path(tempfile.mkdtemp(prefix="attachcheck-"))
    env = {"AWS_PROFILE": settings.profile} if settings.profile else None
    workspace = TerraformWorkspace(workdir, binary=binary, env=env)

    try:
        run_case(case, workspace)
    except CheckFailure as exc:
        payload = {"scenario": case.name, "passed": False, "error": str(exc)}
        output.emit(payload, settings.default_format, output_path=args.output)
        return CHECK_FAILED
    payload = {"scenario": case.name, "passed": True, "steps": len(case.steps)}
    output.emit(payload, settings.default_format, output_path=args.output)
    return 0


# ---------------------------------------------------------------------------
# Helpers


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _session(settings: config.Settings) -> boto3.session.Session:
    return boto3.session.Session(profile_name=settings.profile, region_name=settings.region)


def _inspector(settings: config.Settings) -> IamInspector:
    return IamInspector.from_session(_session(settings), page_size=settings.page_size)


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def main() -> None:
    raise SystemExit(app())


if __name__ == "__main__":
    main()

"""Apply configurations step by step and verify the resulting state."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import boto3

from core.checks.attachment import Check, CheckFailure
from core.constants import ACCEPTANCE_ENV, DEFAULT_REGION
from core.harness.terraform import TerraformError, TerraformWorkspace
from core.models import State
from core.render.blocks import Configuration

logger = logging.getLogger(__name__)


class PreCheckError(RuntimeError):
    """Raised when the environment cannot run acceptance scenarios."""


@dataclass(slots=True)
class Step:
    config: str | Configuration
    check: Check | None = None
    expect_non_empty_plan: bool = False


@dataclass(slots=True)
class AcceptanceCase:
    steps: list[Step] = field(default_factory=list)
    pre_check: Callable[[], Any] | None = None
    check_destroy: Check | None = None
    name: str = "case"


def acceptance_enabled(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get(ACCEPTANCE_ENV))


def require_credentials(session: boto3.session.Session | None = None) -> str:
    """Ensure AWS credentials resolve and return the region scenarios should use."""
    session = session or boto3.session.Session()
    if session.get_credentials() is None:
        raise PreCheckError("AWS credentials must be configured to run acceptance scenarios")
    return session.region_name or os.getenv("AWS_DEFAULT_REGION") or DEFAULT_REGION


def run_case(case: AcceptanceCase, workspace: TerraformWorkspace) -> State | None:
    """Run every step, then destroy and verify the destroy.

    A failing step is re-raised after a best-effort destroy. The destroy
    check still runs against the last state shown, but its failure is only
    logged so the step failure is what propagates.
    """
    if case.pre_check is not None:
        case.pre_check()

    shown: list[State] = []
    try:
        last_state = _run_steps(case, workspace, shown)
    except Exception:
        if _destroy_after_failure(case, workspace) and shown:
            _check_destroy_after_failure(case, shown[-1])
        raise

    workspace.destroy()
    if case.check_destroy is not None and last_state is not None:
        case.check_destroy(last_state)
    logger.info("%s: passed %d step(s)", case.name, len(case.steps))
    return last_state


def _run_steps(case: AcceptanceCase, workspace: TerraformWorkspace, shown: list[State]) -> State | None:
    last_state: State | None = None
    total = len(case.steps)
    for number, step in enumerate(case.steps, start=1):
        logger.info("%s: applying step %d/%d", case.name, number, total)
        workspace.write_config(step.config)
        workspace.apply()
        if not step.expect_non_empty_plan and not workspace.plan_is_empty():
            raise CheckFailure(f"Step {number}/{total} error: After applying this step, the plan was not empty")
        last_state = workspace.show()
        shown.append(last_state)
        if step.check is None:
            continue
        try:
            step.check(last_state)
        except AssertionError as exc:
            raise CheckFailure(f"Step {number}/{total} error: {exc}") from exc
    return last_state


def _destroy_after_failure(case: AcceptanceCase, workspace: TerraformWorkspace) -> bool:
    try:
        workspace.destroy()
    except TerraformError as exc:
        logger.warning("%s: destroy after a failed step also failed, resources may be left behind: %s", case.name, exc)
        return False
    return True


def _check_destroy_after_failure(case: AcceptanceCase, state: State) -> None:
    if case.check_destroy is None:
        return
    try:
        case.check_destroy(state)
    except Exception as exc:
        logger.warning("%s: destroy check after a failed step also failed: %s", case.name, exc)


__all__ = [
    "AcceptanceCase",
    "PreCheckError",
    "Step",
    "acceptance_enabled",
    "require_credentials",
    "run_case",
]

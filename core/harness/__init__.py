"""Terraform-driven acceptance harness."""

from .runner import AcceptanceCase, PreCheckError, Step, acceptance_enabled, require_credentials, run_case
from .terraform import TerraformError, TerraformWorkspace, find_terraform

__all__ = [
    "AcceptanceCase",
    "PreCheckError",
    "Step",
    "TerraformError",
    "TerraformWorkspace",
    "acceptance_enabled",
    "find_terraform",
    "require_credentials",
    "run_case",
]

"""Drive the Terraform CLI inside a scratch working directory."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from core.models import State
from core.render.blocks import Configuration
from core.state.reader import load_state

logger = logging.getLogger(__name__)

COMMON_FLAGS = ("-input=false", "-no-color")


class TerraformError(RuntimeError):
    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        super().__init__(f"{' '.join(command)} exited with status {returncode}: {stderr.strip()}")
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


def find_terraform(binary: str = "terraform") -> str | None:
    return shutil.which(binary)


@dataclass(slots=True)
class TerraformWorkspace:
    """A directory holding one configuration file and the state Terraform keeps for it."""

    workdir: Path
    binary: str = "terraform"
    env: dict[str, str] | None = None
    config_name: str = "main.tf"

    _initialized: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.workdir = Path(self.workdir)
        self.workdir.mkdir(parents=True, exist_ok=True)

    @property
    def config_path(self) -> Path:
        return self.workdir / self.config_name

    def write_config(self, config: str | Configuration) -> Path:
        rendered = config.render() if isinstance(config, Configuration) else config
        self.config_path.write_text(rendered, encoding="utf-8")
        return self.config_path

    def init(self) -> None:
        self._run("init", *COMMON_FLAGS)
        self._initialized = True

    def apply(self) -> None:
        if not self._initialized:
            self.init()
        self._run("apply", "-auto-approve", *COMMON_FLAGS)

    def plan_is_empty(self) -> bool:
        # -detailed-exitcode: 0 means no changes, 2 means changes pending.
        result = self._run("plan", "-detailed-exitcode", *COMMON_FLAGS, allowed=(0, 2))
        return result.returncode == 0

    def show(self) -> State:
        result = self._run("show", "-json", "-no-color")
        return load_state(result.stdout)

    def destroy(self) -> None:
        if not self._initialized:
            self.init()
        self._run("destroy", "-auto-approve", *COMMON_FLAGS)

    def _run(self, *args: str, allowed: Sequence[int] = (0,)) -> subprocess.CompletedProcess[str]:
        command = [self.binary, *args]
        logger.info("Running %s in %s", " ".join(command), self.workdir)
        env = {**os.environ, "TF_IN_AUTOMATION": "1", **(self.env or {})}
        result = subprocess.run(command, cwd=self.workdir, env=env, capture_output=True, text=True)
        if result.returncode not in allowed:
            raise TerraformError(command, result.returncode, result.stderr)
        return result


__all__ = ["TerraformError", "TerraformWorkspace", "find_terraform"]

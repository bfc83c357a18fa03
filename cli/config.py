"""Configuration loader for the attachcheck CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULTS = {
    "region": None,
    "profile": None,
    "terraform_bin": "terraform",
    "default_format": "json",
    "page_size": None,
    "name_prefix": "test-user",
    "workdir": None,
}

FORMATS = ("json", "md", "table")


@dataclass(slots=True)
class Settings:
    region: str | None = DEFAULTS["region"]
    profile: str | None = DEFAULTS["profile"]
    terraform_bin: str = DEFAULTS["terraform_bin"]
    default_format: str = DEFAULTS["default_format"]
    page_size: int | None = DEFAULTS["page_size"]
    name_prefix: str = DEFAULTS["name_prefix"]
    workdir: Path | None = DEFAULTS["workdir"]

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Settings":
        page_size = data.get("page_size", DEFAULTS["page_size"])
        workdir = data.get("workdir", DEFAULTS["workdir"])
        default_format = data.get("default_format", DEFAULTS["default_format"])
        if default_format not in FORMATS:
            raise ValueError(f"default_format must be one of: {', '.join(FORMATS)}")
        return cls(
            region=data.get("region", DEFAULTS["region"]),
            profile=data.get("profile", DEFAULTS["profile"]),
            terraform_bin=data.get("terraform_bin", DEFAULTS["terraform_bin"]),
            default_format=default_format,
            page_size=int(page_size) if page_size is not None else None,
            name_prefix=data.get("name_prefix", DEFAULTS["name_prefix"]),
            workdir=Path(workdir) if workdir else None,
        )

    def merge_cli(
        self,
        format_override: str | None = None,
        region: str | None = None,
        page_size: int | None = None,
    ) -> "Settings":
        return Settings(
            region=region or self.region,
            profile=self.profile,
            terraform_bin=self.terraform_bin,
            default_format=format_override or self.default_format,
            page_size=page_size if page_size is not None else self.page_size,
            name_prefix=self.name_prefix,
            workdir=self.workdir,
        )


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError("Configuration file must be a mapping of keys to values.")

    return Settings.from_mapping(data)


__all__ = ["FORMATS", "Settings", "load_settings"]

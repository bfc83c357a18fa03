"""Output helpers for the attachcheck CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def render(data: dict[str, Any], fmt: str) -> str:
    if fmt == "json":
        return json.dumps(data, indent=2)
    if fmt == "md":
        return _to_markdown(data)
    if fmt == "table":
        return _to_table(data)
    raise ValueError(f"Unsupported format: {fmt}")


def emit(data: dict[str, Any], fmt: str, output_path: Path | None = None) -> None:
    rendered = render(data, fmt)
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered + ("\n" if not rendered.endswith("\n") else ""), encoding="utf-8")
    else:
        print(rendered)


def write_text(text: str, output_path: Path | None = None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def _cell(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or "-"
    return str(value)


def _to_markdown(data: dict[str, Any]) -> str:
    lines = ["| Key | Value |", "| --- | --- |"]
    for key, value in data.items():
        lines.append(f"| {key} | {_cell(value)} |")
    return "\n".join(lines)


def _to_table(data: dict[str, Any]) -> str:
    width = max((len(key) for key in data), default=0)
    return "\n".join(f"{key.ljust(width)} : {_cell(value)}" for key, value in data.items())


__all__ = ["emit", "render", "write_text"]

"""Utilities for loading Terraform state from `terraform show -json` or state files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from core.models import ResourceInstance, State


class StateFormatError(ValueError):
    """Raised when a payload is neither show-json output nor a v4 state file."""


def _format_index(index: Any) -> str:
    if index is None:
        return ""
    if isinstance(index, int):
        return f"[{index}]"
    return f"[{json.dumps(str(index))}]"


def build_address(
    resource_type: str,
    name: str,
    *,
    mode: str = "managed",
    index: Any = None,
    module: str | None = None,
) -> str:
    address = f"{resource_type}.{name}"
    if mode == "data":
        address = f"data.{address}"
    if module:
        address = f"{module}.{address}"
    return address + _format_index(index)


@dataclass(slots=True)
class StateReader:
    """Load Terraform state from a path, raw JSON text or an already decoded mapping."""

    source: Path | str | dict[str, Any]

    def load(self) -> State:
        payload = self._decode()
        if not payload:
            return State()
        if "values" in payload or ("format_version" in payload and "resources" not in payload):
            return self._from_show(payload)
        if "resources" in payload:
            return self._from_state_file(payload)
        raise StateFormatError("Unrecognized Terraform state payload")

    # Decoding ------------------------------------------------------------
    def _decode(self) -> dict[str, Any]:
        if isinstance(self.source, dict):
            return self.source
        if isinstance(self.source, Path):
            text = self.source.read_text(encoding="utf-8")
        else:
            text = self.source
        text = text.strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StateFormatError(f"State is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StateFormatError("State must be a JSON object")
        return data

    # terraform show -json --------------------------------------------------
    def _from_show(self, payload: dict[str, Any]) -> State:
        state = State(terraform_version=payload.get("terraform_version"))
        values = payload.get("values") or {}
        root = values.get("root_module") or {}
        for instance in self._walk_module(root):
            state.add(instance)
        return state

    def _walk_module(self, module: dict[str, Any]) -> Iterator[ResourceInstance]:
        module_address = module.get("address")
        for entry in module.get("resources", []) or []:
            resource_type = entry.get("type", "")
            name = entry.get("name", "")
            mode = entry.get("mode", "managed")
            index = entry.get("index")
            address = entry.get("address") or build_address(
                resource_type, name, mode=mode, index=index, module=module_address
            )
            yield ResourceInstance(
                address=address,
                type=resource_type,
                name=name,
                mode=mode,
                index=index,
                module=module_address,
                attributes=entry.get("values") or {},
            )
        for child in module.get("child_modules", []) or []:
            yield from self._walk_module(child)

    # terraform.tfstate (v4) -----------------------------------------------
    def _from_state_file(self, payload: dict[str, Any]) -> State:
        version = payload.get("version")
        if version is not None and version < 4:
            raise StateFormatError(f"Unsupported state version {version}")
        state = State(terraform_version=payload.get("terraform_version"))
        for entry in payload.get("resources", []) or []:
            resource_type = entry.get("type", "")
            name = entry.get("name", "")
            mode = entry.get("mode", "managed")
            module = entry.get("module")
            for instance in entry.get("instances", []) or []:
                index = instance.get("index_key")
                state.add(
                    ResourceInstance(
                        address=build_address(resource_type, name, mode=mode, index=index, module=module),
                        type=resource_type,
                        name=name,
                        mode=mode,
                        index=index,
                        module=module,
                        attributes=instance.get("attributes") or {},
                    )
                )
        return state


def load_state(source: Path | str | dict[str, Any]) -> State:
    return StateReader(source).load()


__all__ = ["StateFormatError", "StateReader", "build_address", "load_state"]

"""
Tool configuration.

Settings come from an optional `relgen.toml`:

    [instructions]
    extension = ".instructions"

    [differ]
    pattern = "*.beam"

    [renderer]
    name = "tagged"

Command-line options override file values.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .errors import ConfigurationError, InstructionIOError
from .render import list_renderers
from .store import DEFAULT_EXTENSION

CONFIG_FILENAME = "relgen.toml"


@dataclass(frozen=True)
class RelgenConfig:
    extension: str = DEFAULT_EXTENSION
    module_pattern: str = "*"
    renderer: str = "tagged"

    def with_overrides(self, **overrides: Any) -> RelgenConfig:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self, **values)
        config.check()
        return config

    def check(self, path: Path | None = None) -> None:
        if not self.extension.strip() or self.extension.strip() == ".":
            raise ConfigurationError("instructions.extension must not be empty", path=path)
        if not self.module_pattern.strip():
            raise ConfigurationError("differ.pattern must not be empty", path=path)
        if self.renderer not in list_renderers():
            raise ConfigurationError(
                f"Unknown renderer '{self.renderer}' (available: {', '.join(list_renderers())})",
                path=path,
            )


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string(table: dict[str, Any], key: str, default: str, label: str, path: Path) -> str:
    value = table.get(key, default)
    if not isinstance(value, str):
        raise ConfigurationError(f"{label} must be a string", path=path)
    return value.strip()


def load_config(path: Path) -> RelgenConfig:
    """Load configuration from a TOML file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InstructionIOError.wrap("Error reading config", path, exc) from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"Config is not UTF-8 text ({exc.reason})", path=path) from exc

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Unparseable config: {exc}", path=path) from exc

    defaults = RelgenConfig()
    instructions = _coerce_dict(data.get("instructions"))
    differ = _coerce_dict(data.get("differ"))
    renderer = _coerce_dict(data.get("renderer"))

    config = RelgenConfig(
        extension=_string(instructions, "extension", defaults.extension, "instructions.extension", path),
        module_pattern=_string(differ, "pattern", defaults.module_pattern, "differ.pattern", path),
        renderer=_string(renderer, "name", defaults.renderer, "renderer.name", path),
    )
    config.check(path)
    return config


def find_config(start: Path) -> Path | None:
    """Return `relgen.toml` in `start` if present."""
    candidate = start / CONFIG_FILENAME
    return candidate if candidate.is_file() else None

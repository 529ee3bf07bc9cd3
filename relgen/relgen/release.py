"""
Release descriptor loading.

A release descriptor lists the components shipped in one release. YAML and
TOML are both accepted:

    name: shop
    version: "2"
    components:
      - name: foo
        version: "2.0"
        artifact_dir: lib/foo-2.0/ebin

Relative artifact directories are resolved against the descriptor's own
directory. Every top-level key other than `components` is kept as metadata.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError, InstructionIOError
from .models import ComponentInfo, ReleaseDescriptor

_COMPONENT_FIELDS = ("name", "version", "artifact_dir")


def load_release(path: Path) -> ReleaseDescriptor:
    """Load a release descriptor from YAML or TOML."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InstructionIOError.wrap("Error reading release descriptor", path, exc) from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"Release descriptor is not UTF-8 text ({exc.reason})", path=path) from exc

    data = _parse(text, path)
    if not isinstance(data, dict):
        raise ConfigurationError("Release descriptor must be a mapping", path=path)

    raw_components = data.get("components")
    if not isinstance(raw_components, list):
        raise ConfigurationError("Release descriptor needs a 'components' list", path=path)

    base_dir = path.parent
    components: list[ComponentInfo] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_components):
        info = _parse_component(raw, index, base_dir, path)
        if info.name in seen:
            raise ConfigurationError("Duplicate component in release", path=path, component=info.name)
        seen.add(info.name)
        components.append(info)

    metadata = {k: v for k, v in data.items() if k != "components"}
    return ReleaseDescriptor(source_file=path, metadata=metadata, components=tuple(components))


def _parse(text: str, path: Path) -> Any:
    try:
        if path.suffix.lower() == ".toml":
            return tomllib.loads(text)
        return yaml.safe_load(text)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unparseable release descriptor: {exc}", path=path) from exc


def _parse_component(raw: Any, index: int, base_dir: Path, path: Path) -> ComponentInfo:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Component #{index} must be a mapping", path=path)

    values: dict[str, str] = {}
    for field_name in _COMPONENT_FIELDS:
        value = raw.get(field_name)
        # ints are safe to stringify; floats are not ("1.10" would read as 1.1)
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(
                f"Component #{index} needs a string '{field_name}' (quote numeric versions)",
                path=path,
                component=raw.get("name") if isinstance(raw.get("name"), str) else None,
            )
        values[field_name] = value.strip()

    artifact_dir = Path(values["artifact_dir"])
    if not artifact_dir.is_absolute():
        artifact_dir = base_dir / artifact_dir

    return ComponentInfo(name=values["name"], version=values["version"], artifact_dir=artifact_dir)

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from relgen.errors import ConfigurationError, InstructionIOError
from relgen.models import ComponentInfo, InstructionFile, VersionInstructions
from relgen.store import HEADER_PREFIX, InstructionFileStore, render_instruction_file


def _instruction_file(up: list[str], down: list[str]) -> InstructionFile:
    return InstructionFile(
        version="2.0",
        up_from=[VersionInstructions(v, [{"kind": "changed", "module": "m"}]) for v in up],
        down_to=[VersionInstructions(v, []) for v in down],
    )


def test_path_for_uses_artifact_dir_and_name(tmp_path: Path) -> None:
    component = ComponentInfo("foo", "2.0", tmp_path / "lib" / "foo-2.0")

    assert InstructionFileStore().path_for(component) == tmp_path / "lib" / "foo-2.0" / "foo.instructions"
    assert InstructionFileStore("upgrade").path_for(component).name == "foo.upgrade"


def test_written_file_has_header_record_and_trailing_blank_line(tmp_path: Path) -> None:
    store = InstructionFileStore()
    path = tmp_path / "foo.instructions"

    store.write(path, _instruction_file(["1.0"], ["1.0"]))

    text = path.read_text(encoding="utf-8")
    lines = text.split("\n")
    assert lines[0].startswith(HEADER_PREFIX)
    datetime.fromisoformat(lines[0][len(HEADER_PREFIX):])
    assert lines[1] == ""
    assert text.endswith("\n\n")

    loaded = store.load(path)
    assert loaded.version == "2.0"
    assert loaded.up_map() == {"1.0": [{"kind": "changed", "module": "m"}]}
    assert loaded.down_map() == {"1.0": []}


def test_render_uses_given_timestamp() -> None:
    now = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
    text = render_instruction_file(_instruction_file(["1.0"], ["1.0"]), now=now)
    assert text.startswith("# Generated by relgen: 2026-10-17T09:30:00+00:00\n\n")
    assert "version: '2.0'" in text


def test_write_rejects_mismatched_versions_before_writing(tmp_path: Path) -> None:
    path = tmp_path / "foo.instructions"

    with pytest.raises(ConfigurationError, match="Mismatched") as excinfo:
        InstructionFileStore().write(path, _instruction_file(["1.0", "1.1"], ["1.0"]))

    assert excinfo.value.path == path
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_validate_ignores_order(store: InstructionFileStore) -> None:
    store.validate(_instruction_file(["1.1", "1.0"], ["1.0", "1.1"]))


def test_load_rejects_mismatched_versions(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "foo.instructions"
    path.write_text(
        "version: '2.0'\n"
        "up_from:\n"
        "- {version: '1.0', instructions: []}\n"
        "- {version: '1.1', instructions: []}\n"
        "down_to:\n"
        "- {version: '1.0', instructions: []}\n",
        encoding="utf-8",
    )
    component = ComponentInfo("foo", "2.0", tmp_path)

    with pytest.raises(ConfigurationError) as excinfo:
        store.load(path, component)

    message = str(excinfo.value)
    assert "Mismatched" in message
    assert "foo 2.0" in message
    assert str(path) in message


def test_load_requires_exactly_one_record(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "foo.instructions"
    record = "version: '2.0'\nup_from: []\ndown_to: []\n"
    path.write_text(record + "---\n" + record, encoding="utf-8")

    with pytest.raises(ConfigurationError, match="expected one record, found 2"):
        store.load(path)

    path.write_text("# only a comment\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="found 0"):
        store.load(path)


@pytest.mark.parametrize(
    "body, fragment",
    [
        ("- 1\n- 2\n", "expected a mapping"),
        ("version: '2.0'\nup_from: []\n", "expected keys"),
        ("version: '2.0'\nup_from: []\ndown_to: []\nextra: 1\n", "expected keys"),
        ("version: 2.0\nup_from: []\ndown_to: []\n", "version must be a string"),
        ("version: '2.0'\nup_from: {}\ndown_to: []\n", "up_from must be a list"),
        ("version: '2.0'\nup_from: [{version: '1.0'}]\ndown_to: []\n", "exactly the keys"),
        ("version: '2.0'\nup_from: []\ndown_to: [{version: 1.0, instructions: []}]\n", "versions must be strings"),
        ("version: '2.0'\nup_from: [{version: '1.0', instructions: x}]\ndown_to: []\n", "must be a list"),
        ("version: '2.0'\nup_from: [\n", "Invalid instruction file"),
    ],
)
def test_load_rejects_malformed_records(tmp_path: Path, store: InstructionFileStore, body: str, fragment: str) -> None:
    path = tmp_path / "foo.instructions"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=fragment):
        store.load(path)


def test_load_missing_file_is_io_error(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "missing.instructions"

    with pytest.raises(InstructionIOError) as excinfo:
        store.load(path)

    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path == path
    assert str(path) in str(excinfo.value)


def test_write_failure_is_io_error(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "no-such-dir" / "foo.instructions"

    with pytest.raises(InstructionIOError, match="Failed to write"):
        store.write(path, _instruction_file(["1.0"], ["1.0"]))

    assert not path.parent.exists()


def test_write_replaces_whole_file(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "foo.instructions"
    path.write_text("stale contents that are much longer than the new record " * 20, encoding="utf-8")

    store.write(path, _instruction_file(["1.0"], ["1.0"]))

    assert "stale" not in path.read_text(encoding="utf-8")
    assert not (tmp_path / "foo.instructions.tmp").exists()
    assert store.load(path).up_versions() == ["1.0"]


def test_write_failure_leaves_no_temp_file(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "foo.instructions"
    path.mkdir()
    (path / "occupied").write_text("", encoding="utf-8")

    with pytest.raises(InstructionIOError, match="Failed to write"):
        store.write(path, _instruction_file(["1.0"], ["1.0"]))

    assert not (tmp_path / "foo.instructions.tmp").exists()


def test_load_rejects_non_utf8_file(tmp_path: Path, store: InstructionFileStore) -> None:
    path = tmp_path / "foo.instructions"
    path.write_bytes(b"version: '2.0'\n# \xff\xfe\nup_from: []\ndown_to: []\n")
    component = ComponentInfo("foo", "2.0", tmp_path)

    with pytest.raises(ConfigurationError, match="not UTF-8") as excinfo:
        store.load(path, component)

    assert excinfo.value.path == path
    assert excinfo.value.component == "foo"

"""Tests for validgen.collector."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.source_builder import SourceTreeBuilder
from validgen.collector import SourceCollector, SourceReadError, is_generated, is_source


def _relative(units, root: Path) -> list[str]:
    return [unit.path.relative_to(root).as_posix() for unit in units]


def test_single_file_root_yields_exactly_that_file(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"widgets.py": "X = 1\n", "other.py": "Y = 2\n"})

    units = list(SourceCollector().collect(source_tree.path("widgets.py")))

    assert _relative(units, source_tree.path()) == ["widgets.py"]
    unit = units[0]
    assert unit.module == "widgets"
    assert unit.package == ""
    assert unit.is_package is False
    assert unit.source == b"X = 1\n"


def test_directory_skips_generated_and_non_python_files(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "widgets.py": "X = 1\n",
            "widgets_validator.py": "# generated\n",
            "notes.txt": "not python\n",
            "stubs.pyi": "X: int\n",
            "nested/deep.py": "Z = 3\n",
        }
    )

    units = list(SourceCollector().collect(source_tree.path()))

    assert _relative(units, source_tree.path()) == ["widgets.py"]


def test_recursive_walk_descends_into_subdirectories(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "a.py": "",
            "pkg/__init__.py": "",
            "pkg/b.py": "",
            "pkg/sub/c.py": "",
            "pkg/sub/c_validator.py": "",
        }
    )

    units = list(SourceCollector(recursive=True).collect(source_tree.path()))

    assert _relative(units, source_tree.path()) == [
        "a.py",
        "pkg/__init__.py",
        "pkg/b.py",
        "pkg/sub/c.py",
    ]
    by_path = {unit.path.relative_to(source_tree.path()).as_posix(): unit for unit in units}
    assert by_path["pkg/b.py"].package == "pkg"
    assert by_path["pkg/b.py"].is_package is True
    assert by_path["pkg/sub/c.py"].package == "pkg.sub"
    assert by_path["pkg/sub/c.py"].is_package is False


def test_recursive_walk_skips_tool_directories_and_excludes(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "keep.py": "",
            ".venv/lib/site.py": "",
            "__pycache__/cached.py": "",
            "legacy/old.py": "",
            "api/schema_pb2.py": "",
            "api/schema.py": "",
        }
    )

    collector = SourceCollector(recursive=True, exclude_paths=["legacy/", "*_pb2.py"])
    units = list(collector.collect(source_tree.path()))

    assert _relative(units, source_tree.path()) == ["keep.py", "api/schema.py"]


def test_missing_root_raises_before_iteration(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(FileNotFoundError) as excinfo:
        SourceCollector().collect(missing)

    assert str(missing) in str(excinfo.value)


def test_unreadable_source_is_fatal(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"good.py": "X = 1\n"})
    source_tree.path("bad.py").symlink_to(source_tree.path("gone.py"))

    with pytest.raises(SourceReadError) as excinfo:
        list(SourceCollector().collect(source_tree.path()))

    assert excinfo.value.path == source_tree.path("bad.py")


def test_sources_are_kept_as_raw_bytes(source_tree: SourceTreeBuilder) -> None:
    source_tree.path("legacy.py").write_bytes("# -*- coding: latin-1 -*-\nNAME = 'caf\xe9'\n".encode("latin-1"))

    (unit,) = SourceCollector().collect(source_tree.path("legacy.py"))

    assert unit.source.startswith(b"# -*- coding: latin-1 -*-")
    assert b"caf\xe9" in unit.source


def test_root_stat_failure_keeps_reason(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    locked = tmp_path / "locked"
    original_stat = Path.stat

    def fake_stat(self, *args, **kwargs):
        if self == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return original_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", fake_stat)

    with pytest.raises(SourceReadError) as excinfo:
        SourceCollector().collect(locked)

    assert excinfo.value.path == locked
    assert "Permission denied" in str(excinfo.value)
    assert "not found" not in str(excinfo.value)


def test_name_helpers() -> None:
    assert is_generated("widgets_validator.py")
    assert not is_source("widgets_validator.py")
    assert is_source("widgets.py")
    assert not is_source("widgets.pyi")

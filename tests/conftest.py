from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable, Iterator, List

import pytest

from tests._fixtures.source_builder import SourceTreeBuilder


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTreeBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return SourceTreeBuilder(tmp_path)


@pytest.fixture
def import_from(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[Path, str], ModuleType]]:
    """Import a module from a directory and unload everything loaded from there afterwards."""
    directories: List[str] = []

    def _import(directory: Path, name: str) -> ModuleType:
        directories.append(str(directory.resolve()))
        monkeypatch.syspath_prepend(str(directory))
        importlib.invalidate_caches()
        return importlib.import_module(name)

    yield _import

    for name, module in list(sys.modules.items()):
        location = getattr(module, "__file__", None) or ""
        if any(str(Path(location).resolve()).startswith(root) for root in directories if location):
            sys.modules.pop(name, None)


@pytest.fixture(autouse=True)
def reset_validgen_logger() -> Iterator[None]:
    """Undo handlers installed by configure_logging during CLI tests."""
    yield
    logger = logging.getLogger("validgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.proto_builder import ProtoTreeBuilder


@pytest.fixture
def proto_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ProtoTreeBuilder:
    """Provide a proto tree rooted under tmp_path, used as the working directory."""
    builder = ProtoTreeBuilder(tmp_path)
    monkeypatch.chdir(builder.root)
    return builder


@pytest.fixture(autouse=True)
def _reset_protowrap_logger() -> None:
    """Undo CLI logging configuration so caplog sees protowrap records."""
    logger = logging.getLogger("protowrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from catalog.schemas import ParsedRecord
from utils.config_loader import load_config


def make_record(title: str, artist: str, filename: str | None = None,
                mod_time: float = 0.0, difficulty: int = 3, file_size: int = 100) -> ParsedRecord:
    labels = {1: "초급", 2: "초급", 3: "중급", 4: "고급", 5: "최상"}
    return ParsedRecord(
        difficulty_code=difficulty,
        difficulty_label=labels[difficulty],
        title=title,
        artist=artist,
        filename=filename or f"{difficulty}-{title}-{artist}.mid",
        file_size=file_size,
        mod_time=mod_time,
    )


def touch(path: Path, content: bytes = b"MThd", mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> dict:
    for key in list(os.environ):
        if key.startswith("MIDI_CATALOG_"):
            monkeypatch.delenv(key)
    return load_config(None)


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Base directory with empty new/ and midi/ folders."""
    (tmp_path / "new").mkdir()
    (tmp_path / "midi").mkdir()
    return tmp_path


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)

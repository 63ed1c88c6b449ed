from __future__ import annotations

import json
import os

import pytest

from catalog.schemas import RejectionReason, RunOutcome
from conftest import touch
from pipeline.orchestrator import CatalogPipeline
from pipeline.report import format_preview_table, format_summary
from utils.exceptions import LibraryLayoutError, NoAcceptedFilesError


def _never_asked(question: str) -> bool:
    raise AssertionError(f"unexpected prompt: {question}")


def _read_catalog(base):
    return json.loads((base / "museplay.json").read_text(encoding="utf-8"))


def test_full_run_orders_dedups_and_reports(library, config):
    midi = library / "midi"
    touch(midi / "1-Song-Band.mid", content=b"a" * 10, mtime=1000)
    touch(midi / "3-My_Song-John's Band.midi", content=b"b" * 20, mtime=3000)
    touch(midi / "5-Song-Band.midi", content=b"c" * 30, mtime=5000)
    touch(midi / "6-Bad-Digit.mid", mtime=4000)
    touch(midi / "2-Other-Artist.mid", content=b"d" * 40, mtime=2000)

    result = CatalogPipeline(config, library, confirm=_never_asked).run()

    assert result.outcome == RunOutcome.COMPLETED
    assert [r.filename for r in result.rejected] == ["6-Bad-Digit.mid"]
    assert result.rejected[0].reason == RejectionReason.INVALID_DIFFICULTY
    assert len(result.accepted) == 4
    assert [(d.duplicate_filename, d.original_filename) for d in result.duplicates] == [
        ("5-Song-Band.midi", "1-Song-Band.mid")
    ]
    assert result.written == 3
    assert result.backup_path is None

    data = _read_catalog(library)
    assert data["basedir"] == "midi/"
    assert data["file_count"] == 3
    assert [f["filename"] for f in data["files"]] == [
        "3-My_Song-John's Band.midi",
        "2-Other-Artist.mid",
        "1-Song-Band.mid",
    ]
    assert data["files"][0] == {
        "filename": "3-My_Song-John's Band.midi",
        "file_size": 20,
        "title": "My Song",
        "artist": "John's Band",
        "difficulty": "중급",
        "youtube": "",
    }


def test_new_files_are_moved_and_catalogued(library, config):
    touch(library / "new" / "4-Fresh-Upload.mid", mtime=9000)
    touch(library / "midi" / "1-Old-Song.mid", mtime=1000)

    result = CatalogPipeline(config, library, confirm=_never_asked).run()

    assert result.moved == ["4-Fresh-Upload.mid"]
    assert (library / "midi" / "4-Fresh-Upload.mid").is_file()
    assert (library / "new").is_dir()
    assert [f["title"] for f in _read_catalog(library)["files"]] == ["Fresh", "Old"]


def test_no_move_leaves_drop_folder_alone(library, config):
    touch(library / "new" / "4-Fresh-Upload.mid")
    touch(library / "midi" / "1-Old-Song.mid")

    result = CatalogPipeline(config, library, confirm=_never_asked, move_new=False).run()

    assert result.moved == []
    assert (library / "new" / "4-Fresh-Upload.mid").is_file()
    assert _read_catalog(library)["file_count"] == 1


def test_missing_midi_dir_is_created_from_new(tmp_path, config):
    touch(tmp_path / "new" / "2-a-b.mid")

    result = CatalogPipeline(config, tmp_path, confirm=_never_asked).run()

    assert result.outcome == RunOutcome.COMPLETED
    assert (tmp_path / "midi" / "2-a-b.mid").is_file()


def test_zero_input_is_benign_noop(library, config):
    (library / "museplay.json").write_text("previous", encoding="utf-8")

    result = CatalogPipeline(config, library, confirm=_never_asked).run()

    assert result.outcome == RunOutcome.NO_INPUT
    assert (library / "museplay.json").read_text(encoding="utf-8") == "previous"
    assert not (library / "museplay.json.bak").exists()


def test_no_accepted_files_is_fatal(library, config):
    touch(library / "midi" / "1-A-B-C.mid")
    touch(library / "midi" / "readme.mid")

    with pytest.raises(NoAcceptedFilesError) as exc_info:
        CatalogPipeline(config, library, confirm=_never_asked).run()

    err = exc_info.value
    assert err.rejected_count == 2
    assert err.result.outcome == RunOutcome.NO_ACCEPTED
    assert {r.filename for r in err.result.rejected} == {"1-A-B-C.mid", "readme.mid"}
    assert not (library / "museplay.json").exists()


def test_missing_layout(tmp_path, config):
    with pytest.raises(LibraryLayoutError):
        CatalogPipeline(config, tmp_path, confirm=_never_asked).run()


def test_declined_overwrite_keeps_old_catalog(library, config):
    touch(library / "midi" / "1-a-b.mid")
    (library / "museplay.json").write_text("previous", encoding="utf-8")
    questions = []

    def decline(question):
        questions.append(question)
        return False

    result = CatalogPipeline(config, library, confirm=decline).run()

    assert result.outcome == RunOutcome.CANCELLED
    assert questions == ["Overwrite museplay.json?"]
    assert (library / "museplay.json").read_text(encoding="utf-8") == "previous"
    assert not (library / "museplay.json.bak").exists()


def test_accepted_overwrite_takes_backup(library, config):
    touch(library / "midi" / "1-a-b.mid")
    (library / "museplay.json").write_text("previous", encoding="utf-8")

    result = CatalogPipeline(config, library, confirm=lambda q: True).run()

    assert result.outcome == RunOutcome.COMPLETED
    assert result.backup_path == library / "museplay.json.bak"
    assert (library / "museplay.json.bak").read_text(encoding="utf-8") == "previous"
    assert _read_catalog(library)["file_count"] == 1


def test_preview_table_marks_failures(library, config):
    touch(library / "midi" / "3-Song-Band.mid", content=b"x" * 7)
    touch(library / "midi" / "bad.mid")
    entries = CatalogPipeline(config, library).filesystem_ops.scan(library / "midi")

    lines = format_preview_table(entries).splitlines()

    assert lines[0].startswith("Filename")
    row = next(line for line in lines if line.startswith("3-Song-Band.mid"))
    assert "중급" in row and "Song" in row and "Band" in row and " 7 " in row
    bad = next(line for line in lines if line.startswith("bad.mid"))
    assert "parse failed" in bad


def test_summary_lists_outcomes(library, config):
    touch(library / "midi" / "1-Song-Band.mid", mtime=1)
    touch(library / "midi" / "2-Song-Band.mid", mtime=2)
    touch(library / "midi" / "9-x-y.mid")

    result = CatalogPipeline(config, library, confirm=_never_asked).run()
    text = "\n".join(format_summary(result))

    assert "Accepted: 2 file(s)" in text
    assert "Rejected: 1 file(s)" in text
    assert "2-Song-Band.mid (same as 1-Song-Band.mid)" in text
    assert "9-x-y.mid (invalid_difficulty)" in text
    assert "(1 entries)" in text


def test_non_utf8_filename_is_rejected_and_catalog_written(library, config):
    touch(library / "midi" / "1-Song-Band.mid", mtime=1000)
    (library / "museplay.json").write_text('{"old": true}\n', encoding="utf-8")
    bad_name = os.fsencode(library / "midi") + b"/2-Caf\xe9-Band.mid"
    try:
        with open(bad_name, "wb") as f:
            f.write(b"MThd")
    except OSError:
        pytest.skip("filesystem does not accept non-UTF-8 names")

    result = CatalogPipeline(config, library, confirm=lambda q: True).run()

    assert result.outcome == RunOutcome.COMPLETED
    assert [(r.filename, r.reason) for r in result.rejected] == [
        ("2-Caf\\xe9-Band.mid", RejectionReason.UNDECODABLE_NAME)
    ]
    assert [r.filename for r in result.accepted] == ["1-Song-Band.mid"]
    assert _read_catalog(library)["file_count"] == 1
    assert (library / "museplay.json.bak").read_text(encoding="utf-8") == '{"old": true}\n'
    assert "undecodable_name" in "\n".join(format_summary(result))


def test_drop_folder_recreated_without_move(tmp_path, config):
    touch(tmp_path / "midi" / "1-a-b.mid")

    result = CatalogPipeline(config, tmp_path, confirm=_never_asked, move_new=False).run()

    assert result.outcome == RunOutcome.COMPLETED
    assert (tmp_path / "new").is_dir()

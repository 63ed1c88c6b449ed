"""
Filename grammar for the MIDI library.

Every file in the library is named

    <difficulty>-<title>-<artist>.mid
    <difficulty>-<title>-<artist>.midi

where difficulty is a single digit 1-5. Score-editor exports sometimes leave a
second extension on the artist (``1-Song-Band.mscz.mid``); one such token is
dropped. Title and artist are then normalized, see pipeline.normalizer.
"""

import logging
import re

from catalog.schemas import (
    DIFFICULTY_LABELS, FileEntry, ParsedFilename, ParsedRecord, RejectionReason
)
from pipeline.normalizer import normalize_text
from utils.exceptions import GrammarRejectionError

logger = logging.getLogger(__name__)

MIDI_EXTENSIONS = ('.midi', '.mid')
SECONDARY_EXTENSIONS = ('.mscz', '.mscx', '.mxl', '.musicxml')

_DIFFICULTY = re.compile(r"[1-5]")


def strip_midi_extension(filename: str) -> str:
    """Remove exactly one trailing .midi/.mid, or raise if there is none."""
    for ext in MIDI_EXTENSIONS:
        if filename.endswith(ext):
            return filename[:-len(ext)]
    raise GrammarRejectionError(
        filename, RejectionReason.UNSUPPORTED_EXTENSION, "expected .mid or .midi"
    )


def strip_secondary_extension(artist: str) -> str:
    """Drop at most one trailing score-format extension from the artist segment."""
    for ext in SECONDARY_EXTENSIONS:
        if artist.endswith(ext):
            return artist[:-len(ext)]
    return artist


def parse_filename(filename: str) -> ParsedFilename:
    """
    Parse a basename into difficulty, title and artist.

    Args:
        filename: File basename, e.g. "3-My_Song-John's Band.midi"

    Returns:
        ParsedFilename with normalized title and artist

    Raises:
        GrammarRejectionError: If the name does not follow the grammar
    """
    # Non-UTF-8 bytes in a name come back from the OS as lone surrogates.
    try:
        filename.encode('utf-8')
    except UnicodeEncodeError:
        raise GrammarRejectionError(
            filename, RejectionReason.UNDECODABLE_NAME, "filename is not valid UTF-8"
        )

    stem = strip_midi_extension(filename)

    parts = stem.split('-')
    if len(parts) != 3:
        raise GrammarRejectionError(
            filename, RejectionReason.SEGMENT_COUNT,
            f"expected 3 hyphen-separated parts, got {len(parts)}"
        )

    difficulty, title, artist = parts
    artist = strip_secondary_extension(artist)

    if not _DIFFICULTY.fullmatch(difficulty):
        raise GrammarRejectionError(
            filename, RejectionReason.INVALID_DIFFICULTY,
            f"difficulty must be a single digit 1-5, got {difficulty!r}"
        )

    if not title or not artist:
        raise GrammarRejectionError(filename, RejectionReason.EMPTY_FIELD)

    title = normalize_text(title)
    artist = normalize_text(artist)

    if not title or not artist:
        raise GrammarRejectionError(filename, RejectionReason.EMPTY_AFTER_NORMALIZATION)

    code = int(difficulty)
    return ParsedFilename(
        difficulty_code=code,
        difficulty_label=DIFFICULTY_LABELS[code],
        title=title,
        artist=artist,
    )


def parse_file(entry: FileEntry) -> ParsedRecord:
    """Parse a scanned file and attach the size and mtime taken at scan time."""
    if entry.undecodable_name:
        raise GrammarRejectionError(
            entry.filename, RejectionReason.UNDECODABLE_NAME, "filename is not valid UTF-8"
        )
    parsed = parse_filename(entry.filename)
    logger.debug(
        f"Parsed {entry.filename}: difficulty={parsed.difficulty_label}, "
        f"title={parsed.title!r}, artist={parsed.artist!r}"
    )
    return ParsedRecord(
        **parsed.model_dump(),
        filename=entry.filename,
        file_size=entry.file_size,
        mod_time=entry.mod_time,
    )

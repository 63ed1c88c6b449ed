"""
Human-readable output: the pre-run file table and the end-of-run summary.
"""

from datetime import datetime
from typing import List, Sequence

from catalog.schemas import FileEntry, RunOutcome, RunResult
from pipeline.parser import parse_file
from utils.exceptions import GrammarRejectionError

_ROW = "{:<50} {:<12} {:<12} {:<10} {:<30} {:<20}"


def format_preview_table(entries: Sequence[FileEntry]) -> str:
    """Tabulate what each discovered file parses to, before anything is written."""
    lines = [
        _ROW.format("Filename", "Size (bytes)", "Date", "Difficulty", "Title", "Artist"),
        "-" * 139,
    ]

    for entry in entries:
        try:
            parsed = parse_file(entry)
        except GrammarRejectionError:
            lines.append(_ROW.format(entry.filename, "-", "-", "parse failed", "-", "-"))
            continue

        date = datetime.fromtimestamp(entry.created_time).strftime("%Y-%m-%d")
        lines.append(_ROW.format(
            entry.filename, entry.file_size, date,
            parsed.difficulty_label, parsed.title, parsed.artist
        ))

    return "\n".join(lines)


def format_summary(result: RunResult) -> List[str]:
    """
    Summarize a run as report lines.

    Covers the outcome, accepted and rejected counts, duplicates, what was
    written, and the per-file lists.
    """
    lines = ["=== Processing report ==="]

    if result.outcome == RunOutcome.NO_INPUT:
        lines.append("No MIDI files found; nothing to do.")
        return lines

    lines.append(f"Accepted: {len(result.accepted)} file(s)")
    if result.rejected:
        lines.append(f"Rejected: {len(result.rejected)} file(s)")
    if result.duplicates:
        lines.append(f"Duplicates skipped: {len(result.duplicates)}")
        for dup in result.duplicates:
            lines.append(f"  - {dup.duplicate_filename} (same as {dup.original_filename})")

    if result.outcome == RunOutcome.COMPLETED:
        lines.append(f"Catalog: {result.output_path} ({result.written} entries)")
        if result.backup_path:
            lines.append(f"Backup: {result.backup_path}")
    elif result.outcome == RunOutcome.CANCELLED:
        lines.append("Cancelled by user; existing catalog left untouched.")
    elif result.outcome == RunOutcome.NO_ACCEPTED:
        lines.append("No file matched <difficulty>-<title>-<artist>.mid; catalog not written.")

    if result.accepted:
        lines.append("Accepted files:")
        lines.extend(f"  ✓ {record.filename}" for record in result.accepted)

    if result.rejected:
        lines.append("Rejected files:")
        lines.extend(
            f"  ✗ {rejection.filename} ({rejection.reason.value})"
            for rejection in result.rejected
        )

    return lines

"""
Duplicate detection on (title, artist).

The first file seen with a given normalized title and artist wins; later
ones are reported and dropped. Size, date and difficulty are ignored.
"""

import logging
from typing import Dict, Iterable, Tuple

from catalog.schemas import DeduplicationResult, DuplicatePair, ParsedRecord

logger = logging.getLogger(__name__)


def deduplicate(records: Iterable[ParsedRecord]) -> DeduplicationResult:
    """
    Keep the first record for each duplicate key, preserving scan order.

    Args:
        records: Parsed records in scan order

    Returns:
        DeduplicationResult with the surviving records and one
        DuplicatePair per dropped record
    """
    first_seen: Dict[Tuple[str, str], ParsedRecord] = {}
    kept = []
    duplicates = []

    for record in records:
        original = first_seen.get(record.duplicate_key)
        if original is not None:
            duplicates.append(DuplicatePair(
                duplicate_filename=record.filename,
                original_filename=original.filename,
            ))
            logger.warning(
                f"Duplicate song skipped: {record.filename} (same as {original.filename})"
            )
            continue

        first_seen[record.duplicate_key] = record
        kept.append(record)

    return DeduplicationResult(records=kept, duplicates=duplicates)

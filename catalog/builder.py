"""
Catalog assembly and serialization.

Turns deduplicated records into the museplay.json document: newest file
first, one entry per record, pretty-printed UTF-8 JSON.
"""

import json
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from catalog.schemas import CatalogDocument, CatalogEntry, ParsedRecord
from utils.exceptions import FilesystemError

logger = logging.getLogger(__name__)

CREATED_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class CatalogBuilder:
    """Builds and writes the catalog document."""

    def __init__(self, basedir_label: str = "midi/", indent: int = 2):
        """
        Args:
            basedir_label: Value of the top-level "basedir" field
            indent: JSON indentation width
        """
        self.basedir_label = basedir_label
        self.indent = indent

    @staticmethod
    def order_records(records: Iterable[ParsedRecord]) -> List[ParsedRecord]:
        """Most recently modified first; ties keep scan order (sorted() is stable)."""
        return sorted(records, key=lambda record: record.mod_time, reverse=True)

    def build(
        self,
        records: Iterable[ParsedRecord],
        now: Optional[datetime] = None
    ) -> CatalogDocument:
        """
        Assemble the catalog document.

        Args:
            records: Deduplicated records, in any order
            now: Build time; defaults to the current local time

        Returns:
            CatalogDocument whose file_count equals the number of entries
        """
        entries = [CatalogEntry.from_record(r) for r in self.order_records(records)]
        created = (now or datetime.now()).strftime(CREATED_DATE_FORMAT)

        return CatalogDocument(
            created_date=created,
            basedir=self.basedir_label,
            file_count=len(entries),
            files=entries,
        )

    def serialize(self, document: CatalogDocument) -> str:
        """Render the document as JSON text with the on-disk key order."""
        return json.dumps(
            document.model_dump(mode='json'),
            ensure_ascii=False,
            indent=self.indent,
        ) + "\n"

    def write(
        self,
        document: CatalogDocument,
        output_path: Path,
        backup_suffix: str = ".bak"
    ) -> Optional[Path]:
        """
        Write the catalog, copying any existing file aside first.

        Args:
            document: Catalog to write
            output_path: Destination file
            backup_suffix: Appended to the output name for the backup copy

        Returns:
            Path of the backup copy, or None if there was nothing to back up

        Raises:
            FilesystemError: If encoding, the backup or the write fails; the
                existing catalog is left as it was
        """
        try:
            data = self.serialize(document).encode('utf-8')
        except UnicodeError as e:
            raise FilesystemError(str(output_path), "encode", str(e))
        backup_path = None

        if output_path.exists():
            backup_path = output_path.with_name(output_path.name + backup_suffix)
            try:
                shutil.copy2(str(output_path), str(backup_path))
            except OSError as e:
                raise FilesystemError(str(output_path), "backup", str(e))
            logger.info(f"Backup created: {backup_path}")

        # The old catalog is only replaced once the new one is fully on disk.
        tmp_path = output_path.with_name(output_path.name + ".tmp")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'wb') as f:
                f.write(data)
            os.replace(str(tmp_path), str(output_path))
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise FilesystemError(str(output_path), "write", str(e))

        logger.info(f"Catalog written: {output_path} ({document.file_count} files)")
        return backup_path

"""
Pipeline orchestrator for one catalog run.

Moves newly dropped files into the library, scans it, parses every name,
drops duplicates, asks before overwriting an existing catalog, then writes
the new one. All per-file outcomes come back in a RunResult.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from catalog.builder import CatalogBuilder
from catalog.schemas import Rejection, RunOutcome, RunResult
from filesystem.file_ops import FileSystemOperations
from pipeline.dedup import deduplicate
from pipeline.parser import parse_file
from pipeline.report import format_preview_table
from utils.exceptions import GrammarRejectionError, LibraryLayoutError, NoAcceptedFilesError
from utils.logging_config import log_processing_progress
from utils.prompt import confirm as ask_user

logger = logging.getLogger(__name__)


class CatalogPipeline:
    """
    Drives a single run over a base directory laid out as

        <base>/new/            drop folder
        <base>/midi/           library
        <base>/museplay.json   catalog
    """

    def __init__(
        self,
        config: Dict[str, Any],
        base_dir: Path,
        confirm: Callable[[str], bool] = ask_user,
        move_new: bool = True
    ):
        """
        Args:
            config: Configuration dictionary from load_config()
            base_dir: Directory holding new/, midi/ and the catalog
            confirm: Yes/no collaborator consulted before overwriting a catalog
            move_new: Whether to move files from new/ into midi/ first
        """
        self.config = config
        self.base_dir = base_dir
        self.confirm = confirm
        self.move_new = move_new

        paths = config['paths']
        self.new_dir = base_dir / paths['new_dir']
        self.midi_dir = base_dir / paths['midi_dir']
        self.output_path = base_dir / paths['output_file']
        self.backup_suffix = paths['backup_suffix']

        self.filesystem_ops = FileSystemOperations(
            midi_extensions=config['filesystem']['midi_extensions']
        )
        self.builder = CatalogBuilder(
            basedir_label=config['catalog']['basedir_label'],
            indent=config['catalog']['indent']
        )

    def run(self) -> RunResult:
        """
        Execute one run.

        Returns:
            RunResult describing what happened

        Raises:
            LibraryLayoutError: If neither new/ nor midi/ exists
            NoAcceptedFilesError: If files were found but none parsed
            FilesystemError: If a scan, move, backup or write fails
        """
        logger.info(f"Base directory: {self.base_dir}")
        moved = self._prepare_library()

        logger.info(f"Scanning {self.midi_dir} for MIDI files...")
        entries = self.filesystem_ops.scan(self.midi_dir) if self.midi_dir.is_dir() else []

        if not entries:
            logger.warning("No MIDI files found")
            return RunResult(outcome=RunOutcome.NO_INPUT, moved=moved)

        logger.info(f"Found {len(entries)} MIDI file(s)")
        logger.info("Discovered files:\n" + format_preview_table(entries))

        accepted = []
        rejected = []
        for i, entry in enumerate(entries, start=1):
            log_processing_progress(i, len(entries), logger, filename=entry.filename)
            try:
                accepted.append(parse_file(entry))
            except GrammarRejectionError as e:
                logger.warning(f"Parse failed: {entry.filename} ({e.reason.value})")
                rejected.append(Rejection(filename=entry.filename, reason=e.reason, detail=e.detail))
            else:
                logger.info(f"Parsed: {entry.filename}")

        if not accepted:
            logger.error("No file matched the naming rule; catalog not written")
            raise NoAcceptedFilesError(len(rejected), result=RunResult(
                outcome=RunOutcome.NO_ACCEPTED,
                discovered=entries,
                moved=moved,
                rejected=rejected,
            ))

        dedup = deduplicate(accepted)
        if dedup.duplicates:
            logger.info("Duplicate files are skipped automatically")

        result = RunResult(
            outcome=RunOutcome.COMPLETED,
            discovered=entries,
            moved=moved,
            accepted=accepted,
            rejected=rejected,
            duplicates=dedup.duplicates,
        )

        if self.output_path.exists():
            logger.warning(f"Catalog already exists: {self.output_path}")
            if not self.confirm(f"Overwrite {self.output_path.name}?"):
                logger.info("Cancelled by user")
                result.outcome = RunOutcome.CANCELLED
                return result

        document = self.builder.build(dedup.records)
        result.backup_path = self.builder.write(document, self.output_path, self.backup_suffix)
        result.output_path = self.output_path
        result.written = document.file_count

        # Recreated even with move_new off so the next batch has somewhere to go.
        self.new_dir.mkdir(parents=True, exist_ok=True)

        return result

    def _prepare_library(self) -> List[str]:
        """Check the layout and empty new/ into midi/."""
        if not self.new_dir.is_dir():
            logger.warning(f"Drop folder not found: {self.new_dir}")
        if not self.midi_dir.is_dir():
            logger.warning(f"Library folder not found: {self.midi_dir}")
        if not self.new_dir.is_dir() and not self.midi_dir.is_dir():
            raise LibraryLayoutError(str(self.new_dir), str(self.midi_dir))

        if not self.move_new or not self.new_dir.is_dir():
            return []

        logger.info(f"Moving MIDI files from {self.new_dir} to {self.midi_dir}...")
        moved = self.filesystem_ops.move_new_files(self.new_dir, self.midi_dir)
        if moved:
            logger.info(f"Moved {len(moved)} file(s) into the library")
        else:
            logger.info("No MIDI files in the drop folder")
        return moved

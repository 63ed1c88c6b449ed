"""
Filesystem operations for the MIDI library using pathlib.

Scanning is non-recursive and filtered by extension. Moves and stat calls
wrap OSError in FilesystemError so the orchestrator sees one error type.
"""

import os
import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple
import logging

from catalog.schemas import FileEntry
from utils.exceptions import FilesystemError

logger = logging.getLogger(__name__)


class FileSystemOperations:
    """Handles all filesystem operations with proper error handling."""

    def __init__(self, midi_extensions: List[str]):
        """
        Args:
            midi_extensions: Extensions (with dots) that mark candidate files
        """
        self.midi_extensions = tuple(midi_extensions)

    def is_midi_file(self, path: Path) -> bool:
        return path.is_file() and path.name.endswith(self.midi_extensions)

    def discover_midi_files(self, directory: Path) -> List[Path]:
        """
        List candidate files directly inside a directory.

        Args:
            directory: Directory to scan (subdirectories are not entered)

        Returns:
            Matching paths sorted by name

        Raises:
            FilesystemError: If the directory cannot be read
        """
        if not directory.exists():
            raise FilesystemError(str(directory), "scan", "Directory does not exist")

        if not directory.is_dir():
            raise FilesystemError(str(directory), "scan", "Path is not a directory")

        try:
            found = [path for path in directory.iterdir() if self.is_midi_file(path)]
        except PermissionError as e:
            raise FilesystemError(str(directory), "scan", f"Permission denied: {e}")
        except OSError as e:
            raise FilesystemError(str(directory), "scan", f"OS error: {e}")

        return sorted(found, key=lambda path: path.name)

    def get_file_info(self, file_path: Path) -> Dict[str, Any]:
        """
        Get size and timestamps for a file.

        created_time falls back from birth time to modification time to now,
        since birth time is missing on most Linux filesystems.

        Raises:
            FilesystemError: If file cannot be accessed
        """
        try:
            stat_result = file_path.stat()
        except OSError as e:
            raise FilesystemError(str(file_path), "stat", str(e))

        created_time = getattr(stat_result, 'st_birthtime', 0) or stat_result.st_mtime or time.time()

        return {
            'size_bytes': stat_result.st_size,
            'modified_time': stat_result.st_mtime,
            'created_time': created_time,
        }

    def scan(self, directory: Path) -> List[FileEntry]:
        """Discover candidate files and stat each one."""
        entries = []
        for path in self.discover_midi_files(directory):
            info = self.get_file_info(path)
            filename, undecodable = self.display_name(path)
            entries.append(FileEntry(
                path=path.resolve(),
                filename=filename,
                file_size=info['size_bytes'],
                mod_time=info['modified_time'],
                created_time=info['created_time'],
                undecodable_name=undecodable,
            ))
        return entries

    @staticmethod
    def display_name(path: Path) -> Tuple[str, bool]:
        """
        Basename safe to log and serialize.

        Bytes that are not UTF-8 reach Python as lone surrogates; those names
        are returned backslash-escaped (b"Caf\\xe9" -> "Caf\\\\xe9") and flagged.
        """
        name = path.name
        try:
            name.encode('utf-8')
        except UnicodeEncodeError:
            escaped = os.fsencode(name).decode('utf-8', 'backslashreplace')
            logger.warning(f"Filename is not valid UTF-8: {escaped}")
            return escaped, True
        return name, False

    def move_new_files(self, new_dir: Path, midi_dir: Path) -> List[str]:
        """
        Move every candidate file from the drop folder into the library.

        An existing file with the same name in the library is replaced.

        Returns:
            Names of the files moved

        Raises:
            FilesystemError: If a move fails
        """
        midi_dir.mkdir(parents=True, exist_ok=True)

        moved = []
        for source in self.discover_midi_files(new_dir):
            destination = midi_dir / source.name
            try:
                if destination.is_file():
                    logger.warning(f"Replacing existing file in library: {self.display_name(destination)[0]}")
                    destination.unlink()
                shutil.move(str(source), str(destination))
            except PermissionError as e:
                raise FilesystemError(str(source), "move", f"Permission denied: {e}")
            except OSError as e:
                raise FilesystemError(str(source), "move", f"OS error: {e}")

            name, _ = self.display_name(source)
            logger.info(f"Moved file: {name}")
            moved.append(name)

        return moved

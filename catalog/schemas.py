"""
Pydantic schemas for the MIDI catalog pipeline.

These models define the data passed between the parser, deduplicator,
catalog builder and report, and the shape of the JSON document on disk.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DIFFICULTY_LABELS = {
    1: "초급",
    2: "초급",
    3: "중급",
    4: "고급",
    5: "최상",
}


class RejectionReason(str, Enum):
    """Why a filename failed the <difficulty>-<title>-<artist> grammar."""

    UNDECODABLE_NAME = "undecodable_name"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    SEGMENT_COUNT = "segment_count"
    INVALID_DIFFICULTY = "invalid_difficulty"
    EMPTY_FIELD = "empty_field"
    EMPTY_AFTER_NORMALIZATION = "empty_after_normalization"


class FileEntry(BaseModel):
    """A candidate file as reported by the filesystem scan."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute path to the MIDI file")
    filename: str = Field(..., description="Basename of the file")
    file_size: int = Field(..., ge=0, description="File size in bytes at scan time")
    mod_time: float = Field(..., description="Modification timestamp at scan time")
    created_time: float = Field(..., description="Birth time, else modification time, else scan time")
    undecodable_name: bool = Field(
        default=False,
        description="Name on disk is not valid UTF-8; filename holds a backslash-escaped form"
    )


class ParsedFilename(BaseModel):
    """Metadata recovered from a filename alone."""

    model_config = ConfigDict(frozen=True)

    difficulty_code: int = Field(..., ge=1, le=5)
    difficulty_label: str
    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)

    @model_validator(mode='after')
    def check_label(self):
        if DIFFICULTY_LABELS[self.difficulty_code] != self.difficulty_label:
            raise ValueError(
                f"difficulty_label {self.difficulty_label!r} does not match code {self.difficulty_code}"
            )
        return self


class ParsedRecord(ParsedFilename):
    """An accepted file: filename metadata plus the file facts taken at scan time."""

    filename: str
    file_size: int = Field(..., ge=0)
    mod_time: float

    @property
    def duplicate_key(self) -> Tuple[str, str]:
        return (self.title, self.artist)


class DuplicatePair(BaseModel):
    """A later file whose (title, artist) was already seen."""

    model_config = ConfigDict(frozen=True)

    duplicate_filename: str
    original_filename: str


class Rejection(BaseModel):
    """A file that failed parsing, kept for the final report."""

    model_config = ConfigDict(frozen=True)

    filename: str
    reason: RejectionReason
    detail: Optional[str] = None


class CatalogEntry(BaseModel):
    """One entry of the 'files' array. Field order is the on-disk key order."""

    filename: str
    file_size: int
    title: str
    artist: str
    difficulty: str
    youtube: str = ""

    @field_validator('youtube')
    @classmethod
    def youtube_is_placeholder(cls, v):
        if v != "":
            raise ValueError("youtube is a placeholder and must be empty")
        return v

    @classmethod
    def from_record(cls, record: ParsedRecord) -> "CatalogEntry":
        return cls(
            filename=record.filename,
            file_size=record.file_size,
            title=record.title,
            artist=record.artist,
            difficulty=record.difficulty_label,
        )


class CatalogDocument(BaseModel):
    """The catalog written to disk."""

    created_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
    basedir: str
    file_count: int = Field(..., ge=0)
    files: List[CatalogEntry] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_file_count(self):
        if self.file_count != len(self.files):
            raise ValueError(
                f"file_count {self.file_count} does not match {len(self.files)} entries"
            )
        return self


class DeduplicationResult(BaseModel):
    """Records that survived deduplication, in scan order, and what was dropped."""

    records: List[ParsedRecord] = Field(default_factory=list)
    duplicates: List[DuplicatePair] = Field(default_factory=list)


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    NO_INPUT = "no_input"
    NO_ACCEPTED = "no_accepted"
    CANCELLED = "cancelled"


class RunResult(BaseModel):
    """Everything one run did, returned instead of kept in global counters."""

    outcome: RunOutcome
    discovered: List[FileEntry] = Field(default_factory=list)
    moved: List[str] = Field(default_factory=list)
    accepted: List[ParsedRecord] = Field(default_factory=list)
    rejected: List[Rejection] = Field(default_factory=list)
    duplicates: List[DuplicatePair] = Field(default_factory=list)
    written: int = 0
    output_path: Optional[Path] = None
    backup_path: Optional[Path] = None

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class Category(Enum):
    PHOTO = "photo"
    VIDEO = "video"

    @classmethod
    def from_extension(cls, ext: str) -> Optional["Category"]:
        """Case-insensitive lookup; accepts 'jpg' or '.JPG'."""
        from .config import EXT_TO_CATEGORY

        ext = ext.lower()
        if not ext.startswith('.'):
            ext = '.' + ext
        return EXT_TO_CATEGORY.get(ext)


class Outcome(Enum):
    MOVED = "moved"
    ALREADY_PRESENT_IDENTICAL = "already_present_identical"
    DIVERTED_AS_DUPLICATE = "diverted_as_duplicate"
    FAILED = "failed"  # per-file error, file left where it was


@dataclass(frozen=True)
class MediaFile:
    """
    A discovered media file. Stat'ed once at enumeration time.
    """
    path: Path
    ext: str
    name: str
    mtime: float
    size_bytes: int
    category: Optional[Category]

    @classmethod
    def from_path(cls, path: Path) -> "MediaFile":
        path = Path(path).absolute()
        st = path.stat()
        ext = path.suffix.lower()
        return cls(
            path=path,
            ext=ext,
            name=path.name,
            mtime=st.st_mtime,
            size_bytes=st.st_size,
            category=Category.from_extension(ext) if ext else None,
        )

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class ResolvedDate:
    year: int
    month: int
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")
        if not 1 <= self.day <= 31:
            raise ValueError(f"day out of range: {self.day}")

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ResolvedDate":
        return cls(dt.year, dt.month, dt.day)


@dataclass
class PlacementResult:
    """
    One decision per file per run. This is what gets logged and reported.
    """
    source: Path
    outcome: Outcome
    destination: Optional[Path] = None
    category: Optional[Category] = None
    renamed_to: Optional[str] = None   # Only set for DIVERTED_AS_DUPLICATE
    date_source: Optional[str] = None  # 'metadata' or 'filesystem'
    error: Optional[str] = None


@dataclass
class RunSummary:
    counts: Counter = field(default_factory=Counter)

    def add(self, result: PlacementResult) -> None:
        self.counts[result.outcome] += 1

    def count(self, outcome: Outcome) -> int:
        return self.counts[outcome]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def __str__(self) -> str:
        return (
            f"{self.total} files: "
            f"{self.count(Outcome.MOVED)} placed, "
            f"{self.count(Outcome.ALREADY_PRESENT_IDENTICAL)} already present, "
            f"{self.count(Outcome.DIVERTED_AS_DUPLICATE)} diverted to Dupes, "
            f"{self.count(Outcome.FAILED)} failed"
        )

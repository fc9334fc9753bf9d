import logging
import re
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from tqdm import tqdm

from . import config
from .exceptions import MediaOrganizerError, SourceRootError
from .models import Category, MediaFile, Outcome, PlacementResult, RunSummary
from .scanning.filesystem import DiskScanner
from .scanning.hasher import FileHasher
from .organization.resolver import DateResolver
from .organization.rules import build_destination, next_available_name
from .organization.mover import FileMover, ensure_directory


class DirectoryLocks:
    """One lock per destination day folder, created on demand."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = defaultdict(threading.Lock)

    def get(self, directory: Path) -> threading.Lock:
        with self._guard:
            return self._locks[directory]


class PlacementEngine:
    """
    Decides and performs the placement of a single file:

        no file at destination       -> place it                (MOVED)
        same name, same content      -> leave both alone        (ALREADY_PRESENT_IDENTICAL)
        same name, different content -> place under day/Dupes   (DIVERTED_AS_DUPLICATE)

    Every decision, including untouched and failed files, goes to the logger.
    """

    def __init__(self,
                 dest_root: Path,
                 move: bool = True,
                 dry_run: bool = False,
                 resolver: Optional[DateResolver] = None,
                 hasher: Optional[FileHasher] = None,
                 logger: Optional[logging.Logger] = None):
        self.dest_root = Path(dest_root)
        self.dry_run = dry_run
        self.mover = FileMover(move_mode=move)
        self.resolver = resolver or DateResolver()
        self.hasher = hasher or FileHasher()
        self.logger = logger or logging.getLogger("media_organizer")
        self.locks = DirectoryLocks()

    def place(self, media_file: MediaFile) -> PlacementResult:
        """Never raises for per-file problems; those come back as FAILED."""
        try:
            result = self._place(media_file)
        except (MediaOrganizerError, OSError) as e:
            result = PlacementResult(
                source=media_file.path,
                outcome=Outcome.FAILED,
                category=media_file.category,
                error=str(e),
            )
            self.logger.error(f"Skipped {media_file.path}: {e}")
        return result

    def _place(self, media_file: MediaFile) -> PlacementResult:
        category = media_file.category or Category.from_extension(media_file.ext)
        if category is None:
            raise MediaOrganizerError(f"Unrecognized media extension '{media_file.ext}'")

        date, date_source = self.resolver.resolve(media_file, category)
        day_dir = build_destination(self.dest_root, category, date)
        self.logger.debug(f"{media_file.path}: {date_source} date {date.year}-{date.month:02d}-{date.day:02d}")

        # Existence check and placement are not atomic as a pair
        with self.locks.get(day_dir):
            self._ensure_dir(day_dir)
            candidate = day_dir / media_file.name

            if not candidate.exists():
                self._transfer(media_file.path, candidate)
                self.logger.info(f"{self._prefix}{self._past_tense} {media_file.path} -> {candidate}")
                return PlacementResult(media_file.path, Outcome.MOVED, candidate,
                                       category=category, date_source=date_source)

            if self.hasher.same_content(media_file.path, candidate):
                return self._already_present(media_file, candidate, category, date_source)

            dupes_dir = day_dir / config.DUPES_DIR
            existing = self._find_identical(media_file, dupes_dir)
            if existing is not None:
                return self._already_present(media_file, existing, category, date_source)

            self._ensure_dir(dupes_dir)
            new_name = next_available_name(dupes_dir, media_file.stem, media_file.path.suffix)
            target = dupes_dir / new_name
            self._transfer(media_file.path, target)
            self.logger.info(
                f"{self._prefix}Name collision with different content at {candidate}; "
                f"{self._past_tense.lower()} {media_file.path} -> {target}"
            )
            return PlacementResult(media_file.path, Outcome.DIVERTED_AS_DUPLICATE, target,
                                   category=category, renamed_to=new_name, date_source=date_source)

    def _already_present(self, media_file: MediaFile, existing: Path,
                         category: Category, date_source: str) -> PlacementResult:
        self.logger.info(f"Skipped {media_file.path}: identical file already at {existing}")
        return PlacementResult(media_file.path, Outcome.ALREADY_PRESENT_IDENTICAL, existing,
                               category=category, date_source=date_source)

    def _find_identical(self, media_file: MediaFile, dupes_dir: Path) -> Optional[Path]:
        """
        Checks every Dupes entry named like the source (stem.ext, stem_N.ext)
        and returns one with identical content, so a re-run never adds another
        Dupes copy. Gaps in the numbering are not a stopping point.
        """
        if not dupes_dir.is_dir():
            return None

        pattern = re.compile(rf"^{re.escape(media_file.stem)}(?:_(\d+))?{re.escape(media_file.path.suffix)}$")
        matches = []
        for entry in dupes_dir.iterdir():
            m = pattern.match(entry.name)
            if m and entry.is_file():
                matches.append((int(m.group(1) or 0), entry))

        for _, candidate in sorted(matches):
            if self.hasher.same_content(media_file.path, candidate):
                return candidate
        return None

    def _ensure_dir(self, directory: Path):
        if self.dry_run:
            if not directory.is_dir():
                self.logger.info(f"{self._prefix}Create directory {directory}")
            return
        if ensure_directory(directory):
            self.logger.info(f"Created directory {directory}")

    def _transfer(self, src: Path, dest: Path):
        if not self.dry_run:
            self.mover.place(src, dest)

    @property
    def _prefix(self) -> str:
        return "[DRY RUN] " if self.dry_run else ""

    @property
    def _past_tense(self) -> str:
        return "Moved" if self.mover.move_mode else "Copied"


class MediaOrganizerApp:
    def __init__(self,
                 resolver: Optional[DateResolver] = None,
                 logger: Optional[logging.Logger] = None):
        self.resolver = resolver
        self.logger = logger or logging.getLogger("media_organizer")
        self.scanner = DiskScanner()

    def organize(self,
                 src_root: Path,
                 dest_root: Path,
                 move: bool = True,
                 dry_run: bool = False,
                 max_workers: int = 1,
                 skip_dirs: Optional[Set[Path]] = None) -> Tuple[RunSummary, List[PlacementResult]]:
        """
        Scans src_root and places every media file under dest_root.

        Args:
            move: Move files (default) instead of copying them
            dry_run: Log every decision without touching the disk
            max_workers: >1 places files in parallel; files bound for the same
                         day folder are still serialized
        """
        src_root = Path(src_root).absolute()
        dest_root = Path(dest_root).absolute()
        if not src_root.is_dir():
            raise SourceRootError(f"Source directory {src_root} does not exist or is not a directory.")

        self.logger.info(f"Scanning {src_root} (Move={move}, DryRun={dry_run})...")

        # Bootstrap roots
        roots = [dest_root / name for name in config.CATEGORY_ROOTS.values()]
        if not dry_run:
            for root in roots:
                if ensure_directory(root):
                    self.logger.info(f"Created directory {root}")

        # Never re-ingest the library when it lives inside the source
        skip = set(skip_dirs or set()) | set(roots)
        files = list(self.scanner.scan(src_root, skip_dirs=skip))
        self.logger.info(f"Found {len(files)} media files.")

        engine = PlacementEngine(
            dest_root,
            move=move,
            dry_run=dry_run,
            resolver=self.resolver,
            logger=self.logger,
        )

        if max_workers <= 1:
            results = [engine.place(f) for f in tqdm(files, desc="Organizing")]
        else:
            results = self._place_parallel(engine, files, max_workers)

        summary = RunSummary()
        for result in results:
            summary.add(result)
        self.logger.info(f"Organization complete. {summary}")
        return summary, results

    def _place_parallel(self, engine: PlacementEngine, files: Iterable[MediaFile],
                        max_workers: int) -> List[PlacementResult]:
        executor = ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = [executor.submit(engine.place, f) for f in files]
            for _ in tqdm(as_completed(futures), total=len(futures), desc="Organizing"):
                pass
        except KeyboardInterrupt:
            # Queued files are dropped; placements already running finish atomically
            self.logger.warning("Interrupted; cancelling queued files...")
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        # Report in scan order, not completion order
        return [f.result() for f in futures]

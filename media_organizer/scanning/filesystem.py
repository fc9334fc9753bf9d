import os
import logging
from pathlib import Path
from typing import Iterator, Set, Optional

from .. import config
from ..models import MediaFile


class DiskScanner:
    def scan(self,
             root: Path,
             skip_dirs: Optional[Set[Path]] = None) -> Iterator[MediaFile]:
        """
        Generator that yields a MediaFile for every recognized media file under root.

        Args:
            skip_dirs: Directories (and everything below them) to leave alone,
                       e.g. the destination library when it lives inside the source.
        """
        skip_dirs = {Path(d).absolute() for d in (skip_dirs or set())}

        for path in self._iter_files(Path(root).absolute(), skip_dirs):
            if not self._is_media(path):
                continue
            try:
                yield MediaFile.from_path(path)
            except OSError as e:
                # File might have been moved/deleted during scan
                logging.error(f"Failed to scan {path}: {e}")

    def _is_media(self, path: Path) -> bool:
        # AppleDouble resource forks carry a media extension but no media
        if path.name.startswith("._"):
            return False
        return path.suffix.lower() in config.EXT_TO_CATEGORY

    def _iter_files(self, root: Path, skip_dirs: Set[Path]) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()
            if skip_dirs and any(sd == current or sd in current.parents for sd in skip_dirs):
                continue

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f

import errno
import os
import shutil
import uuid
from pathlib import Path

from ..exceptions import FileOperationError


def ensure_directory(path: Path) -> bool:
    """Create path and its parents if missing. Returns True if anything was created."""
    if path.is_dir():
        return False
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"Cannot create directory {path}: {e}") from e
    return True


class FileMover:
    """
    Places a file at its final destination without ever exposing a
    half-written file under the final name.

      - copy: copy2 into a hidden temp sibling, then os.replace onto the name
      - move: os.replace (atomic rename); across filesystems fall back to
              copy-then-replace and only unlink the source once the copy is complete
    """

    def __init__(self, move_mode: bool = True):
        self.move_mode = move_mode

    @property
    def verb(self) -> str:
        return "Move" if self.move_mode else "Copy"

    def place(self, src: Path, dest: Path) -> Path:
        try:
            if self.move_mode:
                self._move(src, dest)
            else:
                self._atomic_copy(src, dest)
        except OSError as e:
            raise FileOperationError(f"Failed to {self.verb.lower()} {src} -> {dest}: {e}") from e
        return dest

    def _move(self, src: Path, dest: Path):
        try:
            os.replace(src, dest)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            self._atomic_copy(src, dest)
            os.unlink(src)

    def _atomic_copy(self, src: Path, dest: Path):
        tmp = dest.with_name(f".{dest.name}.{uuid.uuid4().hex}.partial")
        try:
            shutil.copy2(src, tmp)
            os.replace(tmp, dest)
        except BaseException:
            # Includes KeyboardInterrupt: never leave the temp file behind
            tmp.unlink(missing_ok=True)
            raise

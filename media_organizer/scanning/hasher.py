import hashlib
from pathlib import Path

from .. import config
from ..exceptions import FileHashError


class FileHasher:
    def compute_hash(self, path: Path) -> str:
        """
        Full-content SHA-256 of the file, read in chunks.

        Raises FileHashError if the file cannot be read (permissions,
        vanished mid-run). Callers treat that as fatal for this file only.
        """
        h = hashlib.sha256()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(config.HASH_CHUNK_SIZE):
                    h.update(chunk)
        except OSError as e:
            raise FileHashError(f"Cannot hash {path}: {e}") from e
        return h.hexdigest()

    def same_content(self, a: Path, b: Path) -> bool:
        """Cheap size check first, then compare digests."""
        try:
            if a.stat().st_size != b.stat().st_size:
                return False
        except OSError as e:
            raise FileHashError(f"Cannot stat {a} / {b}: {e}") from e
        return self.compute_hash(a) == self.compute_hash(b)

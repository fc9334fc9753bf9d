import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple, Any
from pathlib import Path

from ..models import Category, MediaFile, ResolvedDate
from ..metadata.extract import MetadataExtractor, parse_date_string

DateLookup = Callable[[Path], Optional[Any]]

METADATA = "metadata"
FILESYSTEM = "filesystem"


class DateResolver:
    """
    Picks the capture date for a file:
      1. category-specific metadata lookup (photo 'date taken', video 'media created')
      2. file modification time

    Whichever wins is final. A metadata date is trusted as-is, even when it
    disagrees with the filesystem.
    """

    def __init__(self,
                 photo_lookup: Optional[DateLookup] = None,
                 video_lookup: Optional[DateLookup] = None):
        extractor = MetadataExtractor()
        self.lookups: Dict[Category, DateLookup] = {
            Category.PHOTO: photo_lookup or extractor.get_photo_date,
            Category.VIDEO: video_lookup or extractor.get_video_date,
        }

    def resolve(self, media_file: MediaFile, category: Optional[Category]) -> Tuple[ResolvedDate, str]:
        """Never raises. Returns the date and where it came from."""
        dt = self._metadata_date(media_file, category)
        if dt is not None:
            try:
                return ResolvedDate.from_datetime(dt), METADATA
            except (ValueError, AttributeError) as e:
                logging.debug(f"Discarding metadata date for {media_file.path}: {e}")

        return ResolvedDate.from_datetime(datetime.fromtimestamp(media_file.mtime)), FILESYSTEM

    def resolve_date(self, media_file: MediaFile, category: Optional[Category]) -> ResolvedDate:
        return self.resolve(media_file, category)[0]

    def _metadata_date(self, media_file: MediaFile, category: Optional[Category]) -> Optional[datetime]:
        lookup = self.lookups.get(category)
        if lookup is None:
            return None

        try:
            value = lookup(media_file.path)
        except Exception as e:
            logging.debug(f"Metadata lookup failed for {media_file.path}: {e}")
            return None

        # Backends may hand back raw tag strings
        dt = parse_date_string(value)
        if value is not None and dt is None:
            logging.debug(f"Unparsable metadata date for {media_file.path}: {value!r}")
        return dt

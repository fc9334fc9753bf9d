import logging
import re
import subprocess
import json
from pathlib import Path
from datetime import datetime
from typing import Optional, Any

import exifread
from pymediainfo import MediaInfo

from .. import config

# Shell property values carry invisible direction marks (U+200E, U+200F) and
# similar noise around the digits. Keep only what a date string can contain.
_DATE_NOISE = re.compile(r"[^\w\s:/\-.+]")

_FALLBACK_FORMATS = [
    "%Y-%m-%d %H:%M:%S",   # EXIF style after separator fix-up
    "%m/%d/%Y %I:%M %p",   # Shell "Media created": 5/3/2021 10:15 AM
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d",
]


def parse_date_string(value: Any) -> Optional[datetime]:
    """
    Handles the date formats metadata backends hand back (ISO, EXIF, UTC
    prefixes/suffixes, shell property strings). Returns None for anything
    that is not a real date, including the all-zero EXIF placeholder.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value

    clean = _DATE_NOISE.sub("", str(value))
    clean = clean.replace("UTC", "").strip()
    clean = re.sub(r"\s+", " ", clean)
    if not clean:
        return None

    # 1. Try ISO format (e.g. 2020-01-01T12:00:00, with or without offset)
    try:
        return datetime.fromisoformat(clean)
    except ValueError:
        pass

    # 2. EXIF "YYYY:MM:DD HH:MM:SS" -> "YYYY-MM-DD HH:MM:SS"
    if re.match(r"^\d{4}:\d{2}:\d{2}", clean):
        clean = clean.replace(":", "-", 2)
    # Sub-second precision is noise for folder placement
    clean = re.sub(r"(\d{2}:\d{2}:\d{2})\.\d+", r"\1", clean)

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(clean, fmt)
        except ValueError:
            continue

    return None


class MetadataExtractor:
    """
    Capture-date lookups for the two media categories.

    Strategies:
      - Photos: 'exifread' date taken tag (fast, Python-native).
      - Video: 'pymediainfo' (fast wrapper) -> falls back to 'exiftool' (robust).

    Both lookups return None instead of raising; a broken or missing tag is
    just "no date" for the resolver.
    """

    def get_photo_date(self, path: Path) -> Optional[datetime]:
        try:
            with path.open('rb') as f:
                # details=False skips maker notes and thumbnails
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            logging.debug(f"ExifRead failed for {path}: {e}")
            return None

        for tag in config.PHOTO_DATE_TAGS:
            if tag in tags:
                dt = parse_date_string(str(tags[tag]))
                if dt:
                    return dt
                logging.debug(f"Unparsable {tag} in {path}: {tags[tag]!r}")
        return None

    def get_video_date(self, path: Path) -> Optional[datetime]:
        # Strategy 1: MediaInfo
        try:
            dt = self._mediainfo_date(path)
            if dt:
                return dt
        except Exception as e:
            logging.debug(f"MediaInfo failed for {path}: {e}")

        # Strategy 2: ExifTool (requires system install)
        try:
            return self._exiftool_date(path)
        except Exception as e:
            # Only log at debug level to avoid spamming console if tool is missing
            logging.debug(f"ExifTool failed for {path}: {e}")

        return None

    # --- Internal Extraction Helpers ---

    def _mediainfo_date(self, path: Path) -> Optional[datetime]:
        mi = MediaInfo.parse(str(path))
        for track in mi.tracks:
            if track.track_type != "General":
                continue
            # Different cameras write to different tags
            for field in config.MEDIAINFO_DATE_FIELDS:
                val = getattr(track, field, None)
                if val:
                    dt = parse_date_string(val)
                    if dt:
                        return dt
        return None

    def _exiftool_date(self, path: Path) -> Optional[datetime]:
        """
        Wraps the 'exiftool' command line utility.
        Must be installed and on the system PATH.
        """
        # -j = JSON output, -n = no formatting
        cmd = ["exiftool", "-j", "-n", str(path)]
        out = subprocess.check_output(cmd, stderr=subprocess.DEVNULL, text=True)
        data_list = json.loads(out)
        if not data_list:
            return None

        tags = data_list[0]
        for field in config.EXIFTOOL_DATE_FIELDS:
            if tags.get(field):
                dt = parse_date_string(str(tags[field]))
                if dt:
                    return dt
        return None

"""
Configuration constants for the media organizer.
"""
from .models import Category

# --- File Type Definitions ---
PHOTO_EXTS = {'.png', '.jpeg', '.jpg', '.gif', '.psd', '.bmp', '.heic'}
VIDEO_EXTS = {'.mov', '.mp4'}

# Extension to Category Mapping
# Anything not listed here is never picked up by the scanner
EXT_TO_CATEGORY = {}
for ext in PHOTO_EXTS: EXT_TO_CATEGORY[ext] = Category.PHOTO
for ext in VIDEO_EXTS: EXT_TO_CATEGORY[ext] = Category.VIDEO

# --- Metadata Parsing ---
# "Date taken" (EXIF 0x9003) as exposed by exifread
PHOTO_DATE_TAGS = [
    'EXIF DateTimeOriginal',
]

# MediaInfo General track fields, in priority order
MEDIAINFO_DATE_FIELDS = [
    "recorded_date",
    "encoded_date",
    "tagged_date",
]

# Exiftool JSON keys, in priority order
EXIFTOOL_DATE_FIELDS = ["MediaCreateDate", "CreateDate", "CreationDate", "DateTimeOriginal"]

# --- Hashing ---
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# --- Organization ---
CATEGORY_ROOTS = {
    Category.PHOTO: "Photos",
    Category.VIDEO: "HomeMovies",
}
FOLDER_PATTERN = "{year:04d}/{month:02d}/{day:02d}"
DUPES_DIR = "Dupes"

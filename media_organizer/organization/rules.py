from pathlib import Path

from .. import config
from ..models import Category, ResolvedDate


def build_destination(dest_root: Path, category: Category, date: ResolvedDate) -> Path:
    """
    Maps (category, date) to the day folder, e.g. Photos/2021/05/03.
    Pure: same inputs always give the same path, which is what makes re-runs safe.
    """
    folder = config.FOLDER_PATTERN.format(year=date.year, month=date.month, day=date.day)
    return Path(dest_root) / config.CATEGORY_ROOTS[category] / folder


def next_available_name(directory: Path, base_name: str, extension: str) -> str:
    """
    Returns 'base_name.ext' if free in directory, else the first free
    'base_name_N.ext' for N = 1, 2, ...

    Existence is checked on disk every call; two files of the same run may
    target the same directory.
    """
    if extension and not extension.startswith('.'):
        extension = '.' + extension

    directory = Path(directory)
    candidate = f"{base_name}{extension}"
    counter = 1
    while (directory / candidate).exists():
        candidate = f"{base_name}_{counter}{extension}"
        counter += 1
    return candidate

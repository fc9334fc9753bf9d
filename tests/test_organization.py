import errno
import os

import pytest
from pathlib import Path
from datetime import datetime

import media_organizer.organization.mover as mover_module
from media_organizer.models import Category, ResolvedDate
from media_organizer.organization.rules import build_destination, next_available_name
from media_organizer.organization.resolver import DateResolver, METADATA, FILESYSTEM
from media_organizer.organization.mover import FileMover, ensure_directory
from media_organizer.exceptions import FileOperationError


# --- Destination paths ---

def test_build_destination_pads_month_and_day(tmp_path):
    dest = build_destination(tmp_path, Category.PHOTO, ResolvedDate(2021, 5, 3))
    assert dest == tmp_path / "Photos" / "2021" / "05" / "03"


def test_build_destination_video_root(tmp_path):
    dest = build_destination(tmp_path, Category.VIDEO, ResolvedDate(1999, 12, 31))
    assert dest == tmp_path / "HomeMovies" / "1999" / "12" / "31"


def test_build_destination_does_no_io(tmp_path):
    dest = build_destination(tmp_path / "lib", Category.PHOTO, ResolvedDate(2021, 1, 1))
    assert dest == build_destination(tmp_path / "lib", Category.PHOTO, ResolvedDate(2021, 1, 1))
    assert not (tmp_path / "lib").exists()


@pytest.mark.parametrize("month,day", [(0, 1), (13, 1), (1, 0), (1, 32)])
def test_resolved_date_rejects_out_of_range(month, day):
    with pytest.raises(ValueError):
        ResolvedDate(2020, month, day)


# --- Collision naming ---

def test_next_available_name_unused(tmp_path):
    assert next_available_name(tmp_path, "photo", ".jpg") == "photo.jpg"


def test_next_available_name_missing_directory(tmp_path):
    assert next_available_name(tmp_path / "Dupes", "photo", ".jpg") == "photo.jpg"


def test_next_available_name_is_monotonic(tmp_path):
    for name in ["photo.jpg", "photo_1.jpg", "photo_2.jpg"]:
        (tmp_path / name).write_bytes(b"x")
    assert next_available_name(tmp_path, "photo", ".jpg") == "photo_3.jpg"


def test_next_available_name_first_fit(tmp_path):
    for name in ["photo.jpg", "photo_2.jpg"]:
        (tmp_path / name).write_bytes(b"x")
    assert next_available_name(tmp_path, "photo", "jpg") == "photo_1.jpg"


def test_next_available_name_rechecks_disk(tmp_path):
    assert next_available_name(tmp_path, "clip", ".mov") == "clip.mov"
    (tmp_path / "clip.mov").write_bytes(b"x")
    assert next_available_name(tmp_path, "clip", ".mov") == "clip_1.mov"


# --- Date resolution ---

def test_metadata_date_wins_over_mtime(make_media):
    mf = make_media("img001.jpg", mtime=datetime(2010, 1, 1, 12, 0))
    resolver = DateResolver(photo_lookup=lambda p: datetime(2021, 5, 3, 8, 0))

    assert resolver.resolve(mf, mf.category) == (ResolvedDate(2021, 5, 3), METADATA)


def test_fallback_to_mtime(make_media):
    mf = make_media("img001.jpg", mtime=datetime(2019, 7, 4, 12, 0))
    resolver = DateResolver(photo_lookup=lambda p: None)

    assert resolver.resolve(mf, mf.category) == (ResolvedDate(2019, 7, 4), FILESYSTEM)


def test_unparsable_metadata_falls_back(make_media):
    mf = make_media("clip.mov", mtime=datetime(2019, 7, 4, 12, 0))
    resolver = DateResolver(video_lookup=lambda p: "\u200e??/??/????")

    assert resolver.resolve_date(mf, mf.category) == ResolvedDate(2019, 7, 4)


def test_metadata_string_is_parsed(make_media):
    mf = make_media("clip.mov", mtime=datetime(2019, 7, 4, 12, 0))
    resolver = DateResolver(video_lookup=lambda p: "\u200e5/\u200e3/\u200e2021 \u200f\u200e10:15 AM")

    assert resolver.resolve_date(mf, mf.category) == ResolvedDate(2021, 5, 3)


def test_lookup_exception_is_swallowed(make_media):
    mf = make_media("img001.jpg", mtime=datetime(2019, 7, 4, 12, 0))

    def broken(path):
        raise RuntimeError("COM property store unavailable")

    resolver = DateResolver(photo_lookup=broken)
    assert resolver.resolve(mf, mf.category) == (ResolvedDate(2019, 7, 4), FILESYSTEM)


def test_category_selects_lookup(make_media):
    photo = make_media("a.png", mtime=datetime(2019, 7, 4, 12, 0))
    video = make_media("b.mp4", mtime=datetime(2019, 7, 4, 12, 0))
    resolver = DateResolver(
        photo_lookup=lambda p: datetime(2001, 1, 1),
        video_lookup=lambda p: datetime(2002, 2, 2),
    )

    assert resolver.resolve_date(photo, photo.category) == ResolvedDate(2001, 1, 1)
    assert resolver.resolve_date(video, video.category) == ResolvedDate(2002, 2, 2)


def test_future_metadata_date_is_trusted(make_media):
    mf = make_media("img001.jpg", mtime=datetime(2019, 7, 4, 12, 0))
    resolver = DateResolver(photo_lookup=lambda p: datetime(2099, 9, 9))

    assert resolver.resolve_date(mf, mf.category) == ResolvedDate(2099, 9, 9)


# --- Mover ---

def test_ensure_directory(tmp_path):
    target = tmp_path / "a" / "b"
    assert ensure_directory(target) is True
    assert ensure_directory(target) is False
    assert target.is_dir()


def test_ensure_directory_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_bytes(b"x")
    with pytest.raises(FileOperationError):
        ensure_directory(blocker / "sub")


def test_mover_copy(tmp_path):
    src = tmp_path / "a.jpg"
    src.write_bytes(b"content")
    dest = tmp_path / "out" / "a.jpg"
    dest.parent.mkdir()

    FileMover(move_mode=False).place(src, dest)

    assert src.exists()
    assert dest.read_bytes() == b"content"
    assert list(dest.parent.iterdir()) == [dest]


def test_mover_move(tmp_path):
    src = tmp_path / "a.jpg"
    src.write_bytes(b"content")
    dest = tmp_path / "out" / "a.jpg"
    dest.parent.mkdir()

    FileMover(move_mode=True).place(src, dest)

    assert not src.exists()
    assert dest.read_bytes() == b"content"


def test_mover_copy_failure_leaves_nothing(tmp_path, monkeypatch):
    src = tmp_path / "a.jpg"
    src.write_bytes(b"content")
    out = tmp_path / "out"
    out.mkdir()

    def partial_copy(s, d):
        Path(d).write_bytes(b"cont")
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr(mover_module.shutil, "copy2", partial_copy)

    with pytest.raises(FileOperationError):
        FileMover(move_mode=False).place(src, out / "a.jpg")

    assert list(out.iterdir()) == []
    assert src.read_bytes() == b"content"


def test_mover_cross_device_move(tmp_path, monkeypatch):
    src = tmp_path / "a.mov"
    src.write_bytes(b"video")
    dest = tmp_path / "out" / "a.mov"
    dest.parent.mkdir()

    real_replace = os.replace

    def replace(a, b):
        if Path(a) == src:
            raise OSError(errno.EXDEV, "Invalid cross-device link")
        return real_replace(a, b)

    monkeypatch.setattr(mover_module.os, "replace", replace)

    FileMover(move_mode=True).place(src, dest)

    assert not src.exists()
    assert dest.read_bytes() == b"video"
    assert list(dest.parent.iterdir()) == [dest]

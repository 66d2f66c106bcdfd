import os
from pathlib import Path

import pytest

from torrentsweep.sweep.scanner import declared_directories, delete_files, scan_directory
from torrentsweep.torrent.parser import parse_torrent_file


@pytest.fixture
def torrent(torrent_path):
    return parse_torrent_file(torrent_path)


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "pkg"
    (root / "docs" / "img").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"12345")
    (root / "docs" / "readme.md").write_bytes(b"abc")
    (root / "docs" / "img" / "logo.png").write_bytes(b"1234")
    return root


def test_declared_directories():
    paths = [os.path.join("docs", "img", "logo.png"), "a.txt"]

    assert declared_directories(paths) == {"docs", os.path.join("docs", "img")}


class TestScanDirectory:
    def test_matching_directory_is_clean(self, content_root, torrent):
        report = scan_directory(content_root, torrent)

        assert report.clean
        assert report.root == content_root

    def test_extra_file_in_declared_directory(self, content_root, torrent):
        (content_root / "docs" / "notes.txt").write_bytes(b"x")
        (content_root / "docs" / "img" / "tmp").mkdir()
        (content_root / "docs" / "img" / "tmp" / "thumb.db").write_bytes(b"x")

        report = scan_directory(content_root, torrent)

        assert report.extra == [
            os.path.join("docs", "notes.txt"),
            os.path.join("docs", "img", "tmp", "thumb.db"),
        ]

    def test_surface_files_ignored_by_default(self, content_root, torrent):
        (content_root / "info.nfo").write_bytes(b"x")
        (content_root / "extras").mkdir()
        (content_root / "extras" / "bonus.bin").write_bytes(b"x")

        assert scan_directory(content_root, torrent).extra == []

    def test_surface_files_counted_with_surface(self, content_root, torrent):
        (content_root / "info.nfo").write_bytes(b"x")
        (content_root / "extras").mkdir()
        (content_root / "extras" / "bonus.bin").write_bytes(b"x")

        report = scan_directory(content_root, torrent, surface=True)

        assert sorted(report.extra) == sorted(
            [os.path.join("extras", "bonus.bin"), "info.nfo"]
        )

    def test_missing_and_mismatched(self, content_root, torrent):
        (content_root / "docs" / "readme.md").unlink()
        (content_root / "a.txt").write_bytes(b"123")

        report = scan_directory(content_root, torrent)

        assert report.missing == [os.path.join("docs", "readme.md")]
        assert report.mismatched == [("a.txt", 5, 3)]
        assert not report.clean


class TestDeleteFiles:
    def test_deletes_and_prunes_empty_directories(self, content_root):
        (content_root / "docs" / "img" / "tmp").mkdir()
        junk = os.path.join("docs", "img", "tmp", "thumb.db")
        (content_root / junk).write_bytes(b"x")
        (content_root / "docs" / "notes.txt").write_bytes(b"x")

        deleted, failed = delete_files(content_root, [junk, os.path.join("docs", "notes.txt")])

        assert deleted == 2
        assert failed == []
        assert not (content_root / "docs" / "img" / "tmp").exists()
        assert (content_root / "docs" / "img" / "logo.png").exists()
        assert (content_root / "docs" / "readme.md").exists()

    def test_undeletable_file_does_not_stop_the_rest(self, content_root, monkeypatch):
        locked = content_root / "docs" / "locked.txt"
        locked.write_bytes(b"x")
        (content_root / "docs" / "notes.txt").write_bytes(b"x")
        real_unlink = Path.unlink

        def unlink(self, missing_ok=False):
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            real_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", unlink)

        deleted, failed = delete_files(
            content_root,
            [os.path.join("docs", "locked.txt"), os.path.join("docs", "notes.txt")],
        )

        assert deleted == 1
        assert [path for path, _ in failed] == [os.path.join("docs", "locked.txt")]
        assert isinstance(failed[0][1], PermissionError)
        assert locked.exists()
        assert not (content_root / "docs" / "notes.txt").exists()

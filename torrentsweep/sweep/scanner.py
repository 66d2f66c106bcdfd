"""
Compare the file list of a multi-file torrent with a directory on disk.

Paths in a ``SweepReport`` are relative to the scanned root and use the
platform separator, the same form ``TorrentFile.file_sizes`` produces.
"""

import logging
import os
from pathlib import Path

from torrentsweep.torrent.metadata import TorrentFile

logger = logging.getLogger(__name__)


class SweepReport:
    __slots__ = ("root", "extra", "missing", "mismatched")

    def __init__(
        self,
        root: Path,
        extra: list[str],
        missing: list[str],
        mismatched: list[tuple[str, int, int]],
    ):
        self.root = root
        self.extra = extra
        self.missing = missing
        # (path, declared size, size on disk)
        self.mismatched = mismatched

    @property
    def clean(self) -> bool:
        return not (self.extra or self.missing or self.mismatched)


def declared_directories(paths) -> set[str]:
    """Every directory a declared file lives under, excluding the root itself."""
    dirs = set()
    for path in paths:
        parent = os.path.dirname(path)
        while parent:
            dirs.add(parent)
            parent = os.path.dirname(parent)
    return dirs


def scan_directory(root: Path, torrent: TorrentFile, surface: bool = False) -> SweepReport:
    """Walk ``root`` and sort what is found against the torrent's file list.

    Without ``surface`` loose files directly under ``root`` and top-level
    directories the torrent never mentions are left alone. With ``surface``
    they count as extras too.
    """
    declared = torrent.file_sizes()
    declared_dirs = declared_directories(declared)
    logger.info(
        f"Scanning {root} against {len(declared)} declared files (surface={surface})"
    )

    extra = []
    found = {}
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        if rel_dir == os.curdir:
            rel_dir = ""
        if not surface and not rel_dir:
            dirnames[:] = [d for d in dirnames if d in declared_dirs]
        dirnames.sort()
        for filename in sorted(filenames):
            rel_path = os.path.join(rel_dir, filename)
            if rel_path in declared:
                found[rel_path] = os.path.getsize(os.path.join(dirpath, filename))
            elif surface or rel_dir:
                extra.append(rel_path)

    missing = [path for path in declared if path not in found]
    mismatched = [
        (path, declared[path], size)
        for path, size in found.items()
        if size != declared[path]
    ]
    logger.info(
        f"Scan of {root}: {len(extra)} extra, {len(missing)} missing, "
        f"{len(mismatched)} mismatched"
    )
    return SweepReport(root, extra, missing, mismatched)


def delete_files(root: Path, paths: list[str]) -> tuple[int, list[tuple[str, OSError]]]:
    """Remove ``paths`` under ``root``, then prune directories left empty.

    A path that cannot be removed does not stop the rest; it is returned
    with its error alongside the number of files deleted.
    """
    deleted = 0
    failed = []
    touched = set()
    for rel_path in paths:
        target = root / rel_path
        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Could not delete {target}: {e}")
            failed.append((rel_path, e))
            continue
        logger.info(f"Deleted {target}")
        deleted += 1
        touched.update(declared_directories([rel_path]))

    # deepest first so parents empty out after their children
    for rel_dir in sorted(touched, key=lambda d: d.count(os.sep), reverse=True):
        directory = root / rel_dir
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                logger.info(f"Removed empty directory {directory}")
        except OSError as e:
            logger.warning(f"Could not remove directory {directory}: {e}")
    return deleted, failed

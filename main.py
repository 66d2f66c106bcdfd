#!/usr/bin/env python3
"""
torrentsweep - reconcile a directory with the file list of a .torrent
Main entry point for the application.
"""

import argparse
import sys
from pathlib import Path
from torrentsweep.common.config import Settings
from torrentsweep.common.errors import SingleFileTorrentError, TorrentError
from torrentsweep.common.logging import config_logging
from torrentsweep.sweep.scanner import delete_files, scan_directory
from torrentsweep.torrent.parser import parse_torrent_file
import logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_SINGLE_FILE = 2


def format_error_chain(error: BaseException) -> str:
    lines = [f"Error: {error}"]
    cause = error.__cause__
    while cause is not None:
        lines.append(f"  caused by: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)


def confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def sweep(
    torrent_path: Path,
    directory: Path | None,
    settings: Settings,
    surface: bool = False,
    no_confirm: bool = False,
    diff: bool = False,
) -> int:
    """
    Decode a torrent and reconcile its file list against a directory.

    Args:
        torrent_path: Path to the .torrent file
        directory: Directory holding the torrent's content (default: ./<name>)
        settings: Decoder and logging settings
        surface: Also consider loose files at the top of the directory
        no_confirm: Delete without asking
        diff: Only report missing and changed files

    Returns:
        The process exit status.
    """
    try:
        torrent = parse_torrent_file(torrent_path, max_depth=settings.max_depth)
        declared = torrent.file_sizes()
    except SingleFileTorrentError as e:
        print(format_error_chain(e))
        return EXIT_SINGLE_FILE
    except TorrentError as e:
        logger.error(f"Failed to load {torrent_path}: {e}")
        print(format_error_chain(e))
        return EXIT_ERROR

    root = directory if directory is not None else Path(torrent.info.name)
    if not root.is_dir():
        print(f"Error: Directory '{root}' not found")
        return EXIT_ERROR

    print(f"\n{'='*60}")
    print(f"Torrent: {torrent.info.name}")
    print(f"Files: {len(declared)} ({torrent.info.total_length / (1024*1024):.2f} MB)")
    print(f"Directory: {root}")
    print(f"{'='*60}\n")

    try:
        report = scan_directory(root, torrent, surface=surface)
    except OSError as e:
        logger.error(f"Failed to scan {root}: {e}")
        print(format_error_chain(e))
        return EXIT_ERROR

    if diff:
        for path in report.missing:
            print(f"- {path}")
        for path, expected, actual in report.mismatched:
            print(f"~ {path} ({expected} bytes declared, {actual} on disk)")
        if not (report.missing or report.mismatched):
            print("✓ Directory content matches the torrent")
        return EXIT_OK

    if not report.extra:
        print("✓ No extra files found")
        return EXIT_OK

    for path in report.extra:
        print(f"+ {path}")
    if not no_confirm and not confirm(f"\nDelete {len(report.extra)} file(s)?"):
        print("Nothing deleted")
        return EXIT_OK

    deleted, failed = delete_files(root, report.extra)
    print(f"✓ Deleted {deleted} file(s)")
    if failed:
        for path, error in failed:
            print(f"✗ {path}: {error}")
        print(f"Error: {len(failed)} file(s) could not be deleted")
        return EXIT_ERROR
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="torrentsweep - remove files a torrent does not declare",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ubuntu.torrent
  %(prog)s movie.torrent downloads/movie -s
  %(prog)s album.torrent --diff
        """,
    )

    parser.add_argument("torrent", type=Path, help="Path to the .torrent file")

    parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        help="Directory holding the torrent's files (default: ./<torrent name>)",
    )

    parser.add_argument(
        "-s", "--surface",
        action="store_true",
        help="Take other files in the root directory into account",
    )

    parser.add_argument(
        "-y", "--no-confirm",
        action="store_true",
        help="Skip confirmation before deleting files",
    )

    parser.add_argument(
        "--diff",
        action="store_true",
        help="Compare directory content changes instead of deleting",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum nesting depth accepted while decoding, 1-200 (default: 64)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Name of the log file under the log directory",
    )

    return parser


def main(argv=None) -> int:
    """Main entry point for torrentsweep."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env().apply_args(args)
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_ERROR

    if not args.torrent.exists():
        print(f"Error: Torrent file '{args.torrent}' not found")
        return EXIT_ERROR

    config_logging(settings.log_file, log_dir=settings.log_dir, verbose=settings.verbose)

    try:
        return sweep(
            args.torrent,
            args.directory,
            settings,
            surface=args.surface,
            no_confirm=args.no_confirm,
            diff=args.diff,
        )
    except KeyboardInterrupt:
        print("\n\nInterrupted, nothing further deleted")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())

from torrentsweep.common.errors import (
    EmptyFileListError,
    EmptyPathError,
    EmptyPiecesError,
    ZeroLengthError,
    ZeroPieceLengthError,
)
from torrentsweep.torrent.metadata import MetaFileInfo, SingleFile, TorrentFile


def validate_torrent(torrent: TorrentFile) -> TorrentFile:
    validate_info(torrent.info)
    return torrent


def validate_info(info: MetaFileInfo) -> MetaFileInfo:
    """Check the invariants the encoding itself cannot express.

    Checks run in a fixed order and the first failure is raised, so the
    same descriptor always reports the same problem.
    """
    if not info.pieces:
        raise EmptyPiecesError()
    if info.piece_length == 0:
        raise ZeroPieceLengthError()

    if isinstance(info.file_list, SingleFile):
        if info.file_list.length == 0:
            raise ZeroLengthError()
        return info

    files = info.file_list.files
    if not files:
        raise EmptyFileListError()
    for index, entry in enumerate(files):
        if not entry.path:
            raise EmptyPathError(index)
        if entry.length == 0:
            raise ZeroLengthError(index)
    return info

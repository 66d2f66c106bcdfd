import os

from torrentsweep.common.errors import DuplicatePathError, SingleFileTorrentError

PIECE_HASH_LENGTH = 20


class FileListItem:
    __slots__ = ("length", "path")

    def __init__(self, length: int, path: tuple[str, ...]):
        self.length = length
        self.path = path

    def relative_path(self) -> str:
        return os.path.join(*self.path) if self.path else ""

    def __eq__(self, other):
        if not isinstance(other, FileListItem):
            return NotImplemented
        return self.length == other.length and self.path == other.path

    def __repr__(self):
        return f"FileListItem(length={self.length}, path={list(self.path)!r})"


class SingleFile:
    """``info`` declared a "length": the descriptor names one file."""

    __slots__ = ("length",)

    def __init__(self, length: int):
        self.length = length

    def __eq__(self, other):
        if not isinstance(other, SingleFile):
            return NotImplemented
        return self.length == other.length

    def __repr__(self):
        return f"SingleFile(length={self.length})"


class MultipleFiles:
    """``info`` declared "files": a directory of files under ``info.name``."""

    __slots__ = ("files",)

    def __init__(self, files: tuple[FileListItem, ...]):
        self.files = files

    def __eq__(self, other):
        if not isinstance(other, MultipleFiles):
            return NotImplemented
        return self.files == other.files

    def __repr__(self):
        return f"MultipleFiles({list(self.files)!r})"


class MetaFileInfo:
    __slots__ = ("name", "piece_length", "pieces", "file_list")

    def __init__(
        self,
        name: str,
        piece_length: int,
        pieces: tuple[bytes, ...],
        file_list: SingleFile | MultipleFiles,
    ):
        self.name = name
        self.piece_length = piece_length
        self.pieces = pieces
        self.file_list = file_list

    @property
    def is_multi_file(self) -> bool:
        return isinstance(self.file_list, MultipleFiles)

    @property
    def total_length(self) -> int:
        if isinstance(self.file_list, SingleFile):
            return self.file_list.length
        return sum(item.length for item in self.file_list.files)

    def __eq__(self, other):
        if not isinstance(other, MetaFileInfo):
            return NotImplemented
        return (
            self.name == other.name
            and self.piece_length == other.piece_length
            and self.pieces == other.pieces
            and self.file_list == other.file_list
        )

    def __repr__(self):
        return (
            f"MetaFileInfo(name={self.name!r}, piece_length={self.piece_length}, "
            f"pieces=<{len(self.pieces)}>, file_list={self.file_list!r})"
        )


class TorrentFile:
    __slots__ = ("announce", "info", "info_hash")

    def __init__(self, announce: str, info: MetaFileInfo, info_hash: bytes):
        self.announce = announce
        self.info = info
        self.info_hash = info_hash

    def file_sizes(self) -> dict[str, int]:
        """Map each declared file's relative path to its size in bytes.

        Only multi-file descriptors describe a directory layout, so a
        single-file descriptor raises ``SingleFileTorrentError``. Two entries
        that resolve to the same path raise ``DuplicatePathError``.
        """
        file_list = self.info.file_list
        if not isinstance(file_list, MultipleFiles):
            raise SingleFileTorrentError(self.info.name)
        sizes = {}
        seen = {}
        for index, item in enumerate(file_list.files):
            path = item.relative_path()
            if path in seen:
                raise DuplicatePathError(path, seen[path], index)
            seen[path] = index
            sizes[path] = item.length
        return sizes

    def __eq__(self, other):
        if not isinstance(other, TorrentFile):
            return NotImplemented
        return (
            self.announce == other.announce
            and self.info == other.info
            and self.info_hash == other.info_hash
        )

    def __repr__(self):
        return (
            f"TorrentFile(announce={self.announce!r}, info={self.info!r}, "
            f"info_hash={self.info_hash.hex()})"
        )

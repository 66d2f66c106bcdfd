import hashlib
import logging
from pathlib import Path

from torrentsweep.bencode.decoder import DEFAULT_MAX_DEPTH, Decoder, DictDecoder
from torrentsweep.bencode.values import BYTES, DICT, INTEGER, LIST
from torrentsweep.common.errors import (
    DuplicateKeyError,
    EmptyInputError,
    IntegerRangeError,
    KindMismatchError,
    MissingKeyError,
    MutuallyExclusiveKeyError,
    TextEncodingError,
    TopLevelShapeError,
    TorrentError,
    TorrentFileError,
)
from torrentsweep.torrent.metadata import (
    PIECE_HASH_LENGTH,
    FileListItem,
    MetaFileInfo,
    MultipleFiles,
    SingleFile,
    TorrentFile,
)
from torrentsweep.torrent.validator import validate_torrent

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1

# real-world descriptors spell it with a space
PIECE_LENGTH_KEYS = (b"piece_length", b"piece length")

ROOT = "metainfo"


def parse_torrent_file(path: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> TorrentFile:
    context = {"descriptor": str(path)}
    logger.info(f"Parsing torrent file: {path}", extra=context)

    try:
        with path.open("rb") as f:
            buf = f.read()
    except OSError as e:
        raise TorrentFileError(path, e.strerror or str(e)) from e

    try:
        torrent = parse_torrent(buf, max_depth=max_depth)
    except TorrentError as e:
        # offset/key/field, whichever the error carries
        details = {
            attr: getattr(e, attr)
            for attr in ("offset", "key", "dictionary", "field")
            if hasattr(e, attr)
        }
        logger.warning(
            f"Rejected {path}: {e}",
            extra={**context, "error": type(e).__name__, **details},
        )
        raise TorrentFileError(path, str(e)) from e

    info = torrent.info
    context.update(info_hash=torrent.info_hash.hex(), total_length=info.total_length)
    if info.is_multi_file:
        logger.info(
            f"Parsed multi-file torrent: {info.name} "
            f"({len(info.file_list.files)} files, {info.total_length} bytes)",
            extra=context,
        )
    else:
        logger.info(
            f"Parsed single-file torrent: {info.name} ({info.total_length} bytes)",
            extra=context,
        )
    return torrent


def parse_torrent(buf: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> TorrentFile:
    """Decode and validate a complete metainfo buffer."""
    return validate_torrent(decode_torrent(buf, max_depth=max_depth))


def decode_torrent(buf: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> TorrentFile:
    """Map a metainfo buffer onto the domain model without running the validator."""
    decoder = Decoder(buf, max_depth=max_depth)
    top = decoder.next_object()
    if top is None:
        raise EmptyInputError()
    if top.kind != DICT:
        raise TopLevelShapeError(top.kind)

    announce = None
    info = None
    info_hash = None
    while (pair := top.next_pair()) is not None:
        key, value = pair
        if key == b"announce":
            _check_duplicate(announce, key, ROOT)
            announce = _text(value, "announce", ROOT)
        elif key == b"info":
            _check_duplicate(info, key, ROOT)
            info_dict = _expect(value, DICT, "info", ROOT)
            info = _map_info(info_dict)
            info_hash = hashlib.sha1(info_dict.raw_bytes()).digest()
        else:
            _ignore(key, ROOT)

    decoder.ensure_end()

    if announce is None:
        raise MissingKeyError("announce", ROOT)
    if info is None:
        raise MissingKeyError("info", ROOT)
    return TorrentFile(announce=announce, info=info, info_hash=info_hash)


def _map_info(info: DictDecoder) -> MetaFileInfo:
    where = "info"
    name = None
    piece_length = None
    pieces = None
    length = None
    files = None
    while (pair := info.next_pair()) is not None:
        key, value = pair
        if key == b"name":
            _check_duplicate(name, key, where)
            name = _text(value, "name", where)
        elif key in PIECE_LENGTH_KEYS:
            _check_duplicate(piece_length, key, where)
            piece_length = _unsigned(value, _key_name(key), where)
        elif key == b"pieces":
            _check_duplicate(pieces, key, where)
            pieces = _pieces(value, where)
        elif key == b"length":
            _check_duplicate(length, key, where)
            length = _unsigned(value, "length", where)
        elif key == b"files":
            _check_duplicate(files, key, where)
            files = _map_files(value, where)
        else:
            _ignore(key, where)

    if name is None:
        raise MissingKeyError("name", where)
    if piece_length is None:
        raise MissingKeyError("piece_length", where)
    if pieces is None:
        raise MissingKeyError("pieces", where)
    if (length is None) == (files is None):
        present = ("length", "files") if files is not None else ()
        raise MutuallyExclusiveKeyError(where, present)

    file_list = SingleFile(length) if files is None else MultipleFiles(files)
    return MetaFileInfo(
        name=name, piece_length=piece_length, pieces=pieces, file_list=file_list
    )


def _map_files(value, where: str) -> tuple[FileListItem, ...]:
    files_list = _expect(value, LIST, "files", where)
    files = []
    while (entry := files_list.next_object()) is not None:
        index = len(files)
        entry_dict = _expect(entry, DICT, f"files[{index}]", where)
        files.append(_map_file_entry(entry_dict, f"{where}.files[{index}]"))
    return tuple(files)


def _map_file_entry(entry: DictDecoder, where: str) -> FileListItem:
    length = None
    path = None
    while (pair := entry.next_pair()) is not None:
        key, value = pair
        if key == b"length":
            _check_duplicate(length, key, where)
            length = _unsigned(value, "length", where)
        elif key == b"path":
            _check_duplicate(path, key, where)
            path = _path(value, where)
        else:
            _ignore(key, where)

    if length is None:
        raise MissingKeyError("length", where)
    if path is None:
        raise MissingKeyError("path", where)
    return FileListItem(length=length, path=path)


def _path(value, where: str) -> tuple[str, ...]:
    segments_list = _expect(value, LIST, "path", where)
    segments = []
    while (segment := segments_list.next_object()) is not None:
        segments.append(_text(segment, f"path[{len(segments)}]", where))
    return tuple(segments)


def _pieces(value, where: str) -> tuple[bytes, ...]:
    raw = _expect(value, BYTES, "pieces", where).value
    if len(raw) % PIECE_HASH_LENGTH != 0:
        raise KindMismatchError(
            "pieces",
            where,
            f"{BYTES} with a length that is a multiple of {PIECE_HASH_LENGTH}",
            f"{BYTES} of length {len(raw)}",
        )
    return tuple(
        raw[i : i + PIECE_HASH_LENGTH] for i in range(0, len(raw), PIECE_HASH_LENGTH)
    )


def _expect(value, kind: str, key: str, where: str):
    if value.kind != kind:
        raise KindMismatchError(key, where, kind, value.kind)
    return value


def _text(value, key: str, where: str) -> str:
    raw = _expect(value, BYTES, key, where).value
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise TextEncodingError(key, where) from None


def _unsigned(value, key: str, where: str) -> int:
    number = _expect(value, INTEGER, key, where).value
    if not 0 <= number <= U64_MAX:
        raise IntegerRangeError(key, where, number)
    return number


def _check_duplicate(current, key: bytes, where: str):
    if current is not None:
        raise DuplicateKeyError(_key_name(key), where)


def _ignore(key: bytes, where: str):
    # the value itself is drained by the cursor before the next pair
    logger.debug(f"Ignoring unrecognized key {_key_name(key)!r} in {where}")


def _key_name(key: bytes) -> str:
    return key.decode("utf-8", errors="backslashreplace")

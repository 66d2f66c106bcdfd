class TorrentError(Exception):
    """Base class for everything torrentsweep raises on bad input."""


class TorrentFileError(TorrentError):
    """A descriptor at ``path`` could not be read, decoded or validated."""

    def __init__(self, path, message: str):
        super().__init__(f"Error while parsing {path}: {message}")
        self.path = path


class SingleFileTorrentError(TorrentError):
    def __init__(self, name: str):
        super().__init__(
            f'"{name}" is a single-file torrent; there is no directory to sweep'
        )
        self.name = name


class DuplicatePathError(TorrentError):
    def __init__(self, path: str, first: int, second: int):
        super().__init__(
            f"info.files[{first}] and info.files[{second}] both resolve to {path!r}"
        )
        self.path = path
        self.first = first
        self.second = second


# decoding


class DecodeError(TorrentError):
    pass


class MalformedInputError(DecodeError):
    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


class NestingTooDeepError(MalformedInputError):
    def __init__(self, max_depth: int, offset: int):
        super().__init__(f"nesting deeper than {max_depth} levels", offset)
        self.max_depth = max_depth


class TrailingDataError(DecodeError):
    def __init__(self, offset: int, remaining: int):
        super().__init__(
            f"Metafile is malformed: {remaining} trailing byte(s) at offset {offset}"
        )
        self.offset = offset
        self.remaining = remaining


class EmptyInputError(DecodeError):
    def __init__(self):
        super().__init__("Metafile is empty")


class TopLevelShapeError(DecodeError):
    def __init__(self, actual: str):
        super().__init__(
            f"Metafile is malformed: top-level value is a {actual}, expected a dict"
        )
        self.actual = actual


class KindMismatchError(DecodeError):
    def __init__(self, key: str, dictionary: str, expected: str, actual: str):
        super().__init__(
            f'Invalid "{key}" data type in {dictionary}: expected {expected}, got {actual}'
        )
        self.key = key
        self.dictionary = dictionary
        self.expected = expected
        self.actual = actual


class DuplicateKeyError(DecodeError):
    def __init__(self, key: str, dictionary: str):
        super().__init__(f'Duplicate key "{key}" in {dictionary}')
        self.key = key
        self.dictionary = dictionary


class MissingKeyError(DecodeError):
    def __init__(self, key: str, dictionary: str):
        super().__init__(f'Key "{key}" is missing in {dictionary}')
        self.key = key
        self.dictionary = dictionary


class MutuallyExclusiveKeyError(DecodeError):
    def __init__(self, dictionary: str, present: tuple[str, ...]):
        found = ", ".join(f'"{k}"' for k in present) if present else "neither"
        super().__init__(
            f'Exactly one of "length" or "files" is required in {dictionary} (found {found})'
        )
        self.dictionary = dictionary
        self.present = present


class IntegerRangeError(DecodeError):
    def __init__(self, key: str, dictionary: str, value: int):
        super().__init__(
            f'Value "{key}" in {dictionary} is out of range for an unsigned 64-bit integer: {value}'
        )
        self.key = key
        self.dictionary = dictionary
        self.value = value


class TextEncodingError(DecodeError):
    def __init__(self, key: str, dictionary: str):
        super().__init__(f'Value "{key}" in {dictionary} is not valid UTF-8')
        self.key = key
        self.dictionary = dictionary


# validation


class ValidationError(TorrentError):
    """A decoded descriptor breaks one of the metainfo invariants."""

    def __init__(self, field: str, message: str):
        super().__init__(f'Value "{field}" {message}')
        self.field = field


class EmptyPiecesError(ValidationError):
    def __init__(self):
        super().__init__("info.pieces", "is empty")


class ZeroPieceLengthError(ValidationError):
    def __init__(self):
        super().__init__("info.piece_length", "is zero")


class ZeroLengthError(ValidationError):
    def __init__(self, index: int | None = None):
        field = "info.length" if index is None else f"info.files[{index}].length"
        super().__init__(field, "is zero")
        self.index = index


class EmptyFileListError(ValidationError):
    def __init__(self):
        super().__init__("info.files", "is empty")


class EmptyPathError(ValidationError):
    def __init__(self, index: int):
        super().__init__(f"info.files[{index}].path", "is empty")
        self.index = index

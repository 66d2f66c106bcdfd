import bencodepy
import pytest

PIECE = bytes(range(20))
ANNOUNCE = b"http://tracker.example/announce"


class Encoded(bytes):
    """Bytes that are already bencoded and go into a buffer verbatim."""


def encode_pairs(pairs) -> bytes:
    """Bencode a dictionary from ``(key, value)`` pairs, keeping their order.

    Unlike ``bencodepy.encode`` this neither sorts nor deduplicates keys.
    """
    out = [b"d"]
    for key, value in pairs:
        out.append(bencodepy.encode(key))
        out.append(value if isinstance(value, Encoded) else bencodepy.encode(value))
    out.append(b"e")
    return Encoded(b"".join(out))


def multi_file_info(overrides=None) -> dict:
    info = {
        b"name": b"pkg",
        b"piece_length": 16384,
        b"pieces": PIECE,
        b"files": [{b"length": 5, b"path": [b"a.txt"]}],
    }
    info.update(overrides or {})
    return {k: v for k, v in info.items() if v is not None}


def single_file_info(overrides=None) -> dict:
    info = {
        b"name": b"pkg.iso",
        b"piece_length": 16384,
        b"pieces": PIECE * 2,
        b"length": 20000,
    }
    info.update(overrides or {})
    return {k: v for k, v in info.items() if v is not None}


@pytest.fixture
def encode_torrent():
    def encode(info, announce=ANNOUNCE, **extra) -> bytes:
        metainfo = {b"announce": announce, b"info": info}
        metainfo.update({k.encode(): v for k, v in extra.items()})
        return bencodepy.encode(metainfo)

    return encode


@pytest.fixture
def torrent_path(tmp_path, encode_torrent):
    """Write a multi-file descriptor whose files live under ``tmp_path / "pkg"``."""
    info = multi_file_info(
        {
            b"files": [
                {b"length": 5, b"path": [b"a.txt"]},
                {b"length": 3, b"path": [b"docs", b"readme.md"]},
                {b"length": 4, b"path": [b"docs", b"img", b"logo.png"]},
            ]
        }
    )
    path = tmp_path / "pkg.torrent"
    path.write_bytes(encode_torrent(info))
    return path

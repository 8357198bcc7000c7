from __future__ import annotations

import struct
from pathlib import Path
from typing import Union

from .constants import MANIFEST_MAGIC, MANIFEST_PAYLOAD_OFFSET
from .errors import BadMagicError


# magic[8] followed by zero padding up to the payload offset
_HEADER_STRUCT = struct.Struct(f"<8s{MANIFEST_PAYLOAD_OFFSET - len(MANIFEST_MAGIC)}x")


def pack_header() -> bytes:
    return _HEADER_STRUCT.pack(MANIFEST_MAGIC)


def write_manifest_file(path: Union[str, Path], payload: bytes) -> None:
    """Write the framed manifest: 8-byte magic, reserved bytes, payload at offset 256."""
    with open(path, "wb") as fh:
        fh.write(pack_header())
        fh.write(payload)


def read_manifest_file(path: Union[str, Path]) -> bytearray:
    """Validate the magic and return the (still encrypted) payload as a mutable buffer.

    The reserved bytes between the magic and the payload offset are never read.
    """
    with open(path, "rb") as fh:
        magic = fh.read(len(MANIFEST_MAGIC))
        if magic != MANIFEST_MAGIC:
            raise BadMagicError(f"Bad manifest magic in {path}")
        fh.seek(MANIFEST_PAYLOAD_OFFSET)
        return bytearray(fh.read())

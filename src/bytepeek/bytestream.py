"""
Byte Stream Reader
==================

Drains a readable byte source into one contiguous buffer.

Compiled code units arrive from several places (zip archive members, loose
``.pyc`` files, resource streams). All of them are read the same way: in
fixed 4096-octet chunks until the source reports end-of-data by returning a
zero length. The source is closed on every exit path.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import io
from typing import BinaryIO

CHUNK_SIZE = 4096


def drain(source: BinaryIO) -> bytes:
    """
    Read a byte source to exhaustion and return its contents.

    The source is entered as a context manager, so it is closed whether the
    read completes or fails part way. Short reads are accumulated and the
    loop continues; only a zero-length read ends it.

    Args:
        source: A binary stream. ``readinto`` is used when available,
            otherwise ``read(CHUNK_SIZE)``.

    Returns:
        The concatenation of everything the source produced.
    """
    sink = io.BytesIO()
    buffer = bytearray(CHUNK_SIZE)

    with source:
        readinto = getattr(source, "readinto", None)
        if readinto is None:
            while chunk := source.read(CHUNK_SIZE):
                sink.write(chunk)
        else:
            with memoryview(buffer) as view:
                while count := readinto(buffer):
                    sink.write(view[:count])

    return sink.getvalue()

# SPDX-License-Identifier: GPL-2.0-only
"""
Low-level byte writers.

write_span() replaces a span of a buffer with new text of any length and
returns a new buffer; write_length() patches a 2 or 4 byte length field in
place. Neither knows about VRs or padding - callers normalize values first.

Example:
    buf, written = write_span(b'..ABCD..', 2, 4, 'ABCDEFGH')
    # buf == bytearray(b'..ABCDEFGH..'), written == 8
"""

import struct
from typing import Tuple, Union

from .exceptions import OutOfRange, UnencodableText

__all__ = ['encode_text', 'write_span', 'write_length']

BufferLike = Union[bytes, bytearray, memoryview]

_LENGTH_FORMATS = {2: 'H', 4: 'I'}


def encode_text(text: str) -> bytes:
    """Encode text one byte per character (8-bit value space)."""
    try:
        return text.encode('latin-1')
    except UnicodeEncodeError as e:
        raise UnencodableText(
            f"Character {text[e.start]!r} at index {e.start} is outside the 8-bit range"
        ) from None


def write_span(buffer: BufferLike, position: int, max_length: int,
               new_text: str) -> Tuple[bytearray, int]:
    """
    Replace ``buffer[position:position + max_length]`` with ``new_text``.

    The replacement may be shorter or longer than ``max_length``; the buffer
    shrinks or grows to fit. Bytes outside the span are preserved.

    Args:
        buffer: Buffer to write into (not modified)
        position: Start of the span
        max_length: Length of the span being replaced
        new_text: Replacement text

    Returns:
        (new_buffer, written_length)

    Raises:
        OutOfRange: If the span does not lie inside the buffer
        UnencodableText: If new_text has characters above U+00FF
    """
    if max_length < 0:
        raise OutOfRange(f"write_span: length cannot be less than 0 (got {max_length})")

    if position < 0 or position + max_length > len(buffer):
        raise OutOfRange(
            f"write_span: span [{position}, {position + max_length}) "
            f"exceeds buffer of {len(buffer)} bytes"
        )

    data = encode_text(new_text)

    new_buffer = bytearray(len(buffer) - max_length + len(data))
    new_buffer[:position] = buffer[:position]
    new_buffer[position:position + len(data)] = data
    new_buffer[position + len(data):] = buffer[position + max_length:]

    return new_buffer, len(data)


def write_length(buffer: bytearray, position: int, width: int, length: int,
                 big_endian: bool = False) -> None:
    """
    Write an unsigned 2 or 4 byte length field at ``position`` in place.

    Raises:
        OutOfRange: If the field does not fit in the buffer or the value
                    does not fit in ``width`` bytes
    """
    try:
        fmt = ('>' if big_endian else '<') + _LENGTH_FORMATS[width]
    except KeyError:
        raise OutOfRange(f"Length fields are 2 or 4 bytes wide, not {width}") from None

    if not 0 <= length < (1 << (8 * width)):
        raise OutOfRange(f"Length {length} does not fit in a {width}-byte length field")

    if position < 0 or position + width > len(buffer):
        raise OutOfRange(
            f"Length field at {position} ({width} bytes) "
            f"exceeds buffer of {len(buffer)} bytes"
        )

    struct.pack_into(fmt, buffer, position, length)

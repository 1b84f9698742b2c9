# SPDX-License-Identifier: GPL-2.0-only
"""
Build a RecordView from encoded DICOM bytes.

Walks the top-level elements of a Part 10 file or a bare dataset and
records where each one starts, where its value starts and how long it is.
Sequences and items are skipped over, not listed. pydicom supplies the
transfer syntax properties and, for implicit VR data, the VR of each tag.

Example:
    from dicom_writer.reader import read_file

    view = read_file('ct.dcm')
    view['00100010']
    # Field(tag='00100010', vr='PN', length=8, offset=312, data_offset=320, ...)
"""

import logging
import struct
from typing import Iterator, Optional, Tuple

from pydicom.datadict import dictionary_VR
from pydicom.uid import UID

from .dataset import Field, FieldEncoding, RecordView
from .exceptions import MalformedRecord, UnsupportedTransferSyntax
from .vr import VR_TABLE, length_prefix_width

__all__ = ['read_record', 'read_file', 'transfer_syntax_encoding']

log = logging.getLogger("dicom_writer")

PREAMBLE_LENGTH = 128
MAGIC = b'DICM'
UNDEFINED_LENGTH = 0xFFFFFFFF

ITEM_TAG = (0xFFFE, 0xE000)
ITEM_DELIM_TAG = (0xFFFE, 0xE00D)
SEQ_DELIM_TAG = (0xFFFE, 0xE0DD)

TRANSFER_SYNTAX_TAG = '00020010'


# =============================================================================
# Element Headers
# =============================================================================

def _unpack(fmt: str, data: bytes, pos: int) -> tuple:
    if pos + struct.calcsize(fmt) > len(data):
        raise MalformedRecord(f"Record truncated at offset {pos}")
    return struct.unpack_from(fmt, data, pos)


def _read_header(data: bytes, pos: int, implicit_vr: bool,
                 little_endian: bool) -> Tuple[int, int, Optional[str], int, int]:
    """Read one element header. Returns (group, element, vr, length, value_pos)."""
    e = '<' if little_endian else '>'
    group, element = _unpack(e + 'HH', data, pos)

    # Items and delimiters never carry a VR
    if implicit_vr or group == 0xFFFE:
        length, = _unpack(e + 'I', data, pos + 4)
        return group, element, None, length, pos + 8

    raw_vr, = _unpack('2s', data, pos + 4)
    vr = raw_vr.decode('ascii', errors='replace')

    if length_prefix_width(vr) == 4:
        # 2 reserved bytes, then 4-byte length
        length, = _unpack(e + 'I', data, pos + 8)
        return group, element, vr, length, pos + 12

    length, = _unpack(e + 'H', data, pos + 6)
    return group, element, vr, length, pos + 8


def _skip_items(data: bytes, pos: int, implicit_vr: bool, little_endian: bool) -> int:
    """Skip the items of an undefined length value; returns the position after its delimiter."""
    while True:
        group, element, _, length, pos = _read_header(data, pos, implicit_vr, little_endian)
        if (group, element) == SEQ_DELIM_TAG:
            return pos
        if (group, element) != ITEM_TAG:
            raise MalformedRecord(
                f"Expected item tag at offset {pos - 8}, found ({group:04X},{element:04X})"
            )
        if length == UNDEFINED_LENGTH:
            pos = _skip_item_dataset(data, pos, implicit_vr, little_endian)
        else:
            pos += length


def _skip_item_dataset(data: bytes, pos: int, implicit_vr: bool, little_endian: bool) -> int:
    """Skip the elements of an undefined length item up to its delimiter."""
    while True:
        group, element, vr, length, pos = _read_header(data, pos, implicit_vr, little_endian)
        if (group, element) == ITEM_DELIM_TAG:
            return pos
        if length == UNDEFINED_LENGTH:
            pos = _skip_undefined(data, pos, vr, implicit_vr, little_endian)
        else:
            pos += length


def _skip_undefined(data: bytes, pos: int, vr: Optional[str], implicit_vr: bool,
                    little_endian: bool) -> int:
    """Skip an undefined length value starting at ``pos``."""
    if vr == 'UN':
        # PS3.5 6.2.2: the contents of UN sequences are implicit VR little endian
        return _skip_items(data, pos, True, True)
    return _skip_items(data, pos, implicit_vr, little_endian)


def _implicit_vr(group: int, element: int) -> str:
    """VR for an implicit VR element, from pydicom's data dictionary."""
    if element == 0x0000:
        return 'UL'  # group length
    if group % 2 and 0x0010 <= element <= 0x00FF:
        return 'LO'  # private creator

    try:
        vr = dictionary_VR((group << 16) | element)
    except KeyError:
        return 'UN'

    # Ambiguous entries such as 'US or SS'
    vr = vr.split(' or ')[0]
    return vr if vr in VR_TABLE else 'UN'


def _read_fields(data: bytes, pos: int, implicit_vr: bool, little_endian: bool,
                 encoding: Optional[FieldEncoding],
                 group: Optional[int] = None) -> Iterator[Tuple[Field, int]]:
    """
    Yield (field, next_position) for each top-level element from ``pos``.

    With ``group`` set, stops at the first element of another group.
    """
    while pos < len(data):
        start = pos
        # Check the group before the VR: the next group may use another encoding
        grp, elem = _unpack('<HH' if little_endian else '>HH', data, pos)
        if group is not None and grp != group:
            return

        _, _, vr, length, value_pos = _read_header(data, pos, implicit_vr, little_endian)

        if grp == 0xFFFE:
            log.warning("Stray item/delimiter (%04X,%04X) at offset %d", grp, elem, start)
            pos = value_pos if length == UNDEFINED_LENGTH else value_pos + length
            continue

        if vr is None:
            vr = _implicit_vr(grp, elem)

        if length == UNDEFINED_LENGTH:
            pos = _skip_undefined(data, value_pos, vr, implicit_vr, little_endian)
            length = pos - value_pos
        else:
            pos = value_pos + length
            if pos > len(data):
                raise MalformedRecord(
                    f"({grp:04X},{elem:04X}) at offset {start}: value of {length} bytes "
                    f"exceeds record of {len(data)} bytes"
                )

        field = Field(
            tag=f'{grp:04X}{elem:04X}',
            vr=vr,
            length=length,
            offset=start,
            data_offset=value_pos,
            encoding=encoding,
        )
        yield field, pos


# =============================================================================
# Transfer Syntax
# =============================================================================

def transfer_syntax_encoding(uid: str) -> Tuple[bool, bool]:
    """
    Return ``(implicit_vr, big_endian)`` for a transfer syntax UID.

    Raises:
        UnsupportedTransferSyntax: Unknown or deflated transfer syntax
    """
    ts = UID(uid)
    try:
        deflated = ts.is_deflated
        implicit_vr = ts.is_implicit_VR
        little_endian = ts.is_little_endian
    except ValueError:
        raise UnsupportedTransferSyntax(f"Unknown transfer syntax {uid!r}") from None

    if deflated:
        raise UnsupportedTransferSyntax(
            f"Deflated transfer syntax {uid} cannot be edited in place"
        )
    return implicit_vr, not little_endian


# =============================================================================
# Public API
# =============================================================================

def read_record(data: bytes, implicit_vr: Optional[bool] = None,
                big_endian: Optional[bool] = None) -> RecordView:
    """
    Build the field directory of an encoded record.

    Args:
        data: Part 10 file contents, or a bare dataset
        implicit_vr: Dataset encoding; defaults to the file's transfer
                     syntax, or explicit VR for a bare dataset
        big_endian: Dataset byte order; same defaults as implicit_vr

    Returns:
        RecordView over a copy of ``data``
    """
    data = bytes(data)
    fields = []
    pos = 0
    file_implicit, file_big = False, False

    if data[PREAMBLE_LENGTH:PREAMBLE_LENGTH + 4] == MAGIC:
        pos = PREAMBLE_LENGTH + 4
        # File Meta Information is always explicit VR little endian
        meta_encoding = FieldEncoding(big_endian=False)
        for field, pos in _read_fields(data, pos, False, True, meta_encoding, group=0x0002):
            fields.append(field)
            if field.tag == TRANSFER_SYNTAX_TAG:
                raw = data[field.data_offset:field.data_offset + field.length]
                uid = raw.rstrip(b'\x00 ').decode('ascii', errors='replace')
                file_implicit, file_big = transfer_syntax_encoding(uid)
                log.debug("Transfer syntax %s", uid)

    if implicit_vr is None:
        implicit_vr = file_implicit
    if big_endian is None:
        big_endian = file_big

    encoding = None if implicit_vr else FieldEncoding(big_endian=big_endian)
    for field, pos in _read_fields(data, pos, implicit_vr, not big_endian, encoding):
        fields.append(field)

    tags = set()
    for field in fields:
        if field.tag in tags:
            log.warning("Duplicate tag %s at offset %d; later element wins",
                        field.tag, field.offset)
        tags.add(field.tag)

    log.debug("Read %d fields from %d bytes (%s VR, %s endian)",
              len(fields), len(data), 'implicit' if implicit_vr else 'explicit',
              'big' if big_endian else 'little')

    return RecordView(data, fields, big_endian=big_endian)


def read_file(path: str, **kwargs) -> RecordView:
    """Read a file from disk and build its RecordView."""
    with open(path, 'rb') as f:
        data = f.read()
    return read_record(data, **kwargs)

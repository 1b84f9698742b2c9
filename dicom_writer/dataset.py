# SPDX-License-Identifier: GPL-2.0-only
"""
RecordView - in-place editing of string fields in an encoded DICOM record.

A RecordView owns the raw bytes of a record plus a directory of its fields
(tag, VR, length and byte positions, as produced by a parser). Replacing a
string value splices the new bytes into the buffer, rewrites the field's
length prefix and records how much the buffer grew or shrank. Positions of
the other fields are corrected when the batch is finished.

Example:
    from dicom_writer import RecordView, read_record

    view = read_record(open('ct.dcm', 'rb').read())
    view.change_string('00100010', 'DOE^JANE')
    view.change_string('00100020', 'ANON0001')
    view.finish_changes()

    open('ct_anon.dcm', 'wb').write(view.buffer)

Layout of an explicit VR element (offset / data_offset as stored in Field):

    offset                                   data_offset
    |  tag (4)  | VR (2) |  length (2)       | value ...
    |  tag (4)  | VR (2) | 00 00 | length (4) | value ...   (OB, SQ, UT, ...)

and of an implicit VR element:

    |  tag (4)  |  length (4)  | value ...
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass, replace
from operator import attrgetter
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .exceptions import MalformedRecord
from .tag import TagLike, format_tag
from .vr import is_string_vr, length_prefix_width, pad_value, strip_value
from .writer import write_length, write_span

__all__ = ['FieldEncoding', 'Field', 'OffsetChange', 'RecordView']

log = logging.getLogger("dicom_writer")


# =============================================================================
# Field Directory
# =============================================================================

@dataclass(frozen=True)
class FieldEncoding:
    """
    Per-field encoding override.

    A field carrying one is written in its byte order, with the length field
    width taken from the VR unless implicit_vr is set. A field without one
    uses the record's byte order and a 4-byte (implicit VR) length field.
    """
    big_endian: bool = False
    implicit_vr: bool = False


@dataclass
class Field:
    """One entry of the field directory."""
    tag: str
    vr: str
    length: int
    offset: int
    data_offset: int
    encoding: Optional[FieldEncoding] = None


@dataclass(frozen=True)
class OffsetChange:
    """Buffer size change recorded at an (original) data offset."""
    offset: int
    change: int


# =============================================================================
# Record View
# =============================================================================

class RecordView:
    """
    Byte buffer plus field directory, with deferred offset correction.

    Edits made by change_string() are visible immediately in the buffer, but
    other fields keep their stored positions until finish_changes() is
    called. Between those calls positions are corrected on the fly from
    offset_changes, so several edits can be made in one batch.

    Not thread safe: serialize access to an instance for the whole
    edit/finish batch.
    """

    def __init__(self, buffer: Union[bytes, bytearray],
                 fields: Union[Mapping[str, Field], Iterable[Field]],
                 big_endian: bool = False):
        """
        Args:
            buffer: Encoded record bytes (copied)
            fields: Field directory, as a mapping tag -> Field or an iterable
            big_endian: Byte order for fields without their own encoding

        Raises:
            MalformedRecord: If a mapping key is not its field's tag
            MalformedTag: If a key or tag is not a valid tag
        """
        self._buffer = bytearray(buffer)
        self.big_endian = big_endian
        self._fields: Dict[str, Field] = {}
        self.offset_changes: List[OffsetChange] = []
        self.total_offset_changes: List[OffsetChange] = []

        if isinstance(fields, Mapping):
            for key, f in fields.items():
                if format_tag(key) != format_tag(f.tag):
                    raise MalformedRecord(
                        f"Directory key {key!r} does not match field tag {f.tag!r}"
                    )
            fields = fields.values()

        for f in fields:
            key = format_tag(f.tag)
            self._fields[key] = replace(f, tag=key)

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    @staticmethod
    def _key(tag: TagLike) -> str:
        if isinstance(tag, str):
            return tag.upper()
        return format_tag(tag)

    def get(self, tag: TagLike, default=None) -> Optional[Field]:
        return self._fields.get(self._key(tag), default)

    def __getitem__(self, tag: TagLike) -> Field:
        return self._fields[self._key(tag)]

    def __contains__(self, tag: TagLike) -> bool:
        return self._key(tag) in self._fields

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return (f'<RecordView {len(self._fields)} fields, {len(self._buffer)} bytes, '
                f'{len(self.offset_changes)} pending>')

    @property
    def buffer(self) -> bytes:
        """Snapshot of the current encoded record."""
        return bytes(self._buffer)

    @property
    def has_pending_changes(self) -> bool:
        return bool(self.offset_changes)

    # -------------------------------------------------------------------------
    # Encoding helpers
    # -------------------------------------------------------------------------

    def length_width(self, field: Field) -> int:
        """Width of the field's length prefix in bytes."""
        if field.encoding is None or field.encoding.implicit_vr:
            return 4
        return length_prefix_width(field.vr)

    def is_big_endian(self, field: Field) -> bool:
        if field.encoding is not None:
            return field.encoding.big_endian
        return self.big_endian

    def _editable(self, tag: TagLike) -> Optional[Field]:
        field = self.get(tag)
        if field is None:
            log.debug("Tag %s not in record", tag)
            return None
        if field.length == 0:
            log.debug("Tag %s is empty", field.tag)
            return None
        # UN (None) counts as binary
        if not is_string_vr(field.vr):
            log.debug("Tag %s has non-string VR %s", field.tag, field.vr)
            return None
        return field

    # -------------------------------------------------------------------------
    # Offset bookkeeping
    # -------------------------------------------------------------------------

    def get_offset_change(self, field: Field) -> int:
        """Net size change of pending edits located before the field's value."""
        return sum(c.change for c in self.offset_changes if c.offset < field.data_offset)

    def get_total_offset_change(self, field: Field) -> int:
        """
        Correction for a field from total_offset_changes.

        This is the cumulative change of the last entry located before the
        field's start, or 0 if every edit lies after it.
        """
        offsets = [c.offset for c in self.total_offset_changes]
        i = bisect_left(offsets, field.offset)
        if i == 0:
            return 0
        return self.total_offset_changes[i - 1].change

    def _setup_total_offsets(self) -> None:
        self.offset_changes.sort(key=attrgetter('offset'))
        total = 0
        totals = []
        for c in self.offset_changes:
            total += c.change
            totals.append(OffsetChange(c.offset, total))
        self.total_offset_changes = totals

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def get_string(self, tag: TagLike) -> Optional[str]:
        """
        Current value of a string field, without padding.

        Returns None if the tag is absent, empty or not a string VR.
        """
        field = self._editable(tag)
        if field is None:
            return None
        position = field.data_offset + self.get_offset_change(field)
        raw = bytes(self._buffer[position:position + field.length])
        return strip_value(field.vr, raw.decode('latin-1'))

    def change_string(self, tag: TagLike, new_text: str, pad: bool = False) -> bool:
        """
        Replace the value of a string field.

        The value bytes and the field's length prefix are rewritten; other
        fields' positions are corrected by finish_changes().

        Args:
            tag: Tag of the field (``'ggggeeee'``, int or tuple)
            new_text: Replacement value, written as-is
            pad: Pad the value to even length first (space, NUL for UI)

        Returns:
            True if the field was rewritten, False if the tag is absent,
            zero length or not a string VR (nothing is changed).

        Raises:
            OutOfRange: If the value or its length prefix does not fit
            UnencodableText: If new_text has characters above U+00FF
        """
        field = self._editable(tag)
        if field is None:
            return False

        if pad:
            new_text = pad_value(field.vr, new_text)

        position = field.data_offset + self.get_offset_change(field)
        width = self.length_width(field)

        new_buffer, new_length = write_span(self._buffer, position, field.length, new_text)
        write_length(new_buffer, position - width, width, new_length,
                     self.is_big_endian(field))

        diff = new_length - field.length
        self._buffer = new_buffer
        field.length = new_length
        self.offset_changes.append(OffsetChange(field.data_offset, diff))

        log.debug("Changed %s (%s) at %d: %d bytes (%+d)",
                  field.tag, field.vr, position, new_length, diff)
        return True

    def finish_changes(self) -> None:
        """
        Apply pending edits to every field's stored positions.

        After this call all offsets are valid for the current buffer and a
        new batch of edits may begin. Calling it again without new edits
        changes nothing.
        """
        self._setup_total_offsets()

        moved = 0
        for field in self._fields.values():
            correction = self.get_total_offset_change(field)
            if correction:
                field.offset += correction
                field.data_offset += correction
                moved += 1

        if self.offset_changes:
            log.info("Applied %d change(s): %d field(s) moved, net %+d bytes",
                     len(self.offset_changes), moved, self.total_offset_changes[-1].change)
        self.offset_changes = []

# SPDX-License-Identifier: GPL-2.0-only
"""
DICOM tag helpers.

Field directories are keyed by tags in canonical form: 8 hex digits,
group first (``ggggeeee``), e.g. ``'00100010'`` for Patient's Name.
"""

import re
from typing import Tuple, Union

from .exceptions import MalformedTag

__all__ = ['TagLike', 'format_tag', 'parse_tag', 'is_private_tag']

TagLike = Union[str, int, Tuple[int, int]]

_TAG_RE = re.compile(r'^[0-9A-Fa-f]{8}$')


def format_tag(tag: TagLike) -> str:
    """
    Convert a tag to canonical upper-case 8 hex digit form.

    Accepts ``'0010001a'``, ``0x0010001A``, ``(0x0010, 0x001A)`` or a
    pydicom ``BaseTag`` (an int subclass).
    """
    if isinstance(tag, str):
        if not _TAG_RE.match(tag):
            raise MalformedTag(tag)
        return tag.upper()

    if isinstance(tag, tuple):
        if len(tag) != 2:
            raise MalformedTag(tag)
        group, element = tag
        if not (0 <= group <= 0xFFFF and 0 <= element <= 0xFFFF):
            raise MalformedTag(tag)
        return f'{group:04X}{element:04X}'

    if isinstance(tag, int) and not isinstance(tag, bool):
        if not 0 <= tag <= 0xFFFFFFFF:
            raise MalformedTag(tag)
        return f'{int(tag):08X}'

    raise MalformedTag(tag)


def parse_tag(tag: TagLike) -> Tuple[int, int]:
    """Return ``(group, element)`` for a tag."""
    canonical = format_tag(tag)
    return int(canonical[:4], 16), int(canonical[4:], 16)


def is_private_tag(tag: str) -> bool:
    """
    Tests whether a tag in ``ggggeeee`` form is private (odd group).

    Only the last hex digit of the group is inspected.
    """
    if not isinstance(tag, str) or not _TAG_RE.match(tag):
        raise MalformedTag(tag)
    return int(tag[3], 16) % 2 == 1

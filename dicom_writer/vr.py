# SPDX-License-Identifier: GPL-2.0-only
"""
Value Representation table.

Static classification of every VR code the writer understands:
    - whether the value is text (and can be rewritten by change_string)
    - the width of the length field in explicit VR encoding
    - how text values are padded and stripped

Length field widths follow PS3.5 Table 7.1-1. Besides OB, OW, OF, SQ, UT
and UN this gives a 4-byte length to OD and UR, which older writers
(including the dicomWriter tables this package replaces) encode with a
2-byte length, and to the newer OL, OV, SV, UC and UV. Length prefixes of
OD and UR fields in records from such writers are not compatible.

Example:
    from dicom_writer.vr import is_string_vr, length_prefix_width

    is_string_vr('PN')          # True
    is_string_vr('UN')          # None - could be anything
    length_prefix_width('OB')   # 4
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .exceptions import UnknownVR

__all__ = [
    'VRInfo',
    'VR_TABLE',
    'vr_info',
    'is_string_vr',
    'length_prefix_width',
    'strip_value',
    'pad_value',
]


# =============================================================================
# VR Definitions
# =============================================================================

@dataclass(frozen=True)
class VRInfo:
    """Classification of a single VR."""
    vr: str
    is_string: Optional[bool]
    length_size: int
    # Padding stripped on read: 'both', 'trailing' or None for binary VRs
    strip: Optional[str] = None
    padding: bytes = b' '


# PS3.5 Table 7.1-1: VRs with a 2-byte reserved field and 4-byte length
_LONG_LENGTH = {'OB', 'OD', 'OF', 'OL', 'OV', 'OW', 'SQ', 'SV', 'UC', 'UN', 'UR', 'UT', 'UV'}

# Leading spaces are insignificant for these
_STRIP_BOTH = {'AE', 'CS', 'DS', 'IS', 'LO', 'SH', 'UC'}

_STRING_VRS = {'AE', 'AS', 'CS', 'DA', 'DS', 'DT', 'IS', 'LO', 'LT', 'PN',
               'SH', 'ST', 'TM', 'UC', 'UI', 'UR', 'UT'}

_BINARY_VRS = {'AT', 'FL', 'FD', 'OB', 'OD', 'OF', 'OL', 'OV', 'OW', 'SL',
               'SQ', 'SS', 'SV', 'UL', 'US', 'UV'}


def _build_table() -> Mapping[str, VRInfo]:
    table = {}
    for vr in sorted(_STRING_VRS | _BINARY_VRS | {'UN'}):
        if vr == 'UN':
            is_string = None
        else:
            is_string = vr in _STRING_VRS

        if not is_string:
            strip = None
        elif vr in _STRIP_BOTH:
            strip = 'both'
        else:
            strip = 'trailing'

        table[vr] = VRInfo(
            vr=vr,
            is_string=is_string,
            length_size=4 if vr in _LONG_LENGTH else 2,
            strip=strip,
            padding=b'\x00' if vr == 'UI' or not is_string else b' ',
        )
    return MappingProxyType(table)


VR_TABLE = _build_table()


# =============================================================================
# Lookups
# =============================================================================

def vr_info(vr: str) -> VRInfo:
    """Return the table entry for a VR, raising UnknownVR if there is none."""
    try:
        return VR_TABLE[vr]
    except (KeyError, TypeError):
        raise UnknownVR(vr) from None


def is_string_vr(vr: str) -> Optional[bool]:
    """
    Tests whether a VR holds text.

    Returns True for text VRs, False for binary ones and None for UN, whose
    content is unspecified.
    """
    return vr_info(vr).is_string


def length_prefix_width(vr: str) -> int:
    """Size in bytes of the length field for a VR in explicit VR encoding."""
    return vr_info(vr).length_size


# =============================================================================
# Padding
# =============================================================================

def strip_value(vr: str, text: str) -> str:
    """
    Remove insignificant padding from a text value.

    AE, CS, DS, IS, LO, SH and UC lose leading and trailing spaces; the other
    text VRs only trailing ones. UI values are padded with NUL instead.
    Binary VRs are returned unchanged.
    """
    info = vr_info(vr)
    if info.strip is None:
        return text
    if vr == 'UI':
        return text.rstrip('\x00 ')
    text = text.rstrip(' \x00')
    if info.strip == 'both':
        text = text.lstrip(' ')
    return text


def pad_value(vr: str, text: str) -> str:
    """Pad a text value to even length with the VR's padding character."""
    info = vr_info(vr)
    if len(text) % 2:
        text += info.padding.decode('latin-1')
    return text

# SPDX-License-Identifier: GPL-2.0-only
"""
Exceptions raised by dicom_writer.

Every error derives from DicomWriterError and from ValueError, so callers
can catch either the package-specific base or the builtin.

A string edit that does not apply (absent tag, zero length, non-string VR)
is not an error: RecordView.change_string() returns False instead.
"""

__all__ = [
    'DicomWriterError',
    'UnknownVR',
    'MalformedTag',
    'OutOfRange',
    'UnencodableText',
    'UnsupportedTransferSyntax',
    'MalformedRecord',
]


class DicomWriterError(Exception):
    """Base class for all dicom_writer errors."""


class UnknownVR(DicomWriterError, ValueError):
    """VR code is not in the classification table."""

    def __init__(self, vr):
        self.vr = vr
        super().__init__(f"Unknown VR: {vr!r}")


class MalformedTag(DicomWriterError, ValueError):
    """Tag is not in canonical 8 hex digit form."""

    def __init__(self, tag):
        self.tag = tag
        super().__init__(f"Malformed tag {tag!r}: expected 8 hex digits (ggggeeee)")


class OutOfRange(DicomWriterError, ValueError):
    """A write or read would fall outside the buffer or the length prefix."""


class UnencodableText(DicomWriterError, ValueError):
    """Text contains characters outside the 8-bit value space."""


class UnsupportedTransferSyntax(DicomWriterError, ValueError):
    """Transfer syntax cannot be edited in place (e.g. deflated)."""


class MalformedRecord(DicomWriterError, ValueError):
    """Encoded record is truncated or its element structure is broken."""

# SPDX-License-Identifier: GPL-2.0-only
"""
dicom-writer - in-place string edits for encoded DICOM records.

Rewrites a field's value bytes and length prefix inside the raw record and
keeps every other field's recorded position correct, without re-encoding
the dataset.

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │  reader.py      bytes ──→ field directory (pydicom for TS/VR)   │
    ├─────────────────────────────────────────────────────────────────┤
    │  dataset.py     RecordView: change_string, finish_changes       │
    ├─────────────────────────────────────────────────────────────────┤
    │  writer.py      write_span, write_length                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  vr.py / tag.py VR table, private tag test                      │
    └─────────────────────────────────────────────────────────────────┘

Quick Start:
    from dicom_writer import read_file

    view = read_file("ct_scan.dcm")
    view.change_string('00100010', 'ANON^PATIENT')
    view.finish_changes()
    open("ct_anon.dcm", "wb").write(view.buffer)

    # Or with a directory from another parser
    from dicom_writer import RecordView, Field, FieldEncoding

    view = RecordView(raw, {
        '00100010': Field('00100010', 'PN', 8, 0, 8, FieldEncoding()),
    })
"""

__version__ = '1.0.0'

from .exceptions import (
    DicomWriterError,
    UnknownVR,
    MalformedTag,
    OutOfRange,
    UnencodableText,
    UnsupportedTransferSyntax,
    MalformedRecord,
)

from .vr import (
    VRInfo,
    VR_TABLE,
    vr_info,
    is_string_vr,
    length_prefix_width,
    strip_value,
    pad_value,
)

from .tag import (
    format_tag,
    parse_tag,
    is_private_tag,
)

from .writer import (
    encode_text,
    write_span,
    write_length,
)

from .dataset import (
    FieldEncoding,
    Field,
    OffsetChange,
    RecordView,
)

from .reader import (
    read_record,
    read_file,
    transfer_syntax_encoding,
)

__all__ = [
    '__version__',
    # Errors
    'DicomWriterError', 'UnknownVR', 'MalformedTag', 'OutOfRange',
    'UnencodableText', 'UnsupportedTransferSyntax', 'MalformedRecord',
    # VR / tag classification
    'VRInfo', 'VR_TABLE', 'vr_info', 'is_string_vr', 'length_prefix_width',
    'strip_value', 'pad_value', 'format_tag', 'parse_tag', 'is_private_tag',
    # Byte writer
    'encode_text', 'write_span', 'write_length',
    # Record view
    'FieldEncoding', 'Field', 'OffsetChange', 'RecordView',
    'read_record', 'read_file', 'transfer_syntax_encoding',
]

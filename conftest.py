# SPDX-License-Identifier: GPL-2.0-only
"""
Pytest configuration for dicom_writer tests.

Provides record-building fixtures and a command-line option for running
the round-trip tests against a real DICOM file.
"""
import struct
from io import BytesIO

import pytest

import pydicom
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian

from dicom_writer import Field, FieldEncoding, RecordView, length_prefix_width


def pytest_addoption(parser):
    """Add custom command-line options for file round-trip tests."""
    parser.addoption(
        "--dicom-file",
        action="store",
        default=None,
        help="DICOM Part 10 file to edit in the round-trip tests",
    )


@pytest.fixture
def dicom_file(request):
    """Fixture providing the path given with --dicom-file."""
    return request.config.getoption("--dicom-file")


def _header(group, element, vr, length, implicit_vr, big_endian):
    e = '>' if big_endian else '<'
    header = struct.pack(e + 'HH', group, element)
    if implicit_vr:
        return header + struct.pack(e + 'I', length)
    if length_prefix_width(vr) == 4:
        return header + vr.encode('ascii') + b'\x00\x00' + struct.pack(e + 'I', length)
    return header + vr.encode('ascii') + struct.pack(e + 'H', length)


@pytest.fixture
def build_record():
    """
    Factory encoding (group, element, vr, value) tuples.

    Returns (bytes, fields). Explicit VR fields carry a FieldEncoding,
    implicit VR fields none.
    """
    def _build(elements, implicit_vr=False, big_endian=False):
        buf = bytearray()
        fields = []
        encoding = None if implicit_vr else FieldEncoding(big_endian=big_endian)
        for group, element, vr, value in elements:
            if isinstance(value, str):
                value = value.encode('latin-1')
            header = _header(group, element, vr, len(value), implicit_vr, big_endian)
            offset = len(buf)
            buf += header + value
            fields.append(Field(
                tag=f'{group:04X}{element:04X}',
                vr=vr,
                length=len(value),
                offset=offset,
                data_offset=offset + len(header),
                encoding=encoding,
            ))
        return bytes(buf), fields
    return _build


# Offsets (explicit VR little endian):
#   0008,0060 CS   0 / 8   len 2
#   0010,0010 PN  10 / 18  len 4
#   0010,0020 LO  22 / 30  len 8
#   0028,0010 US  38 / 46  len 2
#   7FE0,0010 OB  48 / 60  len 4
SAMPLE_ELEMENTS = [
    (0x0008, 0x0060, 'CS', 'CT'),
    (0x0010, 0x0010, 'PN', 'ABCD'),
    (0x0010, 0x0020, 'LO', 'ABCDEFGH'),
    (0x0028, 0x0010, 'US', struct.pack('<H', 512)),
    (0x7FE0, 0x0010, 'OB', b'\x01\x02\x03\x04'),
]


@pytest.fixture
def sample_record(build_record):
    """Encoded sample record and its field directory."""
    return build_record(SAMPLE_ELEMENTS)


@pytest.fixture
def sample_view(sample_record):
    """RecordView over the sample record."""
    data, fields = sample_record
    return RecordView(data, fields)


@pytest.fixture
def make_part10():
    """Factory writing a small CT Part 10 file with pydicom."""
    def _make(transfer_syntax=ExplicitVRLittleEndian):
        ds = Dataset()
        ds.SOPClassUID = CTImageStorage
        ds.SOPInstanceUID = '1.2.826.0.1.3680043.8.498.1'
        ds.Modality = 'CT'
        ds.StudyDescription = 'CHEST'

        code = Dataset()
        code.CodeValue = 'XYZ1'
        code.CodingSchemeDesignator = 'L'
        ds.ProcedureCodeSequence = [code]

        ds.PatientName = 'DOE^JOHN'
        ds.PatientID = 'PAT00001'
        ds.Rows = 512

        ds.file_meta = FileMetaDataset()
        ds.file_meta.TransferSyntaxUID = transfer_syntax
        ds.file_meta.MediaStorageSOPClassUID = ds.SOPClassUID
        ds.file_meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID

        buf = BytesIO()
        pydicom.dcmwrite(buf, ds, enforce_file_format=True)
        return buf.getvalue()
    return _make

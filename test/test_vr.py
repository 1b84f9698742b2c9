# SPDX-License-Identifier: GPL-2.0-only
"""
Tests for the VR classification table and padding helpers.
"""
import pytest

from dicom_writer import (
    VR_TABLE,
    UnknownVR,
    is_string_vr,
    length_prefix_width,
    pad_value,
    strip_value,
    vr_info,
)


class TestClassificationTable:
    """String/binary classification and length field widths."""

    @pytest.mark.parametrize("vr, is_string, width", [
        ('PN', True, 2),
        ('CS', True, 2),
        ('UI', True, 2),
        ('DA', True, 2),
        ('LT', True, 2),
        ('UT', True, 4),
        ('UR', True, 4),
        ('UC', True, 4),
        ('US', False, 2),
        ('AT', False, 2),
        ('FD', False, 2),
        ('OB', False, 4),
        ('OW', False, 4),
        ('OF', False, 4),
        ('OD', False, 4),
        ('SQ', False, 4),
        ('UN', None, 4),
    ])
    def test_reference_values(self, vr, is_string, width):
        """Known VRs classify as in PS3.5."""
        assert is_string_vr(vr) is is_string
        assert length_prefix_width(vr) == width

    def test_only_un_is_unspecified(self):
        """UN is the single VR whose content type is unknown."""
        unknown = [vr for vr, info in VR_TABLE.items() if info.is_string is None]
        assert unknown == ['UN']

    def test_widths_are_two_or_four(self):
        assert {info.length_size for info in VR_TABLE.values()} == {2, 4}

    def test_four_byte_length_set(self):
        """The classic six plus OD, UR and the newer VRs use a 4-byte length."""
        long_length = {vr for vr, info in VR_TABLE.items() if info.length_size == 4}
        classic = {'OB', 'OW', 'OF', 'SQ', 'UT', 'UN'}
        assert classic <= long_length
        assert long_length - classic == {'OD', 'OL', 'OV', 'SV', 'UC', 'UR', 'UV'}

    def test_lookups_are_deterministic(self):
        for vr in VR_TABLE:
            assert is_string_vr(vr) == is_string_vr(vr)
            assert length_prefix_width(vr) == length_prefix_width(vr)

    @pytest.mark.parametrize("vr", ['XX', 'pn', '', 'PNX', None])
    def test_unknown_vr_raises(self, vr):
        """Unknown codes fail rather than defaulting to a width."""
        with pytest.raises(UnknownVR):
            is_string_vr(vr)
        with pytest.raises(UnknownVR):
            length_prefix_width(vr)

    def test_unknown_vr_is_value_error(self):
        with pytest.raises(ValueError):
            vr_info('ZZ')

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            VR_TABLE['XX'] = VR_TABLE['PN']


class TestPadding:
    """Padding conventions for text values."""

    @pytest.mark.parametrize("vr, raw, expected", [
        ('CS', ' ORIGINAL ', 'ORIGINAL'),
        ('LO', '  HOSPITAL ', 'HOSPITAL'),
        ('DS', ' 1.5 ', '1.5'),
        ('PN', ' DOE^JOHN ', ' DOE^JOHN'),
        ('LT', ' Some text  ', ' Some text'),
        ('TM', '120000 ', '120000'),
        ('UI', '1.2.3\x00', '1.2.3'),
    ])
    def test_strip_value(self, vr, raw, expected):
        assert strip_value(vr, raw) == expected

    def test_strip_binary_is_noop(self):
        assert strip_value('OB', ' \x00') == ' \x00'

    @pytest.mark.parametrize("vr, text, expected", [
        ('PN', 'DOE', 'DOE '),
        ('PN', 'DOE^', 'DOE^'),
        ('UI', '1.2.3', '1.2.3\x00'),
        ('CS', '', ''),
    ])
    def test_pad_value(self, vr, text, expected):
        assert pad_value(vr, text) == expected

    def test_pad_unknown_vr_raises(self):
        with pytest.raises(UnknownVR):
            pad_value('QQ', 'A')

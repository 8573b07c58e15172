"""
Tests for the MOT Debugger identity codec
==========================================
pytest tests/test_identity.py -v
"""

import uuid

import numpy as np
import pytest
import sys, os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mot_debugger.identity import (
    DISPLAY_STRING_LENGTH, coerce_identity, identity_from_bytes, parse_identity,
    to_display_key, to_display_string,
)
from mot_debugger.errors import IdentityError, TrackerDebugError


SAMPLE = uuid.UUID('12345678-1234-5678-1234-567812345678')


class TestParsing:
    def test_from_byte_list(self):
        raw = list(SAMPLE.bytes)
        assert identity_from_bytes(raw) == SAMPLE

    def test_from_numpy_uint8(self):
        raw = np.frombuffer(SAMPLE.bytes, dtype=np.uint8)
        assert identity_from_bytes(raw) == SAMPLE

    def test_wrong_length(self):
        with pytest.raises(IdentityError):
            identity_from_bytes(b"\x00" * 15)

    def test_byte_out_of_range(self):
        with pytest.raises(IdentityError):
            identity_from_bytes([256] + [0] * 15)

    def test_parse_dashed_and_plain(self):
        assert parse_identity(str(SAMPLE)) == SAMPLE
        assert parse_identity(SAMPLE.hex) == SAMPLE

    def test_parse_garbage(self):
        with pytest.raises(IdentityError):
            parse_identity("not-a-uuid")

    def test_error_is_debug_error(self):
        with pytest.raises(TrackerDebugError):
            parse_identity("zz")


class TestCoerce:
    def test_passthrough(self):
        assert coerce_identity(SAMPLE) is SAMPLE

    def test_int(self):
        assert coerce_identity(7) == uuid.UUID(int=7)

    def test_int_too_large(self):
        with pytest.raises(IdentityError):
            coerce_identity(1 << 128)

    def test_negative_int(self):
        with pytest.raises(IdentityError):
            coerce_identity(-1)

    def test_bool_rejected(self):
        with pytest.raises(IdentityError):
            coerce_identity(True)

    def test_bytes_and_str(self):
        assert coerce_identity(SAMPLE.bytes) == SAMPLE
        assert coerce_identity(str(SAMPLE)) == SAMPLE


class TestDisplay:
    def test_display_string(self):
        assert to_display_string(SAMPLE) == '12345678123456781234567812345678'

    def test_display_string_fixed_width(self):
        s = to_display_string(uuid.UUID(int=1))
        assert len(s) == DISPLAY_STRING_LENGTH
        assert s == '0' * 31 + '1'

    def test_display_key_deterministic(self):
        assert to_display_key(SAMPLE) == to_display_key(uuid.UUID(str(SAMPLE)))

    def test_display_key_int32_range(self):
        rng = np.random.RandomState(0)
        for _ in range(50):
            key = to_display_key(uuid.UUID(bytes=rng.bytes(16)))
            assert -2**31 <= key < 2**31

    def test_display_key_spreads(self):
        keys = {to_display_key(uuid.UUID(int=i)) for i in range(100)}
        assert len(keys) > 90

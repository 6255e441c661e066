"""Tests for the binary cursor helpers."""

import io
import struct

import pytest

from quake_loader.binary import (
    decode_name,
    element_count,
    read_array,
    read_exact,
    read_struct,
    seek,
)
from quake_loader.constants import EDGE_FORMAT, VERTEX_FORMAT
from quake_loader.exceptions import FormatError, TruncatedError


class TestReadExact:
    def test_reads_requested_bytes(self):
        f = io.BytesIO(b"abcdef")
        assert read_exact(f, 4, "test") == b"abcd"

    def test_short_read(self):
        f = io.BytesIO(b"abc")
        with pytest.raises(TruncatedError, match="unexpected EOF"):
            read_exact(f, 4, "test")

    def test_read_struct(self):
        f = io.BytesIO(struct.pack("<ii", 7, -3))
        assert read_struct(f, struct.Struct("<ii"), "pair") == (7, -3)

    def test_negative_seek(self):
        with pytest.raises(FormatError):
            seek(io.BytesIO(b""), -1)


class TestElementCount:
    def test_exact_multiple(self):
        assert element_count(48, 12, "vertices") == 4
        assert element_count(0, 12, "vertices") == 0

    def test_remainder_rejected(self):
        with pytest.raises(FormatError, match="not a multiple"):
            element_count(50, 12, "vertices")

    def test_negative_rejected(self):
        with pytest.raises(FormatError):
            element_count(-4, 4, "edges")


class TestReadArray:
    def test_reads_at_offset(self):
        data = b"\xff" * 8 + struct.pack("<HHHH", 1, 2, 3, 4)
        f = io.BytesIO(data)
        assert read_array(f, 8, 8, EDGE_FORMAT) == [(1, 2), (3, 4)]

    def test_empty_lump(self):
        assert read_array(io.BytesIO(b""), 0, 0, VERTEX_FORMAT) == []

    def test_partial_element_rejected(self):
        f = io.BytesIO(bytes(16))
        with pytest.raises(FormatError):
            read_array(f, 0, 14, VERTEX_FORMAT)

    def test_declared_size_past_eof(self):
        f = io.BytesIO(struct.pack("<3f", 1, 2, 3))
        with pytest.raises(TruncatedError):
            read_array(f, 0, 24, VERTEX_FORMAT)


class TestDecodeName:
    def test_stops_at_nul(self):
        assert decode_name(b"maps/e1m1.bsp\x00garbage\x00") == "maps/e1m1.bsp"

    def test_full_width(self):
        assert decode_name(b"abcd") == "abcd"

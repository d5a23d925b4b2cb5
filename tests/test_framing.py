"""Tests for message frame building and parsing."""

import io

import pytest

from rfid_reader_mcp.errors import FramingError, IntegrityError, TransportError
from rfid_reader_mcp.protocol.framing import (
    MIN_RESPONSE_LENGTH,
    PREFIX,
    ResponseFrame,
    build_frame,
    build_response_frame,
    parse_frame,
    read_frame,
    xor_checksum,
)


class TrickleStream:
    """Delivers one byte per read, like a slow serial line."""

    def __init__(self, data: bytes):
        self._data = data

    def read(self, size: int) -> bytes:
        chunk, self._data = self._data[:1], self._data[1:]
        return chunk


def test_build_frame_beep_example():
    """Beep with data 0x7F must encode byte for byte."""
    frame = build_frame(0x0103, b"\x7f")
    expected = bytes([0xAA, 0xDD, 0x00, 0x04, 0x01, 0x03, 0x7F, 0x01 ^ 0x03 ^ 0x7F])
    assert frame == expected


def test_build_frame_prefix():
    """Every frame starts with 0xAA 0xDD."""
    assert build_frame(0x0102)[:2] == PREFIX == b"\xAA\xDD"


def test_build_frame_length_counts_command_data_checksum():
    """Length field = 2 (command) + len(data) + 1 (checksum)."""
    data = bytes(range(10))
    frame = build_frame(0x020C, data)
    assert int.from_bytes(frame[2:4], "big") == 2 + len(data) + 1
    assert len(frame) == 4 + 2 + len(data) + 1


def test_build_frame_empty_data():
    """Info request: AA DD 00 03 01 02 03."""
    assert build_frame(0x0102) == bytes.fromhex("aadd0003010203")


def test_build_frame_checksum_excludes_prefix_and_length():
    frame = build_frame(0x030C, b"\x10\x20\x30")
    assert frame[-1] == xor_checksum(frame[4:-1])
    assert frame[-1] == 0x03 ^ 0x0C ^ 0x10 ^ 0x20 ^ 0x30


def test_build_frame_rejects_oversized_data():
    with pytest.raises(ValueError):
        build_frame(0x020C, b"\x00" * 0xFFFF)


def test_build_frame_rejects_command_outside_16_bits():
    with pytest.raises(ValueError):
        build_frame(0x10000)
    with pytest.raises(ValueError):
        build_frame(-1)
    assert build_frame(0xFFFF)[4:6] == b"\xff\xff"


def test_xor_checksum():
    assert xor_checksum(b"") == 0
    assert xor_checksum(b"\xff") == 0xFF
    assert xor_checksum(b"\x01\x03\x7f") == 0x7D
    assert xor_checksum(b"\x5a\x5a") == 0


def test_roundtrip_response():
    """A response-shaped frame decodes back to its fields."""
    frame = build_response_frame(0x010C, 0x00, b"\xde\xad\xbe\xef")
    parsed = parse_frame(frame)
    assert parsed.command == 0x010C
    assert parsed.status == 0x00
    assert parsed.answer == b"\xde\xad\xbe\xef"
    assert parsed.checksum == frame[-1]


def test_roundtrip_empty_answer():
    parsed = parse_frame(build_response_frame(0x0104, 0x00))
    assert parsed.answer == b""


def test_roundtrip_large_answer():
    answer = bytes(range(256)) * 4
    parsed = parse_frame(build_response_frame(0x0102, 0x00, answer))
    assert parsed.answer == answer


def test_no_tag_response_example():
    """AA DD 00 04 01 0C 01 <cs> is a well-formed no-tag response."""
    raw = bytes([0xAA, 0xDD, 0x00, 0x04, 0x01, 0x0C, 0x01, 0x01 ^ 0x0C ^ 0x01])
    parsed = parse_frame(raw)
    assert parsed.command == 0x010C
    assert parsed.status == 0x01
    assert parsed.answer == b""


def test_read_frame_leaves_following_bytes():
    """Back-to-back frames on one stream are read one at a time."""
    stream = io.BytesIO(
        build_response_frame(0x0104, 0x00) + build_response_frame(0x0103, 0x00)
    )
    assert read_frame(stream).command == 0x0104
    assert read_frame(stream).command == 0x0103


def test_read_frame_from_trickling_stream():
    frame = build_response_frame(0x0102, 0x00, b"MODEL")
    assert read_frame(TrickleStream(frame)).answer == b"MODEL"


def test_short_header_is_framing_error():
    with pytest.raises(FramingError):
        read_frame(io.BytesIO(b"\xAA\xDD\x00"))


def test_empty_stream_is_framing_error():
    with pytest.raises(FramingError):
        read_frame(io.BytesIO(b""))


def test_bad_prefix_is_framing_error():
    frame = bytearray(build_response_frame(0x0102, 0x00, b"x"))
    frame[1] = 0xDE
    with pytest.raises(FramingError):
        parse_frame(bytes(frame))


def test_length_below_minimum_is_framing_error():
    # length 3: room for command and checksum, none for status
    raw = b"\xAA\xDD\x00\x03\x01\x02\x03"
    with pytest.raises(FramingError):
        parse_frame(raw)


def test_minimum_length_accepted():
    assert MIN_RESPONSE_LENGTH == 4
    parse_frame(build_response_frame(0x0103, 0x00))


def test_truncated_body_is_transport_error():
    frame = build_response_frame(0x010C, 0x00, b"\x01\x02\x03\x04")
    with pytest.raises(TransportError) as exc_info:
        read_frame(io.BytesIO(frame[:-3]))
    assert exc_info.value.phase == "receive"


def test_every_bit_flip_is_integrity_error():
    """Flipping any bit from command through checksum must be detected."""
    frame = build_response_frame(0x010C, 0x00, b"\x04\xa2\x3c\x91")
    for index in range(4, len(frame)):
        for bit in range(8):
            corrupted = bytearray(frame)
            corrupted[index] ^= 1 << bit
            with pytest.raises(IntegrityError):
                parse_frame(bytes(corrupted))


def test_integrity_error_carries_bytes():
    frame = bytearray(build_response_frame(0x0102, 0x00, b"abc"))
    good = frame[-1]
    frame[-1] = good ^ 0xFF
    with pytest.raises(IntegrityError) as exc_info:
        parse_frame(bytes(frame))
    assert exc_info.value.expected == good
    assert exc_info.value.actual == good ^ 0xFF


def test_trailing_bytes_rejected():
    with pytest.raises(FramingError):
        parse_frame(build_response_frame(0x0102, 0x00) + b"\x00")


def test_error_classes_are_distinct():
    """Framing, transport and integrity failures never share a class."""
    assert not issubclass(FramingError, IntegrityError)
    assert not issubclass(IntegrityError, FramingError)
    assert not issubclass(TransportError, FramingError)


def test_frame_repr():
    r = repr(ResponseFrame(command=0x010C, status=0, answer=b"\x01\x02", checksum=0))
    assert "0x010C" in r
    assert "01 02" in r

"""Tests for pixel_shared.tcp: FramedConnection and length-prefixed frames."""

import socket
import threading

import pytest

from pixel_shared.tcp import (
    ConnectionFailed,
    FrameError,
    FramedConnection,
    RecvFailed,
    open_connection,
    parse_length,
)


class TestFramedPayload:
    @pytest.mark.parametrize("payload", [b"", b"x", b"\n", b"12\n34\n\x00\xff"])
    def test_round_trip_small(self, framed_pair, payload):
        writer, reader = framed_pair
        writer.write_framed_payload(payload)
        assert reader.read_framed_payload() == payload

    def test_round_trip_large(self, framed_pair):
        writer, reader = framed_pair
        payload = bytes(range(256)) * 20_000  # ~5 MB, many socket reads
        t = threading.Thread(target=writer.write_framed_payload, args=(payload,))
        t.start()
        result = reader.read_framed_payload()
        t.join(timeout=5)
        assert result == payload

    def test_wire_format(self, socketpair):
        a, b = socketpair
        FramedConnection(a).write_framed_payload(b"hello")
        assert b.recv(64) == b"5\nhello"

    def test_accumulates_across_small_sends(self, socketpair):
        a, b = socketpair
        reader = FramedConnection(b)
        data = b"7\nabcdefg"

        def _send():
            for byte in data:
                a.sendall(bytes([byte]))

        t = threading.Thread(target=_send)
        t.start()
        assert reader.read_framed_payload() == b"abcdefg"
        t.join(timeout=2)

    def test_back_to_back_frames(self, framed_pair):
        writer, reader = framed_pair
        writer.write_framed_payload(b"one")
        writer.write_framed_payload(b"two\n")
        assert reader.read_framed_payload() == b"one"
        assert reader.read_framed_payload() == b"two\n"

    @pytest.mark.parametrize("header", [b"abc\n", b"-5\n", b"+5\n", b"1.5\n", b"\n", b"5 5\n"])
    def test_invalid_length_header(self, socketpair, header):
        a, b = socketpair
        a.sendall(header + b"xxxxx")
        with pytest.raises(FrameError):
            FramedConnection(b).read_framed_payload()

    def test_oversized_length_header(self, socketpair):
        a, b = socketpair
        a.sendall(b"999999999999\n")
        with pytest.raises(FrameError, match="too large"):
            FramedConnection(b).read_framed_payload()

    def test_truncated_payload(self, socketpair):
        a, b = socketpair
        a.sendall(b"10\nabc")
        a.shutdown(socket.SHUT_WR)
        with pytest.raises(FrameError, match="3/10"):
            FramedConnection(b).read_framed_payload()

    def test_closed_before_header(self, socketpair):
        a, b = socketpair
        a.shutdown(socket.SHUT_WR)
        with pytest.raises(RecvFailed):
            FramedConnection(b).read_framed_payload()

    def test_closed_mid_header(self, socketpair):
        a, b = socketpair
        a.sendall(b"12")
        a.shutdown(socket.SHUT_WR)
        with pytest.raises(FrameError):
            FramedConnection(b).read_framed_payload()


class TestRequestLine:
    def test_round_trip(self, framed_pair):
        writer, reader = framed_pair
        writer.write_request_line("downscale", [300, 200, 2])
        assert reader.read_request_line() == "downscale 300 200 2"

    def test_request_then_payload(self, framed_pair):
        writer, reader = framed_pair
        writer.write_request_line("blur", [1, 4])
        writer.write_framed_payload(b"\x89PNG\n")
        assert reader.read_request_line() == "blur 1 4"
        assert reader.read_framed_payload() == b"\x89PNG\n"

    def test_line_too_long(self, socketpair):
        a, b = socketpair
        t = threading.Thread(target=a.sendall, args=(b"a" * 10_000 + b"\n",))
        t.start()
        with pytest.raises(FrameError, match="longer"):
            FramedConnection(b).read_request_line()
        b.close()
        t.join(timeout=2)

    def test_non_ascii_line(self, socketpair):
        a, b = socketpair
        a.sendall(b"bl\xffur 1\n")
        with pytest.raises(FrameError):
            FramedConnection(b).read_request_line()


class TestParseLength:
    def test_valid(self):
        assert parse_length(b"0") == 0
        assert parse_length(b"123\r") == 123

    def test_invalid(self):
        with pytest.raises(FrameError):
            parse_length(b"0x10")


class TestOpenConnection:
    def test_refused(self):
        with socket.socket() as s:
            s.bind(("127.0.0.1", 0))
            port = s.getsockname()[1]
        with pytest.raises(ConnectionFailed):
            open_connection("127.0.0.1", port, timeout=1.0)

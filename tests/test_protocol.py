"""Tests for pixel_shared.protocol: request lines and parameter validation."""

import pytest

from pixel_shared import ParameterError, TransformRequest, parse_request_line
from pixel_shared.protocol import format_request_line


class TestParseRequestLine:
    def test_blur_with_workers(self):
        req = parse_request_line("blur 3 4")
        assert req == TransformRequest("blur", (3,), 4)

    def test_blur_defaults_to_one_worker(self):
        assert parse_request_line("blur 3").workers == 1

    @pytest.mark.parametrize("workers", ["0", "-2"])
    def test_non_positive_workers_become_one(self, workers):
        assert parse_request_line(f"blur 2 {workers}").workers == 1

    def test_downscale(self):
        req = parse_request_line("downscale 10 20 2")
        assert req.algorithm == "downscale"
        assert req.params == (10, 20)
        assert req.workers == 2

    def test_test_has_no_payload(self):
        req = parse_request_line("test")
        assert req.algorithm == "test"
        assert not req.has_payload

    def test_gblur_alias(self):
        assert parse_request_line("gblur 2").algorithm == "blur"

    def test_extra_whitespace_is_ignored(self):
        assert parse_request_line("  blur   1   2 ").params == (1,)

    def test_negative_radius_is_accepted(self):
        assert parse_request_line("blur -1").params == (-1,)

    @pytest.mark.parametrize("line", [
        "",
        "sharpen 3",
        "blur",
        "blur 1 2 3",
        "blur x",
        "blur 1 y",
        "downscale 10",
        "downscale 10 10 2 9",
        "downscale a 10",
        "downscale 0 10",
        "downscale 10 -1",
        "test 1",
        "BLUR 1",
        "blur 1_000",
        "blur +3",
        "blur \u0661\u0662",
        "blur 1 \u0663",
        "downscale \uff11 2",
        "downscale 200000 200000 1",
    ])
    def test_rejects_malformed(self, line):
        with pytest.raises(ParameterError):
            parse_request_line(line)


class TestTransformRequest:
    def test_from_args_accepts_strings(self):
        req = TransformRequest.from_args("downscale", ["300", "200"])
        assert req.params == (300, 200)

    def test_output_limit(self):
        side = 1 << 13
        assert TransformRequest.from_args("downscale", [side, side]).params == (side, side)
        with pytest.raises(ParameterError):
            TransformRequest.from_args("downscale", [side, side + 1])

    def test_line_params_include_workers(self):
        assert TransformRequest("blur", (3,), 4).line_params() == [3, 4]

    def test_line_params_for_test(self):
        assert TransformRequest("test").line_params() == []

    def test_line_round_trip(self):
        req = TransformRequest.from_args("downscale", [30, 20, 8])
        line = format_request_line(req.algorithm, req.line_params())
        assert parse_request_line(line.decode()) == req


def test_format_request_line():
    assert format_request_line("downscale", [300, 200, 2]) == b"downscale 300 200 2\n"
    assert format_request_line("test", []) == b"test\n"

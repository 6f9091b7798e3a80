"""
Unit tests for reading hx request headers.
"""

from hxserver.htmx import HXRequestHeaders, hx_request, is_hx_request
from hxserver.http import parse_request


class TestHXRequest:

    def test_plain_request_has_no_snapshot(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert hx_request(request) is None
        assert is_hx_request(request) is False

    def test_hx_request_fields(self, sample_hx_request: bytes):
        hx = hx_request(parse_request(sample_hx_request))

        assert hx == HXRequestHeaders(
            boosted=True,
            current_url="http://localhost:8080/",
            history_restore_request=False,
            prompt="",
            target="list",
            trigger_name="more",
            trigger="load-more",
        )

    def test_request_flag_must_be_exactly_true(self):
        for value in (b"True", b"1", b"yes", b""):
            raw = b"GET / HTTP/1.1\r\nHX-Request: " + value + b"\r\n\r\n"
            assert hx_request(parse_request(raw)) is None

    def test_booleans_only_for_exact_true(self):
        raw = (
            b"GET / HTTP/1.1\r\n"
            b"HX-Request: true\r\n"
            b"HX-Boosted: TRUE\r\n"
            b"HX-History-Restore-Request: true\r\n"
            b"\r\n"
        )
        hx = hx_request(parse_request(raw))

        assert hx.boosted is False
        assert hx.history_restore_request is True

    def test_header_names_are_case_insensitive(self):
        raw = b"GET / HTTP/1.1\r\nhx-request: true\r\nhx-prompt: yes please\r\n\r\n"

        assert hx_request(parse_request(raw)).prompt == "yes please"

    def test_computed_once(self, sample_hx_request: bytes):
        request = parse_request(sample_hx_request)
        first = hx_request(request)

        request.headers["hx-target"] = "changed"

        assert hx_request(request) is first
        assert first.target == "list"

    def test_works_without_middleware(self, sample_hx_request: bytes):
        """Reading request headers never needs HXMiddleware."""
        assert is_hx_request(parse_request(sample_hx_request))

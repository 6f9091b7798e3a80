"""
Unit tests for the response writer.
"""

import pytest

from hxserver.http import HTTPResponse, HTTPStatus, ResponseWriter, html, no_content


class TestResponseWriter:
    """Tests for ResponseWriter commit and framing."""

    def test_nothing_sent_before_commit(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["X-A"] = "1"

        assert not writer.committed
        assert sink.chunks == []

    def test_write_header_commits(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["Content-Length"] = "0"
        writer.write_header(HTTPStatus.CREATED)

        assert writer.committed
        assert writer.status == HTTPStatus.CREATED
        assert sink.head.startswith("HTTP/1.1 201 Created\r\n")
        assert sink.header("Server") == "HXServer/1.0"
        assert sink.header("Date").endswith("GMT")

    def test_second_write_header_is_ignored(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["Content-Length"] = "0"
        writer.write_header(HTTPStatus.OK)
        writer.write_header(HTTPStatus.NOT_FOUND)

        assert writer.status == HTTPStatus.OK
        assert len(sink.chunks) == 1

    def test_headers_after_commit_have_no_effect(self, sink):
        writer = ResponseWriter(sink)
        writer.write("body")
        writer.headers["X-Late"] = "1"
        writer.finish()

        assert sink.header("X-Late") is None

    def test_first_write_commits_with_200_chunked(self, sink):
        writer = ResponseWriter(sink)
        writer.write("hello")
        writer.write(b" world")
        writer.finish()

        assert sink.status == 200
        assert sink.header("Transfer-Encoding") == "chunked"
        assert sink.body == b"5\r\nhello\r\n6\r\n world\r\n0\r\n\r\n"
        assert writer.bytes_written == 11

    def test_content_length_disables_chunking(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["Content-Length"] = "5"
        writer.write(b"hello")
        writer.finish()

        assert sink.header("Transfer-Encoding") is None
        assert sink.body == b"hello"

    def test_finish_without_write(self, sink):
        """An untouched writer sends an empty 200."""
        writer = ResponseWriter(sink)
        writer.finish()

        assert sink.status == 200
        assert sink.header("Content-Length") == "0"
        assert sink.body == b""

    def test_finish_is_idempotent(self, sink):
        writer = ResponseWriter(sink)
        writer.write("x")
        writer.finish()
        sent = sink.data
        writer.finish()

        assert sink.data == sent

    def test_write_after_finish_raises(self, sink):
        writer = ResponseWriter(sink)
        writer.finish()

        with pytest.raises(RuntimeError):
            writer.write("late")

    def test_bodyless_status_drops_body(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["Content-Length"] = "3"
        writer.write_header(HTTPStatus.NO_CONTENT)

        assert writer.write(b"abc") == 0
        writer.finish()

        assert sink.header("Content-Length") is None
        assert sink.header("Transfer-Encoding") is None
        assert sink.data.endswith(b"\r\n\r\n")


class TestSendResponse:
    """Tests for BaseResponseWriter.send_response."""

    def test_sends_complete_response(self, sink):
        writer = ResponseWriter(sink)
        writer.send_response(html("<p>hi</p>"))

        assert sink.status == 200
        assert sink.header("Content-Length") == "9"
        assert sink.header("Content-Type") == "text/html; charset=utf-8"
        assert sink.body == b"<p>hi</p>"

    def test_response_headers_override_writer_headers(self, sink):
        writer = ResponseWriter(sink)
        writer.headers["X-Source"] = "writer"
        writer.headers["X-Writer-Only"] = "1"

        writer.send_response(HTTPResponse(headers={"X-Source": "response"}, body=b"x"))

        assert sink.header("X-Source") == "response"
        assert sink.header("X-Writer-Only") == "1"

    def test_no_content_response(self, sink):
        writer = ResponseWriter(sink)
        writer.send_response(no_content())

        assert sink.status == 204
        assert sink.header("Content-Length") is None
        assert sink.body == b""

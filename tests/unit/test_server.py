"""
Unit tests for HTTPServer request handling, without sockets.
"""

import io
import json
import logging

import pytest

from hxserver import HTTPServer, ServerConfig, create_app, read_request
from hxserver.htmx import HXMiddleware, hx_request, retarget, trigger
from hxserver.http import HTTPParseError, html
from hxserver.middleware import LoggingMiddleware


HX_GET = b"GET /items HTTP/1.1\r\nHost: test\r\nHX-Request: true\r\n\r\n"


class TestHandle:

    def test_returned_response(self, config, sink):
        server = create_app(lambda req: html("<p>hi</p>"), config)

        server.handle(b"GET / HTTP/1.1\r\nHost: test\r\n\r\n", sink)

        assert sink.status == 200
        assert sink.body == b"<p>hi</p>"
        assert sink.header("Connection") == "close"
        assert sink.header("X-Request-ID")

    def test_hx_directives_reach_the_wire(self, config, sink):
        def app(request):
            if hx_request(request):
                trigger(request, "loaded")
                retarget(request, "#main")
            return html("<p>fragment</p>")

        create_app(app, config).handle(HX_GET, sink)

        assert sink.header("HX-Trigger") == "loaded"
        assert sink.header("HX-Retarget") == "#main"

    def test_streamed_response(self, config, sink):
        def app(request):
            trigger(request, "streamed")
            request.writer.write("<li>1</li>")
            request.writer.write("<li>2</li>")
            return None

        create_app(app, config).handle(HX_GET, sink)

        assert sink.header("Transfer-Encoding") == "chunked"
        assert sink.header("HX-Trigger") == "streamed"
        assert sink.head.count("HX-Trigger") == 1
        assert sink.body.endswith(b"0\r\n\r\n")

    def test_handler_returning_none_without_writing(self, config, sink):
        def app(request):
            retarget(request, "#x")
            return None

        create_app(app, config).handle(HX_GET, sink)

        assert sink.status == 200
        assert sink.header("Content-Length") == "0"
        assert sink.header("HX-Retarget") == "#x"

    def test_vary_from_config(self, sink):
        config = ServerConfig(port=0, hx_vary=True)

        create_app(lambda req: html(""), config).handle(HX_GET, sink)

        assert sink.header("Vary") == "HX-Request"

    def test_vary_kept_when_handler_sets_vary(self, sink):
        config = ServerConfig(port=0, hx_vary=True)

        def app(request):
            response = html("")
            response.headers["Vary"] = "Accept-Encoding"
            return response

        create_app(app, config).handle(HX_GET, sink)

        assert sink.header("Vary") == "Accept-Encoding, HX-Request"

    def test_parse_error(self, config, sink):
        server = create_app(lambda req: html(""), config)

        server.handle(b"BREW /pot HTTP/1.1\r\n\r\n", sink)

        assert sink.status == 405
        assert "error" in json.loads(sink.body)

    def test_handler_exception_sends_500_without_directives(self, config, sink, caplog):
        def app(request):
            trigger(request, "saved")
            raise RuntimeError("database down")

        with caplog.at_level(logging.ERROR):
            create_app(app, config).handle(HX_GET, sink)

        assert sink.status == 500
        assert sink.header("HX-Trigger") is None
        assert b"database down" not in sink.body
        assert "database down" in caplog.text

    def test_exception_after_commit_finishes_response(self, config, sink):
        def app(request):
            request.writer.write("partial")
            raise RuntimeError("late failure")

        create_app(app, config).handle(HX_GET, sink)

        assert sink.status == 200
        assert sink.data.endswith(b"0\r\n\r\n")

    def test_use_after_first_request(self, config, sink):
        """Middleware added later is picked up by the next request."""
        calls = []

        def app(request):
            if calls:
                retarget(request, "#late")
            calls.append(request)
            return html("")

        server = HTTPServer(app, config)
        server.handle(b"GET / HTTP/1.1\r\n\r\n", sink)

        server.use(HXMiddleware())
        second = type(sink)()
        server.handle(b"GET / HTTP/1.1\r\n\r\n", second)

        assert second.header("HX-Retarget") == "#late"

    def test_without_hx_middleware_setters_fail_with_500(self, config, sink):
        def app(request):
            retarget(request, "#x")
            return html("")

        server = HTTPServer(app, config)
        server.use(LoggingMiddleware())

        server.handle(b"GET / HTTP/1.1\r\n\r\n", sink)

        assert sink.status == 500


class TestAccessLog:

    def test_logs_hx_marker(self, config, sink, caplog):
        with caplog.at_level(logging.INFO, logger="hxserver.access"):
            create_app(lambda req: html("abc"), config).handle(HX_GET, sink, ("10.0.0.1", 5555))

        line = [r.getMessage() for r in caplog.records if r.name == "hxserver.access"][0]
        assert line.startswith("10.0.0.1 - - [")
        assert '"GET /items" 200 3' in line
        assert line.endswith(" hx")

    def test_json_format(self, sink, caplog):
        config = ServerConfig(port=0, log_format="json")

        with caplog.at_level(logging.INFO, logger="hxserver.access"):
            create_app(lambda req: html("abc"), config).handle(b"GET / HTTP/1.1\r\n\r\n", sink)

        entry = json.loads([r.getMessage() for r in caplog.records if r.name == "hxserver.access"][0])
        assert entry["hx"] is False
        assert entry["status_code"] == 200
        assert entry["path"] == "/"

    def test_streamed_response_logged_from_writer(self, config, sink, caplog):
        def app(request):
            request.writer.write("12345")
            return None

        with caplog.at_level(logging.INFO, logger="hxserver.access"):
            create_app(app, config).handle(b"GET /s HTTP/1.1\r\n\r\n", sink)

        line = [r.getMessage() for r in caplog.records if r.name == "hxserver.access"][0]
        assert '"GET /s" 200 5' in line

    def test_skip_paths(self, config, sink, caplog):
        server = HTTPServer(lambda req: html(""), config)
        server.use(LoggingMiddleware(skip_paths=["/health"]))

        with caplog.at_level(logging.INFO, logger="hxserver.access"):
            server.handle(b"GET /health HTTP/1.1\r\n\r\n", sink)

        assert not [r for r in caplog.records if r.name == "hxserver.access"]


class TestReadRequest:

    def test_reads_head_and_body(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 5\r\n\r\nhelloEXTRA"

        assert read_request(io.BytesIO(raw), 1024) == raw[:-5]

    def test_closed_connection(self):
        assert read_request(io.BytesIO(b""), 1024) is None

    def test_too_large(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 5000\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            read_request(io.BytesIO(raw), 1024)

        assert exc_info.value.status_code == 413

    def test_header_line_too_long(self):
        raw = b"GET / HTTP/1.1\r\nX-Big: " + b"a" * 70000 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            read_request(io.BytesIO(raw), 1024 * 1024)

        assert exc_info.value.status_code == 431

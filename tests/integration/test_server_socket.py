"""
Integration tests: real sockets against a running server.
"""

import json


def split(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return status, headers, body


class TestServerOverSocket:

    def test_full_page_for_plain_request(self, test_server):
        status, headers, body = split(test_server.request(
            b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"
        ))

        assert status == 200
        assert b"page" in body
        assert "hx-trigger" not in headers
        assert headers["vary"] == "HX-Request"

    def test_fragment_with_directives(self, test_server):
        status, headers, body = split(test_server.request(
            b"GET /items HTTP/1.1\r\nHost: localhost\r\nHX-Request: true\r\n\r\n"
        ))

        assert status == 200
        assert body == b"<p>fragment</p>"
        assert json.loads(headers["hx-trigger"]) == {"loaded": {"path": "/items"}}
        assert headers["hx-retarget"] == "#main"

    def test_streamed_response(self, test_server):
        status, headers, body = split(test_server.request(
            b"GET /stream HTTP/1.1\r\nHost: localhost\r\n\r\n"
        ))

        assert status == 200
        assert headers["transfer-encoding"] == "chunked"
        assert headers["hx-trigger"] == "streamed"
        assert body == b"C\r\n<li>one</li>\r\nC\r\n<li>two</li>\r\n0\r\n\r\n"

    def test_bad_request(self, test_server):
        status, _, body = split(test_server.request(b"NOT HTTP\r\n\r\n"))

        assert status == 400
        assert "error" in json.loads(body)

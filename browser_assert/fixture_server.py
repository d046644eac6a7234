from __future__ import annotations

import contextlib
import http.server
import threading
from collections.abc import Iterator, Mapping

SUBMIT_PAGE = "<html><title>Title</title><button>Submit</button></html>"

# Text appears after the first poll interval of the containment check.
DELAYED_PAGE = (
	"<html><title>Delayed</title><body><p id=\"status\">Loading</p>"
	"<script>setTimeout(() => { document.getElementById('status').textContent = 'Ready'; }, 400);</script>"
	"</body></html>"
)

DEFAULT_PAGES: dict[str, str] = {
	"/": SUBMIT_PAGE,
	"/delayed": DELAYED_PAGE,
}


def _make_handler(pages: Mapping[str, str]) -> type[http.server.BaseHTTPRequestHandler]:
	class PageHandler(http.server.BaseHTTPRequestHandler):
		def do_GET(self) -> None:  # noqa: N802
			path = self.path.split("?", 1)[0]
			body = pages.get(path)
			if body is None:
				self.send_error(404)
				return
			data = body.encode("utf-8")
			self.send_response(200)
			self.send_header("Content-Type", "text/html; charset=utf-8")
			self.send_header("Content-Length", str(len(data)))
			self.end_headers()
			self.wfile.write(data)

		def log_message(self, format: str, *args) -> None:  # noqa: A002
			return

	return PageHandler


@contextlib.contextmanager
def serve_pages(pages: Mapping[str, str] | None = None) -> Iterator[str]:
	handler = _make_handler(dict(pages or DEFAULT_PAGES))
	with http.server.ThreadingHTTPServer(("127.0.0.1", 0), handler) as httpd:
		port = httpd.server_address[1]
		thread = threading.Thread(target=httpd.serve_forever, name="fixture-httpd", daemon=True)
		thread.start()
		try:
			yield f"http://127.0.0.1:{port}"
		finally:
			httpd.shutdown()
			thread.join(timeout=2)

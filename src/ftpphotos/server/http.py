from __future__ import annotations

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from ftpphotos.errors import NoResultsError, PhotoServiceError, RemoteConnectionError
from ftpphotos.output_models import PhotoOutput, photos_to_json
from ftpphotos.service import PhotoService

log = logging.getLogger(__name__)


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    server_version = "ftpphotos"

    def do_GET(self) -> None:  # noqa: N802
        url = urlsplit(self.path)
        route = url.path.rstrip("/") or "/"
        if route == "/health":
            self._write_json(200, {"ok": True})
            return
        if route == "/photos":
            self._photos()
            return
        if route == "/photos/photo":
            self._photo(parse_qs(url.query).get("path", []))
            return
        self._write_json(404, {"ok": False, "error": "not found"})

    def _photos(self) -> None:
        service: PhotoService = self.server.service  # type: ignore[attr-defined]
        try:
            photos = service.get_photos()
        except NoResultsError as exc:
            self._write_json(404, {"ok": False, "error": str(exc)})
            return
        except RemoteConnectionError as exc:
            log.error("ftp connection failed: %s", exc)
            self._write_json(502, {"ok": False, "error": str(exc)})
            return
        except PhotoServiceError as exc:
            log.error("photo retrieval failed: %s", exc)
            self._write_json(500, {"ok": False, "error": str(exc)})
            return
        except Exception as exc:
            log.exception("unexpected failure while walking")
            self._write_json(500, {"ok": False, "error": f"internal error: {exc}"})
            return
        self._write_json(200, photos_to_json(photos))

    def _photo(self, paths: list[str]) -> None:
        if not paths or not paths[0]:
            self._write_json(400, {"ok": False, "error": "missing path parameter"})
            return
        service: PhotoService = self.server.service  # type: ignore[attr-defined]
        photo = service.get_photo_info(paths[0])
        if photo is None:
            self._write_json(404, {"ok": False, "error": f"file not found: {paths[0]}"})
            return
        self._write_json(200, PhotoOutput.from_photo(photo).as_json())

    def log_message(self, fmt: str, *args: Any) -> None:
        log.debug("%s %s", self.address_string(), fmt % args)

    def _write_json(self, status: int, payload: Any) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def make_http_server(service: PhotoService, host: str = "127.0.0.1", port: int = 8080) -> ThreadingHTTPServer:
    server = ThreadingHTTPServer((host, port), _Handler)
    server.service = service  # type: ignore[attr-defined]
    return server


def run_http_server(service: PhotoService, host: str = "127.0.0.1", port: int = 8080) -> int:
    server = make_http_server(service, host=host, port=port)
    log.info("serving on http://%s:%d", host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0

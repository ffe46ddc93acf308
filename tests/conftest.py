import json
import re
from typing import Dict, List, Optional
from urllib.parse import parse_qs, unquote

import httpx
import pytest

from colore.http.colore_client import ColoreClient


JPEG_MAGIC = b"\xff\xd8\xff"

# Tareas de conversión que conoce el servicio falso: mime type -> acciones
CONVERSION_TASKS = {
    "image/jpeg": {"ocr", "ocr_text"},
    "application/pdf": {"ocr", "ocr_text", "thumbnail"},
}


def parse_multipart(request: httpx.Request) -> Dict[str, object]:
    """Parsear un body multipart/form-data generado por httpx."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=")[1].strip('"').encode()
    body = request.read()
    parts: Dict[str, object] = {}

    for chunk in body.split(b"--" + boundary):
        if not chunk.strip() or chunk.startswith(b"--"):
            continue
        head, _, data = chunk[2:].partition(b"\r\n\r\n")
        data = data[:-2]  # CRLF antes del siguiente boundary
        headers = head.decode("utf-8")
        name = re.search(r'; name="([^"]*)"', headers).group(1)
        filename = re.search(r'; filename="([^"]*)"', headers)

        if filename:
            ctype = re.search(r"Content-Type: (\S+)", headers)
            parts[name] = {
                "filename": filename.group(1),
                "content_type": ctype.group(1) if ctype else None,
                "data": data,
            }
        elif name.endswith("[]"):
            parts.setdefault(name, []).append(data.decode())
        else:
            parts[name] = data.decode()
    return parts


def parse_form(request: httpx.Request) -> Dict[str, object]:
    """Parsear campos de un request (multipart, urlencoded o query string)."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        return parse_multipart(request)

    raw = request.read().decode() if content_type.startswith("application/x-www-form-urlencoded") else ""
    raw = raw or request.url.query.decode()
    parsed = parse_qs(raw)
    return {k: (v if k.endswith("[]") else v[0]) for k, v in parsed.items()}


def detect_content_type(data: bytes) -> str:
    if data.startswith(JPEG_MAGIC):
        return "image/jpeg"
    if data.startswith(b"%PDF"):
        return "application/pdf"
    return "text/plain"


class FakeColore:
    """
    Servicio Colore en memoria para httpx.MockTransport.

    Replica las rutas, status y mensajes de error del servicio real.
    """

    def __init__(self):
        self.documents: Dict[str, Dict[str, dict]] = {}
        self.requests: List[httpx.Request] = []
        self.forms: List[Dict[str, object]] = []

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_form(self) -> Dict[str, object]:
        return self.forms[-1]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        form = parse_form(request)
        self.forms.append(form)

        raw_path = request.url.raw_path.decode().split("?")[0]
        segments = [unquote(s) for s in raw_path.strip("/").split("/") if s]

        if request.method == "HEAD" and not segments:
            return httpx.Response(200)

        if segments == ["convert"] and request.method == "POST":
            return self._convert(form)

        if len(segments) < 3 or segments[0] != "document":
            return httpx.Response(404, text="<html><body>Not Found</body></html>")

        app, doc_id, rest = segments[1], segments[2], segments[3:]
        key = f"{app}/{doc_id}"
        handler = {
            ("PUT", 1): self._create,
            ("POST", 1): self._update,
            ("GET", 0): self._info,
            ("DELETE", 0): self._delete_document,
            ("DELETE", 1): self._delete_version,
            ("GET", 2): self._get_file,
            ("POST", 3): self._request_conversion,
        }.get((request.method, len(rest)))

        if request.method == "POST" and len(rest) == 2 and rest[0] == "title":
            handler = self._update_title
        if handler is None:
            return self._error(405, "Method not allowed")
        return handler(app, doc_id, key, rest, form)

    def _json(self, status: int, **fields) -> httpx.Response:
        return httpx.Response(status, json={"status": status, **fields})

    def _error(self, status: int, description: str, backtrace: Optional[List[str]] = None) -> httpx.Response:
        return httpx.Response(
            status,
            json={"status": status, "description": description, "backtrace": backtrace},
        )

    def _resolve(self, doc: dict, version: str) -> str:
        return doc["current_version"] if version == "current" else version

    def _create(self, app, doc_id, key, rest, form):
        if key in self.documents:
            return self._error(409, "A document with this doc_id already exists")
        upload = form["file"]
        self.documents[key] = {
            "title": form.get("title"),
            "current_version": "v001",
            "versions": {"v001": {"filename": rest[0], "data": upload["data"]}},
        }
        return self._json(
            201,
            description="Document stored",
            app=app,
            doc_id=doc_id,
            path=f"/document/{app}/{doc_id}/current/{rest[0]}",
        )

    def _update(self, app, doc_id, key, rest, form):
        doc = self.documents.get(key)
        if doc is None:
            return self._error(404, "Document not found")
        version = f"v{len(doc['versions']) + 1:03d}"
        doc["versions"][version] = {"filename": rest[0], "data": form["file"]["data"]}
        doc["current_version"] = version
        return self._json(
            201,
            description="Document updated",
            app=app,
            doc_id=doc_id,
            path=f"/document/{app}/{doc_id}/current/{rest[0]}",
        )

    def _update_title(self, app, doc_id, key, rest, form):
        doc = self.documents.get(key)
        if doc is None:
            return self._error(404, "Document not found")
        doc["title"] = rest[1]
        return self._json(200, description="Title updated")

    def _info(self, app, doc_id, key, rest, form):
        doc = self.documents.get(key)
        if doc is None:
            return self._error(404, "Document not found")
        return self._json(
            200,
            description="Information retrieved",
            app=app,
            doc_id=doc_id,
            title=doc["title"],
            current_version=doc["current_version"],
            versions={v: {"filename": f["filename"]} for v, f in doc["versions"].items()},
        )

    def _delete_document(self, app, doc_id, key, rest, form):
        if self.documents.pop(key, None) is None:
            return self._error(404, "Document not found")
        return self._json(200, description="Document deleted")

    def _delete_version(self, app, doc_id, key, rest, form):
        doc = self.documents.get(key)
        if doc is None:
            return self._error(404, "Document not found")
        version = self._resolve(doc, rest[0])
        if version == doc["current_version"]:
            return self._error(400, "Version is current, change current version first")
        if doc["versions"].pop(version, None) is None:
            return self._error(404, "Version not found")
        return self._json(200, description="Document version deleted")

    def _get_file(self, app, doc_id, key, rest, form):
        doc = self.documents.get(key)
        if doc is None:
            return self._error(404, "Document not found")
        stored = doc["versions"].get(self._resolve(doc, rest[0]))
        if stored is None or stored["filename"] != rest[1]:
            return self._error(404, "File not found")
        return httpx.Response(
            200,
            content=stored["data"],
            headers={"content-type": "application/json"},
        )

    def _request_conversion(self, app, doc_id, key, rest, form):
        if key not in self.documents:
            return self._error(404, "Document not found")
        return self._json(202, description="Conversion initiated")

    def _convert(self, form):
        upload = form["file"]
        action = form.get("action")
        content_type = detect_content_type(upload["data"])
        if action not in CONVERSION_TASKS.get(content_type, set()):
            return self._error(
                400,
                f"No task found for action: '{action}', mime type: '{content_type}'",
            )
        return httpx.Response(200, content=b"The quick brown fox jumps over the lazy dog\n")


@pytest.fixture
def fake_colore():
    """Servicio Colore falso, en memoria."""
    return FakeColore()


@pytest.fixture
def client(fake_colore):
    """Cliente apuntando al servicio falso."""
    with ColoreClient(
        app="client_test",
        base_uri="http://localhost:9240/",
        transport=fake_colore.transport(),
    ) as c:
        yield c


@pytest.fixture
def quickfox_jpg():
    """Bytes de una imagen JPEG de ejemplo (con CRLF y bytes no ASCII en el medio)."""
    return JPEG_MAGIC + b"\xe0\x00\x10JFIF\x00" + b"quick brown fox\r\n\x00\xfe" * 256 + b"\xff\xd9"


@pytest.fixture
def error_body():
    """Factory de bodies de error en formato Colore."""
    def _make(status: int, description: str = "foo", backtrace=None) -> bytes:
        return json.dumps(
            {"status": status, "description": description, "backtrace": backtrace}
        ).encode()
    return _make

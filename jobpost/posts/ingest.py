"""
Ingestion multipart en streaming.

Chaque partie du formulaire est confiée à un handler choisi par nom de champ:
- champ texte: valeur décodée (taille bornée);
- fichier "logo" (avec nom de fichier): flux transmis au collaborateur d'upload
  pendant que le parsing continue, l'URL publique remplace ensuite le fichier;
- tout autre fichier: lu et ignoré (jamais mis en mémoire).

Le fichier logo n'est jamais bufferisé: les morceaux passent par une file
bornée consommée par la tâche d'upload.
"""
import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from fastapi import Request
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from jobpost import config
from jobpost.errors import SubmissionError, UploadError

logger = logging.getLogger(__name__)

# upload(chunks, filename, content_type) -> URL publique
LogoUploader = Callable[[AsyncIterator[bytes], str, str], Awaitable[str]]

LOGO_FIELD = "logo"
_QUEUE_SIZE = 8


class _Part:
    def __init__(self) -> None:
        self.headers: List[Tuple[bytes, bytes]] = []
        self.name = ""
        self.filename: Optional[str] = None
        self.content_type = ""

    def parse_headers(self) -> None:
        for field, value in self.headers:
            if field == b"content-disposition":
                _, options = parse_options_header(value)
                self.name = options.get(b"name", b"").decode("utf-8", errors="replace")
                filename = options.get(b"filename")
                self.filename = filename.decode("utf-8", errors="replace") if filename is not None else None
            elif field == b"content-type":
                self.content_type = value.decode("latin-1").strip().lower()


class _ScalarHandler:
    def __init__(self, name: str, fields: Dict[str, str]) -> None:
        self.name = name
        self.fields = fields
        self.chunks: List[bytes] = []
        self.size = 0

    async def start(self) -> None:
        return None

    async def feed(self, chunk: bytes) -> None:
        self.size += len(chunk)
        if self.size > config.MAX_FIELD_BYTES:
            raise SubmissionError(f"Champ trop volumineux: {self.name}", code="field_too_large")
        self.chunks.append(chunk)

    async def finish(self) -> None:
        # Première occurrence conservée (comme FormData.get)
        self.fields.setdefault(self.name, b"".join(self.chunks).decode("utf-8", errors="replace"))


class _DiscardHandler:
    """Draine un fichier non attendu sans le conserver."""

    async def start(self) -> None:
        return None

    async def feed(self, chunk: bytes) -> None:
        return None

    async def finish(self) -> None:
        return None


class _LogoHandler:
    def __init__(self, upload: LogoUploader, filename: str, content_type: str) -> None:
        self.upload = upload
        self.filename = filename
        self.content_type = content_type or "application/octet-stream"
        self.queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue(maxsize=_QUEUE_SIZE)
        self.task: Optional["asyncio.Task[str]"] = None
        self.size = 0
        self.closed = False

    async def start(self) -> None:
        if not self.content_type.startswith("image/"):
            raise UploadError("Le logo doit être une image", code="logo_not_image")
        self.task = asyncio.create_task(self.upload(self._chunks(), self.filename, self.content_type))

    async def _chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.queue.get()
            if chunk is None:
                return
            yield chunk

    async def _offer(self, item: Optional[bytes]) -> None:
        # N'attend jamais une file pleine si la tâche d'upload s'est arrêtée
        put = asyncio.ensure_future(self.queue.put(item))
        await asyncio.wait({put, self.task}, return_when=asyncio.FIRST_COMPLETED)
        if not put.done():
            put.cancel()

    async def feed(self, chunk: bytes) -> None:
        self.size += len(chunk)
        if self.size > config.MAX_LOGO_BYTES:
            raise UploadError("Logo trop volumineux", code="logo_too_large")
        if chunk:
            await self._offer(chunk)

    async def finish(self) -> None:
        if not self.closed:
            self.closed = True
            await self._offer(None)

    async def result(self) -> str:
        await self.finish()
        try:
            url = await self.task
        except UploadError:
            raise
        except Exception as exc:
            logger.exception("posts.ingest logo upload failed filename=%s", self.filename)
            raise UploadError("Échec de l'upload du logo") from exc
        if not url:
            raise UploadError("Échec de l'upload du logo")
        return url

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()


class MultipartIngestor:
    """
    Parse un flux multipart/form-data et retourne les champs texte.
    Les callbacks du parser sont synchrones: ils empilent des événements,
    traités de manière asynchrone après chaque morceau reçu.
    """

    def __init__(self, boundary: bytes, upload: LogoUploader) -> None:
        self.upload = upload
        self.fields: Dict[str, str] = {}
        self.events: List[Tuple[str, Any]] = []
        self.part_count = 0
        self._part: Optional[_Part] = None
        self._handler: Any = None
        self._logo: Optional[_LogoHandler] = None
        self._header_field = b""
        self._header_value = b""
        callbacks = {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
        }
        self.parser = MultipartParser(boundary, callbacks)

    # --- callbacks python-multipart ---
    def on_part_begin(self) -> None:
        self.events.append(("begin", None))

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self.events.append(("data", data[start:end]))

    def on_part_end(self) -> None:
        self.events.append(("end", None))

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self.events.append(("header", (self._header_field.lower(), self._header_value)))
        self._header_field = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        self.events.append(("headers_done", None))

    # --- dispatch ---
    def _select_handler(self, part: _Part) -> Any:
        if part.filename is None:
            if not part.name:
                return _DiscardHandler()
            return _ScalarHandler(part.name, self.fields)
        if part.name == LOGO_FIELD and part.filename and self._logo is None:
            self._logo = _LogoHandler(self.upload, part.filename, part.content_type)
            return self._logo
        return _DiscardHandler()

    async def _process_events(self) -> None:
        events, self.events = self.events, []
        for kind, payload in events:
            if kind == "begin":
                self.part_count += 1
                if self.part_count > config.MAX_FORM_FIELDS:
                    raise SubmissionError("Trop de champs dans la soumission", code="too_many_fields")
                self._part = _Part()
            elif kind == "header":
                self._part.headers.append(payload)
            elif kind == "headers_done":
                self._part.parse_headers()
                self._handler = self._select_handler(self._part)
                await self._handler.start()
            elif kind == "data":
                await self._handler.feed(payload)
            elif kind == "end":
                await self._handler.finish()
                self._handler = None

    async def run(self, stream: AsyncIterator[bytes]) -> Dict[str, str]:
        try:
            async for chunk in stream:
                if not chunk:
                    continue
                self.parser.write(chunk)
                await self._process_events()
            self.parser.finalize()
            await self._process_events()
            if self._logo is not None:
                self.fields[LOGO_FIELD] = await self._logo.result()
            else:
                # Un champ texte "logo" ne remplace jamais l'upload
                self.fields.pop(LOGO_FIELD, None)
        except MultipartParseError as exc:
            self._cancel_upload()
            raise SubmissionError("Soumission multipart illisible") from exc
        except Exception:
            self._cancel_upload()
            raise
        return self.fields

    def _cancel_upload(self) -> None:
        if self._logo is not None:
            self._logo.cancel()


async def ingest_multipart(content_type: str, stream: AsyncIterator[bytes], upload: LogoUploader) -> Dict[str, str]:
    """
    Point d'entrée testable sans Request.
    - content_type: en-tête Content-Type complet (boundary incluse).
    - Lève SubmissionError si ce n'est pas du multipart/form-data.
    """
    ctype, options = parse_options_header(content_type or "")
    boundary = options.get(b"boundary")
    if ctype != b"multipart/form-data" or not boundary:
        raise SubmissionError("Soumission multipart/form-data attendue", code="not_multipart")
    return await MultipartIngestor(boundary, upload).run(stream)


async def ingest_submission(request: Request, upload: LogoUploader) -> Dict[str, str]:
    return await ingest_multipart(request.headers.get("content-type", ""), request.stream(), upload)

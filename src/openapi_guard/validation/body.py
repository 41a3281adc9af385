"""Body capture and replay.

ASGI request bodies can be received only once and response bodies go
straight to the client, so both are buffered here: the validators read the
buffer, everything downstream reads a replay of it.

Both bodies are held fully in memory for the length of the exchange, so
memory use grows with body size per in-flight request. Schema validation
needs the whole document anyway.
"""

import io
from typing import Callable, Iterable

from starlette.requests import ClientDisconnect
from starlette.types import Message, Receive, Send

from openapi_guard.validation.verdict import HttpResponse


class CapturedBody:
    """An immutable buffered body with any number of independent replays."""

    def __init__(self, data: bytes = b""):
        self._data = bytes(data)

    @classmethod
    def from_chunks(cls, chunks: Iterable[bytes]) -> "CapturedBody":
        """Drain a once-readable chunk iterator into a buffer."""
        return cls(b"".join(chunks))

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def open(self) -> io.BytesIO:
        """Fresh reader positioned at offset zero."""
        return io.BytesIO(self._data)

    def replay(self, receive: Receive) -> "ReplayReceive":
        """Fresh ASGI ``receive`` that yields the buffered body first."""
        return ReplayReceive(self._data, receive)


class ReplayReceive:
    """Hands out the buffered body as one message, then defers to the real receive."""

    def __init__(self, data: bytes, receive: Receive):
        self._data = data
        self._receive = receive
        self._delivered = False

    async def __call__(self) -> Message:
        if not self._delivered:
            self._delivered = True
            return {"type": "http.request", "body": self._data, "more_body": False}
        # after the body only disconnect notifications are left
        return await self._receive()


async def capture_request_body(receive: Receive) -> CapturedBody:
    """Receive every ``http.request`` chunk of the current request."""
    chunks = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            raise ClientDisconnect()
        if message["type"] != "http.request":
            continue
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return CapturedBody.from_chunks(chunks)


class ResponseTee:
    """Wraps ``send``: forwards every message untouched and keeps a copy.

    ``on_start`` runs once the status line has been forwarded,
    ``on_complete`` once the final body chunk has been forwarded.
    """

    def __init__(
        self,
        send: Send,
        on_start: Callable[[HttpResponse], None] | None = None,
        on_complete: Callable[[HttpResponse, CapturedBody], None] | None = None,
    ):
        self._send = send
        self._on_start = on_start
        self._on_complete = on_complete
        self._chunks: list[bytes] = []
        self.response: HttpResponse | None = None
        self.complete = False

    async def __call__(self, message: Message) -> None:
        await self._send(message)

        if message["type"] == "http.response.start":
            self.response = HttpResponse.from_start_message(message)
            if self._on_start:
                self._on_start(self.response)
        elif message["type"] == "http.response.body" and not self.complete:
            self._chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                self.complete = True
                if self._on_complete:
                    self._on_complete(self.response, self.body())

    def body(self) -> CapturedBody:
        return CapturedBody.from_chunks(self._chunks)

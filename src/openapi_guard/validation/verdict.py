"""Violations and the request/response records the pipelines judge."""

from enum import Enum

from pydantic import BaseModel
from starlette.datastructures import Headers


class Provenance(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"


class Violation(BaseModel):
    """A detected mismatch between live traffic and the contract."""

    provenance: Provenance
    message: str
    # status an application answers with when it rejects this kind of traffic itself
    expected_status: int | None = None

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.provenance.value.capitalize()} invalid: {self.message}"


def request_violation(message: str, expected_status: int | None = None) -> Violation:
    return Violation(provenance=Provenance.REQUEST, message=message, expected_status=expected_status)


def response_violation(message: str, expected_status: int | None = None) -> Violation:
    return Violation(provenance=Provenance.RESPONSE, message=message, expected_status=expected_status)


class HttpRequest(BaseModel):
    """The parts of an inbound request the validators look at."""

    method: str
    raw_path: bytes
    query_string: bytes = b""
    headers: list[tuple[bytes, bytes]] = []

    @classmethod
    def from_scope(cls, scope: dict) -> "HttpRequest":
        raw_path = scope.get("raw_path") or scope["path"].encode("utf-8")
        # some servers hand over the full target, query string included
        raw_path = raw_path.split(b"?", 1)[0]
        return cls(
            method=scope["method"],
            raw_path=raw_path,
            query_string=scope.get("query_string", b""),
            headers=[(bytes(k).lower(), bytes(v)) for k, v in scope.get("headers", [])],
        )

    def header(self, name: str) -> str | None:
        return Headers(raw=self.headers).get(name)


class HttpResponse(BaseModel):
    status: int
    headers: list[tuple[bytes, bytes]] = []

    @classmethod
    def from_start_message(cls, message: dict) -> "HttpResponse":
        return cls(
            status=message["status"],
            headers=[(bytes(k).lower(), bytes(v)) for k, v in message.get("headers", [])],
        )

    def header(self, name: str) -> str | None:
        return Headers(raw=self.headers).get(name)

"""Request validation pipeline."""

from dataclasses import dataclass
from typing import Callable

from openapi_guard.contract.base import ResolvedOperation
from openapi_guard.contract.registry import ContractRegistry, NotFound
from openapi_guard.validation.body import CapturedBody
from openapi_guard.validation.media import acceptable_any, effective_media_type, is_json, lookup_media
from openapi_guard.validation.params import parse_query, validate_query_params
from openapi_guard.validation.schema import validate_json_document
from openapi_guard.validation.verdict import HttpRequest, Violation, request_violation

STANDARD_METHODS = ("GET", "POST", "HEAD", "PUT", "DELETE", "TRACE", "CONNECT", "OPTIONS", "PATCH")
BODY_METHODS = ("POST", "PUT")


@dataclass(frozen=True)
class RequestVerdict:
    violation: Violation | None
    operation: ResolvedOperation | None  # None when resolution itself failed


def strip_path_prefix(path_prefix: bytes, raw_path: bytes) -> str | None:
    if not raw_path.startswith(path_prefix):
        return None
    return raw_path[len(path_prefix):].decode("utf-8", errors="replace")


def resolve_request_operation(
    registry: ContractRegistry,
    path_prefix: bytes,
    request: HttpRequest,
    make_violation: Callable[..., Violation],
) -> ResolvedOperation | Violation:
    """Method, prefix and template lookup shared by both pipelines."""
    method = request.method.upper()
    if method not in STANDARD_METHODS:
        return make_violation(f"non-standard HTTP method: {request.method}", 405)

    path = strip_path_prefix(path_prefix, request.raw_path)
    if path is None:
        return make_violation(f"path prefix not in path: {request.raw_path!r}", 404)

    resolved = registry.resolve_operation(path, method)
    if isinstance(resolved, NotFound):
        return make_violation(resolved.describe(), 404 if resolved.reason == "path" else 405)
    return resolved


def _check_body(registry: ContractRegistry, operation: ResolvedOperation, request: HttpRequest, body: CapturedBody):
    content_type = effective_media_type(request.header("content-type"))
    if operation.method not in BODY_METHODS or not is_json(content_type):
        return None

    if operation.request_body is None:
        return request_violation("no request body for that method", 400)
    media = lookup_media(operation.request_body, content_type)
    schema = media.get("schema") if media else None
    if schema is None:
        return request_violation("no schema for that request", 400)

    errors = validate_json_document(registry.contract, schema, body.data)
    if errors:
        return request_violation("\n".join(errors), 400)
    return None


def _check_accept(operation: ResolvedOperation, request: HttpRequest):
    media_types = operation.declared_response_media_types()
    accept = request.header("accept")
    if media_types and not acceptable_any(accept, media_types):
        return request_violation(
            f"no acceptable content type for {accept!r}, the operation produces {', '.join(media_types)}",
            406,
        )
    return None


def validate_request(
    registry: ContractRegistry,
    path_prefix: bytes,
    request: HttpRequest,
    body: CapturedBody,
) -> RequestVerdict:
    """Judge one inbound request against the contract.

    Body, query parameters and ``Accept`` are all checked; when several fail
    the body violation wins, then the first parameter by name, then Accept.
    """
    resolved = resolve_request_operation(registry, path_prefix, request, request_violation)
    if isinstance(resolved, Violation):
        return RequestVerdict(resolved, None)
    if not resolved.declared:
        return RequestVerdict(None, resolved)

    body_violation = _check_body(registry, resolved, request, body)
    param_violations = validate_query_params(
        registry.contract, resolved.query_parameters(), parse_query(request.query_string)
    )
    accept_violation = _check_accept(resolved, request)

    for violation in (body_violation, *param_violations, accept_violation):
        if violation is not None:
            return RequestVerdict(violation, resolved)
    return RequestVerdict(None, resolved)

"""Response validation pipeline."""

from openapi_guard.contract.base import ResolvedOperation
from openapi_guard.contract.registry import ContractRegistry
from openapi_guard.validation.body import CapturedBody
from openapi_guard.validation.media import accepts, effective_media_type, is_json, lookup_media
from openapi_guard.validation.request import resolve_request_operation
from openapi_guard.validation.schema import validate_json_document
from openapi_guard.validation.verdict import HttpRequest, HttpResponse, Violation, response_violation


def validate_response(
    registry: ContractRegistry,
    path_prefix: bytes,
    request: HttpRequest,
    response: HttpResponse,
    body: CapturedBody,
    operation: ResolvedOperation | None = None,
) -> Violation | None:
    """Judge the response *request* produced.

    *operation* may carry the resolution from the request phase; without it
    the operation is resolved again from the request.
    """
    if operation is None:
        resolved = resolve_request_operation(registry, path_prefix, request, response_violation)
        if isinstance(resolved, Violation):
            return resolved
        operation = resolved
    if not operation.declared:
        return None

    descriptor = operation.response_for(response.status)
    if descriptor is None:
        return response_violation("no response for that status code")

    content_type = effective_media_type(response.header("content-type"))
    content = descriptor.get("content")
    if not content:
        # a response without declared content may only be empty
        if len(body) == 0:
            return None
        return response_violation("no content type for that response")

    media = lookup_media(content, content_type)
    if media is None:
        return response_violation("no content type for that response")
    schema = media.get("schema")
    if schema is None:
        return response_violation("no schema for that content type")

    violation = None
    if is_json(content_type):
        errors = validate_json_document(registry.contract, schema, body.data)
        if errors:
            violation = response_violation("\n".join(errors))

    if violation is None and not accepts(request.header("accept"), content_type):
        violation = response_violation(f"response content type {content_type} is not acceptable", 406)
    return violation

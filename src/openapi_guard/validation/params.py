"""Query parameter validation.

Declared query parameters and the actual query string are aligned by name.
Every name is checked, in sorted order, so the first violation reported is
stable from one run to the next.
"""

import json
from urllib.parse import parse_qsl

from openapi_guard.contract.base import ParameterSpec
from openapi_guard.contract.document import OpenApiContract
from openapi_guard.validation.schema import validate_json_document
from openapi_guard.validation.verdict import Violation, request_violation

BAD_REQUEST = 400


def parse_query(query_string: bytes) -> dict[str, str]:
    """Flat name -> value map; the last occurrence of a repeated name wins."""
    pairs = parse_qsl(query_string.decode("utf-8", errors="replace"), keep_blank_values=True)
    return dict(pairs)


def _param_error(name: str, message: str) -> Violation:
    return request_violation(f"error validating query parameter {name} - {message}", BAD_REQUEST)


def _as_json_scalar(value: str, schema: dict) -> bytes:
    types = schema.get("type")
    # 3.1 contracts spell nullable strings as ["string", "null"]
    is_string = types == "string" or (isinstance(types, list) and "string" in types)
    if is_string and not value.startswith('"'):
        return json.dumps(value).encode("utf-8")
    return value.encode("utf-8")


def check_query_param(
    contract: OpenApiContract,
    name: str,
    value: str | None,
    spec: ParameterSpec | None,
) -> Violation | None:
    """Judge one aligned (actual value, declared spec) pair."""
    if spec is None:
        return _param_error(name, "this parameter is not specified")

    if value is None:
        # parameters are optional unless declared required
        if spec.required:
            return _param_error(name, "this parameter is required and not present")
        return None

    if value == "":
        if spec.allow_empty_value:
            return None
        return request_violation(f"empty value for query parameter {name} is not allowed", BAD_REQUEST)

    if spec.param_schema is None:
        return _param_error(name, "no schema specified for this parameter")

    schema = contract.dereference(spec.param_schema)
    errors = validate_json_document(contract, schema, _as_json_scalar(value, schema))
    if errors:
        return _param_error(name, "\n".join(errors))
    return None


def validate_query_params(
    contract: OpenApiContract,
    specs: list[ParameterSpec],
    query: dict[str, str],
) -> list[Violation]:
    """Check every declared and every supplied query parameter."""
    declared = {spec.name: spec for spec in specs if spec.location == "query"}

    violations = []
    for name in sorted(set(declared) | set(query)):
        violation = check_query_param(contract, name, query.get(name), declared.get(name))
        if violation is not None:
            violations.append(violation)
    return violations

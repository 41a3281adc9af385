"""JSON document validation against contract schemas, backed by jsonschema."""

import json
from functools import lru_cache

from jsonschema import Draft4Validator, Draft202012Validator
from jsonschema.exceptions import ValidationError

from openapi_guard.contract.document import OpenApiContract

INVALID_JSON = "The document is not valid JSON"

# python type names jsonschema may report for a "type" keyword -> OpenAPI type names
TYPE_NAMES = {
    "str": "string",
    "float": "number",
    "int": "integer",
    "bool": "boolean",
}


def fix_validation_error(error: ValidationError) -> str:
    """Message for *error* with the expected types named in the OpenAPI vocabulary.

    Only the ``type`` keyword's own value is rewritten; instance values and
    property names in the message are left as they are.
    """
    if error.validator != "type":
        return error.message
    expected = error.validator_value if isinstance(error.validator_value, list) else [error.validator_value]
    names = ", ".join(repr(TYPE_NAMES.get(t, t)) for t in expected)
    return f"{error.instance!r} is not of type {names}"


def _nullable_to_type(node):
    """Rewrite OpenAPI 3.0 ``nullable: true`` into plain JSON Schema."""
    if isinstance(node, list):
        return [_nullable_to_type(item) for item in node]
    if not isinstance(node, dict):
        return node

    node = {key: _nullable_to_type(value) for key, value in node.items()}
    if node.get("nullable") is not True:
        return node
    del node["nullable"]

    if "type" not in node:
        # $ref siblings are ignored by draft 4, so null is offered as an alternative
        return {"anyOf": [node, {"type": "null"}]}
    types = node["type"] if isinstance(node["type"], list) else [node["type"]]
    if "null" not in types:
        node["type"] = types + ["null"]
    if "enum" in node and None not in node["enum"]:
        node["enum"] = node["enum"] + [None]
    return node


@lru_cache(maxsize=512)
def _cached_validator(contract: OpenApiContract, schema_key: str):
    root = dict(contract.dereference(json.loads(schema_key)))
    # nested "#/components/..." refs resolve against the root resource
    root.setdefault("components", contract.components)
    if contract.schema_dialect == "3.1":
        return Draft202012Validator(root)
    return Draft4Validator(_nullable_to_type(root))


def _validator_for(contract: OpenApiContract, schema: dict):
    """One validator per (contract, schema node), built on first use."""
    return _cached_validator(contract, json.dumps(schema, sort_keys=True, default=str))


def validate(contract: OpenApiContract, schema: dict, document) -> list[str]:
    """All violations of *schema* by an already decoded *document*."""
    validator = _validator_for(contract, schema)
    errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])

    messages = []
    for error in errors:
        message = fix_validation_error(error)
        if error.absolute_path:
            location = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path)
            message = f"${location}: {message}"
        messages.append(message)
    return messages


def validate_json_document(contract: OpenApiContract, schema: dict, raw: bytes) -> list[str]:
    """Decode *raw* and validate it; undecodable input is a single error."""
    try:
        document = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return [INVALID_JSON]
    return validate(contract, schema, document)

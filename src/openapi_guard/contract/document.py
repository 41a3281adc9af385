"""OpenAPI contract document.

Loads an OpenAPI 3.x document (YAML or JSON) and exposes the handful of
accessors the registry and validators need: declared paths, operations,
parameters and local ``$ref`` dereferencing.
"""

from pathlib import Path

import yaml

from openapi_guard.contract.base import ParameterSpec
from openapi_guard.contract.errors import ContractError

OPERATION_METHODS = ("GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE")

MAX_REF_DEPTH = 32


def load_contract(file_path: Path) -> "OpenApiContract":
    """Read and parse a contract file."""
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ContractError(f"cannot read contract {file_path}: {e}") from e
    return OpenApiContract.from_text(text)


class OpenApiContract:
    """A parsed OpenAPI document. Never mutated after construction."""

    def __init__(self, doc: dict):
        if not isinstance(doc, dict) or not ("openapi" in doc or "swagger" in doc):
            raise ContractError("document is not an OpenAPI contract")
        if not isinstance(doc.get("paths"), dict):
            raise ContractError("contract declares no paths")
        self.doc = doc

    @classmethod
    def from_text(cls, text: str) -> "OpenApiContract":
        # JSON is a subset of YAML, one parser covers both
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ContractError(f"contract is not valid YAML/JSON: {e}") from e
        return cls(doc)

    @property
    def version(self) -> str:
        return str(self.doc.get("openapi") or self.doc.get("swagger"))

    @property
    def schema_dialect(self) -> str:
        """'3.1' for JSON Schema 2020-12 contracts, '3.0' otherwise."""
        return "3.1" if self.version.startswith("3.1") else "3.0"

    @property
    def components(self) -> dict:
        return self.doc.get("components") or {}

    def list_declared_path_templates(self) -> list[str]:
        return list(self.doc["paths"].keys())

    def path_item(self, template: str) -> dict | None:
        item = self.doc["paths"].get(template)
        if item is None:
            return None
        return self.dereference(item)

    def operation_for(self, template: str, method: str) -> dict | None:
        item = self.path_item(template)
        if item is None or method.upper() not in OPERATION_METHODS:
            return None
        operation = item.get(method.lower())
        return None if operation is None else self.dereference(operation)

    def parameters_for(self, template: str, method: str) -> list[ParameterSpec]:
        """Path-item parameters overlaid with the operation's own ones."""
        item = self.path_item(template) or {}
        operation = self.operation_for(template, method) or {}

        merged: dict[tuple[str, str], dict] = {}
        for raw in list(item.get("parameters", [])) + list(operation.get("parameters", [])):
            p = self.dereference(raw)
            merged[(p["name"], p.get("in", "query"))] = p

        return [
            ParameterSpec(
                name=p["name"],
                location=p.get("in", "query"),
                required=p.get("required", False),
                allow_empty_value=p.get("allowEmptyValue", False),
                param_schema=p.get("schema"),
            )
            for p in merged.values()
        ]

    def dereference(self, node):
        """Follow local ``$ref`` pointers until a concrete node is reached."""
        seen = 0
        while isinstance(node, dict) and "$ref" in node:
            seen += 1
            if seen > MAX_REF_DEPTH:
                raise ContractError(f"$ref cycle at {node['$ref']}")
            node = self._resolve_pointer(node["$ref"])
        return node

    def _resolve_pointer(self, ref: str):
        if not isinstance(ref, str) or not ref.startswith("#/"):
            raise ContractError(f"only local references are supported: {ref!r}")

        target = self.doc
        for token in ref[2:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if not isinstance(target, dict) or token not in target:
                raise ContractError(f"unresolvable reference {ref}")
            target = target[token]
        return target

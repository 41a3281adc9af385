"""Contract registry: the parsed contract plus its path template index."""

import logging
from dataclasses import dataclass

from openapi_guard.contract.base import ResolvedOperation
from openapi_guard.contract.document import OpenApiContract
from openapi_guard.contract.paths import PathTemplateIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotFound:
    """Why an operation could not be resolved: unknown 'path' or 'method'."""

    reason: str
    path: str
    method: str

    def describe(self) -> str:
        if self.reason == "path":
            return f"no such path: {self.path}"
        return "no such method for that path"


class ContractRegistry:
    """Read-only handle shared by every validated exchange."""

    def __init__(self, contract: OpenApiContract, path_index: PathTemplateIndex):
        self.contract = contract
        self.path_index = path_index

    @classmethod
    def build(cls, contract: OpenApiContract) -> "ContractRegistry":
        templates = contract.list_declared_path_templates()
        index = PathTemplateIndex.build(templates)
        logger.info("contract registry built with %d path templates", len(templates))
        return cls(contract, index)

    def lookup_template(self, path: str) -> str | None:
        return self.path_index.lookup(path)

    def resolve_operation(self, path: str, method: str) -> ResolvedOperation | NotFound:
        method = method.upper()
        template = self.path_index.lookup(path)
        if template is None:
            return NotFound("path", path, method)

        operation = self.contract.operation_for(template, method)
        if operation is None:
            # pre-flight requests are answered by the server, not the contract
            if method == "OPTIONS":
                return ResolvedOperation(template_path=template, method=method, declared=False)
            return NotFound("method", path, method)

        request_body = operation.get("requestBody")
        if request_body is not None:
            request_body = self.contract.dereference(request_body).get("content") or {}

        responses = {
            str(status): self.contract.dereference(response)
            for status, response in (operation.get("responses") or {}).items()
        }

        return ResolvedOperation(
            template_path=template,
            method=method,
            parameters=self.contract.parameters_for(template, method),
            request_body=request_body,
            responses=responses,
        )

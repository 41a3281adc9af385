"""ASGI middleware checking live traffic against an OpenAPI contract.

Validation is advisory: the wrapped application always receives the full
request body and the client always receives the application's response,
byte for byte. Violations only go to the reporter.

    app = Starlette(routes=...)
    app.add_middleware(ValidationMiddleware, registry=registry, path_prefix=b"/api")
"""

import logging
from typing import Callable

from starlette.types import ASGIApp, Receive, Scope, Send

from openapi_guard.config import Settings, get_settings
from openapi_guard.contract.document import OpenApiContract, load_contract
from openapi_guard.contract.errors import ContractError
from openapi_guard.contract.registry import ContractRegistry
from openapi_guard.report import Reporter, log_violation
from openapi_guard.validation.body import ResponseTee, capture_request_body
from openapi_guard.validation.exchange import Exchange
from openapi_guard.validation.verdict import HttpRequest

logger = logging.getLogger(__name__)


class ValidationMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        registry: ContractRegistry,
        path_prefix: bytes = b"",
        reporter: Reporter | None = None,
    ):
        self.app = app
        self.registry = registry
        self.path_prefix = path_prefix
        self.reporter = reporter or log_violation

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = HttpRequest.from_scope(scope)
        exchange = Exchange(self.registry, self.path_prefix, request, self.reporter)

        body = await capture_request_body(receive)
        exchange.judge_request(body)

        tee = ResponseTee(send, on_start=exchange.settle_request, on_complete=exchange.judge_response)
        try:
            await self.app(scope, body.replay(receive), tee)
        finally:
            # the application may fail or finish without ever responding
            exchange.settle_request(tee.response)


def mk_validator(
    reporter: Reporter,
    path_prefix: bytes,
    contract: OpenApiContract,
) -> Callable[[ASGIApp], ValidationMiddleware]:
    """Build the registry once and return a decorator wrapping ASGI apps."""
    registry = ContractRegistry.build(contract)

    def wrap(app: ASGIApp) -> ValidationMiddleware:
        return ValidationMiddleware(app, registry, path_prefix=path_prefix, reporter=reporter)

    return wrap


def from_settings(app: ASGIApp, settings: Settings | None = None) -> ValidationMiddleware:
    """Wrap *app* using the contract and prefix from the environment."""
    settings = settings or get_settings()
    if settings.CONTRACT_PATH is None:
        raise ContractError("OPENAPI_GUARD_CONTRACT_PATH is not set")

    registry = ContractRegistry.build(load_contract(settings.CONTRACT_PATH))
    logger.info("validating traffic against %s", settings.CONTRACT_PATH)
    return ValidationMiddleware(app, registry, path_prefix=settings.path_prefix_bytes)

"""Violation reporting.

A reporter is any callable taking ``(request, response, violation)``;
``response`` is None for request-phase violations. Exceptions raised by a
reporter are not caught: they abort the exchange.
"""

import logging
from typing import Callable

from openapi_guard.validation.verdict import HttpRequest, HttpResponse, Violation

logger = logging.getLogger(__name__)

Reporter = Callable[[HttpRequest, HttpResponse | None, Violation], None]


def log_violation(request: HttpRequest, response: HttpResponse | None, violation: Violation) -> None:
    """Default reporter: one warning per violation."""
    logger.warning(
        "%s %s: %s",
        request.method,
        request.raw_path.decode("latin-1"),
        violation,
        extra={
            "method": request.method,
            "path": request.raw_path.decode("latin-1"),
            "status": response.status if response is not None else None,
            "provenance": violation.provenance.value,
        },
    )


class CollectingReporter:
    """Keeps every report in memory, in arrival order."""

    def __init__(self):
        self.reports: list[tuple[HttpRequest, HttpResponse | None, Violation]] = []

    def __call__(self, request: HttpRequest, response: HttpResponse | None, violation: Violation) -> None:
        self.reports.append((request, response, violation))

    @property
    def violations(self) -> list[Violation]:
        return [violation for _, _, violation in self.reports]

"""Per-exchange validation state.

A request violation is held back until the response status is known: if the
application rejected the request with the status that kind of violation
calls for (400, 404, 405, 406), the application behaved as the contract
expects and nothing is reported.
"""

import logging

from openapi_guard.contract.registry import ContractRegistry
from openapi_guard.validation.body import CapturedBody
from openapi_guard.validation.request import RequestVerdict, validate_request
from openapi_guard.validation.response import validate_response
from openapi_guard.validation.verdict import HttpRequest, HttpResponse, Violation

logger = logging.getLogger(__name__)


class Exchange:
    def __init__(self, registry: ContractRegistry, path_prefix: bytes, request: HttpRequest, reporter):
        self.registry = registry
        self.path_prefix = path_prefix
        self.request = request
        self.reporter = reporter
        self.request_verdict: RequestVerdict | None = None
        self._request_settled = False
        self._response_judged = False

    def judge_request(self, body: CapturedBody) -> Violation | None:
        self.request_verdict = validate_request(self.registry, self.path_prefix, self.request, body)
        return self.request_verdict.violation

    def _rejected_as_expected(self, response: HttpResponse | None) -> bool:
        violation = self.request_verdict.violation if self.request_verdict else None
        return violation is not None and response is not None and response.status == violation.expected_status

    def settle_request(self, response: HttpResponse | None) -> None:
        """Report the request violation, if any, once per exchange."""
        if self._request_settled or self.request_verdict is None:
            return
        self._request_settled = True

        violation = self.request_verdict.violation
        if violation is None:
            return
        if self._rejected_as_expected(response):
            logger.debug("request violation answered with %s: %s", response.status, violation)
            return
        self.reporter(self.request, None, violation)

    def judge_response(self, response: HttpResponse, body: CapturedBody) -> Violation | None:
        if self._response_judged:
            return None
        self._response_judged = True
        self.settle_request(response)

        operation = None
        if self.request_verdict is not None:
            # unresolved operations were already dealt with in the request phase
            if self.request_verdict.operation is None or self._rejected_as_expected(response):
                return None
            operation = self.request_verdict.operation

        violation = validate_response(
            self.registry, self.path_prefix, self.request, response, body, operation=operation
        )
        if violation is not None:
            self.reporter(self.request, response, violation)
        return violation

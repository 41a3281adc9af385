"""CLI entry point for openapi-guard."""

from pathlib import Path
from urllib.parse import urlsplit

import click
import requests

from openapi_guard.config import get_settings
from openapi_guard.contract.document import OPERATION_METHODS, OpenApiContract, load_contract
from openapi_guard.contract.errors import ContractError
from openapi_guard.contract.registry import ContractRegistry, NotFound
from openapi_guard.logs import configure_logging
from openapi_guard.report import CollectingReporter
from openapi_guard.validation.body import CapturedBody
from openapi_guard.validation.exchange import Exchange
from openapi_guard.validation.verdict import HttpRequest, HttpResponse

PROBE_TIMEOUT = 30


def _load_registry(contract_path: Path) -> tuple[OpenApiContract, ContractRegistry]:
    """Load a contract and build its registry, turning failures into CLI errors."""
    try:
        contract = load_contract(contract_path)
        return contract, ContractRegistry.build(contract)
    except ContractError as e:
        raise click.ClickException(str(e)) from e


def _parse_headers(headers: tuple[str, ...]) -> dict[str, str]:
    parsed = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {header!r}", param_hint="--header")
        parsed[name.strip()] = value.strip()
    return parsed


def _encode_headers(headers) -> list[tuple[bytes, bytes]]:
    return [(k.lower().encode("latin-1"), str(v).encode("latin-1")) for k, v in headers.items()]


@click.group()
@click.option("--log-level", default=None, help="Logging level, overrides OPENAPI_GUARD_LOG_LEVEL.")
def main(log_level: str | None):
    """Check HTTP traffic against an OpenAPI contract."""
    configure_logging((log_level or get_settings().LOG_LEVEL).upper())


@main.command()
@click.argument("contract_path", type=click.Path(exists=True, path_type=Path))
def check(contract_path: Path):
    """Load a contract and build its path index."""
    contract, registry = _load_registry(contract_path)

    templates = contract.list_declared_path_templates()
    operations = sum(
        1
        for template in templates
        for method in OPERATION_METHODS
        if contract.operation_for(template, method) is not None
    )
    click.echo(f"Contract {contract_path} (OpenAPI {contract.version}) is usable.")
    click.echo(f"Found {len(templates)} path templates, {operations} operations.")


@main.command()
@click.argument("contract_path", type=click.Path(exists=True, path_type=Path))
@click.argument("paths", nargs=-1, required=True)
@click.option("--method", default=None, help="Also check that this method is declared.")
def match(contract_path: Path, paths: tuple[str, ...], method: str | None):
    """Show which declared template each concrete path maps to."""
    _, registry = _load_registry(contract_path)

    unmatched = 0
    for path in paths:
        if method is None:
            template = registry.lookup_template(path)
            if template is None:
                unmatched += 1
            click.echo(f"{path} -> {template or '(no match)'}")
            continue

        resolved = registry.resolve_operation(path, method)
        if isinstance(resolved, NotFound):
            unmatched += 1
            click.echo(f"{method.upper()} {path} -> {resolved.describe()}")
        else:
            click.echo(f"{method.upper()} {path} -> {resolved.method} {resolved.template_path}")

    if unmatched:
        raise click.exceptions.Exit(1)


@main.command()
@click.argument("contract_path", type=click.Path(exists=True, path_type=Path))
@click.argument("base_url")
@click.argument("method")
@click.argument("target")
@click.option("--data", default=None, help="Request body to send.")
@click.option("-H", "--header", "headers", multiple=True, help="Request header as 'Name: value', repeatable.")
@click.option("--prefix", default=None, help="Path prefix to strip; defaults to the path of BASE_URL.")
def probe(
    contract_path: Path,
    base_url: str,
    method: str,
    target: str,
    data: str | None,
    headers: tuple[str, ...],
    prefix: str | None,
):
    """Send one request to a live server and validate both request and response."""
    _, registry = _load_registry(contract_path)
    if prefix is None:
        prefix = urlsplit(base_url).path.rstrip("/")

    body = CapturedBody((data or "").encode("utf-8"))
    url = base_url.rstrip("/") + "/" + target.lstrip("/")
    click.echo(f"{method.upper()} {url}")
    try:
        resp = requests.request(
            method.upper(),
            url,
            data=body.data if data is not None else None,
            headers=_parse_headers(headers),
            stream=True,
            timeout=PROBE_TIMEOUT,
        )
        response_body = CapturedBody.from_chunks(resp.iter_content(chunk_size=8192))
    except requests.RequestException as e:
        raise click.ClickException(f"request failed: {e}") from e

    sent = urlsplit(resp.request.url)
    request = HttpRequest(
        method=resp.request.method,
        raw_path=(sent.path or "/").encode("utf-8"),
        query_string=sent.query.encode("utf-8"),
        headers=_encode_headers(resp.request.headers),
    )
    response = HttpResponse(status=resp.status_code, headers=_encode_headers(resp.headers))
    click.echo(f"  -> {resp.status_code} ({len(response_body)} bytes)")

    reporter = CollectingReporter()
    exchange = Exchange(registry, prefix.encode("utf-8"), request, reporter)
    exchange.judge_request(body)
    exchange.judge_response(response, response_body)

    if not reporter.violations:
        click.echo("No violations.")
        return
    for violation in reporter.violations:
        click.echo(f"  {violation}")
    raise click.exceptions.Exit(1)

"""authhmac CLI - build canonical strings, sign and verify requests."""

import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from authhmac.errors import UnknownCredential
from authhmac.logging import setup_logging
from authhmac.settings import Settings
from authhmac.signer import AuthHMAC

console = Console()


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


def _build_request(method: str, path: str, headers: tuple[str, ...]) -> dict[str, Any]:
    return {
        "method": method.upper(),
        "path": path,
        "request_headers": _parse_headers(headers),
    }


def request_options(f: Any) -> Any:
    """Shared options describing the request to canonicalize."""
    f = click.option(
        "--header",
        "-H",
        "headers",
        multiple=True,
        help="Request header as 'Name: value' (repeatable)",
    )(f)
    f = click.option("--path", "-p", required=True, help="Request path (query is ignored)")(f)
    f = click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")(f)
    return f


@click.group()
@click.option("--service-id", default=None, help="Service ID used in the Authorization header")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, service_id: str | None, verbose: bool) -> None:
    """authhmac - HMAC authentication for HTTP requests."""
    settings = Settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_json)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["service_id"] = service_id or settings.service_id


@cli.command("canonical")
@request_options
@click.pass_context
def canonical(ctx: click.Context, method: str, path: str, headers: tuple[str, ...]) -> None:
    """Print the canonical string for a request."""
    request = _build_request(method, path, headers)
    signer = AuthHMAC(service_id=ctx.obj["service_id"])
    click.echo(signer.canonical_string(request))


@cli.command("sign")
@request_options
@click.option("--access-key-id", "-k", required=True, help="Access key id to sign with")
@click.option("--secret", "-s", default=None, help="Shared secret (defaults to configured credentials)")
@click.option("--table", "as_table", is_flag=True, help="Render headers as a table")
@click.pass_context
def sign(
    ctx: click.Context,
    method: str,
    path: str,
    headers: tuple[str, ...],
    access_key_id: str,
    secret: str | None,
    as_table: bool,
) -> None:
    """Sign a request and print the Date and Authorization headers to send."""
    settings: Settings = ctx.obj["settings"]
    credentials = {access_key_id: secret} if secret is not None else settings.credentials
    signer = AuthHMAC(credentials, service_id=ctx.obj["service_id"])

    request = _build_request(method, path, headers)
    try:
        signer.sign(request, access_key_id)
    except UnknownCredential as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    signed = request["request_headers"]
    output = {"Date": signed["Date"], "Authorization": signed["Authorization"]}

    if as_table:
        table = Table(title="Signed headers")
        table.add_column("Header", style="cyan")
        table.add_column("Value")
        for name, value in output.items():
            table.add_row(name, value)
        console.print(table)
        return

    for name, value in output.items():
        click.echo(f"{name}: {value}")


@cli.command("verify")
@request_options
@click.option("--access-key-id", "-k", default=None, help="Verify against a single access key id")
@click.option("--secret", "-s", default=None, help="Secret for --access-key-id")
@click.pass_context
def verify(
    ctx: click.Context,
    method: str,
    path: str,
    headers: tuple[str, ...],
    access_key_id: str | None,
    secret: str | None,
) -> None:
    """Verify the Authorization header of a request. Exits 1 on failure."""
    settings: Settings = ctx.obj["settings"]
    if (access_key_id is None) != (secret is None):
        raise click.UsageError("--access-key-id and --secret must be given together")

    credentials = {access_key_id: secret} if access_key_id is not None else settings.credentials
    signer = AuthHMAC(credentials, service_id=ctx.obj["service_id"])

    request = _build_request(method, path, headers)
    if signer.authorization_header(request) is None:
        console.print("[red]No Authorization header given[/red]")
        sys.exit(1)

    if not signer.authenticated(request):
        console.print("[red]Not authenticated[/red]")
        sys.exit(1)

    console.print(f"[green]Authenticated[/green] access key id: {signer.access_key_id(request)}")


def main() -> None:
    """Entry point for the authhmac CLI."""
    cli()


if __name__ == "__main__":
    main()

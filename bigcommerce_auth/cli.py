"""CLI for verifying and minting BigCommerce app tokens."""

import asyncio
import functools
import json
import logging
import sys

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bigcommerce_auth.auth.jwt import DEFAULT_CHANNEL_ID
from bigcommerce_auth.client import BigCommerce
from bigcommerce_auth.config import BigCommerceConfig
from bigcommerce_auth.errors import BigCommerceError


def _claims_table(title: str, claims: dict) -> Table:
    table = Table(title=title, show_header=True, header_style="bold blue")
    table.add_column("Claim")
    table.add_column("Value")
    for key, value in claims.items():
        if not isinstance(value, str):
            value = json.dumps(value)
        table.add_row(key, escape(value))
    return table


def _print_token(console: Console, title: str, token: str) -> None:
    console.print(f"[bold blue]{title}[/bold blue]")
    # Tokens are printed unwrapped so they can be copied
    console.print(token, soft_wrap=True, highlight=False)


def _reports_errors(func):
    """Print library errors in red and exit 1 instead of raising."""

    @functools.wraps(func)
    def wrapper(console: Console, *args, **kwargs):
        try:
            return func(console, *args, **kwargs)
        except BigCommerceError as e:
            console.print(f"[red]Error:[/red] {escape(e.message)} [dim]({e.code})[/dim]")
            sys.exit(1)

    return wrapper


def _client() -> BigCommerce:
    return BigCommerce(BigCommerceConfig.from_env())


@click.group()
@click.option(
    "--log-level",
    default="warning",
    envvar="BIGCOMMERCE_LOG_LEVEL",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(ctx, log_level):
    """Verify callback payloads and issue BigCommerce app tokens."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.obj = Console()


@cli.command("verify-payload")
@click.argument("signed_payload")
@click.pass_obj
@_reports_errors
def verify_payload(console, signed_payload):
    """Verify a legacy signed_payload."""
    data = _client().verify_legacy_payload(signed_payload)
    console.print("[green]Signature is valid[/green]")
    console.print(_claims_table("Signed payload", data))


@cli.command("verify-jwt")
@click.argument("token")
@click.pass_obj
@_reports_errors
def verify_jwt(console, token):
    """Verify a signed_payload_jwt."""
    claims = _client().verify_jwt(token)
    console.print("[green]Token is valid[/green]")
    console.print(_claims_table("Token claims", claims))


@cli.command("app-token")
@click.argument("user")
@click.argument("context")
@click.option("--url", default="/", help="App URL to load")
@click.pass_obj
@_reports_errors
def app_token(console, user, context, url):
    """Issue an app context JWT.

    USER is the user as JSON, e.g. '{"id": 1, "email": "a@b.com"}'.
    CONTEXT is the store context, e.g. stores/abc123.
    """
    try:
        user = json.loads(user)
    except json.JSONDecodeError:
        raise click.BadParameter("must be valid JSON", param_hint="USER")

    token = _client().issue_app_context_token(user, context, url)
    _print_token(console, "App context token", token)


@cli.command("login-token")
@click.argument("customer_id", type=int)
@click.option("--channel", default=DEFAULT_CHANNEL_ID, type=int, help="Channel id")
@click.option("--redirect-url", default=None, help="Where to send the customer after login")
@click.option("--request-ip", default=None, help="IP address the login is expected from")
@click.option(
    "--store-time",
    is_flag=True,
    help="Use the store's clock for iat (requires access token and store hash)",
)
@click.pass_obj
@_reports_errors
def login_token(console, customer_id, channel, redirect_url, request_ip, store_time):
    """Issue a customer login JWT."""
    client = _client()
    if store_time:
        token = asyncio.run(
            client.issue_customer_login_token_at_store_time(
                customer_id,
                channel_id=channel,
                redirect_url=redirect_url,
                request_ip=request_ip,
            )
        )
    else:
        token = client.issue_customer_login_token(
            customer_id,
            channel_id=channel,
            redirect_url=redirect_url,
            request_ip=request_ip,
        )
    _print_token(console, "Customer login token", token)


@cli.command("time")
@click.pass_obj
@_reports_errors
def show_time(console):
    """Show the store's current time."""
    now = asyncio.run(_client().get_time())
    console.print(f"Store time: [bold]{now}[/bold]")


def main() -> None:
    """Run the bigcommerce-auth CLI."""
    load_dotenv()
    cli(prog_name="bigcommerce-auth")


if __name__ == "__main__":
    main()

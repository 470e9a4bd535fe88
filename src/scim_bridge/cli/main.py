import os
import sys
from contextlib import closing
from typing import Tuple
import click
from rich.console import Console
from rich.table import Table
from scim_bridge import __version__
from scim_bridge.client import ScimClient, parse_error, parse_user
from scim_bridge.config import load_provider_config, settings
from scim_bridge.exceptions import ScimBridgeError
from scim_bridge.transport import ScimSession
from scim_bridge.utils import setup_logging

console = Console()


def build_client() -> ScimClient:
    return ScimClient(ScimSession(load_provider_config()))


def _client_or_exit() -> ScimClient:
    try:
        return build_client()
    except ScimBridgeError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        console.print("[yellow]Set SCIM_BRIDGE_SCIMURL, SCIM_BRIDGE_LOGINUSERNAME and SCIM_BRIDGE_LOGINPASSWORD (or use a .env file)[/yellow]")
        sys.exit(1)


def _fail(response) -> None:
    error = parse_error(response)
    console.print(f"[red]✗ HTTP {response.status_code}: {error.detail or 'no detail'}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="scim-bridge")
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False), default=None, help='Logging level (defaults to LOG_LEVEL)')
def cli(log_level):
    """scim-bridge - provision users into a remote SCIM 2.0 directory"""
    setup_logging(log_level)


@cli.command()
@click.option('--show-values', is_flag=True, help='Show all connection settings')
def config(show_values: bool):
    """Display the SCIM connection configuration"""
    env_file = os.path.join(os.getcwd(), '.env')
    if os.path.exists(env_file):
        console.print(f"[green]✓[/green] Environment file: {env_file}")
    else:
        console.print(f"[yellow]⚠[/yellow]  No .env file found at: {env_file}")

    try:
        provider_config = load_provider_config()
    except ScimBridgeError as e:
        console.print(f"[red]Error loading configuration: {e.detail}[/red]")
        sys.exit(1)

    table = Table(title=f"{settings.app_name} - SCIM Connection")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("scimurl", provider_config.scimurl)
    table.add_row("loginusername", provider_config.loginusername)
    table.add_row("loginpassword", "***")

    if show_values:
        table.add_row("request_timeout", str(provider_config.request_timeout))
        table.add_row("verify_tls", str(provider_config.verify_tls))

    console.print(table)


@cli.group()
def user():
    """Manage users in the remote directory"""
    pass


@user.command()
@click.argument('username')
def create(username: str):
    """Create USERNAME in the remote directory."""
    client = _client_or_exit()
    try:
        with closing(client.create_user(username)) as response:
            if response.status_code != 201:
                _fail(response)
            created = parse_user(response)
        console.print(f"[green]✓ Created user '{created.user_name}'[/green]")
        console.print(f"  SCIM id: [cyan]{created.id}[/cyan]")
    except ScimBridgeError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        sys.exit(1)
    finally:
        client.close()


@user.command()
@click.argument('remote_id')
def get(remote_id: str):
    """Show the user with SCIM id REMOTE_ID."""
    client = _client_or_exit()
    try:
        found = client.get_user_by_id(remote_id)
    except ScimBridgeError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        sys.exit(1)
    finally:
        client.close()

    table = Table(title=f"User {found.id}")
    table.add_column("Attribute", style="cyan")
    table.add_column("Value")

    table.add_row("userName", found.user_name)
    table.add_row("active", str(found.active))
    table.add_row("givenName", (found.name.given_name if found.name else None) or "")
    table.add_row("familyName", (found.name.family_name if found.name else None) or "")
    table.add_row("email", found.primary_email or "")

    console.print(table)


@user.command()
@click.argument('remote_id')
@click.argument('attribute')
@click.argument('values', nargs=-1, required=True)
def update(remote_id: str, attribute: str, values: Tuple[str, ...]):
    """Set ATTRIBUTE (firstName, lastName, email, userName) on REMOTE_ID."""
    client = _client_or_exit()
    try:
        with closing(client.update_user(remote_id, attribute, list(values))) as response:
            if response.status_code != 200:
                _fail(response)
        console.print(f"[green]✓ Updated {attribute} for {remote_id}[/green]")
    except ScimBridgeError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        sys.exit(1)
    finally:
        client.close()


@user.command()
@click.argument('remote_id')
def delete(remote_id: str):
    """Delete the user with SCIM id REMOTE_ID."""
    client = _client_or_exit()
    try:
        with closing(client.delete_user(remote_id)) as response:
            if response.status_code != 204:
                _fail(response)
        console.print(f"[green]✓ Deleted {remote_id}[/green]")
    except ScimBridgeError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        sys.exit(1)
    finally:
        client.close()


if __name__ == '__main__':
    cli()

"""libreg CLI — the command line entry point for the library registry."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Callable

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from libregistry import __version__
from libregistry.config import load_config
from libregistry.errors import RegistryError
from libregistry.log import configure_logging
from libregistry.registry.service import LibraryRegistry, open_registry

console = Console()


class CliContext:
    """The registry and caller identity shared by every command."""

    def __init__(self, registry: LibraryRegistry, caller: str) -> None:
        self.registry = registry
        self.caller = caller


pass_ctx = click.make_pass_decorator(CliContext)


def handle_errors(fn: Callable) -> Callable:
    """Report registry errors in red and exit with status 1."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except RegistryError as exc:
            console.print(f"[red]Error[/] [{exc.code}] {exc.message}")
            raise click.exceptions.Exit(1) from exc

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--state-dir", default=None, help="Registry state directory")
@click.option("--as", "caller", default=None, help="Caller address (default: configured operator)")
@click.option("--verbose", "-v", is_flag=True, help="Log registry activity")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, state_dir: str | None,
         caller: str | None, verbose: bool):
    """libreg — a registry of libraries with access control and licensing.

    Register libraries, publish immutable versions, and gate access through
    private allow-lists or purchasable licenses.
    """
    try:
        config = load_config(config_path)
    except RegistryError as exc:
        raise click.ClickException(exc.message) from exc
    if state_dir:
        config.state_dir = Path(state_dir)
    configure_logging("INFO" if verbose else config.log_level)

    ctx.obj = CliContext(open_registry(config), caller or config.operator)


# ── Lifecycle ────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--description", "-d", default="", help="Library description")
@click.option("--tag", "-t", multiple=True, help="Tag (repeatable)")
@click.option("--private", "is_private", is_flag=True, help="Restrict access to authorized addresses")
@click.option("--language", "-l", default="", help="Implementation language")
@pass_ctx
@handle_errors
def register(obj: CliContext, name: str, description: str, tag: tuple,
             is_private: bool, language: str):
    """Register a new library owned by the caller."""
    obj.registry.register_library(
        name, description, list(tag), is_private, language, caller=obj.caller
    )
    visibility = "[magenta]private[/]" if is_private else "[green]public[/]"
    console.print(f"  Registered: [cyan]{name}[/] ({visibility}, owner {obj.caller})")


@main.command()
@click.argument("name")
@pass_ctx
@handle_errors
def delete(obj: CliContext, name: str):
    """Delete a library that has no published versions."""
    obj.registry.delete_library(name, caller=obj.caller)
    console.print(f"  Deleted: [cyan]{name}[/]")


# ── Versions ─────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("version")
@click.argument("content_pointer")
@click.option("--dep", multiple=True, help="Dependency specifier (repeatable, stored verbatim)")
@pass_ctx
@handle_errors
def publish(obj: CliContext, name: str, version: str, content_pointer: str, dep: tuple):
    """Publish VERSION of NAME pointing at CONTENT_POINTER."""
    obj.registry.publish_version(name, version, content_pointer, list(dep), caller=obj.caller)
    console.print(f"  Published: [cyan]{name}@{version}[/] -> {content_pointer}")


@main.command()
@click.argument("name")
@click.argument("version")
@pass_ctx
@handle_errors
def deprecate(obj: CliContext, name: str, version: str):
    """Mark a published version as deprecated."""
    obj.registry.deprecate_version(name, version, caller=obj.caller)
    console.print(f"  Deprecated: [cyan]{name}@{version}[/]")


# ── Reads ────────────────────────────────────────────────────────────


@main.command(name="list")
@pass_ctx
def list_libraries(obj: CliContext):
    """List all registered libraries."""
    registry = obj.registry
    names = registry.get_all_library_names()

    if not names:
        console.print("[yellow]Registry is empty.[/]")
        return

    table = Table(title=f"Registry ({len(names)} libraries)")
    table.add_column("Name", style="cyan")
    table.add_column("Owner")
    table.add_column("Access", justify="center")
    table.add_column("Versions", justify="right")
    table.add_column("Description")

    for name in names:
        info = registry.get_library_info(name)
        if info.is_private:
            access = "[magenta]private[/]"
        elif info.license_required:
            access = f"[yellow]licensed ({info.license_fee})[/]"
        else:
            access = "[green]open[/]"
        table.add_row(
            name,
            info.owner,
            access,
            str(len(registry.get_version_numbers(name))),
            info.description[:50],
        )

    console.print(table)


@main.command()
@click.argument("name")
@pass_ctx
@handle_errors
def info(obj: CliContext, name: str):
    """Show a library's details."""
    lib = obj.registry.get_library_info(name)
    versions = obj.registry.get_version_numbers(name)
    body = "\n".join([
        f"Owner:       {lib.owner}",
        f"Description: {lib.description}",
        f"Tags:        {', '.join(lib.tags) or '-'}",
        f"Language:    {lib.language or '-'}",
        f"Private:     {'yes' if lib.is_private else 'no'}",
        f"License:     fee={lib.license_fee} required={'yes' if lib.license_required else 'no'}",
        f"Versions:    {', '.join(versions) or '-'}",
    ])
    console.print(Panel(body, title=name))


@main.command()
@click.argument("name")
@pass_ctx
@handle_errors
def versions(obj: CliContext, name: str):
    """List the versions of NAME in publish order."""
    numbers = obj.registry.get_version_numbers(name)
    if not numbers:
        console.print("[yellow]No versions published.[/]")
        return

    table = Table(title=f"{name} ({len(numbers)} versions)")
    table.add_column("Version", style="cyan")
    table.add_column("Content")
    table.add_column("Publisher")
    table.add_column("Deprecated", justify="center")
    for number in numbers:
        v = obj.registry.get_version_info(name, number)
        table.add_row(
            number, v.content_pointer, v.publisher, "[red]Y[/]" if v.deprecated else ""
        )
    console.print(table)


@main.command(name="version-info")
@click.argument("name")
@click.argument("version")
@pass_ctx
@handle_errors
def version_info(obj: CliContext, name: str, version: str):
    """Show one version's record."""
    v = obj.registry.get_version_info(name, version)
    body = "\n".join([
        f"Content:      {v.content_pointer}",
        f"Publisher:    {v.publisher}",
        f"Timestamp:    {v.timestamp}",
        f"Deprecated:   {'yes' if v.deprecated else 'no'}",
        f"Dependencies: {', '.join(v.dependencies) or '-'}",
    ])
    console.print(Panel(body, title=f"{name}@{version}"))


@main.command()
@click.argument("name")
@click.argument("address")
@pass_ctx
@handle_errors
def access(obj: CliContext, name: str, address: str):
    """Check whether ADDRESS may access NAME."""
    if obj.registry.has_access(name, address):
        console.print(f"  [green]GRANTED[/] {address} -> {name}")
    else:
        console.print(f"  [red]DENIED[/] {address} -> {name}")


# ── Authorization ────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("address")
@pass_ctx
@handle_errors
def authorize(obj: CliContext, name: str, address: str):
    """Grant ADDRESS access to private library NAME."""
    obj.registry.authorize_user(name, address, caller=obj.caller)
    console.print(f"  Authorized: {address} for [cyan]{name}[/]")


@main.command()
@click.argument("name")
@click.argument("address")
@pass_ctx
@handle_errors
def revoke(obj: CliContext, name: str, address: str):
    """Remove ADDRESS from the allow-list of private library NAME."""
    obj.registry.revoke_authorization(name, address, caller=obj.caller)
    console.print(f"  Revoked: {address} for [cyan]{name}[/]")


# ── Licensing ────────────────────────────────────────────────────────


@main.group(name="license")
def license_group():
    """Configure, buy and check library licenses."""


@license_group.command(name="set")
@click.argument("name")
@click.argument("fee", type=int)
@click.option("--required/--optional", default=True, help="Whether access needs a license")
@pass_ctx
@handle_errors
def set_license(obj: CliContext, name: str, fee: int, required: bool):
    """Set the license FEE for NAME."""
    obj.registry.set_library_license(name, fee, required, caller=obj.caller)
    state = "required" if required else "optional"
    console.print(f"  License for [cyan]{name}[/]: fee={fee} ({state})")


@license_group.command(name="buy")
@click.argument("name")
@click.argument("payment", type=int)
@pass_ctx
@handle_errors
def buy_license(obj: CliContext, name: str, payment: int):
    """Buy a license for NAME, paying PAYMENT; any excess is refunded."""
    obj.registry.purchase_library_license(name, payment, caller=obj.caller)
    fee = obj.registry.get_library_info(name).license_fee
    console.print(f"  Purchased license for [cyan]{name}[/] (fee {fee}, refunded {payment - fee})")


@license_group.command(name="check")
@click.argument("name")
@click.argument("address")
@pass_ctx
@handle_errors
def check_license(obj: CliContext, name: str, address: str):
    """Check whether ADDRESS holds a license for NAME."""
    if obj.registry.has_user_license(name, address):
        console.print(f"  [green]LICENSED[/] {address} -> {name}")
    else:
        console.print(f"  [yellow]NO LICENSE[/] {address} -> {name}")


# ── Treasury ─────────────────────────────────────────────────────────


@main.group()
def treasury():
    """Inspect and fund address balances."""


@treasury.command()
@click.argument("address")
@click.argument("amount", type=int)
@pass_ctx
@handle_errors
def fund(obj: CliContext, address: str, amount: int):
    """Credit AMOUNT to ADDRESS."""
    balance = obj.registry.treasury.deposit(address, amount)
    obj.registry.treasury.save()
    console.print(f"  Funded {address}: balance {balance}")


@treasury.command()
@click.argument("address")
@pass_ctx
def balance(obj: CliContext, address: str):
    """Show the balance of ADDRESS."""
    console.print(f"  {address}: {obj.registry.treasury.balance_of(address)}")


if __name__ == "__main__":
    main()

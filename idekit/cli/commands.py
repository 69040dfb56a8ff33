"""CLI commands for idekit."""

import json
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from idekit import __logo__, __version__

app = typer.Typer(
    name="idekit",
    help=f"{__logo__} idekit - IDE identity and account manager",
    no_args_is_help=True,
)

console = Console()

_LINE_STYLES = {
    "[OK]": "green",
    "[WARN]": "yellow",
    "[ERROR]": "red",
    "[INFO]": "cyan",
}


class _State:
    config_path: Path | None = None


_state = _State()


def _print_log_line(line: str) -> None:
    stripped = line.strip()
    style = next((s for prefix, s in _LINE_STYLES.items() if stripped.startswith(prefix)), None)
    console.print(line, style=style, markup=False, highlight=False)


def _load_config():
    from idekit.config.loader import load_config

    return load_config(_state.config_path)


def _session(config):
    from idekit.accounts.session import ActiveSession
    from idekit.platform.paths import resolve_ide_paths

    return ActiveSession(resolve_ide_paths(config), sign_up_type=config.accounts.sign_up_type)


def _account_store(config, file: Path | None = None):
    from idekit.accounts.store import AccountStore
    from idekit.platform.paths import get_accounts_file_path

    path = file.expanduser() if file else get_accounts_file_path(config)
    return AccountStore(path, session=_session(config))


def _finish(result) -> None:
    if not result.success:
        console.print(f"[red]Failed:[/red] {result.error}")
        raise typer.Exit(1)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} idekit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    config: Path | None = typer.Option(None, "--config", help="Config file path"),
    logs: bool = typer.Option(False, "--logs", help="Show runtime logs on stderr"),
):
    """idekit - IDE identity and account manager."""
    _state.config_path = config.expanduser() if config else None
    if logs:
        from idekit.utils.logging import configure_logging

        cfg = _load_config()
        configure_logging(cfg.logging.level, cfg.logging.file or None)
    else:
        logger.disable("idekit")


# ============================================================================
# Identity Commands
# ============================================================================


@app.command()
def reset():
    """Generate fresh machine identifiers and write them to every store."""
    from idekit.platform.paths import resolve_ide_paths
    from idekit.reset.orchestrator import ResetOrchestrator

    config = _load_config()
    orchestrator = ResetOrchestrator(resolve_ide_paths(config))
    _finish(orchestrator.rotate_identifiers(sink=_print_log_line))


@app.command()
def wipe(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove all local IDE data and start over with new identifiers."""
    from idekit.platform.paths import resolve_ide_paths
    from idekit.reset.orchestrator import ResetOrchestrator

    config = _load_config()
    paths = resolve_ide_paths(config)
    if not yes:
        console.print("[yellow]The following locations will be removed:[/yellow]")
        for target in paths.wipe_targets:
            console.print(f"  - {target}", markup=False)
        if not typer.confirm("Continue?"):
            raise typer.Exit(1)
    _finish(ResetOrchestrator(paths).full_wipe(sink=_print_log_line))


@app.command()
def info():
    """Show the active login and identifiers."""
    config = _load_config()
    data = _session(config).info()
    table = Table(title="Active Account")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@app.command()
def paths():
    """Show resolved store locations."""
    from idekit.platform.paths import get_accounts_file_path, resolve_ide_paths

    config = _load_config()
    data = resolve_ide_paths(config).to_dict()
    data["accountsFile"] = str(get_accounts_file_path(config))
    console.print_json(json.dumps(data))


@app.command()
def subscription(
    token: str = typer.Option("", "--token", help="Access token (default: active login)"),
):
    """Look up the subscription of the active (or given) access token."""
    from idekit.accounts.subscription import SubscriptionClient

    config = _load_config()
    client = SubscriptionClient(
        profile_url=config.subscription.profile_url,
        timeout_seconds=config.subscription.timeout_seconds,
    )
    result = client.fetch(token or _session(config).info().get("token"))
    if not result.success:
        console.print("[red]Subscription lookup failed[/red]")
        raise typer.Exit(1)
    console.print(f"subscription={result.subscription_type or '-'}")
    console.print(f"days_remaining={'-' if result.days_remaining is None else result.days_remaining}")


# ============================================================================
# Auth Commands
# ============================================================================


auth_app = typer.Typer(help="Manage the active login")
app.add_typer(auth_app, name="auth")


@auth_app.command("update")
def auth_update(
    email: str = typer.Option("", "--email", help="Account email"),
    access_token: str = typer.Option("", "--access-token", help="Access token"),
    refresh_token: str = typer.Option("", "--refresh-token", help="Refresh token"),
):
    """Write credentials directly into the IDE's stores."""
    config = _load_config()
    result = _session(config).update_auth(
        email=email or None,
        access_token=access_token or None,
        refresh_token=refresh_token or None,
        sink=_print_log_line,
    )
    _finish(result)


# ============================================================================
# Account Commands
# ============================================================================


accounts_app = typer.Typer(help="Manage saved accounts")
app.add_typer(accounts_app, name="accounts")


@accounts_app.command("list")
def accounts_list(
    file: Path | None = typer.Option(None, "--file", "-f", help="Alternate accounts file"),
):
    """List saved accounts."""
    config = _load_config()
    accounts = _account_store(config, file).list()

    if not accounts:
        console.print("No saved accounts.")
        return

    table = Table(title="Saved Accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Created")
    for account in accounts:
        table.add_row(account.id, account.name, account.email, account.created_at)
    console.print(table)


@accounts_app.command("create")
def accounts_create(
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    email: str = typer.Option(..., "--email", "-e", help="Account email"),
    access_token: str = typer.Option(..., "--access-token", help="Access token"),
    refresh_token: str = typer.Option("", "--refresh-token", help="Refresh token"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Alternate accounts file"),
):
    """Save a new account with its own identifiers."""
    from idekit.errors import IdekitError

    config = _load_config()
    try:
        account = _account_store(config, file).create(
            name, email, access_token, refresh_token or None
        )
    except (IdekitError, OSError) as exc:
        console.print(f"[red]Failed to save account:[/red] {exc}")
        raise typer.Exit(1) from exc
    console.print(f"[green]✓[/green] Saved account '{account.name}' ({account.id})")


@accounts_app.command("delete")
def accounts_delete(
    account_id: str = typer.Argument(..., help="Account ID to remove"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Alternate accounts file"),
):
    """Delete a saved account."""
    from idekit.errors import IdekitError

    config = _load_config()
    try:
        _account_store(config, file).delete(account_id)
    except (IdekitError, OSError) as exc:
        console.print(f"[red]Failed to delete account:[/red] {exc}")
        raise typer.Exit(1) from exc
    console.print(f"[green]✓[/green] Removed account {account_id}")


@accounts_app.command("activate")
def accounts_activate(
    account_id: str = typer.Argument(..., help="Account ID to switch to"),
):
    """Switch the IDE to a saved account."""
    config = _load_config()
    _finish(_account_store(config).activate(account_id, sink=_print_log_line))


@accounts_app.command("import")
def accounts_import(
    path: Path = typer.Argument(..., help="JSON file with an array of accounts"),
    persist: bool = typer.Option(False, "--persist", help="Merge into the saved accounts file"),
):
    """Import accounts from an exported file."""
    from idekit.errors import IdekitError

    config = _load_config()
    try:
        imported = _account_store(config).import_from(path.expanduser(), persist=persist)
    except (IdekitError, OSError) as exc:
        console.print(f"[red]Import failed:[/red] {exc}")
        raise typer.Exit(2) from exc
    console.print(f"[green]✓[/green] Imported {len(imported)} accounts from {path}")


@accounts_app.command("export")
def accounts_export(
    out: Path | None = typer.Option(None, "--out", "-o", help="Write to file instead of stdout"),
):
    """Export the saved accounts file."""
    from idekit.errors import IdekitError

    config = _load_config()
    try:
        data = _account_store(config).export()
    except (IdekitError, OSError) as exc:
        console.print(f"[red]Export failed:[/red] {exc}")
        raise typer.Exit(1) from exc
    if out:
        out.expanduser().write_text(data, encoding="utf-8")
        console.print(f"[green]✓[/green] Exported accounts to {out}")
    else:
        console.print(data, markup=False, highlight=False)


# ============================================================================
# Config Commands
# ============================================================================


config_app = typer.Typer(help="Manage idekit config")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show():
    """Print the effective configuration."""
    from idekit.config.loader import convert_to_camel

    config = _load_config()
    console.print_json(json.dumps(convert_to_camel(config.model_dump())))


@config_app.command("init")
def config_init():
    """Write the effective configuration to the config file."""
    from idekit.config.loader import save_config

    path = save_config(_load_config(), _state.config_path)
    console.print(f"[green]✓[/green] Config written: {path}")


if __name__ == "__main__":
    app()

"""CLI entrypoint using typer."""

from __future__ import annotations

from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from mcache.observability import configure_logging
from mcache_core.binding import resolve_key
from mcache_core.config.settings import Settings
from mcache_core.constants import PING_KEY, PING_TTL_MS
from mcache_core.exceptions import BindingError, StoreError, TemplateError
from mcache_core.interfaces.store import StoreClient
from mcache_core.template import FieldPath, compile_template
from mcache_infra.store.factory import create_store

app = typer.Typer(
    name="mcache",
    help="Inspect key templates and the configured cache store",
)
console = Console()


@app.command()
def check(
    template: str = typer.Argument(..., help="Key template, e.g. 'user:{p.id}'"),
) -> None:
    """Compile a key template and show its segments."""
    try:
        plan = compile_template(template)
    except TemplateError as exc:
        console.print(f"[red]Invalid template:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title=template)
    table.add_column("#", justify="right")
    table.add_column("kind")
    table.add_column("value")
    for index, segment in enumerate(plan.segments):
        kind = "placeholder" if isinstance(segment, FieldPath) else "literal"
        table.add_row(str(index), kind, repr(str(segment)))
    console.print(table)
    console.print(f"arguments: {', '.join(sorted(plan.roots)) or '(none)'}")


@app.command()
def render(
    template: str = typer.Argument(..., help="Key template"),
    arg: list[str] = typer.Option(
        [], "--arg", "-a", help="Argument as name=value; dotted names build nested fields"
    ),
) -> None:
    """Render a cache key from command-line arguments."""
    try:
        arguments = _parse_arguments(arg)
        plan = compile_template(template)
        key = resolve_key(plan, arguments)
    except (TemplateError, BindingError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(key, markup=False, highlight=False)


@app.command()
def get(
    key: str = typer.Argument(..., help="Cache key"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Print the raw stored value for a key."""
    store = _open_store(verbose)
    try:
        value = store.get(key)
    except StoreError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    finally:
        store.close()

    if value is None:
        console.print(f"[yellow]Miss:[/yellow] {key}")
        raise typer.Exit(code=1)
    console.print(value, markup=False, highlight=False)


@app.command()
def delete(
    key: str = typer.Argument(..., help="Cache key"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Delete a key from the store."""
    store = _open_store(verbose)
    try:
        existed = store.delete(key)
    except StoreError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    finally:
        store.close()
    console.print("deleted" if existed else "not found")


@app.command()
def ping(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Write and read back a probe key to check the store is reachable."""
    store = _open_store(verbose)
    try:
        store.set(PING_KEY, "pong", PING_TTL_MS)
        value = store.get(PING_KEY)
    except StoreError as exc:
        console.print(f"[red]Store unreachable:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    finally:
        store.close()

    if value != "pong":
        console.print(f"[red]Unexpected probe value:[/red] {value!r}")
        raise typer.Exit(code=1)
    console.print("[bold green]pong[/bold green]")


@app.command()
def version() -> None:
    """Show version."""
    console.print("mcache v0.1.0")


def _open_store(verbose: bool) -> StoreClient:
    """Load settings from the environment and build the configured store."""
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return create_store(settings)


def _parse_arguments(pairs: list[str]) -> dict[str, Any]:
    """Turn ['p.id=1', 'name=x'] into {'p': {'id': '1'}, 'name': 'x'}."""
    arguments: dict[str, Any] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            msg = f"argument {pair!r} must look like name=value"
            raise ValueError(msg)
        path = FieldPath.parse(name)
        target = arguments
        for part in path.parts[:-1]:
            nested = target.setdefault(part, {})
            if not isinstance(nested, dict):
                msg = f"argument {part!r} is both a value and a field container"
                raise ValueError(msg)
            target = nested
        if isinstance(target.get(path.parts[-1]), dict):
            msg = f"argument {path.parts[-1]!r} is both a value and a field container"
            raise ValueError(msg)
        target[path.parts[-1]] = value
    return arguments


if __name__ == "__main__":
    app()

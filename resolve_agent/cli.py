"""CLI entry point for resolve-agent."""

from __future__ import annotations

import logging
import os
import sqlite3
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

import resolve_agent

app = typer.Typer(
    name="resolve-agent",
    help="AI-powered package installation resolver.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True))],
    )


def _resolve_model(model: Optional[str]) -> str:
    """Resolve model from CLI flag → env var → config → default."""
    from resolve_agent.core.llm import DEFAULT_MODEL

    if model:
        return model
    env_model = os.environ.get("RESOLVE_AGENT_MODEL")
    if env_model:
        return env_model
    try:
        from resolve_agent.data.store import DataStore

        with DataStore() as store:
            cfg_model = store.get_config("model")
        if cfg_model:
            return cfg_model
    except (OSError, sqlite3.Error) as e:
        logger.debug("Config store unavailable: %s", e)
    return DEFAULT_MODEL


def _load_settings() -> dict:
    """Read the optional numeric and host settings from the store."""
    from resolve_agent.data.store import DataStore

    try:
        with DataStore() as store:
            return {
                "oracle_timeout": store.get_config_float("oracle_timeout"),
                "command_timeout": store.get_config_float("command_timeout"),
                "ollama_host": store.get_config("ollama_host"),
            }
    except (OSError, sqlite3.Error) as e:
        logger.debug("Config store unavailable: %s", e)
        return {
            "oracle_timeout": None,
            "command_timeout": None,
            "ollama_host": None,
        }


@app.command()
def resolve(
    package_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Package type: npm or python"
    ),
    package: Optional[str] = typer.Option(
        None, "--package", "-p",
        help="Package with version (e.g. react@18.2.0, requests==2.31.0)",
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f",
        help="Dependency file (package.json, requirements.txt, ...)",
    ),
    env: str = typer.Option(
        "venv", "--env", "-e",
        help="Python environment type: venv (pip) or conda",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Auto-confirm all command batches"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="LLM model to use"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
) -> None:
    """Install a package or dependency file, fixing errors with an AI agent."""
    from resolve_agent.core.exceptions import OracleError, TargetError
    from resolve_agent.core.models import EnvFlavor, PackageKind, Target
    from resolve_agent.core.providers import detect_provider, get_provider_class
    from resolve_agent.core.targets import (
        check_for_common_invalid_packages,
        detect_common_typos,
        detect_package_kind_from_file,
        validate_resolve_query,
    )

    _setup_logging(verbose)

    if env not in ("venv", "conda"):
        console.print("[red]Error: --env must be 'venv' or 'conda'[/]")
        raise typer.Exit(1)
    flavor = EnvFlavor(env)

    if file and (package_type or package):
        console.print(
            "[red]Error: --file cannot be combined with --type/--package[/]"
        )
        raise typer.Exit(1)

    if file:
        try:
            kind = detect_package_kind_from_file(file)
        except TargetError as e:
            console.print(f"[red]Error: {escape(str(e))}[/]")
            raise typer.Exit(1)
        target = Target(kind=kind, spec=file, file_mode=True, env=flavor)
    else:
        if not package_type or not package:
            console.print(
                "[red]Error: --type and --package are required when not "
                "using --file[/]"
            )
            raise typer.Exit(1)
        if package_type not in ("npm", "python"):
            console.print("[red]Error: --type must be 'npm' or 'python'[/]")
            raise typer.Exit(1)
        kind = PackageKind(package_type)

        try:
            validate_resolve_query(kind, package)
        except TargetError as e:
            console.print(f"[red]Error: {escape(str(e))}[/]")
            raise typer.Exit(1)

        warning = check_for_common_invalid_packages(kind, package)
        if warning:
            console.print(f"[yellow]Warning: {escape(warning)}[/]")
            corrected = detect_common_typos(package)
            if corrected is None:
                raise typer.Exit(1)
            console.print(
                f"\n[bold]Proceeding with the corrected package: "
                f"{escape(corrected)}[/]"
            )
            package = corrected
        target = Target(kind=kind, spec=package, env=flavor)

    resolved_model = _resolve_model(model)
    provider_name = detect_provider(resolved_model)
    try:
        provider_class = get_provider_class(provider_name)
    except ImportError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    has_key, key_name = provider_class.check_api_key()
    if not has_key:
        console.print(
            f"[red]Error: {key_name} environment variable not set.[/]\n"
            f"Set it with: export {key_name}='your-key-here'",
        )
        raise typer.Exit(1)

    from resolve_agent.core.executor import CommandExecutor
    from resolve_agent.core.llm import OracleClient, load_system_prompt
    from resolve_agent.core.orchestrator import ResolutionLoop
    from resolve_agent.core.prompts import build_initial_prompt

    settings = _load_settings()
    oracle = OracleClient(
        model=resolved_model,
        timeout=settings["oracle_timeout"],
        ollama_host=settings["ollama_host"],
    )
    system_prompt = load_system_prompt()

    label = "Dependency file" if target.file_mode else "Package"
    console.print(
        Panel(
            f"[bold]{label}:[/] {escape(target.spec)}\n"
            f"[bold]Type:[/] {kind.value}\n"
            f"[bold]Package manager:[/] {target.package_manager}\n"
            f"[bold]Model:[/] {escape(resolved_model)}",
            title="resolve-agent",
            border_style="blue",
        )
    )

    console.print("[dim]Processing your package resolution request...[/]")
    try:
        response = oracle.query(system_prompt, build_initial_prompt(target))
    except OracleError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        console.print(
            f"\nMake sure the {provider_name} provider is reachable and "
            f"configured correctly (see 'resolve-agent config get')."
        )
        raise typer.Exit(1)

    executor = CommandExecutor(
        console=console, timeout=settings["command_timeout"]
    )
    loop = ResolutionLoop(
        target=target,
        oracle=oracle,
        system_prompt=system_prompt,
        executor=executor,
        console=console,
        auto_confirm=yes,
    )
    result = loop.run(response)
    raise typer.Exit(result.exit_code)


@app.command()
def config(
    action: str = typer.Argument(
        "get", help="Action: get, set or unset"
    ),
    key: Optional[str] = typer.Argument(
        None,
        help="Config key (model, oracle_timeout, command_timeout, "
        "ollama_host)",
    ),
    value: Optional[str] = typer.Argument(
        None, help="Value to set"
    ),
) -> None:
    """View or modify configuration."""
    from resolve_agent.data.store import CONFIG_KEYS, NUMERIC_KEYS, DataStore

    store = DataStore()

    try:
        if action == "get":
            if key:
                val = store.get_config(key)
                if val is not None:
                    console.print(f"{key} = {val}")
                else:
                    console.print(f"[yellow]{key} is not set[/]")
            else:
                for k in CONFIG_KEYS:
                    val = store.get_config(k)
                    console.print(f"{k} = {val or '(not set)'}")
        elif action == "set":
            if not key or value is None:
                console.print(
                    "[red]Usage: resolve-agent config set <key> <value>[/]"
                )
                raise typer.Exit(1)
            if key not in CONFIG_KEYS:
                console.print(
                    f"[red]Unknown config key: {key}. "
                    f"Valid keys: {', '.join(CONFIG_KEYS)}[/]"
                )
                raise typer.Exit(1)
            if key in NUMERIC_KEYS:
                try:
                    number = float(value)
                except ValueError:
                    number = 0.0
                if number <= 0:
                    console.print(
                        f"[red]{key} must be a positive number of seconds[/]"
                    )
                    raise typer.Exit(1)
            store.set_config(key, value)
            console.print(f"[green]Set {key} = {value}[/]")
        elif action == "unset":
            if not key:
                console.print(
                    "[red]Usage: resolve-agent config unset <key>[/]"
                )
                raise typer.Exit(1)
            store.unset_config(key)
            console.print(f"[green]Unset {key}[/]")
        else:
            console.print("[red]Unknown action. Use 'get', 'set' or 'unset'.[/]")
            raise typer.Exit(1)
    finally:
        store.close()


@app.command()
def version() -> None:
    """Print version."""
    console.print(f"resolve-agent {resolve_agent.__version__}")


if __name__ == "__main__":
    app()

# src/lincheck/cli.py
"""lincheck Command Line Interface.

Entry point for the lincheck CLI tool.

Exit codes for `lincheck verify`:
    0  history is linearizable
    1  error (unreadable or malformed history, bad configuration)
    2  history is NOT linearizable
    3  inconclusive (oracle time budget exhausted)
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from lincheck import __version__
from lincheck.contracts import CorrelationPolicy, HistoryError, Verdict
from lincheck.core.config import LincheckSettings, load_settings
from lincheck.oracle.registry import AdapterRegistry

__all__ = ["app"]

EXIT_ERROR = 1
EXIT_NOT_LINEARIZABLE = 2
EXIT_INCONCLUSIVE = 3

# Module-level singleton for the adapter registry
_registry_cache: AdapterRegistry | None = None


def _get_registry() -> AdapterRegistry:
    """Get initialized adapter registry (singleton).

    Returns:
        AdapterRegistry with built-in and entry point plugins registered
    """
    global _registry_cache

    if _registry_cache is None:
        registry = AdapterRegistry()
        registry.register_builtin_plugins()
        registry.load_entrypoint_plugins()
        _registry_cache = registry
    return _registry_cache


@dataclass
class _CliState:
    verbose: bool = False
    json_logs: bool = False


app = typer.Typer(
    name="lincheck",
    help="lincheck: record, replay and verify operation histories.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lincheck version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(EXIT_ERROR)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """lincheck: record, replay and verify operation histories."""
    from lincheck.core.logging import configure_logging

    # Logs go to stderr; stdout carries command output
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO", stream=sys.stderr)
    ctx.obj = _CliState(verbose=verbose, json_logs=json_logs)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _resolve_settings(ctx: typer.Context, settings_path: Path | None) -> LincheckSettings:
    """Load settings (or defaults) and apply their logging section.

    Command-line logging flags win over the settings file.
    """
    if settings_path is None:
        return LincheckSettings()

    try:
        settings = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings_path}: {e.problem}", err=True)
        raise typer.Exit(EXIT_ERROR) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(EXIT_ERROR) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    from lincheck.core.logging import configure_logging

    state = ctx.obj if isinstance(ctx.obj, _CliState) else _CliState()
    configure_logging(
        json_output=state.json_logs or settings.logging.json_output,
        level="DEBUG" if state.verbose else settings.logging.level,
        stream=sys.stderr,
    )
    return settings


def _resolve_history_path(history: Path | None, settings: LincheckSettings) -> Path:
    path = history if history is not None else settings.history.path
    if path is None:
        typer.echo("Error: no history file given (argument or history.path setting)", err=True)
        raise typer.Exit(EXIT_ERROR)
    return path


def _resolve_correlation(lenient: bool | None, settings: LincheckSettings) -> CorrelationPolicy:
    if lenient is None:
        return settings.history.correlation
    return CorrelationPolicy.LENIENT if lenient else CorrelationPolicy.STRICT


@app.command()
def verify(
    ctx: typer.Context,
    history: Path | None = typer.Argument(
        None,
        help="History file to verify (defaults to history.path from settings).",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    adapter: str | None = typer.Option(
        None,
        "--adapter",
        "-a",
        help="Adapter supplying the model and parser.",
    ),
    oracle: str | None = typer.Option(
        None,
        "--oracle",
        help="Oracle deciding linearizability.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0.001,
        help="Oracle time budget in seconds (inconclusive when exceeded).",
    ),
    lenient: bool | None = typer.Option(
        None,
        "--lenient/--strict",
        help="Tolerate broken call/return pairing instead of rejecting the history.",
    ),
) -> None:
    """Replay a history and check it for linearizability."""
    from lincheck.history.verifier import HistoryVerifier

    config = _resolve_settings(ctx, settings)
    path = _resolve_history_path(history, config)
    registry = _get_registry()

    try:
        selected = registry.get_adapter(adapter or config.check.adapter)
        checker = registry.create_oracle(oracle or config.check.oracle)
        verifier = HistoryVerifier(
            checker,
            timeout_seconds=timeout if timeout is not None else config.check.timeout_seconds,
            correlation=_resolve_correlation(lenient, config),
        )
        result = verifier.verify(path, selected.create_model(), selected.create_parser())
    except (HistoryError, OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    typer.echo(
        f"{result.verdict.value}: {result.event_count} events "
        f"({result.synthesized_count} synthesized) in {result.elapsed_ms:.1f} ms"
    )
    if result.verdict == Verdict.NOT_LINEARIZABLE:
        raise typer.Exit(EXIT_NOT_LINEARIZABLE)
    if result.verdict == Verdict.UNKNOWN:
        raise typer.Exit(EXIT_INCONCLUSIVE)


@app.command()
def replay(
    ctx: typer.Context,
    history: Path | None = typer.Argument(
        None,
        help="History file to replay (defaults to history.path from settings).",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    adapter: str | None = typer.Option(
        None,
        "--adapter",
        "-a",
        help="Adapter supplying the parser.",
    ),
    lenient: bool | None = typer.Option(
        None,
        "--lenient/--strict",
        help="Tolerate broken call/return pairing instead of rejecting the history.",
    ),
) -> None:
    """Print the reconstructed call/return events as JSON lines."""
    from lincheck.history.replayer import HistoryReplayer

    config = _resolve_settings(ctx, settings)
    path = _resolve_history_path(history, config)

    try:
        selected = _get_registry().get_adapter(adapter or config.check.adapter)
        replayer = HistoryReplayer(selected.create_parser(), correlation=_resolve_correlation(lenient, config))
        replayed = replayer.replay(path)
    except (HistoryError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    for event in replayed:
        typer.echo(
            json.dumps(
                {"kind": event.kind.value, "id": event.id, "value": to_jsonable_python(event.value)},
                separators=(",", ":"),
            )
        )


@app.command()
def adapters() -> None:
    """List registered adapters and oracles."""
    registry = _get_registry()
    typer.echo("Adapters:")
    for adapter in registry.get_adapters():
        typer.echo(f"  {adapter.name}: {adapter.description}")
    typer.echo("Oracles:")
    for name in registry.get_oracle_names():
        typer.echo(f"  {name}")


if __name__ == "__main__":
    app()

"""Environment diagnostics for the scheduled job.

Prints where and how the bot would run without touching any network:
interpreter, working directory, non-secret settings, which credentials are
present, and whether runtime libraries resolve.

Usage:
    python -m feebot.preflight
"""

from importlib.util import find_spec
from pathlib import Path
import platform
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from feebot.helpers.config import CREDENTIAL_ENV_KEYS, get_optional_env


SETTING_ENV_KEYS = ("DRY_RUN", "BTC_TIER", "EXPLAINER_URL")

RUNTIME_MODULES = ("httpx", "oauthlib", "pydantic")

EXIT_MISSING_MODULE = 2


def collect_settings() -> dict[str, str]:
    return {key: get_optional_env(key, "") or "" for key in SETTING_ENV_KEYS}


def collect_credentials() -> dict[str, bool]:
    """Report which X credential variables are set, never their values."""
    return {
        env_key: bool(get_optional_env(env_key))
        for env_key in CREDENTIAL_ENV_KEYS.values()
    }


def collect_modules() -> dict[str, bool]:
    return {name: find_spec(name) is not None for name in RUNTIME_MODULES}


def run_preflight(console: Console | None = None) -> int:
    """Print the diagnostics report.

    Args:
        console: Rich console to print to (default: stdout)

    Returns:
        int: 0 when every runtime library resolves, 2 otherwise
    """
    console = console or Console()

    console.print("[bold blue]post-metrics preflight[/bold blue]")
    console.print(f"[cyan]python={platform.python_version()} ({sys.executable})[/cyan]")
    console.print(f"[cyan]cwd={Path.cwd()}[/cyan]")
    console.print(f"[cyan]argv={escape(str(sys.argv))}[/cyan]")

    table = Table(title="Environment")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in collect_settings().items():
        table.add_row(key, escape(value) if value else "[dim]<unset>[/dim]")
    for key, is_set in collect_credentials().items():
        table.add_row(key, "[green]set[/green]" if is_set else "[red]missing[/red]")
    console.print(table)

    modules = collect_modules()
    for name, found in modules.items():
        if found:
            console.print(f"[green]✓ {name} is resolvable[/green]")
        else:
            console.print(f"[red]✗ {name} cannot be imported[/red]")

    return 0 if all(modules.values()) else EXIT_MISSING_MODULE


def main() -> int:
    return run_preflight()


if __name__ == "__main__":
    sys.exit(main())

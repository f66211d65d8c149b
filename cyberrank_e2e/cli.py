# cyberrank_e2e/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Show the effective config, check the page objects' selector inventories,
and run the browser suite through pytest.
"""

import json
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click

from cyberrank_e2e.pages import ALL_PAGES
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.utils.config import BrowserType, get_settings
from cyberrank_e2e.utils.logger import bind, get_logger, set_log_level, unbind

E2E_TESTS_DIR = Path("tests") / "e2e"

_SECRET_FIELDS = {"TEST_USER_PASSWORD", "PROXY_PASSWORD"}


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


def _iter_candidates(value) -> List[SelectorCandidate]:
    if isinstance(value, SelectorCandidate):
        return [value]
    if isinstance(value, (tuple, list)):
        out: List[SelectorCandidate] = []
        for v in value:
            out.extend(_iter_candidates(v))
        return out
    if isinstance(value, dict):
        out = []
        for v in value.values():
            out.extend(_iter_candidates(v))
        return out
    return []


def selector_inventory() -> Dict[str, List[Tuple[str, SelectorCandidate]]]:
    """Page class name -> [(attribute, candidate), ...] for every declared selector."""
    inventory: Dict[str, List[Tuple[str, SelectorCandidate]]] = {}
    for page_cls in ALL_PAGES:
        rows: List[Tuple[str, SelectorCandidate]] = []
        for attr in sorted(vars(page_cls)):
            if attr.startswith("_") or not attr.isupper():
                continue
            for cand in _iter_candidates(getattr(page_cls, attr)):
                rows.append((attr, cand))
        inventory[page_cls.__name__] = rows
    return inventory


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="cyberrank-e2e")
def cli(log_level: Optional[str]):
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    s = get_settings()
    data = {}
    for k, v in s.model_dump().items():
        if k in _SECRET_FIELDS and v:
            v = "***"
        data[k] = str(v) if isinstance(v, Path) else v
    _echo_json(data)


@cli.command("check-selectors")
@click.argument("raw", nargs=-1, required=False)
@click.option("--verbose", "-v", is_flag=True, help="List every candidate, not just counts")
def cmd_check_selectors(raw: Tuple[str, ...], verbose: bool):
    """
    Validate selector notation.

    With arguments, parse each RAW selector and show how it is interpreted.
    Without, list the candidates every page object declares (they are
    validated when the page module is imported).

    Examples:
      cyberrank-e2e check-selectors 'vaadin-button*=Register' '#submit-button'
    """
    if raw:
        ok = True
        for r in raw:
            try:
                click.echo(f"OK  {r!r} -> {SelectorCandidate.parse(r)}")
            except ValueError as e:
                ok = False
                click.echo(f"ERR {r!r} -> {e}")
        sys.exit(0 if ok else 1)

    total = 0
    for page, rows in selector_inventory().items():
        total += len(rows)
        click.echo(f"{page}: {len(rows)} candidate(s)")
        if verbose:
            for attr, cand in rows:
                click.echo(f"    {attr:<28} {cand}")
    click.echo(f"Done. {total} candidate(s) across {len(ALL_PAGES)} page(s)")


@cli.command("run", context_settings=dict(ignore_unknown_options=True))
@click.option("--tags", "-m", "tags", type=str, default=None, help="Marker expression, e.g. 'login and not registration'")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option(
    "--browser",
    type=click.Choice([b.value for b in BrowserType], case_sensitive=False),
    default=None,
    help="Override BROWSER_TYPE",
)
@click.option(
    "--tests-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Scenario directory (default: tests/e2e under the current directory)",
)
@click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)
def cmd_run(
    tags: Optional[str],
    headed: bool,
    browser: Optional[str],
    tests_dir: Optional[Path],
    pytest_args: Tuple[str, ...],
):
    """
    Run the browser scenarios under tests/e2e of the project checkout.

    Examples:
      cyberrank-e2e run --tags authenticated
      cyberrank-e2e run --headed --browser firefox -- -x -k login
    """
    import pytest

    log = get_logger(__name__)

    target = (tests_dir or Path.cwd() / E2E_TESTS_DIR).resolve()
    if not target.is_dir():
        raise click.UsageError(f"No scenario directory at {target}; run from the project root or pass --tests-dir")

    os.environ["RUN_E2E"] = "true"
    if headed:
        os.environ["HEADLESS"] = "false"
    if browser:
        os.environ["BROWSER_TYPE"] = browser.lower()
    # re-read the environment overrides above
    get_settings.cache_clear()

    args: List[str] = [str(target)]
    if tags:
        args += ["-m", tags]
    args += list(pytest_args)

    bind(command="run")
    log.info(f"pytest {' '.join(args)}")
    try:
        code = pytest.main(args)
    finally:
        unbind("command")
    sys.exit(int(code))


def main() -> None:
    cli(prog_name="cyberrank-e2e")


if __name__ == "__main__":
    main()

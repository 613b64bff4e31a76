# backoffice_ui/cli.py
from __future__ import annotations

"""backoffice-ui
-------------
`list` and `run` the registered back-office scenarios, or dump the settings
the suite would run with.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from backoffice_ui.core.scenario import ScenarioDef, load_scenarios
from backoffice_ui.utils.config import BrowserType, LogLevel, get_settings
from backoffice_ui.utils.logger import bind, get_logger, set_colorized, set_log_level, unbind


_MASK = "********"
_SECRET_KEYS = ("E2E_PASSWORD",)


def _plain(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    return getattr(value, "value", value)


def _selection_options(func):
    func = click.option("--tag", "tags", multiple=True, help="Keep scenarios tagged with any of these (repeatable)")(func)
    func = click.option("--feature", default=None, help="Keep scenarios of one feature, e.g. Profile")(func)
    return func


def _report(sc: ScenarioDef, res: Dict[str, Any]) -> None:
    if res.get("ok", True):
        click.echo(f"OK  {sc.id} -> run_dir={res.get('run_dir', '-')}")
    else:
        step = res.get("failed_step") or {}
        where = f" [{step.get('keyword', '')} {step.get('text', '')}]" if step else ""
        kind = f"{res['error_type']}: " if res.get("error_type") else ""
        click.echo(f"ERR {sc.id}{where} -> {kind}{res.get('error', 'unknown error')}")
    # widgets that only converged after escalation
    for fb in res.get("fallbacks") or []:
        click.echo(f"    fallback: {fb['widget']} -> {fb['target']!r} via {fb['strategy']}")


def _write_summary(path: str, results: List[Dict[str, Any]]) -> Path:
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps({"results": results}, indent=2, default=str), encoding="utf-8")
    return target


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--log-level",
    type=click.Choice([lvl.value for lvl in LogLevel], case_sensitive=False),
    default=None,
    help="Console/file log level for this invocation",
)
@click.option("--color/--no-color", default=None, help="ANSI colour on the console log")
@click.version_option(package_name="backoffice-ui-tests")
def cli(log_level: Optional[str], color: Optional[bool]):
    get_settings()
    if color is not None:
        set_colorized(color)
    if log_level:
        set_log_level(log_level.upper())


@cli.command("config")
def cmd_config():
    """Show the effective settings as JSON, secrets masked."""
    data = {key: _plain(val) for key, val in get_settings().model_dump().items()}
    for key in _SECRET_KEYS:
        if data.get(key) is not None:
            data[key] = _MASK
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@cli.command("list")
@_selection_options
def cmd_list(feature: Optional[str], tags: List[str]):
    """Show registered scenarios."""
    found = load_scenarios().select(feature=feature, tags=tags)
    if not found:
        click.echo("No scenarios found.")
        return
    click.echo(f"Found {len(found)} scenario(s):\n")
    for sc in found:
        suffix = f"  [{', '.join(sc.tags)}]" if sc.tags else ""
        click.echo(f" - {sc.id}{suffix}")


@cli.command("run")
@click.argument("names", nargs=-1, required=False)
@_selection_options
@click.option("--parallel/--no-parallel", default=None, help="Run scenarios concurrently (default: PARALLEL_EXECUTION)")
@click.option("--max-workers", type=int, default=None, help="Concurrent scenario limit (default: MAX_WORKERS)")
@click.option("--headless/--headed", default=None, help="Show or hide the browser window")
@click.option("--browser", type=click.Choice([b.value for b in BrowserType]), default=None, help="Browser engine")
@click.option("--json-out", type=click.Path(dir_okay=False), default=None, help="Also write the result dicts here")
def cmd_run(
    names: List[str],
    feature: Optional[str],
    tags: List[str],
    parallel: Optional[bool],
    max_workers: Optional[int],
    headless: Optional[bool],
    browser: Optional[str],
    json_out: Optional[str],
):
    """
    Run scenarios. Each NAME keeps scenarios whose "Feature: Scenario" id
    contains it.

    \b
      backoffice-ui run "valid credentials"
      backoffice-ui run --feature Profile --parallel --max-workers 2
    """
    log = get_logger(__name__)
    settings = get_settings()
    changes: Dict[str, Any] = {}
    if headless is not None:
        changes["HEADLESS"] = headless
    if browser is not None:
        changes["BROWSER_TYPE"] = BrowserType(browser)
    if changes:
        settings = settings.model_copy(update=changes)

    chosen = load_scenarios().select(names=names, feature=feature, tags=tags)
    if not chosen:
        click.echo("No scenarios matched.")
        sys.exit(1)

    concurrent = settings.PARALLEL_EXECUTION if parallel is None else parallel
    workers = max_workers or settings.MAX_WORKERS

    bind(run_id=datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"))
    click.echo(f"Running {len(chosen)} scenario(s){' in parallel' if concurrent else ''}...")
    log.debug(f"Selected: {[sc.id for sc in chosen]}")

    from backoffice_ui.core.runner import run_scenarios  # resolved at call time

    try:
        results = run_scenarios(chosen, settings=settings, parallel=concurrent, max_workers=workers)
    finally:
        unbind("run_id")

    for sc, res in zip(chosen, results):
        _report(sc, res)
    failed = sum(1 for res in results if not res.get("ok", True))
    click.echo(f"Done. OK={len(results) - failed}  FAIL={failed}")

    if json_out:
        click.echo(f"Wrote summary: {_write_summary(json_out, results)}")
    sys.exit(1 if failed else 0)


def main() -> None:
    cli(prog_name="backoffice-ui")


if __name__ == "__main__":
    main()

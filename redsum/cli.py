"""Command line interface for redsum."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from loguru import logger

from .activity import ActivityStore, RunScope, SourceWindow, export_activities, parse_date_range
from .config import AppConfig, load_config, mask_secret
from .errors import RedsumError
from .pipeline import CheckpointStore, RunCriteria, RunState, SummarizerOrchestrator
from .tracker import TrackerPublisher


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    verbose: bool = False
    _config: AppConfig | None = None

    def ensure_config(self, *, insecure: bool = False) -> AppConfig:
        if self._config is None:
            logger.info("Loading configuration from {}", self.config_path)
            self._config = load_config(AppConfig, self.config_path)
        config = self._config
        if insecure and not config.tracker.insecure:
            config = config.model_copy(update={"tracker": config.tracker.model_copy(update={"insecure": True})})
        return config


app = typer.Typer(help="Summarise Redmine activity and publish it back to Redmine")

_sink_id: int | None = None


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _configure_logging(level: str) -> None:
    """Replace loguru's default stderr handler with one at ``level``."""

    global _sink_id
    if _sink_id is not None:
        logger.remove(_sink_id)
    else:
        try:
            logger.remove(0)
        except ValueError:
            pass
    _sink_id = logger.add(lambda message: sys.stderr.write(message), level=level.upper())


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def build_orchestrator(config: AppConfig) -> SummarizerOrchestrator:
    return SummarizerOrchestrator.from_config(config)


def _read_prompt(path: Path | None) -> str | None:
    if path is None:
        return None
    if not path.exists():
        logger.warning("Prompt file not found: {}; using the default prompt", path)
        return None
    logger.debug("Loaded custom prompt from {}", path)
    return path.read_text(encoding="utf-8")


def _check_range_options(from_date: str | None, to_date: str | None) -> None:
    if (from_date is None) != (to_date is None):
        logger.error("--from and --to must be given together")
        _exit(2)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Initialise CLI state and logging."""

    state = CLIState(config_path=config.resolve(), verbose=verbose)
    ctx.obj = state
    if verbose:
        _configure_logging("DEBUG")

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'summarize' or 'status'.")


def _apply_config_logging(state: CLIState, config: AppConfig) -> None:
    if not state.verbose:
        _configure_logging(config.logging_level)


@app.command(help="Summarise activity and publish it to the tracker")
def summarize(
    ctx: typer.Context,
    project: int | None = typer.Option(None, "--project", "-p", help="Only summarise this project id"),
    user: str | None = typer.Option(None, "--user", "-u", help="Only include activity by this login"),
    days: int | None = typer.Option(None, "--days", "-d", min=1, help="Look-back window in days"),
    from_date: str | None = typer.Option(None, "--from", "-f", help="Start date (YYYY-MM-DD)"),
    to_date: str | None = typer.Option(None, "--to", "-t", help="End date (YYYY-MM-DD)"),
    prompt: Path | None = typer.Option(None, "--prompt", "-P", help="Custom prompt file containing {ACTIVITIES}"),
    title: str | None = typer.Option(None, "--title", "-T", help="Wiki page title prefix"),
    model: str | None = typer.Option(None, "--model", "-M", help="Override the LLM model name"),
    show_token_info: bool = typer.Option(False, "--show-token-info", "-S", help="Append token usage to the summary"),
    insecure: bool = typer.Option(False, "--insecure", "-I", help="Disable TLS verification for the tracker"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config(insecure=insecure)
    _apply_config_logging(state, config)
    _check_range_options(from_date, to_date)

    criteria = RunCriteria(
        window_days=days,
        from_date=from_date,
        to_date=to_date,
        project_id=project,
        author_login=user,
        prompt_template=_read_prompt(prompt),
        title_prefix=title,
        model=model,
        include_token_usage=True if show_token_info else None,
    )
    orchestrator = build_orchestrator(config)
    try:
        orchestrator.ensure_checkpoint_directory()
        report = orchestrator.run(criteria)
    finally:
        orchestrator.close()

    if report.state is RunState.FAILED:
        typer.echo(f"Summary run failed: {report.error}", err=True)
        if report.checkpoint_path is not None:
            typer.echo(f"Generated summary kept at: {report.checkpoint_path}", err=True)
        _exit(1)
    if report.state is RunState.EMPTY:
        typer.echo("No activity found for the requested window.")
        return
    typer.echo(f"Summary published ({report.record_count} activities).")


@app.command("test-connection", help="Check that the tracker API is reachable with the configured key")
def test_connection(
    ctx: typer.Context,
    insecure: bool = typer.Option(False, "--insecure", "-I", help="Disable TLS verification"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config(insecure=insecure)
    _apply_config_logging(state, config)
    result = TrackerPublisher(config.tracker).test_connectivity()
    typer.echo(("OK: " if result.ok else "FAILED: ") + result.message)
    if not result.ok:
        _exit(1)


@app.command(help="Probe the tracker URL over http and https")
def diagnose(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    _apply_config_logging(state, config)
    results = TrackerPublisher(config.tracker).diagnose_url_reachability()
    for label, probe in results.items():
        detail = f"status={probe.status}" if probe.error is None else f"error={probe.error}"
        typer.echo(f"[{label}] {probe.url}: {'reachable' if probe.ok else 'unreachable'} ({detail}, {probe.elapsed_ms} ms)")


@app.command("list-checkpoints", help="List summary checkpoints left by failed runs")
def list_checkpoints(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    _apply_config_logging(state, config)
    entries = CheckpointStore(config.summary.checkpoint_dir).list_checkpoints()
    if not entries:
        typer.echo("No checkpoints found.")
        return
    typer.echo("Saved checkpoints:")
    for info in entries:
        typer.echo(f"  {info.path} ({info.size / 1024:.2f}KB, {info.modified_at:%Y-%m-%d %H:%M:%S})")


@app.command("prune-checkpoints", help="Delete checkpoints older than N days")
def prune_checkpoints(
    ctx: typer.Context,
    days: int | None = typer.Option(None, "--days", "-d", min=0, help="Age threshold in days"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    _apply_config_logging(state, config)
    threshold = config.summary.prune_after_days if days is None else days
    removed = CheckpointStore(config.summary.checkpoint_dir).prune(threshold)
    typer.echo(f"Removed {len(removed)} checkpoint(s) older than {threshold} days.")


@app.command(help="Export fetched activity records to JSON")
def export(
    ctx: typer.Context,
    project: int | None = typer.Option(None, "--project", "-p", help="Only export this project id"),
    user: str | None = typer.Option(None, "--user", "-u", help="Only include activity by this login"),
    days: int | None = typer.Option(None, "--days", "-d", min=1, help="Look-back window in days"),
    from_date: str | None = typer.Option(None, "--from", "-f", help="Start date (YYYY-MM-DD)"),
    to_date: str | None = typer.Option(None, "--to", "-t", help="End date (YYYY-MM-DD)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file path"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    _apply_config_logging(state, config)
    _check_range_options(from_date, to_date)

    store = ActivityStore.from_config(config.database)
    try:
        if from_date is not None and to_date is not None:
            start, end = parse_date_range(from_date, to_date)
            window = SourceWindow.between(start, end)
            records = store.fetch_by_date_range(from_date, to_date, project_id=project, author_login=user)
        else:
            window_days = days or config.summary.activity_days
            window = SourceWindow.last_days(window_days)
            records = store.fetch_recent(window_days, project_id=project, author_login=user)
    except RedsumError as exc:
        logger.error("Export failed: {}", exc)
        _exit(1)
    finally:
        store.close()

    path = export_activities(
        records,
        scope=RunScope(project_id=project, author_login=user),
        window=window,
        directory=config.summary.export_dir,
        output_path=output,
    )
    typer.echo(f"Exported {len(records)} activities to {path}")


@app.command(help="Show the effective configuration")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    _apply_config_logging(state, config)

    logger.info("=== General Configuration ===")
    logger.info("Logging level: {}", config.logging_level)
    logger.info("\n=== Database ===")
    db = config.database
    logger.info("Driver: {}, host: {}:{}, database: {}", db.driver, db.host, db.port, db.name)
    logger.info("Explicit URL configured: {}", db.url is not None)
    logger.info("\n=== LLM ===")
    logger.info("Model: {} via {}", config.llm.model, config.llm.base_url)
    logger.info(
        "temperature={}, top_k={}, top_p={}, max_output_tokens={}",
        config.llm.temperature,
        config.llm.top_k,
        config.llm.top_p,
        config.llm.max_output_tokens,
    )
    logger.info("\n=== Tracker ===")
    logger.info("URL: {}", config.tracker.url)
    logger.info("API key: {}", mask_secret(config.tracker.api_key))
    logger.info("Insecure mode: {}", config.tracker.insecure)
    logger.info("Default project id: {}", config.tracker.default_project_id)
    logger.info("\n=== Summary ===")
    logger.info("Activity days: {}", config.summary.activity_days)
    logger.info("Checkpoint dir: {}", config.summary.checkpoint_dir)
    logger.info("Prune after days: {}", config.summary.prune_after_days)


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

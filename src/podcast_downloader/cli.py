"""CLI interface for podcast-downloader."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, DownloadColumn, Progress, TaskID, TransferSpeedColumn
from rich.table import Table

from podcast_downloader import __version__
from podcast_downloader.config import Config
from podcast_downloader.exceptions import FeedDiscoveryError, PodcastDownloaderError
from podcast_downloader.models import DownloadOutcome, Episode, OutcomeStatus, SelectionMode
from podcast_downloader.naming import resolve_filename
from podcast_downloader.pipeline import RunRequest, RunResult, load_feed, run_pipeline
from podcast_downloader.selector import sort_newest_first

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

MODE_CHOICES = [m.value for m in SelectionMode]


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="podcast-dl")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Download podcast episodes from RSS/Atom feeds."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = Config.load()
    except PodcastDownloaderError as e:
        raise click.ClickException(str(e)) from e


def _prompt_request(config: Config, output_dir: str | None) -> RunRequest:
    url = click.prompt("Feed or show page URL").strip()
    mode = click.prompt(
        "Selection mode",
        type=click.Choice(MODE_CHOICES, case_sensitive=False),
        default=config.default_mode,
    )
    count = None
    if mode == SelectionMode.CUSTOM:
        count = click.prompt("How many episodes", type=click.IntRange(min=1))
    return RunRequest(url=url, mode=mode, count=count, output_dir=output_dir)


def _run_with_progress(request: RunRequest, config: Config) -> RunResult:
    with Progress(
        "[progress.description]{task.description}",
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        disable=not console.is_terminal,
    ) as progress:
        current: dict[str, TaskID] = {}

        def on_episode(episode: Episode):
            task = progress.add_task(f"[cyan]{episode.title[:50]}", total=None)
            current["task"] = task

            def on_progress(downloaded: int, total: int, _task=task) -> None:
                if total:
                    progress.update(_task, total=total, completed=downloaded)
                else:
                    progress.update(_task, completed=downloaded)

            return on_progress

        def on_outcome(outcome: DownloadOutcome) -> None:
            task = current.get("task")
            if task is None:
                return
            title = outcome.episode_title[:40]
            if outcome.status is OutcomeStatus.SKIPPED:
                description = f"[dim]SKIPPED: {title}[/dim]"
            elif outcome.status is OutcomeStatus.DOWNLOADED:
                description = f"[green]OK: {title}[/green]"
            else:
                description = f"[red]FAILED: {title}[/red]"
            progress.update(
                task,
                description=description,
                completed=outcome.file_size,
                total=outcome.file_size or None,
            )

        return run_pipeline(
            request,
            config=config,
            progress_callback=on_episode,
            outcome_callback=on_outcome,
        )


def _print_summary(result: RunResult) -> None:
    summary = result.summary
    table = Table(title=f"Summary for {result.feed_title}")
    table.add_column("Outcome", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("[green]Downloaded[/green]", str(len(summary.downloaded)))
    table.add_row("[dim]Skipped[/dim]", str(len(summary.skipped)))
    table.add_row("[red]Failed[/red]", str(len(summary.failed)))
    console.print(table)

    for outcome in summary.failed:
        err_console.print(f"[red]Failed: {outcome.episode_title}: {outcome.error}[/red]")

    console.print(f"\n[bold green]Done.[/bold green] Files in [bold]{result.podcast_dir}[/bold]")
    if result.log_path:
        console.print(f"[dim]Log: {result.log_path}[/dim]")


@main.command()
@click.argument("url", required=False)
@click.option(
    "--mode",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Which episodes to download (default from config: latest).",
)
@click.option("--count", type=int, default=None, help="Number of episodes for --mode custom.")
@click.option("-o", "--output", "output_dir", type=click.Path(), default=None, help="Output dir.")
@click.option("--retries", type=int, default=None, help="Attempts per episode.")
@click.option("--retry-delay", type=float, default=None, help="Seconds between attempts.")
@click.option("--interactive/--no-interactive", default=None, help="Prompt for missing input.")
@click.pass_context
def download(
    ctx: click.Context,
    url: str | None,
    mode: str | None,
    count: int | None,
    output_dir: str | None,
    retries: int | None,
    retry_delay: float | None,
    interactive: bool | None,
) -> None:
    """Download episodes from a feed or a show page that links to one."""
    config: Config = ctx.obj["config"]
    try:
        if retries is not None:
            config.set("max_attempts", retries)
        if retry_delay is not None:
            config.set("retry_delay", retry_delay)
    except PodcastDownloaderError as e:
        raise click.ClickException(str(e)) from e

    if interactive is None:
        interactive = url is None and sys.stdin.isatty()

    if url is None and not interactive:
        raise click.UsageError("A feed URL is required (or use --interactive).")

    if url is not None:
        request = RunRequest(
            url=url,
            mode=mode or config.default_mode,
            count=count,
            output_dir=output_dir,
        )
    else:
        request = _prompt_request(config, output_dir)

    while True:
        console.print(f"Fetching [bold]{request.url}[/bold]\n")
        try:
            result = _run_with_progress(request, config)
        except FeedDiscoveryError as e:
            logger.debug("Feed discovery failed: %s", e)
            if not interactive:
                raise click.ClickException(str(e)) from e
            err_console.print(f"[yellow]{e}[/yellow]")
            err_console.print("Try another URL.")
            request = _prompt_request(config, output_dir)
            continue
        except PodcastDownloaderError as e:
            logger.debug("Run failed: %s", e)
            raise click.ClickException(str(e)) from e
        break

    _print_summary(result)


@main.command()
@click.argument("url")
@click.pass_context
def inspect(ctx: click.Context, url: str) -> None:
    """List a feed's episodes and the file names they would be saved as."""
    config: Config = ctx.obj["config"]
    try:
        listing = load_feed(url, timeout=config.timeout)
    except PodcastDownloaderError as e:
        raise click.ClickException(str(e)) from e

    if listing.feed_source.discovered:
        console.print(f"Discovered feed: [bold]{listing.feed_source.resolved_url}[/bold]")

    episodes = sort_newest_first(listing.downloadable)
    skipped = len(listing.all_episodes) - len(episodes)

    table = Table(title=f"Episodes of {listing.feed_title}")
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("File name", style="cyan")

    for position, ep in enumerate(episodes, start=1):
        date_str = ep.published_at.strftime("%Y-%m-%d") if ep.published_at else "—"
        table.add_row(date_str, ep.title, resolve_filename(ep, position))

    console.print(table)
    if skipped:
        console.print(f"[yellow]{skipped} item(s) without downloadable audio.[/yellow]")


@main.group()
def config() -> None:
    """Manage configuration."""


@config.command("show")
def show_config() -> None:
    """Display current configuration."""
    try:
        cfg = Config.load()
    except PodcastDownloaderError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in Config.field_names():
        table.add_row(key, str(getattr(cfg, key)))
    console.print(table)


@config.command("set")
@click.argument("key", type=click.Choice(Config.field_names()))
@click.argument("value")
def set_config(key: str, value: str) -> None:
    """Set a configuration value."""
    try:
        cfg = Config.load()
        cfg.set(key, value)
        cfg.save()
    except PodcastDownloaderError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"[green]{key} saved.[/green]")

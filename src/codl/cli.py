#!/usr/bin/env python3
"""Command-line interface for codl.

Reads the instance URL and API key from the environment (see Settings)
or from the global options, then talks to the cobalt instance.
"""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from codl.client import CobaltClient, media_targets, resolve_media
from codl.exceptions import CodlError
from codl.models.enums import (
    AudioBitrate,
    AudioFormat,
    DownloadMode,
    DownloadStatus,
    FilenameStyle,
    LocalProcessing,
    VideoQuality,
    YoutubeVideoCodec,
)
from codl.models.options import ProcessOptions
from codl.models.responses import (
    LocalProcessingResponse,
    MediaResponse,
    PickerResponse,
    ServerInfo,
    TunnelRedirectResponse,
)
from codl.models.results import DownloadResult
from codl.settings import Settings

logger = logging.getLogger("codl")

# Using the same console for Progress and RichHandler ensures logs appear
# above the progress bar rather than interfering with it.
PROGRESS_COLUMNS = (
    SpinnerColumn(),
    TextColumn("[progress.description]{task.description}"),
    BarColumn(),
    DownloadColumn(),
    TransferSpeedColumn(),
    TimeElapsedColumn(),
)


def setup_logging(
    verbose: bool = False,
    console: Console | None = None,
    level: str = "WARNING",
) -> None:
    """Configure logging with Rich handler.

    Clears existing handlers first so it can be called again to switch to
    a shared Progress console.

    Args:
        verbose: If True, set log level to DEBUG regardless of level.
        console: Optional Console instance to use for RichHandler.
        level: Log level name used when not verbose.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = RichHandler(
        rich_tracebacks=True,
        show_path=False,
        console=console,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root_logger.setLevel(logging.DEBUG if verbose else level)
    root_logger.addHandler(handler)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


# Each option's destination matches a ProcessOptions field name.
_PROCESS_OPTION_DECORATORS: tuple[Callable[[Any], Any], ...] = (
    click.option(
        "--quality",
        "video_quality",
        type=click.Choice([q.value for q in VideoQuality]),
        help="Maximum video quality (default: instance setting).",
    ),
    click.option(
        "--audio-format",
        "audio_format",
        type=click.Choice([f.value for f in AudioFormat]),
        help="Audio format.",
    ),
    click.option(
        "--audio-bitrate",
        "audio_bitrate",
        type=click.Choice([b.value for b in AudioBitrate]),
        help="Audio bitrate in kbps.",
    ),
    click.option(
        "--filename-style",
        "filename_style",
        type=click.Choice([s.value for s in FilenameStyle]),
        help="Style of the filename suggested by the instance.",
    ),
    click.option(
        "--mode",
        "download_mode",
        type=click.Choice([m.value for m in DownloadMode]),
        help="auto (video + audio), audio only, or mute (video only).",
    ),
    click.option(
        "--codec",
        "youtube_video_codec",
        type=click.Choice([c.value for c in YoutubeVideoCodec]),
        help="Preferred YouTube video codec.",
    ),
    click.option(
        "--dub-lang", "youtube_dub_lang", help="YouTube dub language code (e.g. en)."
    ),
    click.option(
        "--subtitle-lang", "subtitle_lang", help="Subtitle language code to embed."
    ),
    click.option(
        "--local-processing",
        "local_processing",
        type=click.Choice([p.value for p in LocalProcessing]),
        help="Whether the instance may leave muxing to the client.",
    ),
    click.option(
        "--always-proxy", "always_proxy", is_flag=True, help="Tunnel all downloads."
    ),
    click.option(
        "--no-metadata",
        "disable_metadata",
        is_flag=True,
        help="Do not embed file metadata.",
    ),
    click.option(
        "--tiktok-full-audio",
        "tiktok_full_audio",
        is_flag=True,
        help="Download the original sound of a TikTok video.",
    ),
    click.option(
        "--tiktok-h265", "tiktok_h265", is_flag=True, help="Allow H265 TikTok videos."
    ),
    click.option(
        "--twitter-gif",
        "twitter_gif",
        is_flag=True,
        help="Convert Twitter GIFs to .gif.",
    ),
    click.option(
        "--youtube-hls",
        "youtube_hls",
        is_flag=True,
        help="Use HLS formats for YouTube.",
    ),
)


def process_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the processing option flags to a command."""
    for decorator in reversed(_PROCESS_OPTION_DECORATORS):
        func = decorator(func)
    return func


def build_options(values: dict[str, Any]) -> ProcessOptions:
    """Build ProcessOptions from parsed option values.

    Unset choices and unset flags are left out so the instance
    defaults apply.
    """
    return ProcessOptions(
        **{key: value for key, value in values.items() if value not in (None, False)}
    )


def make_client(ctx: click.Context, ascii_filenames: bool = False) -> CobaltClient:
    """Create a client from the settings stored on the context."""
    settings: Settings = ctx.obj["settings"]
    if ascii_filenames:
        settings = settings.model_copy(update={"ascii_filenames": True})
    try:
        config = settings.client_config()
    except ValueError as e:
        raise click.UsageError(
            "No cobalt instance URL. Pass --instance-url or set CODL_INSTANCE_URL."
        ) from e
    try:
        return CobaltClient(config)
    except CodlError as e:
        raise click.ClickException(str(e)) from e


def print_server_info(console: Console, info: ServerInfo) -> None:
    """Print instance information as a table."""
    table = Table(show_header=False, padding=(0, 1))
    table.add_column("Field", style="bold cyan", width=14)
    table.add_column("Value", overflow="fold")

    table.add_row("Version", info.cobalt.version)
    table.add_row("URL", info.cobalt.url)
    table.add_row("Started", info.cobalt.start_time.isoformat())
    table.add_row("Duration limit", f"{info.cobalt.duration_limit}s")
    table.add_row("Services", ", ".join(info.cobalt.services))
    if info.git:
        table.add_row("Commit", info.git.commit)
        table.add_row("Branch", info.git.branch)
        table.add_row("Remote", info.git.remote)

    console.print(table)


def print_response(console: Console, response: MediaResponse) -> None:
    """Print a processing response in a readable form."""
    console.print(f"[bold]Status:[/bold] {response.status}")
    match response:
        case TunnelRedirectResponse():
            console.print(f"[bold]Filename:[/bold] {escape(response.filename)}")
            console.print(f"[bold]URL:[/bold] {escape(response.url)}", soft_wrap=True)
        case PickerResponse():
            table = Table(title=f"{len(response.picker)} item(s)", title_justify="left")
            table.add_column("#", style="bold yellow", justify="right")
            table.add_column("Type", style="cyan")
            table.add_column("URL", overflow="fold")
            for i, item in enumerate(response.picker):
                table.add_row(str(i), str(item.media_type), escape(item.url))
            console.print(table)
            if response.audio:
                console.print(
                    f"[bold]Audio:[/bold] {escape(response.audio_filename or '')} "
                    f"{escape(response.audio)}",
                    soft_wrap=True,
                )
        case LocalProcessingResponse():
            console.print(f"[bold]Processing:[/bold] {response.job_type}")
            console.print(f"[bold]Filename:[/bold] {escape(response.output.filename)}")
            for tunnel in response.tunnel:
                console.print(f"  [dim]{escape(tunnel)}[/dim]", soft_wrap=True)


def print_download_result(console: Console, result: DownloadResult) -> None:
    path = escape(str(result.path))
    if result.status == DownloadStatus.SKIPPED:
        reason = result.skip_reason.label if result.skip_reason else "skipped"
        console.print(f"[yellow]skipped ({reason}):[/yellow] {path}", soft_wrap=True)
    else:
        console.print(f"saved to {path}", soft_wrap=True)


def dump_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False, default=str)
    sys.stdout.write("\n")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--instance-url",
    metavar="URL",
    help="cobalt instance URL (env: CODL_INSTANCE_URL or INSTANCE_URL).",
)
@click.option(
    "--api-key",
    metavar="KEY",
    help="cobalt API key (env: CODL_API_KEY or AUTH_TOKEN).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Request timeout in seconds.",
)
@click.version_option(package_name="codl")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    instance_url: str | None,
    api_key: str | None,
    timeout: float | None,
) -> None:
    """Download media through a cobalt instance."""
    try:
        settings = Settings()
    except ValidationError as e:
        raise click.ClickException(
            f"Configuration error: {e.errors()[0]['msg']}"
        ) from e

    overrides = {
        key: value
        for key, value in (
            ("instance_url", instance_url),
            ("api_key", api_key),
            ("timeout", timeout),
        )
        if value is not None
    }
    if overrides:
        settings = settings.model_copy(update=overrides)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = settings
    setup_logging(verbose=verbose, level=settings.log_level)


@main.command(name="info")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show information about the cobalt instance."""
    console = Console()
    client = make_client(ctx)

    try:
        with client:
            info = client.info()
    except CodlError as e:
        logger.error(str(e))
        raise click.ClickException(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error")
        raise click.ClickException(f"Unexpected error: {e}") from e

    if as_json:
        dump_json(info.model_dump(mode="json", by_alias=True))
    else:
        print_server_info(console, info)


@main.command(name="process")
@click.argument("url", metavar="URL")
@process_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def process_cmd(
    ctx: click.Context, url: str, as_json: bool, **option_values: Any
) -> None:
    """Ask the instance about a media URL without downloading.

    \b
    Examples:
      codl process "https://twitter.com/i/status/1825427547108053062"
      codl process --mode audio --json "https://youtu.be/dQw4w9WgXcQ"
    """
    console = Console()
    client = make_client(ctx)

    try:
        options = build_options(option_values)
        with client:
            response = client.process(url, options)
    except (CodlError, ValueError) as e:
        logger.error(str(e))
        raise click.ClickException(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error")
        raise click.ClickException(f"Unexpected error: {e}") from e

    if as_json:
        dump_json(response.model_dump(mode="json", by_alias=True, exclude_none=True))
    else:
        print_response(console, response)


@main.command(name="download")
@click.argument("url", metavar="URL")
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory to save files into.",
)
@process_options
@click.option(
    "--picker-index",
    type=click.IntRange(min=0),
    default=None,
    help="Which picker item to save (0-based, default: first).",
)
@click.option(
    "--all", "save_all", is_flag=True, help="Save every item of a picker response."
)
@click.option("--overwrite", is_flag=True, help="Replace existing files.")
@click.option(
    "--ascii-filenames",
    is_flag=True,
    help="Transliterate unicode to ASCII in filenames.",
)
@click.pass_context
def download_cmd(
    ctx: click.Context,
    url: str,
    output: Path,
    picker_index: int | None,
    save_all: bool,
    overwrite: bool,
    ascii_filenames: bool,
    **option_values: Any,
) -> None:
    """Download media from a URL through the cobalt instance.

    For posts with several items (a picker response) the first item is
    saved, unless --picker-index or --all is given. Existing files are
    skipped unless --overwrite is given.

    \b
    Examples:
      codl download "https://twitter.com/i/status/1825427547108053062"
      codl download --mode audio -o ~/Music "https://youtu.be/dQw4w9WgXcQ"
      codl download --all -o ./photos "https://www.instagram.com/p/POST_ID/"
    """
    if save_all and picker_index is not None:
        raise click.UsageError("--all and --picker-index cannot be used together")

    console = Console()
    verbose = ctx.obj.get("verbose", False)
    settings: Settings = ctx.obj["settings"]

    # Reconfigure logging to use this console so logs appear above progress bar
    setup_logging(verbose=verbose, console=console, level=settings.log_level)
    client = make_client(ctx, ascii_filenames=ascii_filenames)

    results: list[DownloadResult] = []
    try:
        options = build_options(option_values)
        with client:
            response = client.process(url, options)
            if save_all:
                targets = media_targets(response)
            else:
                targets = [resolve_media(response, picker_index or 0)]

            with Progress(*PROGRESS_COLUMNS, console=console) as progress:
                for target in targets:
                    task = progress.add_task(
                        escape(target.filename or target.fallback_filename), total=None
                    )

                    def on_progress(
                        done: int, total: int | None, task_id: Any = task
                    ) -> None:
                        progress.update(task_id, completed=done, total=total)

                    result = client.download_file(
                        target.url,
                        output,
                        target.filename,
                        fallback_filename=target.fallback_filename,
                        overwrite=overwrite,
                        on_progress=on_progress,
                        taken={r.filename for r in results},
                    )
                    results.append(result)
    except (CodlError, ValueError) as e:
        logger.error(str(e))
        raise click.ClickException(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error")
        raise click.ClickException(f"Unexpected error: {e}") from e

    for result in results:
        print_download_result(console, result)


if __name__ == "__main__":
    main()

"""Command-line interface."""

import json
import logging
import sys
from pathlib import Path

import click

from ..api.client import MuseClient, ingesting_flag
from ..config.settings import ConfigManager, load_config
from ..core.models import (
    NO_CHANGES,
    AnalysisKind,
    CoverByFile,
    CoverByTimestamp,
    Failure,
    Visibility,
)

VISIBILITY_CHOICES = [v.value for v in Visibility]
ANALYSIS_CHOICES = [k.value for k in AnalysisKind]


def _echo_result(result) -> None:
    """Print a client result as JSON and exit non-zero on failure."""
    if result is NO_CHANGES:
        click.echo("No changes requested")
        return
    if isinstance(result, Failure):
        click.echo(json.dumps(result.as_dict(), indent=2), err=True)
        sys.exit(1)
    click.echo(json.dumps(result.body, indent=2, ensure_ascii=False))


def _configure_logging(level: str, log_file: str | None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Custom configuration file",
)
@click.option("--api-key", envvar="MUSEAI_API_KEY", help="muse.ai API key")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, config: Path | None, api_key: str | None, verbose: bool):
    """Manage muse.ai collections and videos.

    Results are printed as JSON. Commands exit with status 1 when the API
    reports an error.
    """
    settings = load_config(config)
    if api_key:
        settings = settings.model_copy(
            update={"api": settings.api.model_copy(update={"api_key": api_key})}
        )

    _configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)

    ctx.obj = settings


def _client(ctx: click.Context) -> MuseClient:
    settings = ctx.obj
    if not settings.api.api_key:
        raise click.UsageError(
            "No API key configured. Use --api-key, MUSEAI_API_KEY or the config file."
        )
    return MuseClient(settings.api)


@main.command()
@click.pass_context
def collections(ctx: click.Context):
    """List collections."""
    _echo_result(_client(ctx).list_collections())


@main.command()
@click.argument("scid")
@click.pass_context
def collection(ctx: click.Context, scid: str):
    """Show one collection."""
    _echo_result(_client(ctx).get_collection(scid))


@main.command("create-collection")
@click.argument("name")
@click.option("--visibility", type=click.Choice(VISIBILITY_CHOICES), default="private",
              show_default=True)
@click.pass_context
def create_collection(ctx: click.Context, name: str, visibility: str):
    """Create a collection."""
    _echo_result(_client(ctx).create_collection(name, visibility))


@main.command("delete-collection")
@click.argument("scid")
@click.pass_context
def delete_collection(ctx: click.Context, scid: str):
    """Delete a collection."""
    _echo_result(_client(ctx).delete_collection(scid))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--collection", help="SCID of the collection to add the video to")
@click.option("--visibility", type=click.Choice(VISIBILITY_CHOICES))
@click.pass_context
def upload(ctx: click.Context, file: Path, collection: str | None, visibility: str | None):
    """Upload a video file."""
    client = _client(ctx)
    with open(file, "rb") as handle:
        _echo_result(client.upload_video(handle, collection, visibility))


@main.command()
@click.argument("fid")
@click.option("--visibility", type=click.Choice(VISIBILITY_CHOICES))
@click.option("--title")
@click.option("--description")
@click.option("--domain", "domains", multiple=True, help="Restrict embedding to a domain (repeatable)")
@click.pass_context
def update(ctx: click.Context, fid: str, visibility: str | None, title: str | None,
           description: str | None, domains: tuple[str, ...]):
    """Update video attributes."""
    _echo_result(_client(ctx).update_video(fid, visibility, title, description, list(domains)))


@main.command()
@click.argument("fid")
@click.pass_context
def delete(ctx: click.Context, fid: str):
    """Delete a video."""
    _echo_result(_client(ctx).delete_video(fid))


@main.command()
@click.pass_context
def videos(ctx: click.Context):
    """List videos."""
    _echo_result(_client(ctx).list_videos())


@main.command()
@click.argument("svid")
@click.pass_context
def video(ctx: click.Context, svid: str):
    """Show one video."""
    _echo_result(_client(ctx).get_video(svid))


@main.command()
@click.argument("svid")
@click.pass_context
def ingesting(ctx: click.Context, svid: str):
    """Show whether a video is still being processed.

    A failed lookup is reported as an error instead of "Ready".
    """
    result = _client(ctx).get_video(svid)
    if isinstance(result, Failure):
        _echo_result(result)
    click.echo("Ingesting" if ingesting_flag(result) else "Ready")


@main.command()
@click.argument("fid")
@click.option("--time", "-t", type=click.IntRange(min=0), help="Use the frame at this second")
@click.option("--file", "-f", "image", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Upload this image (PNG, JPEG, JPG)")
@click.pass_context
def cover(ctx: click.Context, fid: str, time: int | None, image: Path | None):
    """Change the cover of a video."""
    if time is not None and image is not None:
        raise click.UsageError("Use either --time or --file, not both")
    client = _client(ctx)
    if image is not None:
        with open(image, "rb") as handle:
            _echo_result(client.change_video_cover(fid, CoverByFile(handle)))
    elif time is not None:
        _echo_result(client.change_video_cover(fid, CoverByTimestamp(time)))
    else:
        _echo_result(client.change_video_cover(fid))


@main.command()
@click.argument("kind", type=click.Choice(ANALYSIS_CHOICES))
@click.argument("svid")
@click.pass_context
def analysis(ctx: click.Context, kind: str, svid: str):
    """Show scenes, speech, text, actions, sounds or faces of a video."""
    _echo_result(_client(ctx).get_video_analysis(kind, svid))


@main.command()
@click.argument("fid")
@click.option("--time", "-t", type=click.IntRange(min=0), help="Timestamp in seconds")
@click.pass_context
def thumbnail(ctx: click.Context, fid: str, time: int | None):
    """Print the thumbnail URL of a video."""
    click.echo(MuseClient(ctx.obj.api).thumbnail_url(fid, time))


@main.command("init-config")
@click.argument("output", type=click.Path(path_type=Path), required=False)
def init_config(output: Path | None):
    """Write a commented sample configuration file."""
    output = output or (Path.cwd() / "museai_sample.yaml")
    ConfigManager(output).create_sample_config(output)
    click.echo(f"Sample configuration created at {output}")


if __name__ == "__main__":
    main()

"""Command-line interface for web2markdown."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .core.converter import Converter
from .errors import Web2MarkdownError
from .logging_config import setup_logging
from .models.config import Web2MarkdownConfig
from .models.events import ConversionEvent, EventType
from .settings import SettingsStore


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="web2markdown",
        description="Convert a web page's main content to clean markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract and refine with the configured LLM, copy to clipboard
  web2markdown https://example.com/article

  # Extraction only, no LLM call, no images
  web2markdown https://example.com/article --raw --no-images

  # Convert a saved page, resolving links against its original URL
  web2markdown page.html --url https://example.com/article -o article.md

  # Persist model settings and check the endpoint
  web2markdown --model gpt-4.1-mini --api-key '$OPENAI_API_KEY' --save-settings --test-connection
        """,
    )

    parser.add_argument(
        "source",
        nargs="?",
        help="http(s) URL or local HTML file to convert",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Page URL for a local HTML file (used to resolve relative links)",
    )

    # Extraction
    extraction_group = parser.add_argument_group("extraction")
    extraction_group.add_argument(
        "--no-images",
        action="store_true",
        help="Leave images out of the markdown",
    )
    extraction_group.add_argument(
        "--remove",
        nargs="+",
        metavar="SELECTOR",
        help="Extra boilerplate selectors to strip (e.g. .cookie-banner)",
    )

    # Refine
    refine_group = parser.add_argument_group("refine (LLM)")
    refine_group.add_argument(
        "--raw",
        action="store_true",
        help="Skip the LLM and output the extracted markdown",
    )
    refine_group.add_argument("--model", type=str, help="Chat completion model")
    refine_group.add_argument("--endpoint", type=str, metavar="URL", help="Chat completions endpoint")
    refine_group.add_argument("--api-key", type=str, help="API key (supports $VAR)")
    refine_group.add_argument("--temperature", type=float, default=None, help="Sampling temperature")
    refine_group.add_argument(
        "--test-connection",
        action="store_true",
        help="Send a minimal request to the endpoint and exit",
    )

    # Delivery
    delivery_group = parser.add_argument_group("delivery")
    delivery_group.add_argument(
        "--copy",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Copy the result to the clipboard",
    )
    delivery_group.add_argument(
        "--append-page-info",
        action="store_true",
        default=None,
        help="Append a source link footer",
    )
    delivery_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the markdown to this file instead of stdout",
    )

    # Settings
    settings_group = parser.add_argument_group("settings")
    settings_group.add_argument(
        "--settings",
        type=Path,
        default=None,
        metavar="FILE",
        help="Settings file (default: ~/.config/web2markdown/settings.yaml)",
    )
    settings_group.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML configuration file for sections not covered by settings",
    )
    settings_group.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the model, endpoint, API key, temperature and image options given",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    output_group.add_argument("--quiet", "-q", action="store_true", help="Suppress notices")

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.model:
        overrides["model"] = args.model
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.api_key:
        overrides["api_key"] = args.api_key
    if args.temperature is not None:
        overrides["temperature"] = args.temperature
    if args.no_images:
        overrides["include_images"] = False
    return overrides


def build_config(args: argparse.Namespace, store: SettingsStore) -> Web2MarkdownConfig:
    """Merge YAML config, stored settings and command-line flags."""
    base = Web2MarkdownConfig.from_yaml_file(args.config) if args.config else Web2MarkdownConfig()
    config = store.to_config(base)

    data = config.model_dump()
    overrides = _settings_overrides(args)
    if "include_images" in overrides:
        data["extraction"]["include_images"] = overrides.pop("include_images")
    data["refine"].update(overrides)

    if args.remove:
        data["extraction"]["remove_selectors"] = data["extraction"]["remove_selectors"] + args.remove
    if args.raw:
        data["refine"]["enabled"] = False
    if args.copy is not None:
        data["delivery"]["auto_copy"] = args.copy
    if args.append_page_info:
        data["delivery"]["append_page_info"] = True
    if args.output:
        data["delivery"]["output_file"] = args.output
    if args.quiet:
        data["delivery"]["show_notifications"] = False

    if args.verbose:
        data["log_level"] = "DEBUG"
    elif args.quiet:
        data["log_level"] = "ERROR"

    return Web2MarkdownConfig.model_validate(data)


def _load_source(args: argparse.Namespace) -> tuple[str, Optional[bytes]]:
    """Return (page URL, HTML or None when the URL should be fetched)."""
    source: str = args.source
    if source.startswith(("http://", "https://")):
        return source, None

    path = Path(source).expanduser()
    if not path.is_file():
        raise Web2MarkdownError(f"Not a URL or readable file: {source}")
    return args.url or path.resolve().as_uri(), path.read_bytes()


def run_converter(args: argparse.Namespace) -> int:
    """Run a conversion (or connection test) with given arguments."""
    console = Console(stderr=True)
    store = SettingsStore(args.settings)

    try:
        config = build_config(args, store)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config.log_level, str(config.log_file) if config.log_file else None)

    if args.save_settings:
        overrides = _settings_overrides(args)
        store.set(**overrides)
        if "model" in overrides or "endpoint" in overrides:
            store.remember_model(config.refine.model, config.refine.endpoint)
        if not args.quiet:
            console.print(f"Saved settings to {store.path}")

    if args.test_connection:
        return asyncio.run(_test_connection(config, console))

    if not args.source:
        if args.save_settings:
            return 0
        console.print("[red]Error:[/red] Please provide a URL or HTML file to convert")
        return 1

    try:
        url, html = _load_source(args)
    except Web2MarkdownError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    async def run() -> int:
        async with Converter(config) as converter:
            if args.quiet:
                ctx = await converter.convert(url, html=html)
            else:
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    console=console,
                    transient=True,
                ) as progress:
                    task = progress.add_task("Starting...", total=None)

                    def on_event(event: ConversionEvent) -> None:
                        if event.type == EventType.FETCH_STARTED:
                            progress.update(task, description=f"[cyan]Fetching {event.url}")
                        elif event.type == EventType.CONTENT_EXTRACTED:
                            progress.update(task, description=f"[cyan]{event.message}")
                        elif event.type == EventType.REFINE_STARTED:
                            progress.update(task, description=f"[cyan]{event.message}")

                    ctx = await converter.convert(url, html=html, emit=on_event)

        if ctx.error:
            if not config.delivery.show_notifications and not args.quiet:
                console.print(f"[red]Failed:[/red] {ctx.error}")
            return 1

        if ctx.refined:
            store.remember_model(config.refine.model, config.refine.endpoint)
        if config.delivery.output_file is None and ctx.markdown is not None:
            sys.stdout.write(ctx.markdown + "\n")
        return 0

    try:
        return asyncio.run(run())
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


async def _test_connection(config: Web2MarkdownConfig, console: Console) -> int:
    async with Converter(config) as converter:
        ok, message = await converter.test_connection()
    console.print(f"[green]{message}[/green]" if ok else f"[red]{message}[/red]")
    return 0 if ok else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_converter(args)


if __name__ == "__main__":
    sys.exit(main())

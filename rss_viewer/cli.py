"""Command-line interface for the rss_viewer application."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from .client import USER_AGENT, FeedClient
from .config import AppConfig, parse_app_config, parse_env_config, resolve_backend_url
from .driver import Driver
from .models import ClosePreview, HoverItem, InputChanged, Submit, Success
from .renderers import render_html, render_text

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Commands:
  url <text>   set the URL input
  submit       fetch the URL in the input
  show <n>     preview item n
  close        close the preview
  quit         exit
Any other line is used as the URL and submitted."""


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(description="View RSS feeds through a feed backend.")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional path to a configuration XML file.",
    )
    parser.add_argument(
        "--backend-url",
        default=None,
        help="Base URL of the feed backend. Overrides environment and config.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds. No timeout unless set.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    parser.add_argument(
        "--html",
        metavar="PATH",
        help="Write the rendered HTML page to PATH after every change.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Fetch a single feed, print it and exit.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def _write_html(path: str, html: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(html, encoding="utf-8")


def _handle_command(driver: Driver, line: str, out: TextIO) -> bool:
    """Translate one input line into events. Returns False when asked to quit."""
    command, _, argument = line.strip().partition(" ")
    argument = argument.strip()

    if command in ("quit", "exit"):
        return False
    if command == "help":
        print(HELP_TEXT, file=out)
    elif command == "url":
        driver.dispatch(InputChanged(argument))
    elif command == "submit":
        driver.dispatch(Submit())
    elif command == "close":
        driver.dispatch(ClosePreview())
    elif command == "show":
        request = driver.model.request
        items = request.items if isinstance(request, Success) else ()
        try:
            item = items[int(argument) - 1]
        except (ValueError, IndexError):
            print(f"No item {argument!r}", file=out)
        else:
            driver.dispatch(HoverItem(item))
    elif command:
        driver.dispatch(InputChanged(line.strip()))
        driver.dispatch(Submit())
    return True


def run_shell(
    driver: Driver,
    lines: Iterable[str],
    out: TextIO,
    html_path: Optional[str] = None,
) -> None:
    """Run the interactive loop over ``lines`` until exhausted or ``quit``."""
    print(render_text(driver.model), file=out)
    for line in lines:
        if not _handle_command(driver, line, out):
            break
        driver.wait_idle()
        print(render_text(driver.model), file=out)
        if html_path:
            _write_html(html_path, render_html(driver.model))


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        backend_url = resolve_backend_url(args.backend_url, app_config)
        timeout = args.timeout if args.timeout is not None else app_config.timeout
        if timeout is not None and timeout <= 0:
            raise ValueError("--timeout must be positive.")
        logger.info("Using feed backend %s (timeout=%s)", backend_url, timeout)

        client = FeedClient(
            backend_url,
            timeout=timeout,
            user_agent=app_config.user_agent or USER_AGENT,
        )
        with Driver(client) as driver:
            if args.url is not None:
                driver.dispatch(InputChanged(args.url))
                driver.dispatch(Submit())
                model = driver.wait_idle()
                print(render_text(model))
                if args.html:
                    _write_html(args.html, render_html(model))
                return 0 if isinstance(model.request, Success) else 1

            run_shell(driver, sys.stdin, sys.stdout, html_path=args.html)
    except ValueError as exc:
        parser.error(str(exc))
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    return 0

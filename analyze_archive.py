#!/usr/bin/env python3
"""Archive analyzer tool that inspects ZIP archives.

Reconstructs the directory tree of each archive, classifies files as
analyzable (source and text formats) or not, and reports line counts per
file and in total.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from archive_analyzer.config import AppConfig, ArchiveAnalyzerError, DEFAULT_CONFIG_PATH
from archive_analyzer.core import AnalysisSession
from archive_analyzer.interfaces.cli import CLIPresenter
from archive_analyzer.utils import print_error, print_info
from archive_analyzer.utils.events import SimpleEmitter

# Logger will be configured in main() after loading config
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ARCHIVE_ANALYZER_CONFIG"
PROMPT = "Archive path (empty line to quit): "


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="analyze_archive",
        description="Show the directory tree and line counts of ZIP archives.",
    )
    parser.add_argument(
        "archives", nargs="*", type=Path, metavar="ARCHIVE",
        help="ZIP archive(s) to analyze; prompts interactively if omitted",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help=f"YAML configuration file (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Console log level, overrides logging.level from the config",
    )
    parser.add_argument(
        "--no-spinner", action="store_true",
        help="Disable progress spinners",
    )
    return parser


def setup_logging(config_log_level: str, log_file: Optional[Path] = None) -> None:
    """Configure logging with a console handler and an optional file handler."""
    log_level = getattr(logging, config_log_level.upper(), logging.INFO)

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(funcName)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    handlers: list[logging.Handler] = [console_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(levelname)s - %(funcName)s - %(message)s')
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file is not None else log_level,
        handlers=handlers,
        force=True
    )


def load_config(config_path: Optional[Path]) -> AppConfig:
    """Load configuration from the CLI flag, the environment, or the default file.
    
    Only an explicitly named file (flag or environment variable) has to exist.
    """
    load_dotenv(find_dotenv(usecwd=True))
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])
    if config_path is not None:
        return AppConfig.load(config_path)
    return AppConfig.load(DEFAULT_CONFIG_PATH, required=False)


def collect_archives(args: argparse.Namespace, config: AppConfig) -> list[Path]:
    """Archives named on the command line, else the configured one (if any)."""
    if args.archives:
        return list(args.archives)
    if config.project.archive_path is not None:
        return [config.project.archive_path]
    return []


async def analyze_all(
    session: AnalysisSession,
    presenter: CLIPresenter,
    archives: list[Path]
) -> bool:
    """Analyze archives one after another; return True if all succeeded."""
    all_ok = True
    for archive in archives:
        outcome = await session.analyze(archive)
        presenter.show_outcome(outcome)
        all_ok = all_ok and outcome.ok
        print()
    return all_ok


async def interactive_loop(session: AnalysisSession, presenter: CLIPresenter) -> bool:
    """Prompt for archive paths until an empty line or end of input."""
    presenter.show_idle()
    all_ok = True
    while True:
        try:
            raw = await asyncio.to_thread(input, PROMPT)
        except EOFError:
            break
        raw = raw.strip().strip('"').strip("'")
        if not raw:
            break
        all_ok = await analyze_all(session, presenter, [Path(raw).expanduser()]) and all_ok
    return all_ok


async def run(args: argparse.Namespace, config: AppConfig) -> bool:
    emitter = SimpleEmitter()
    presenter = CLIPresenter(show_spinners=not args.no_spinner)
    presenter.attach_to_pipeline(emitter)
    session = AnalysisSession(config, emitter)

    archives = collect_archives(args, config)
    if archives:
        return await analyze_all(session, presenter, archives)
    return await interactive_loop(session, presenter)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the archive analyzer."""
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config.logging.level, config.logging.log_file)
        ok = asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print_info("Interrupted.", indent=0)
        sys.exit(130)
    except ArchiveAnalyzerError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected Error: {e}")
        logger.debug("Unexpected error occurred", exc_info=True)
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()

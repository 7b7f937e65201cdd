"""
Command-line plumbing shared by all skills.

Every skill exposes `build_parser()` and `main(argv) -> int`; `execute()` runs the
skill body once and converts any failure into a logged message and exit code 1.
"""

import argparse
import asyncio
import inspect
import sys
from typing import Any, Callable, NoReturn

import structlog
from dotenv import load_dotenv

from .errors import SkillError
from .logging import configure_logging

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1


class SkillArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits 1 (not 2) on invalid arguments."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def str2bool(value: str) -> bool:
    """Parse `true`/`false` style flag values."""
    lowered = str(value).strip().lower()
    if lowered in ("true", "1", "yes", "y", "on"):
        return True
    if lowered in ("false", "0", "no", "n", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def add_browser_arguments(parser: argparse.ArgumentParser, timeout: bool = True) -> None:
    """Add the --headless/--timeout flags used by browser skills."""
    parser.add_argument(
        "--headless",
        type=str2bool,
        default=None,
        metavar="BOOL",
        help="Run in headless mode (default: true)",
    )
    if timeout:
        parser.add_argument(
            "--timeout",
            type=int,
            default=None,
            metavar="MS",
            help="Page load timeout in milliseconds (default: 30000)",
        )


def execute(operation: Callable[[], Any], skill: str) -> int:
    """
    Run a skill body and map its outcome to an exit code.

    `operation` may be a plain callable or return a coroutine; coroutines are
    driven on a fresh event loop.
    """
    configure_logging()
    load_dotenv()
    log = logger.bind(skill=skill)

    try:
        result = operation()
        if inspect.iscoroutine(result):
            result = asyncio.run(result)
    except SkillError as e:
        log.error("skill_failed", **e.to_dict())
        return EXIT_FAILURE
    except KeyboardInterrupt:
        log.warning("skill_interrupted")
        return EXIT_FAILURE
    except Exception as e:
        log.exception("skill_failed", error=str(e))
        return EXIT_FAILURE

    if isinstance(result, int) and not isinstance(result, bool):
        return result
    return EXIT_OK

"""CLI entry point.

Without arguments an interactive REPL starts; otherwise the arguments are run
as a single command, e.g. ``filesync download 3 ~/Desktop/``.
"""

import os
import shlex
import sys

from common.logging_config import setup_logging
from cli.commands import dispatch_command
from cli.parser import ParseError, parse_command
from cli.repl import repl_loop


def run_once(argv: list[str]) -> int:
    """
    Run a single command given on the command line.

    Returns:
        Process exit status
    """
    try:
        cmd_obj = parse_command(shlex.join(argv))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    result = dispatch_command(cmd_obj)
    print(result)
    return 1 if result.startswith("Error") or " failed: " in result else 0


def main() -> None:
    """Entry point for CLI."""
    argv = sys.argv[1:]
    debug = '--debug' in argv
    if debug:
        argv = [arg for arg in argv if arg != '--debug']

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if debug:
        logger.info("Debug logging enabled")

    if argv:
        sys.exit(run_once(argv))

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()

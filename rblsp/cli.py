#!/usr/bin/env python3
"""Command-line interface for the Ruby Language Server."""

import logging
import sys
from typing import Optional, Tuple

import click

from rblsp import __version__
from rblsp.config import ServerSettings, configure_logging
from rblsp.service import create_server


@click.command()
@click.option(
    "--root",
    "roots",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    envvar="RBLSP_ROOT",
    help="Project root directory (repeatable, defaults to the current directory)",
)
@click.option("--ruby", "ruby_executable", default="ruby", envvar="RBLSP_RUBY", show_default=True,
              help="Ruby interpreter used for diagnostics")
@click.option("--rct-complete", "rct_complete_command", default="rct-complete", envvar="RBLSP_RCT_COMPLETE",
              show_default=True, help="rct-complete executable used for method completion")
@click.option("--debug/--no-debug", default=False, envvar="RBLSP_DEBUG", help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), envvar="RBLSP_LOG_FILE",
              help="Write logs to this file instead of stderr")
@click.version_option(__version__, prog_name="rblsp")
def main(
    roots: Tuple[str, ...],
    ruby_executable: str,
    rct_complete_command: str,
    debug: bool,
    log_file: Optional[str],
) -> None:
    """Run the Ruby language server on stdin/stdout.

    Args:
        roots: Project root directories.
        ruby_executable: Ruby interpreter used for diagnostics.
        rct_complete_command: rct-complete executable used for completion.
        debug: Whether to enable debug logging.
        log_file: Optional log file path.
    """
    settings = ServerSettings(
        roots=list(roots),
        ruby_executable=ruby_executable,
        rct_complete_command=rct_complete_command,
        debug=debug,
        log_file=log_file,
    )
    configure_logging(settings)

    try:
        server = create_server(settings)
    except ValueError as e:
        logging.error(f"Error: {e}")
        sys.exit(2)

    sys.exit(server.run())


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter

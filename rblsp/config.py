"""Runtime settings for the Ruby Language Server."""

import logging
import os
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ServerSettings(BaseModel):
    """Settings the server is started with.

    Attributes:
        roots: Project root directories.
        ruby_executable: Interpreter used for `ruby -wc` diagnostics.
        rct_complete_command: Executable used for method completion.
        debug: Whether to log at debug level.
        log_file: File to log to instead of stderr.
    """

    roots: List[str] = Field(default_factory=lambda: [os.getcwd()])
    ruby_executable: str = "ruby"
    rct_complete_command: str = "rct-complete"
    debug: bool = False
    log_file: Optional[str] = None

    @field_validator("roots")
    @classmethod
    def _absolute_roots(cls, roots: List[str]) -> List[str]:
        if not roots:
            return [os.getcwd()]
        return [os.path.abspath(root) for root in roots]


def configure_logging(settings: ServerSettings) -> None:
    """Configure the root logger for a server process.

    Logs never go to stdout, which carries protocol messages.

    Args:
        settings: Settings selecting the level and destination.
    """
    log_level = logging.DEBUG if settings.debug else logging.INFO
    if settings.log_file:
        logging.basicConfig(level=log_level, format=LOG_FORMAT, filename=settings.log_file)
    else:
        logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)

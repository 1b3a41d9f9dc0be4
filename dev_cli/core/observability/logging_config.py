"""
Logging configuration — set up once by the CLI callback.

Every module does ``logger = logging.getLogger(__name__)``.  Records
are diagnostics only: they go to stderr through click, never to
stdout, so they cannot interleave with the output of a command run
inside a container.

Level precedence:
    --debug  >  --verbose  >  DEV_CLI_LOG_LEVEL env var  >  WARNING
"""

from __future__ import annotations

import logging
import os

import click

LOG_LEVEL_ENV = "DEV_CLI_LOG_LEVEL"

# The Docker SDK and its HTTP transport log every request at DEBUG
_NOISY_LOGGERS = ("urllib3", "docker", "charset_normalizer")


class ClickStderrHandler(logging.Handler):
    """Writes records with ``click.echo(err=True)``.

    Stderr is looked up per record, so records follow click's current
    stream (including a CliRunner's).
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def resolve_level(*, debug: bool = False, verbose: bool = False) -> int:
    """Pick the log level from CLI flags, then the environment.

    An unknown level name in the environment means WARNING.
    """
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.WARNING)


def _formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(
            "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s",
            datefmt="%H:%M:%S",
        )
    if level <= logging.INFO:
        return logging.Formatter("[%(name)s] %(message)s")
    return logging.Formatter("%(levelname)s: %(message)s")


def setup_logging(level: int = logging.WARNING, quiet_third_party: bool = True) -> None:
    """Install the stderr handler on the root logger.

    Calling it again replaces the handler installed by a previous call;
    handlers added by anyone else are left alone.

    Args:
        level: Numeric log level.
        quiet_third_party: Hold the Docker SDK and urllib3 at WARNING
            below DEBUG.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, ClickStderrHandler):
            root.removeHandler(handler)

    handler = ClickStderrHandler(level)
    handler.setFormatter(_formatter(level))
    root.addHandler(handler)
    root.setLevel(level)

    third_party_level = logging.NOTSET
    if quiet_third_party and level > logging.DEBUG:
        third_party_level = logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

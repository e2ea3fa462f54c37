from __future__ import annotations

import logging
import sys

_QUIET_FORMAT = "compass: %(message)s"
_VERBOSE_FORMAT = "compass [%(levelname)s] %(name)s: %(message)s"


def log_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """
    Route log records to stderr so stdout only carries the report.

    --verbose wins over --quiet for programmatic callers; the CLI rejects both.
    """

    logging.basicConfig(
        level=log_level(verbose=verbose, quiet=quiet),
        format=_VERBOSE_FORMAT if verbose else _QUIET_FORMAT,
        stream=sys.stderr,
        force=True,
    )

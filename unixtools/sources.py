import logging
import sys
from contextlib import contextmanager
from typing import BinaryIO, Generator

from unixtools.errors import FileAccessError

logger = logging.getLogger(__name__)

STDIN_NAME = "-"


@contextmanager
def open_source(path: str | None = None) -> Generator[BinaryIO, None, None]:
    """
    Yield a binary stream for `path`, or standard input for None / "-".

    Files are closed when the block exits, even if the consumer stops early.
    Standard input is left open.
    """
    if path is None or path == STDIN_NAME:
        logger.debug("reading standard input")
        yield sys.stdin.buffer
        return

    try:
        file = open(path, "rb")
    except OSError as e:
        raise FileAccessError(path, e.strerror or str(e)) from e

    logger.debug("opened %s", path)
    with file:
        yield file


def display_name(path: str | None) -> str:
    if path is None or path == STDIN_NAME:
        return "(standard input)"
    return path

import logging
import shutil
import sys
from dataclasses import dataclass
from typing import BinaryIO, TextIO

from unixtools.errors import EXIT_ERROR, EXIT_SUCCESS, FileAccessError
from unixtools.sources import display_name, open_source

logger = logging.getLogger(__name__)


@dataclass
class CatOptions:
    number: bool = False
    number_nonblank: bool = False
    squeeze_blank: bool = False

    @property
    def is_raw(self) -> bool:
        return not (self.number or self.number_nonblank or self.squeeze_blank)


@dataclass
class LineFormatter:
    """Numbering and blank-squeezing state, shared by every input of one run."""

    options: CatOptions
    line_number: int = 0
    previous_blank: bool = False

    def format_line(self, line: bytes) -> bytes | None:
        """Return the output for `line`, or None when it is squeezed away."""
        is_blank = line.rstrip(b"\r\n") == b""

        if self.options.squeeze_blank and is_blank and self.previous_blank:
            return None
        self.previous_blank = is_blank

        if self.options.number_nonblank:
            if is_blank:
                return line
        elif not self.options.number:
            return line

        self.line_number += 1
        return f"{self.line_number:6d}\t".encode() + line


def cat_stream(stream: BinaryIO, out: BinaryIO, formatter: LineFormatter) -> None:
    if formatter.options.is_raw:
        shutil.copyfileobj(stream, out)
        return

    for line in stream:
        formatted = formatter.format_line(line)
        if formatted is not None:
            out.write(formatted)


def cat(
    paths: list[str],
    options: CatOptions,
    out: BinaryIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout.buffer
    err = err or sys.stderr

    formatter = LineFormatter(options)
    status = EXIT_SUCCESS

    for path in paths or ["-"]:
        logger.debug("concatenating %s", display_name(path))
        try:
            with open_source(path) as stream:
                cat_stream(stream, out, formatter)
        except BrokenPipeError:
            raise
        except FileAccessError as e:
            err.write(f"cat: {e.path}: {e.reason}\n")
            status = EXIT_ERROR
        except OSError as e:
            err.write(f"cat: {display_name(path)}: {e.strerror or e}\n")
            status = EXIT_ERROR

    out.flush()
    return status

import logging
import re
import sys
from dataclasses import dataclass
from typing import Generator, Iterable, TextIO

from unixtools.errors import (
    EXIT_ERROR,
    EXIT_FAILURE,
    EXIT_SUCCESS,
    FileAccessError,
    PatternError,
)
from unixtools.sources import display_name, open_source

logger = logging.getLogger(__name__)


@dataclass
class GrepOptions:
    invert: bool = False
    line_number: bool = False
    with_file_name: bool = False
    files_with_matches: bool = False
    count: bool = False


def compile_pattern(pattern: str, ignore_case: bool = False) -> re.Pattern:
    flags = re.IGNORECASE if ignore_case else 0
    try:
        regex = re.compile(pattern, flags)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e

    logger.debug("compiled pattern %r (flags=%d)", pattern, flags)
    return regex


def matches(regex: re.Pattern, line: str) -> bool:
    return regex.search(line) is not None


def match_lines(
    lines: Iterable[str], regex: re.Pattern, invert: bool = False
) -> Generator[tuple[int, str], None, None]:
    """
    Yield (line_number, line) for every selected line, numbering from 1.

    The yielded line drops only its newline; a carriage return before it is
    kept so the line is written back unchanged. Matching sees neither.
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.removesuffix("\n")
        if matches(regex, line.removesuffix("\r")) != invert:
            yield line_number, line


def _decoded_lines(stream) -> Generator[str, None, None]:
    for raw in stream:
        # Undecodable bytes round-trip through surrogates on output
        yield raw.decode("utf-8", errors="surrogateescape")


def grep(
    regex: re.Pattern,
    paths: list[str],
    options: GrepOptions,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """
    Search each input for `regex` and write the selected lines to `out`.

    Returns EXIT_SUCCESS when any line was selected, EXIT_FAILURE when none
    was, and EXIT_ERROR when an input could not be read.
    """
    out = out or sys.stdout
    err = err or sys.stderr
    inputs = paths or ["-"]
    show_names = options.with_file_name or len(inputs) > 1

    any_selected = False
    had_error = False

    for path in inputs:
        name = display_name(path)
        try:
            with open_source(path) as stream:
                selected = match_lines(_decoded_lines(stream), regex, options.invert)

                if options.files_with_matches:
                    if next(selected, None) is not None:
                        any_selected = True
                        out.write(f"{name}\n")
                    continue

                if options.count:
                    count = sum(1 for _ in selected)
                    any_selected = any_selected or count > 0
                    prefix = f"{name}:" if show_names else ""
                    out.write(f"{prefix}{count}\n")
                    continue

                for line_number, line in selected:
                    any_selected = True
                    prefix = f"{name}:" if show_names else ""
                    if options.line_number:
                        prefix += f"{line_number}:"
                    out.write(f"{prefix}{line}\n")
        except BrokenPipeError:
            raise
        except FileAccessError as e:
            err.write(f"grep: {e.path}: {e.reason}\n")
            had_error = True
        except OSError as e:
            err.write(f"grep: {name}: {e.strerror or e}\n")
            had_error = True

    if had_error:
        return EXIT_ERROR
    return EXIT_SUCCESS if any_selected else EXIT_FAILURE

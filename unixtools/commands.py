from argparse import ArgumentParser, ArgumentTypeError
import sys

from unixtools.cat import CatOptions, cat as cat_paths
from unixtools.errors import EXIT_ERROR, EXIT_SUCCESS, FileAccessError, PatternError
from unixtools.grep import GrepOptions, compile_pattern, grep as grep_paths
from unixtools.hexdump import RENDERERS, format_source
from unixtools.sources import display_name, open_source


def _non_negative_int(value: str) -> int:
    try:
        if value.lower().startswith("0x"):
            number = int(value, 16)
        else:
            number = int(value)
    except ValueError:
        raise ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise ArgumentTypeError(f"must not be negative: {value!r}")
    return number


def cat(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(
        prog="cat", description="Concatenates files to standard output."
    )
    parser.add_argument(
        "--number", "-n", action="store_true", help="Number all output lines"
    )
    parser.add_argument(
        "--number-nonblank",
        "-b",
        action="store_true",
        help="Number only non-blank output lines, overrides -n",
    )
    parser.add_argument(
        "--squeeze-blank",
        "-s",
        action="store_true",
        help="Suppress repeated blank lines",
    )
    parser.add_argument(
        "files", nargs="*", help="Input files, standard input if empty or '-'"
    )
    args = parser.parse_args(sys.argv[2:] if argv is None else argv)

    options = CatOptions(
        number=args.number and not args.number_nonblank,
        number_nonblank=args.number_nonblank,
        squeeze_blank=args.squeeze_blank,
    )
    return cat_paths(args.files, options)


def grep(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(
        prog="grep", description="Prints lines matching a regular expression."
    )
    parser.add_argument("pattern")
    parser.add_argument(
        "files", nargs="*", help="Input files, standard input if empty or '-'"
    )
    parser.add_argument(
        "-v", dest="invert", action="store_true", help="Select non-matching lines"
    )
    parser.add_argument(
        "-n",
        dest="line_number",
        action="store_true",
        help="Precede each line with its line number, starting at 1",
    )
    parser.add_argument(
        "-H",
        dest="with_file_name",
        action="store_true",
        help="Precede each line with the input file name",
    )
    parser.add_argument(
        "-l",
        dest="files_with_matches",
        action="store_true",
        help="Only print the names of files with selected lines",
    )
    parser.add_argument(
        "-c",
        dest="count",
        action="store_true",
        help="Only print a count of selected lines",
    )
    parser.add_argument(
        "-i", dest="ignore_case", action="store_true", help="Ignore case"
    )
    args = parser.parse_args(sys.argv[2:] if argv is None else argv)

    try:
        regex = compile_pattern(args.pattern, ignore_case=args.ignore_case)
    except PatternError as e:
        print(f"grep: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    options = GrepOptions(
        invert=args.invert,
        line_number=args.line_number,
        with_file_name=args.with_file_name,
        files_with_matches=args.files_with_matches,
        count=args.count,
    )
    # Lines are written back byte for byte, undecodable bytes included
    sys.stdout.reconfigure(encoding="utf-8", errors="surrogateescape")
    return grep_paths(regex, args.files, options)


def hexdump(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(
        prog="hexdump",
        description="Displays file contents in hexadecimal, decimal, octal or ASCII.",
    )
    formats = parser.add_mutually_exclusive_group()
    formats.add_argument(
        "-C",
        dest="renderer",
        action="store_const",
        const="canonical",
        help="Canonical hex+ASCII display (default)",
    )
    formats.add_argument(
        "-b",
        dest="renderer",
        action="store_const",
        const="one_byte_octal",
        help="One-byte octal display",
    )
    formats.add_argument(
        "-c",
        dest="renderer",
        action="store_const",
        const="one_byte_char",
        help="One-byte character display",
    )
    formats.add_argument(
        "-x",
        dest="renderer",
        action="store_const",
        const="two_bytes_hex",
        help="Two-byte hexadecimal display",
    )
    formats.add_argument(
        "-d",
        dest="renderer",
        action="store_const",
        const="two_bytes_decimal",
        help="Two-byte decimal display",
    )
    formats.add_argument(
        "-o",
        dest="renderer",
        action="store_const",
        const="two_bytes_octal",
        help="Two-byte octal display",
    )
    parser.add_argument(
        "-n",
        dest="length",
        type=_non_negative_int,
        default=None,
        help="Interpret only this many bytes of input",
    )
    parser.add_argument(
        "-s",
        dest="skip",
        type=_non_negative_int,
        default=0,
        help="Skip this many bytes from the beginning of the input",
    )
    parser.add_argument(
        "file", nargs="?", default=None, help="Input file, standard input if omitted"
    )
    args = parser.parse_args(sys.argv[2:] if argv is None else argv)
    render = RENDERERS[args.renderer or "canonical"]

    out = sys.stdout
    try:
        with open_source(args.file) as stream:
            for record in format_source(stream, skip=args.skip, length=args.length):
                out.write(render(record) + "\n")
    except BrokenPipeError:
        raise
    except FileAccessError as e:
        print(f"hexdump: {e.path}: {e.reason}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"hexdump: {display_name(args.file)}: {e.strerror or e}", file=sys.stderr)
        return EXIT_ERROR

    out.flush()
    return EXIT_SUCCESS

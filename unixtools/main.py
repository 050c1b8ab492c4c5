import logging
import os
import sys

from unixtools import commands
from unixtools.errors import EXIT_ERROR, EXIT_SUCCESS

USAGE = "usage: unixtools {cat,grep,hexdump} [args...]"


def _configure_logging() -> None:
    level = os.environ.get("UNIXTOOLS_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def run(argv: list[str]) -> int:
    if not argv:
        print(USAGE, file=sys.stderr)
        return EXIT_ERROR

    command, args = argv[0], argv[1:]
    match command:
        case "cat":
            return commands.cat(args)
        case "grep":
            return commands.grep(args)
        case "hexdump":
            return commands.hexdump(args)
        case _:
            print(f"unixtools: unknown command {command!r}", file=sys.stderr)
            print(USAGE, file=sys.stderr)
            return EXIT_ERROR


def main():
    _configure_logging()
    try:
        status = run(sys.argv[1:])
    except BrokenPipeError:
        # Reader went away; silence the flush at interpreter exit too
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        status = EXIT_SUCCESS
    sys.exit(status)


if __name__ == "__main__":
    main()

"""Command line interface: compress or decompress OBJ meshes."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import IO, ContextManager, Sequence

from edgebreaker.codec import compress_obj, decompress_obj
from edgebreaker.model import EdgeBreakerError
from edgebreaker.objfile import Obj

log = logging.getLogger(__name__)

_RESET = "\x1b[0m"
_LEVELS = (
    (logging.ERROR, "ERRO", "31"),
    (logging.WARNING, "WARN", "33"),
    (logging.INFO, "INFO", "36"),
    (logging.DEBUG, "DEBG", "34"),
)
_TRACE = ("TRAC", "35")


def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def _use_color() -> bool:
    return "NO_COLOR" not in os.environ


class Operation(Enum):
    """What the command does with its input."""

    COMPRESS = "compress"
    DECOMPRESS = "decompress"


@dataclass
class Options:
    """Parsed command line."""

    verbose: bool = False
    input: str | None = None
    output: str | None = None
    operation: Operation | None = None


class LevelFormatter(logging.Formatter):
    """Formats records as ``[LEVEL:file:line] message`` with a coloured level tag."""

    def __init__(self, color: bool = True) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, code = next(
            ((tag, code) for level, tag, code in _LEVELS if record.levelno >= level),
            _TRACE,
        )
        text = (
            f"[{_style(tag, '1', code, color=self.color)}:"
            f"{record.filename}:{record.lineno}] {record.getMessage()}"
        )
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


class _CliHandler(logging.StreamHandler):
    """Handler installed by :func:`configure_logging`."""


def configure_logging(verbose: bool) -> logging.Logger:
    """Send the package's log records to standard error."""
    logger = logging.getLogger("edgebreaker")
    for handler in list(logger.handlers):
        if isinstance(handler, _CliHandler):
            logger.removeHandler(handler)
    handler = _CliHandler(sys.stderr)
    handler.setFormatter(LevelFormatter(color=_use_color()))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


def parse_args(argv: Sequence[str]) -> Options:
    """Parse operations and flags; unknown arguments are reported and skipped."""
    options = Options()
    args = iter(argv)
    for arg in args:
        head = arg[:1]
        if head == "-":
            for flag in arg[1:]:
                if flag == "v":
                    options.verbose = True
                elif flag in ("i", "o"):
                    path = next(args, None)
                    if path is None:
                        log.error("-%s: missing file path", flag)
                    elif flag == "i":
                        options.input = path
                    else:
                        options.output = path
                else:
                    log.error("Unknown flag '%s'", flag)
        elif head == "c":
            if "compression".startswith(arg):
                options.operation = Operation.COMPRESS
            else:
                log.error("Unknown operation '%s'", arg)
        elif head == "d":
            if "decompression".startswith(arg):
                options.operation = Operation.DECOMPRESS
            else:
                log.error("Unknown operation '%s'", arg)
        else:
            log.error("Failed to parse argument '%s'", arg)
    return options


def _print_help() -> None:
    color = _use_color()
    program = (sys.argv[0] if sys.argv and sys.argv[0] else "edgebreaker").split("/")[-1]
    operations = _style("OPERATIONS", "32", color=color)
    flags = _style("FLAGS", "34", color=color)
    lines = [
        f"usage: {_style(program, '33', color=color)} <{operations}> [{flags}]",
        "",
        f"{operations}:",
        "  compress       Compress input and write it to output",
        "  decompress     Decompress input and write it to output",
        "",
        f"{flags}:",
        "  -i <file>      Input file. Defaults to stdin",
        "  -o <file>      Output file. Defaults to stdout",
        "  -v             Increase verbosity",
        "",
    ]
    print("\n".join(lines), file=sys.stderr)


def _open(path: str | None, mode: str, default: IO[str]) -> ContextManager[IO[str]]:
    if path is None:
        return nullcontext(default)
    return open(path, mode, encoding="utf-8")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    options = parse_args(sys.argv[1:] if argv is None else list(argv))
    configure_logging(options.verbose)

    if options.operation is None:
        _print_help()
        return 0

    try:
        source = _open(options.input, "r", sys.stdin)
    except OSError:
        log.error("Input file does not exist")
        return 1

    try:
        with source as stream:
            obj = Obj.read(stream)
        if options.operation is Operation.COMPRESS:
            compress_obj(obj)
        else:
            decompress_obj(obj)
    except EdgeBreakerError as exc:
        log.error("%s", exc)
        return 1

    try:
        target = _open(options.output, "w", sys.stdout)
    except OSError:
        log.error("Output file does not exist")
        return 1

    with target as stream:
        obj.write(stream)
    return 0


if __name__ == "__main__":
    sys.exit(main())
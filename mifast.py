#!/usr/bin/env python3
"""Command-line runner for Manifast scripts."""

import argparse
import logging
import sys

from termcolor import colored

from manifast import (ASSERTION_FAILURE_TAG, MAX_CALL_DEPTH, RUNTIME_ERROR_MARKER, Config, LexicalError, Status,
                      run, tokenize)

ERROR = "red"
WARNING = "magenta"


def read_source(path):
    with open(path, "r", encoding="utf8") as f:
        return f.read()


def call_depth(text):
    depth = int(text)
    if not 1 <= depth <= MAX_CALL_DEPTH:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_CALL_DEPTH}")
    return depth


def highlight(line, color):
    if not color:
        return line
    if line.startswith(RUNTIME_ERROR_MARKER):
        return colored(line, ERROR, attrs=["bold"])
    if line.startswith(ASSERTION_FAILURE_TAG):
        return colored(line, WARNING, attrs=["bold"])
    return line


def run_command(args):
    config = Config(max_depth=args.max_depth, max_steps=args.max_steps, timeout=args.timeout)
    result = run(read_source(args.file), config)
    color = sys.stdout.isatty() and not args.no_color

    sys.stdout.write(result.output)
    marker = result.marker_line()
    if marker is not None:
        if result.output and not result.output.endswith("\n"):
            sys.stdout.write("\n")
        print(highlight(marker, color))
    sys.stdout.flush()

    if result.status is Status.OK:
        return result.exit_code
    return 1


def tokens_command(args):
    try:
        for token in tokenize(read_source(args.file)):
            print(f"{token.line}:{token.column}\t{token.type}\t{token.value!r}")
    except LexicalError as err:
        print(highlight(f"{RUNTIME_ERROR_MARKER} {err}", sys.stdout.isatty()))
        return 1
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="mifast", description="Run Manifast scripts.")
    parser.add_argument("-v", "--verbose", action="store_true", help="log interpreter activity to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="execute a script and print its output")
    run_parser.add_argument("file", help="script to run")
    run_parser.add_argument("--max-depth", type=call_depth, default=Config.max_depth, help="maximum call depth")
    run_parser.add_argument("--max-steps", type=int, default=None, help="maximum number of executed statements")
    run_parser.add_argument("--timeout", type=float, default=None, help="wall-clock limit in seconds")
    run_parser.add_argument("--no-color", action="store_true", help="never color diagnostic lines")
    run_parser.set_defaults(handler=run_command)

    tokens_parser = subparsers.add_parser("tokens", help="print the token stream of a script")
    tokens_parser.add_argument("file", help="script to tokenize")
    tokens_parser.set_defaults(handler=tokens_command)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(levelname)s: %(message)s")
    try:
        return args.handler(args)
    except OSError as err:
        print(colored(f"mifast: {err}", ERROR), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

"""Runs texcalc documents, or an interactive shell, from the command line. Also uses the error handling context manager.
Called from the texcalc console script.

Python version must be >=3.10, because expression nodes use keyword-only dataclass fields.
"""

import argparse
import logging
import sys

from texcalc.lang.error import ErrorHandler, GenericException
from texcalc.lang.session import Runtime
from texcalc.lang.shell import Shell
from texcalc.pure.algebra import FoilVisitor
from texcalc.pure.printer import PrintVisitor


def get_parser():
    parser = argparse.ArgumentParser(prog="texcalc", description="Evaluate algebra written in TeX notation.")
    parser.add_argument("file", help="file to evaluate (if empty, goes to interactive mode)", nargs="?")
    parser.add_argument("--inline", action="store_true", help="write fractions as a / b instead of \\frac{a}{b}")
    parser.add_argument("--foil", choices=("off", "full", "step"), default="off",
                        help="also print each result expanded (fully, or by a single step)")
    parser.add_argument("--parsed", action="store_true", help="also print each statement as it was parsed")
    parser.add_argument("--keep-going", action="store_true", help="do not stop at the first failing statement")
    parser.add_argument("--verbose", action="store_true", help="log every step of the evaluation")
    return parser


def main(argv=None):
    """Runs texcalc. Called from the texcalc console script."""
    assert sys.version_info >= (3, 10), "texcalc cannot be run with python < 3.10"

    with ErrorHandler() as error_handler:
        args = get_parser().parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                            format="%(levelname)s %(name)s: %(message)s")

        printer = PrintVisitor(inline=args.inline)
        foil = None if args.foil == "off" else FoilVisitor(single_step=args.foil == "step")
        runtime = Runtime()

        if args.file is None:
            Shell(runtime, error_handler, printer, foil).cmdloop()
            return

        try:
            with open(args.file, "r") as file:
                source = file.read()
        except OSError:
            raise GenericException("'{}' could not be opened", args.file, diagnosis=False)

        error_handler.register_source(source, args.file)
        error_handler.fatal = not args.keep_going

        failed = 0
        for outcome in runtime.statements(source):
            if not outcome.success:
                failed += 1
                error_handler.throw(outcome.error)
                continue

            if args.parsed:
                print(printer.visit(outcome.parsed))
            print(printer.visit(outcome.evaluated))
            if foil is not None:
                print(printer.visit(foil.visit(outcome.evaluated)))

        if failed:
            sys.exit(1)


if __name__ == "__main__":
    main()

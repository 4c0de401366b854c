import argparse
import logging
import sys
from typing import Optional, TextIO

from exprcalc.parser import format_expression, parse
from exprcalc.runtime import evaluate
from exprcalc.tokenizer import TokenizerError, scan_errors, tokenize
from exprcalc.utils import SourceError

logger = logging.getLogger(__name__)


def run_line(code: str, verbose: bool = False, require_end: bool = True, out: Optional[TextIO] = None) -> bool:
    if verbose:
        print(f"tokens: {' '.join(str(t) for t in tokenize(code))}", file=out)

    try:
        expression = parse(code, require_end=require_end)
    except TokenizerError:
        for error in scan_errors(code):
            print(error, file=out)
        return False
    except SourceError as e:
        print(e, file=out)
        return False

    if verbose:
        print(f"ast: {format_expression(expression)}", file=out)
    print(evaluate(expression), file=out)
    return True


def main(argv: Optional[list[str]] = None) -> int:
    arg_parser = argparse.ArgumentParser(prog="exprcalc", description="evaluate arithmetic expressions")
    arg_parser.add_argument("expression", nargs="?", help="evaluate this expression and exit")
    arg_parser.add_argument("-v", "--verbose", action="store_true", help="also print tokens and the parsed tree")
    arg_parser.add_argument(
        "--allow-trailing",
        action="store_true",
        help="ignore whatever follows the first complete expression",
    )
    arg_parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = arg_parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    require_end = not args.allow_trailing

    if args.expression is not None:
        return 0 if run_line(args.expression, verbose=args.verbose, require_end=require_end) else 1

    interactive = sys.stdin.isatty()
    all_ok = True
    while True:
        try:
            code = input("> ") if interactive else sys.stdin.readline()
        except (EOFError, KeyboardInterrupt):
            break
        if not interactive and not code:
            break
        code = code.strip()
        if not code:
            continue
        logger.debug("Read line %r", code)
        all_ok = run_line(code, verbose=args.verbose, require_end=require_end) and all_ok

    if interactive:
        print()
        return 0
    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())

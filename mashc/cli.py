import argparse
import logging
import sys

from .codegen import VERSION
from .compiler import MashCompiler
from .errors import MashError


def build_arg_parser():
    p = argparse.ArgumentParser(prog="mashc", description="Compile mash source into stack machine assembly.")
    p.add_argument("file", nargs="?", help="mash source file (stdin when omitted)")
    p.add_argument("-o", "--output", help="write the assembly here instead of stdout")
    p.add_argument("--no-debug", action="store_true", help="omit source positions from instructions")
    p.add_argument("--label-base", type=int, help="fixed label base for reproducible output")
    p.add_argument("-v", "--verbose", action="store_true", help="log compiler progress")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.file:
        try:
            with open(args.file, encoding="utf-8") as f:
                code = f.read()
        except OSError as e:
            print(f"mashc: cannot read '{args.file}': {e.strerror or e}", file=sys.stderr)
            return 1
        origin = args.file
    else:
        code = sys.stdin.read()
        origin = "<stdin>"

    print("Compiling...", file=sys.stderr)
    try:
        exe = MashCompiler(args.label_base).compile(code, origin, debug=not args.no_debug)
    except MashError as e:
        print(e, file=sys.stderr)
        print(f"\nFound 1 error [{e.code}].", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(exe.code + "\n")
        print(f"Compilation successful. Assembly written to {args.output}", file=sys.stderr)
    else:
        print(exe.code)
    return 0

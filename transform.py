#!/usr/bin/env python3
import os
import sys
import json
import argparse
import config
from debug import debug
from pipeline import deobfuscate, ParseError

sys.setrecursionlimit(100000)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_TOO_BIG = 4

def make_parser():
    parser = argparse.ArgumentParser(prog="js-deobfuscator", description="Statically deobfuscate a JavaScript file")
    parser.add_argument("input", help="input file")
    parser.add_argument("-o", "--out", help="output file (default: standard output)")
    parser.add_argument("--report", help="write the transformation report to this file (JSON)")
    parser.add_argument("--passes", help="comma-separated list of passes (default: " + ",".join(config.default_passes) + ")")
    parser.add_argument("--no-rename", help="Disable variable renaming", action='store_true')
    parser.add_argument("--max-size", help="maximum input size in bytes", type=int, default=config.max_input_size)
    parser.add_argument("-v", "--verbose", help="print diagnostics on stderr", action='store_true')
    return parser

def main(argv=None):
    parser = make_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        #--help exits with 0, usage errors with 2
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    if not os.path.isfile(args.input):
        print("Input file not found: " + args.input, file=sys.stderr)
        return EXIT_NOT_FOUND

    size = os.path.getsize(args.input)
    if size > args.max_size:
        print("Input file too big: " + str(size) + " bytes (maximum " + str(args.max_size) + ")", file=sys.stderr)
        return EXIT_TOO_BIG

    passes = None
    if args.passes is not None:
        passes = [p.strip() for p in args.passes.split(",") if p.strip() != ""]

    with open(args.input, "r", encoding="utf-8") as f:
        data = f.read()

    try:
        result = deobfuscate(data, passes, rename=not args.no_rename, verbose=args.verbose)
    except ParseError as e:
        print("Parse error: " + str(e), file=sys.stderr)
        return EXIT_FAILURE

    report = json.dumps(result.report.to_dict(), indent=2)
    if args.verbose:
        print(report, file=sys.stderr)
    if args.report is not None:
        debug("Writing report:", args.report)
        with open(args.report, "w", encoding="utf-8") as f:
            f.write(report + "\n")

    if args.out is not None:
        debug("Writing output file:", args.out)
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(result.code + "\n")
    else:
        print(result.code)
    return EXIT_OK

if __name__ == "__main__":
    sys.exit(main())

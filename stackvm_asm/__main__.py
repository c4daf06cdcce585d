#!/usr/bin/env python3
"""
StackVM Assembler - Command Line Interface

Usage:
    python3 -m stackvm_asm input.asm output.v
    python3 -m stackvm_asm input.asm output.v -v
    python3 -m stackvm_asm input.asm --listing
    python3 -m stackvm_asm input.asm output.v --profile target.yaml
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .assembler import Assembler
from .errors import AssemblerError
from .profile import DEFAULT_PROFILE, load_profile, get_profile_summary


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="stackvm-asm",
        description="StackVM Assembler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s programs/hello.asm programs/hello.v
  %(prog)s programs/fib.asm programs/fib.v -v
  %(prog)s programs/fib.asm --listing
        """,
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input assembly file",
    )

    parser.add_argument(
        "output",
        type=str,
        nargs="?",
        help="Output binary file. If not specified, prints hex words to stdout.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-l",
        "--listing",
        action="store_true",
        help="Print assembly listing",
    )

    parser.add_argument(
        "-p",
        "--profile",
        type=str,
        help="Target profile (YAML) describing header, byte order and alignment",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    # Validate input file
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        profile = load_profile(args.profile) if args.profile else DEFAULT_PROFILE
        if args.verbose:
            summary = get_profile_summary(profile)
            print(
                f"Target: {summary['name']} (magic {summary['magic']}, "
                f"{summary['byte_order']}-endian, align {summary['alignment']})"
            )

        asm = Assembler(verbose=args.verbose, profile=profile)
        asm.assemble_file(str(input_path), args.output)

        if args.listing:
            print("\n" + asm.get_listing())

        # If no output file, print hex to stdout
        if not args.output and not args.listing:
            print(asm.get_hex_string())

        if args.output:
            print(f"Successfully assembled {args.input} to {args.output}")
        elif args.verbose:
            print(f"\nAssembly successful: {len(asm.instructions)} instructions")

    except AssemblerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

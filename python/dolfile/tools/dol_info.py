#!/usr/bin/env python3
"""
DOL inspection CLI tool.

Prints the metadata the loader derives from a DOL header: image info, load
base, entry point and sections. Optionally runs structural verification and
writes a MessagePack report.

Usage:
    python -m dolfile.tools.dol_info <binary> [--verify] [--msgpack OUT] [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path

from dolfile.loader import DolBinary, DolLoadError
from dolfile.report import write_report
from dolfile.verify import DolVerifier


def print_binary(binary: DolBinary) -> None:
    """Print info, entry points and sections of a loaded image."""
    info = binary.info()
    print(f"File:    {info.file}")
    print(f"Type:    {info.type}")
    print(f"Machine: {info.machine} ({info.os})")
    print(
        f"Arch:    {info.arch} {info.bits}-bit "
        f"{'big' if info.big_endian else 'little'}-endian"
    )
    print(f"Base:    {binary.baddr():#010x}")

    for entry in binary.entries():
        print(
            f"Entry:   {entry.virtual_address:#010x} "
            f"(paddr {entry.physical_address:#06x})"
        )

    print("-" * 60)
    print(f"{'Name':<8} {'Offset':>10} {'Address':>10} {'Size':>10}  Perm")
    for section in binary.sections():
        print(
            f"{section.name:<8} {section.file_offset:#10x} "
            f"{section.load_address:#10x} {section.size:#10x}  {section.perm_string}"
        )
    print("-" * 60)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Show the header, sections and entry point of a DOL executable"
    )
    parser.add_argument("binary", type=Path, help="Path to .dol file")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Also run structural verification checks",
    )
    parser.add_argument(
        "--msgpack",
        type=Path,
        metavar="OUT",
        help="Write a MessagePack metadata report to OUT",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging and verification warnings",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.binary.exists():
        print(f"Error: {args.binary} does not exist", file=sys.stderr)
        sys.exit(1)

    try:
        binary = DolBinary.load(args.binary)
    except DolLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_binary(binary)

    exit_code = 0
    if args.verify:
        result = DolVerifier(binary).run_all_checks()
        if args.verbose or not result.passed:
            print(result)
        else:
            print("Verification PASSED")
        if not result.passed:
            exit_code = 1

    if args.msgpack:
        written = write_report(binary, args.msgpack)
        print(f"Wrote {written} byte report to {args.msgpack}")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

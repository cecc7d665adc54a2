"""Scan one URL from the command line and print the verdict.

    vtscan https://example.com
    vtscan --json https://example.com

Exit status: 0 safe, 1 unsafe, 2 on any error.
"""
from __future__ import annotations

import argparse
import sys

from .config import Settings
from .errors import ScanError
from .notify import format_notification
from .scanner import Scanner


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vtscan", description="Rescan a URL on VirusTotal and report whether it is safe.")
    p.add_argument("url")
    p.add_argument("--json", action="store_true", help="print the summary as JSON")
    return p


def main(argv: list[str] | None = None, scanner: Scanner | None = None) -> int:
    args = _parser().parse_args(argv)

    owns_scanner = scanner is None
    try:
        if scanner is None:
            scanner = Scanner.from_settings(Settings.from_env())
        summary = scanner.scan(args.url)
    except ScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        if owns_scanner and scanner is not None:
            scanner.close()

    if args.json:
        print(summary.model_dump_json(by_alias=True, indent=2))
    else:
        note = format_notification(summary)
        print(f"\n=== {note.title} ===\n{note.body}\n")
    return 0 if summary.safe else 1


if __name__ == "__main__":
    sys.exit(main())

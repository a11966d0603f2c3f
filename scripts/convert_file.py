#!/usr/bin/env python3
"""
Dev helper: convert a local direct-mail data file into a PCL job.

Runs the same conversion the batch endpoint uses, without storage, so a
layout can be checked on a printer (or in a PCL viewer) before a batch is
submitted.

Usage
-----
# Convert a CSV with the default configuration (A4, windowed envelope)
python scripts/convert_file.py enderecos.csv

# Tab/pipe-delimited export, explicit output path
python scripts/convert_file.py export.txt --out /tmp/export.pcl

# Name + CEP only, non-windowed envelope, custom margins
python scripts/convert_file.py enderecos.csv --no-full-address \\
    --envelope Comum --margin-top 30 --margin-left 40

Requires the maladireta package to be importable (pip install -e .).
"""

import argparse
import sys
import textwrap
from pathlib import Path

from maladireta.models.print_config import PrintConfiguration
from maladireta.services.pcl_document import convert_records


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="convert_file.py",
        description=textwrap.dedent("""\
            Convert a .csv (comma) or .txt (tab / pipe) address file into a
            PCL envelope job.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", metavar="PATH", help="Address data file to convert")
    parser.add_argument(
        "--out",
        default=None,
        metavar="PATH",
        help="Output .pcl path (default: next to the source, same name)",
    )
    parser.add_argument("--format", dest="paper_format", default="A4", help="Paper format tag (default: A4)")
    parser.add_argument("--envelope", default="Janela", help="Envelope type tag (default: Janela)")
    parser.add_argument(
        "--no-full-address",
        action="store_true",
        help="Print only the name (and CEP) lines",
    )
    parser.add_argument("--no-postal-code", action="store_true", help="Omit the CEP line")
    parser.add_argument("--logo", default="", help="Company logo path referenced in the footer")
    parser.add_argument("--margin-top", type=int, default=15)
    parser.add_argument("--margin-left", type=int, default=20)

    args = parser.parse_args()

    source = Path(args.source)
    if not source.exists():
        print(f"ERROR: File not found: {source}", file=sys.stderr)
        return 1

    if args.margin_top < 0 or args.margin_left < 0:
        print("ERROR: Margins must be non-negative", file=sys.stderr)
        return 1

    config = PrintConfiguration(
        paper_format=args.paper_format,
        envelope_type=args.envelope,
        full_address=not args.no_full_address,
        postal_code=not args.no_postal_code,
        company_logo=args.logo,
        margin_top=args.margin_top,
        margin_left=args.margin_left,
    )

    out_path = Path(args.out) if args.out else source.with_suffix(".pcl")
    with source.open("rb") as fh:
        document = convert_records(fh, source.name, config)

    out_path.write_bytes(document)
    print(f"Wrote {out_path} ({len(document):,} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

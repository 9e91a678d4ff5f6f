#!/usr/bin/env python3
"""
HTML Sanitizer for saved chat pages
Strips styling noise and keeps only essential structure
"""

import argparse
import sys
from pathlib import Path

from transcript_extractor.sanitize import sanitize_html


def main(argv=None):
    """Sanitize a saved chat page into a smaller, cleaner copy"""
    parser = argparse.ArgumentParser(prog="sanitize_html", description=__doc__)
    parser.add_argument("input", help="Saved chat page (.html)")
    parser.add_argument("output", nargs="?", help="Output file (default: <input>-clean.html)")
    args = parser.parse_args(argv)

    input_file = Path(args.input)
    output_file = Path(args.output) if args.output else input_file.with_name(f"{input_file.stem}-clean.html")

    print("🧹 Reading and parsing HTML...")
    try:
        html_content = input_file.read_text(encoding="utf-8")
    except OSError as e:
        print(f"❌ Cannot read {input_file}: {e}", file=sys.stderr)
        return 1

    print("🔧 Sanitizing HTML structure...")
    output_file.write_text(sanitize_html(html_content), encoding="utf-8")

    print(f"✅ Sanitized HTML saved to {output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

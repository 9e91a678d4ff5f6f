#!/usr/bin/env python3
"""
Chat conversation extractor
Reads a saved chat page and writes the transcript as JSON or Markdown

Heuristic thresholds can be overridden through TRANSCRIPT_* environment
variables (see transcript_extractor.config).
"""

import argparse
import logging
import sys
from pathlib import Path

from bs4 import BeautifulSoup

from transcript_extractor import HeuristicSettings, Role, extract_transcript, filter_transcript
from transcript_extractor.export import export_filename, to_json, to_markdown


def parse_args(argv=None):
    """Parse command line options"""
    parser = argparse.ArgumentParser(
        prog="extract_conversation",
        description="Extract a chat transcript from a saved HTML page",
    )
    parser.add_argument("input", help="Saved chat page (.html)")
    parser.add_argument("--output", "-o", help="Output file (default: deepseek-chat-<id>-<date>.<ext>)")
    parser.add_argument("--format", "-f", choices=["json", "markdown"], default="json")
    parser.add_argument(
        "--messages",
        choices=["all", "human", "agent", "both", "user", "ai"],
        default="all",
        help="Which turns to keep",
    )
    parser.add_argument("--no-thinking", action="store_true", help="Drop the AI thinking process")
    parser.add_argument("--url", help="Page URL, used for the chat id (default: canonical link of the page)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser.parse_args(argv)


def main(argv=None):
    """Extract the transcript of a saved chat page and write it to disk"""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        settings = HeuristicSettings.from_env()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print("🔍 Reading HTML file...")
    try:
        html_content = Path(args.input).read_text(encoding="utf-8")
    except OSError as e:
        print(f"❌ Cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    soup = BeautifulSoup(html_content, "lxml")

    print("📝 Extracting conversation turns...")
    transcript = extract_transcript(soup, url=args.url, settings=settings)
    transcript = filter_transcript(transcript, args.messages, include_reasoning=not args.no_thinking)

    human = sum(1 for m in transcript.messages if m.role is Role.HUMAN)
    agent = len(transcript.messages) - human
    print(f"Found {human} user messages, {agent} assistant responses")

    if args.format == "markdown":
        content, extension = to_markdown(transcript), "md"
    else:
        content, extension = to_json(transcript), "json"

    output_file = Path(args.output) if args.output else Path(export_filename(transcript, extension))
    output_file.write_text(content, encoding="utf-8")

    print(f"✅ Transcript saved to {output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

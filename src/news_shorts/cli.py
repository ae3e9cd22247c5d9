"""
CLI entrypoint:
  news-shorts list [--source thepaper] [--json]
  news-shorts produce [--source thepaper] [--index 0] [--preview]
  python -m news_shorts ...
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from news_shorts import __version__, config
from news_shorts.domain.errors import PipelineError
from news_shorts.logging_utils import get_logger, setup_logging

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-shorts",
        description="Turn trending headlines into narrated vertical news shorts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List the current top headlines of a source")
    list_cmd.add_argument("--source", default="thepaper", help="Content source name")
    list_cmd.add_argument("--json", action="store_true", help="Print headlines as JSON")

    produce = sub.add_parser("produce", help="Produce a video for one headline")
    produce.add_argument("--source", default="thepaper", help="Content source name")
    produce.add_argument(
        "--index",
        type=int,
        default=0,
        help="Position of the headline in the listing (0 = top)",
    )
    produce.add_argument(
        "--preview",
        action="store_true",
        help="Only render the silent slideshow (no muxing)",
    )
    return parser


def _build_director():
    from news_shorts.adapters import default_sources, default_stages
    from news_shorts.application.director import Director

    return Director(default_sources(), default_stages())


async def _list(director, args) -> int:
    references = await director.list_top_content(args.source)
    if args.json:
        print(json.dumps([r.to_dict() for r in references], ensure_ascii=False, indent=2))
        return 0
    if not references:
        print(f"No headlines from {args.source}")
        return 0
    for i, ref in enumerate(references):
        print(f"{i:2d}. {ref.title}")
        print(f"    {ref.url}")
    return 0


async def _produce(director, args) -> int:
    references = await director.list_top_content(args.source)
    if not references:
        print(f"❌ No headlines from {args.source}", file=sys.stderr)
        return 1
    if not 0 <= args.index < len(references):
        print(f"❌ Index {args.index} out of range (0-{len(references) - 1})", file=sys.stderr)
        return 1

    reference = references[args.index]
    print(f"🎬 {reference.title}")
    run = director.preview if args.preview else director.produce
    result = await run(reference)
    print(f"✅ Video ready: {result.path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level or config.LOG_LEVEL)

    director = _build_director()
    handler = _list if args.command == "list" else _produce
    try:
        return asyncio.run(handler(director, args))
    except PipelineError as e:
        log.error("production failed", stage=e.stage, error=e.message)
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

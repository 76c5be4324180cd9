from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Optional, Sequence

from loguru import logger

from spotibridge._version import __version__
from spotibridge.core.classifier import QueryClassifier
from spotibridge.core.errors import InvalidInput
from spotibridge.domain.models import LoadResult
from spotibridge.engine import Node, StandaloneEngine
from spotibridge.plugin import SpotifyOptions, SpotifyPlugin
from spotibridge.utils.logger import config as configure_logger


def _jsonable(value: Any) -> Any:
    if isinstance(value, LoadResult):
        data = value.to_dict()
        if data["tracks"] is not None:
            data["tracks"] = [_jsonable(t) for t in data["tracks"]]
        return data
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return value


async def _resolve(query: str, rest_version: str) -> LoadResult:
    plugin = SpotifyPlugin(SpotifyOptions.from_env())
    engine = StandaloneEngine(nodes=[Node(rest_version=rest_version)])
    resolver = plugin.wrap(engine)
    try:
        return await resolver.resolve(query)
    finally:
        await plugin.credentials.stop()


def _cmd_resolve(args: argparse.Namespace) -> int:
    try:
        result = asyncio.run(_resolve(args.query, args.rest_version))
    except InvalidInput as exc:
        logger.error(str(exc))
        return 2
    print(json.dumps(_jsonable(result), indent=2))
    return 1 if result.failed else 0


def _cmd_classify(args: argparse.Namespace) -> int:
    classified = QueryClassifier().classify(args.query)
    print(
        json.dumps(
            {
                "matched": classified.matched,
                "entityType": classified.entity_type.value if classified.entity_type else None,
                "entityId": classified.entity_id,
                "segment": classified.segment,
            },
            indent=2,
        )
    )
    return 0 if classified.matched else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spotibridge",
        description="Resolve Spotify links into playback-engine load results.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="fetch and print the load result for a query")
    p_resolve.add_argument("query")
    p_resolve.add_argument(
        "--rest-version",
        default="v4",
        help="node REST API revision selecting the load-type vocabulary (default: v4)",
    )
    p_resolve.set_defaults(func=_cmd_resolve)

    p_classify = sub.add_parser("classify", help="show how a query is classified (no network)")
    p_classify.add_argument("query")
    p_classify.set_defaults(func=_cmd_classify)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logger(sink=sys.stderr)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

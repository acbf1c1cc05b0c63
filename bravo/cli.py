"""
Bravo 命令行工具

用法:
    python main.py organizations
    python main.py collections
    python main.py widgets [--collection-id ID]
    python main.py cards --widget-id ID [--limit N]
    python main.py stats

凭证从环境变量 / .env 读取（FAVRO_TOKEN, FAVRO_USER_EMAIL, FAVRO_ORGANIZATION_ID）。
日志输出到 stderr，结果输出到 stdout。
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, TextIO

from bravo.core.config import settings
from bravo.core.errors import BravoError
from bravo.providers.favro.bravo_client import BravoClient

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.BRAVO_LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bravo", description="Favro API client")
    parser.add_argument("--log-level", default=None, help="覆盖 BRAVO_LOG_LEVEL")
    parser.add_argument("--organization-id", default=None, help="覆盖 FAVRO_ORGANIZATION_ID")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("organizations", help="列出可访问的组织")
    subparsers.add_parser("collections", help="列出当前组织的集合")

    widgets = subparsers.add_parser("widgets", help="列出 Widget")
    widgets.add_argument("--collection-id", default=None)

    cards = subparsers.add_parser("cards", help="列出 Widget 上的卡片")
    cards.add_argument("--widget-id", required=True)
    cards.add_argument("--limit", type=int, default=None, help="最多输出的卡片数")

    subparsers.add_parser("stats", help="发出一次请求并输出限流统计")
    return parser


async def run(args: argparse.Namespace, client: BravoClient, out: TextIO) -> int:
    if args.command == "organizations":
        for org in await client.list_organizations():
            out.write(f"{org.organization_id}\t{org.name}\n")
    elif args.command == "collections":
        for collection in await client.list_collections():
            out.write(f"{collection.collection_id}\t{collection.name}\n")
    elif args.command == "widgets":
        for widget in await client.list_widgets(args.collection_id):
            out.write(f"{widget.widget_common_id}\t{widget.type}\t{widget.name}\n")
    elif args.command == "cards":
        pager = await client.list_cards(widget_common_id=args.widget_id)
        count = 0
        async for card in pager:
            if args.limit is not None and count >= args.limit:
                break
            out.write(f"{card.sequential_id}\t{card.card_id}\t{card.name}\n")
            count += 1
    elif args.command == "stats":
        await client.list_organizations()
        for key, value in client.request_stats.items():
            out.write(f"{key}\t{value}\n")
    return 0


async def _main(args: argparse.Namespace) -> int:
    async with BravoClient(organization_id=args.organization_id) as client:
        return await run(args, client, sys.stdout)


def main(argv: Optional[List[str]] = None) -> int:
    """命令行入口"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(_main(args))
    except BravoError as e:
        logger.error("Bravo command failed: %s", e.message)
        sys.stderr.write(f"Error: {e.message}\n")
        return 1

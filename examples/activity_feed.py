#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from movedao.reads import ChainReader, Subject


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Print one page of MoveDAO activity")
    p.add_argument("--dao", help="DAO address (default: global feed)")
    p.add_argument("--user", help="User address")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--page-size", type=int, default=20)
    p.add_argument("--cache-dir", default=".movedao_cache", help="Snapshot directory")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.dao:
        subject = Subject.dao(args.dao)
    elif args.user:
        subject = Subject.user(args.user)
    else:
        subject = Subject.everyone()

    async with ChainReader.connect(cache_dir=args.cache_dir) as reader:
        restored = await reader.hydrate()
        print(f"Restored {restored} cached entries")

        page = await reader.get_activity_page(subject, args.page, args.page_size)
        print(
            f"Page {page.page_index}/{page.total_pages or 1} | {page.total_items} total"
            f" | source={page.source.value} | next={page.has_next}"
        )
        for record in page.items:
            amount = f"{record.amount:.4f}" if record.amount is not None else "-"
            print(
                f"#{record.id} {record.timestamp_seconds} {record.kind.value:<22}"
                f" dao={record.dao_address[:10]} user={record.subject_address[:10]} amount={amount}"
            )


if __name__ == "__main__":
    asyncio.run(main())

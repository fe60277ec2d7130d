import argparse
import asyncio
import logging
from datetime import timedelta

from icecream import ic

from core.config import get_settings


async def purge(max_age_minutes: int | None) -> int:
    from server.services import MatchmakingService
    from server.store import build_store

    settings = get_settings()
    store = build_store(settings)
    await store.connect()
    try:
        service = MatchmakingService(store, settings)
        max_age = timedelta(minutes=max_age_minutes) if max_age_minutes is not None else None
        return await service.purge_orphaned_matches(max_age)
    finally:
        await store.disconnect()


def main() -> None:
    parser = argparse.ArgumentParser(description="SEDETOK 1v1 trivia matchmaker")

    parser.add_argument(
        "--mode",
        "-m",
        choices=["server", "purge"],
        default="server",
        help="'server' runs the HTTP API, 'purge' deletes orphaned waiting matches (default: server)",
    )
    parser.add_argument(
        "--max-age",
        type=int,
        default=None,
        help="Minimum age in minutes of the matches deleted by 'purge'",
    )
    parser.add_argument("--debug", action="store_true", help="Enable icecream traces")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ic.configureOutput(prefix="🍦 DEBUG | ")
    if not args.debug:
        ic.disable()

    if args.mode == "server":
        from server.app import ServerApp

        ServerApp(get_settings()).run()
    elif args.mode == "purge":
        deleted = asyncio.run(purge(args.max_age))
        print(f"Deleted {deleted} orphaned waiting matches")


if __name__ == "__main__":
    main()

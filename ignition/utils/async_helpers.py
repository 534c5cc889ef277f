import asyncio
import concurrent.futures
from collections.abc import Coroutine
from typing import TypeVar

T = TypeVar("T")


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a store coroutine from a Streamlit page.

    Pages execute synchronously while the stores (aiosqlite, redis.asyncio) are
    async. If a loop is already running in this thread, the coroutine runs on a
    fresh loop in a worker thread instead.

    Usage:
        run_async(session.move_card_to_board(card_id, board_id))
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None or not loop.is_running():
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()

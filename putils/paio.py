"""
Bridges between blocking code and asyncio.
"""
import asyncio
import concurrent.futures
import functools


def background(func):
    """
    Runs the decorated blocking callable in the loop's default executor.

    The wrapper is a coroutine function.
    """
    @functools.wraps(func)
    async def wrapper(*pargs, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(func, *pargs, **kwargs)
        )

    return wrapper


def run_sync(coro):
    """
    Runs a coroutine to completion from synchronous code.

    If this thread already has a running loop (some hosts call us from inside
    one), the coroutine gets its own loop on a worker thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()

"""Fixed-partition schedulers used as baselines for the block scheduler."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Iterable

from .canvas import Canvas

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Raised when a unit of work fails and the render has to be abandoned."""


def _run_jobs(jobs: Iterable[tuple], workers: int, prefix: str, what: str) -> None:
    """Run ``(func, *args)`` jobs on a pool; the first failure cancels the rest."""

    failed = threading.Event()

    def watch(future: Future) -> None:
        if not future.cancelled() and future.exception() is not None:
            failed.set()

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=prefix)
    futures: list[Future] = []
    try:
        for func, *args in jobs:
            if failed.is_set():
                break
            future = pool.submit(func, *args)
            future.add_done_callback(watch)
            futures.append(future)
        wait(futures, return_when=FIRST_EXCEPTION)
    finally:
        pool.shutdown(wait=True, cancel_futures=True)

    for future in futures:
        if future.cancelled():
            continue
        exc = future.exception()
        if exc is not None:
            raise RenderError(f"{what} failed: {exc}") from exc


def fill_sequential(canvas: Canvas) -> None:
    """Evaluate every pixel from a single control flow, row by row."""

    try:
        for row in range(canvas.height):
            for col in range(canvas.width):
                canvas.compute(col, row)
    except Exception as exc:
        raise RenderError(f"sequential render failed at ({col}, {row}): {exc}") from exc


def _pixel_job(canvas: Canvas, col: int, row: int) -> None:
    start = time.perf_counter()
    logger.debug("Thread-%d.%d started.", col, row)
    canvas.compute(col, row)
    logger.debug("Thread-%d.%d stopped.", col, row)
    logger.debug("Thread-%d.%d execution time was %.6fs", col, row, time.perf_counter() - start)


def fill_per_pixel(canvas: Canvas, workers: int) -> None:
    """Submit one job per pixel and wait for all of them."""

    jobs = (
        (_pixel_job, canvas, col, row)
        for row in range(canvas.height)
        for col in range(canvas.width)
    )
    _run_jobs(jobs, workers, "pixel", "pixel job")


def _row_job(canvas: Canvas, row: int) -> None:
    logger.info("Thread-%d started.", row)
    start = time.perf_counter()
    for col in range(canvas.width):
        canvas.compute(col, row)
    logger.info("Thread-%d stopped.", row)
    logger.info("Thread-%d execution time was %.6fs", row, time.perf_counter() - start)


def fill_per_row(canvas: Canvas, workers: int) -> None:
    """Submit one job per row and wait for all of them."""

    _run_jobs(((_row_job, canvas, row) for row in range(canvas.height)), workers, "row", "row job")

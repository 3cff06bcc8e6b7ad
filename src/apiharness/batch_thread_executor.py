from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Event, Lock
from typing import Any, Callable

from apiharness.batch_executor import BatchExecutor

logger = logging.getLogger(__name__)


class BatchThreadExecutor(BatchExecutor):
    def __init__(
        self,
        http_client,
        assertion_engine,
        max_workers: int = 5,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> None:
        super().__init__(http_client, assertion_engine)
        self.max_workers = max_workers
        self.on_progress = on_progress
        self._lock = Lock()
        self._canceled = Event()
        self._completed = 0
        self._total = 0

    def run_cases(self, cases: list) -> list:
        self._canceled.clear()
        self._completed = 0
        self._total = len(cases)
        results: list[dict[str, Any] | None] = [None] * len(cases)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures: list[Future] = [
                pool.submit(self._run_indexed, index, case, results)
                for index, case in enumerate(cases)
            ]
            for future in futures:
                future.result()
        return [result for result in results if result is not None]

    def cancel(self) -> None:
        logger.info("batch canceled, pending cases will be skipped")
        self._canceled.set()

    @property
    def canceled(self) -> bool:
        return self._canceled.is_set()

    def _run_indexed(self, index: int, case: dict, results: list) -> None:
        if self._canceled.is_set():
            return
        results[index] = self.run_case(case)
        with self._lock:
            self._completed += 1
            completed = self._completed
        if self.on_progress is None:
            return
        try:
            self.on_progress(completed, self._total)
        except Exception:
            logger.exception("progress callback failed after case %s", case.get("case_id"))

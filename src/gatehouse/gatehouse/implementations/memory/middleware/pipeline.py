# ABOUTME: InMemoryMiddlewarePipeline implementation for in-memory guard management
# ABOUTME: Runs request guards in priority order and stops at the first rejection

import threading
from datetime import datetime, UTC
from typing import List, Optional

from loguru import logger

from gatehouse.exceptions import CoreException
from gatehouse.interfaces.middleware import AbstractMiddleware, AbstractMiddlewarePipeline
from gatehouse.models.middleware import MiddlewareResult, MiddlewareStatus, PipelineResult, RequestContext


class InMemoryMiddlewarePipeline(AbstractMiddlewarePipeline):
    """
    In-memory implementation of the request pipeline.

    Guards are kept in a list and executed in priority order. The sorted
    order is cached and rebuilt only after the guard set changes.

    A guard that raises a `CoreException` is treated like one that returned
    a rejection carrying that exception's status. Any other exception is
    logged and turned into a 500 failure; the pipeline never lets a request
    through after a guard crashed.
    """

    def __init__(self, name: str = "AccessPipeline"):
        """
        Args:
            name: Name of the pipeline for identification and logging.
        """
        self.name = name
        self._middlewares: List[AbstractMiddleware] = []
        self._sorted_cache: Optional[List[AbstractMiddleware]] = None
        self._cache_dirty = False

        self._lock = threading.RLock()
        self._logger = logger.bind(name=f"{__name__}.{self.name}")

        self._execution_count = 0
        self._rejection_count = 0

    async def add_middleware(self, middleware: AbstractMiddleware) -> None:
        with self._lock:
            self._middlewares.append(middleware)
            self._invalidate_cache()
            self._logger.debug(
                f"Guard {middleware.name} added with priority {int(middleware.priority)}. "
                f"Total count: {len(self._middlewares)}"
            )

    async def remove_middleware(self, middleware: AbstractMiddleware) -> None:
        with self._lock:
            try:
                self._middlewares.remove(middleware)
            except ValueError as e:
                raise ValueError(f"Middleware {middleware!r} not found in pipeline") from e
            self._invalidate_cache()
            self._logger.debug(f"Guard {middleware.name} removed. Total count: {len(self._middlewares)}")

    async def execute(self, context: RequestContext) -> PipelineResult:
        with self._lock:
            sorted_middlewares = list(self._get_sorted_middlewares())
            self._execution_count += 1
            execution_id = self._execution_count

        pipeline_result = PipelineResult(pipeline_name=self.name, total_middlewares=len(sorted_middlewares))
        self._logger.debug(
            f"Execution #{execution_id} for context {context.id} ({context.operation}) "
            f"with {len(sorted_middlewares)} guards"
        )

        cancelled = False
        for index, middleware in enumerate(sorted_middlewares):
            if context.is_cancelled:
                self._logger.debug(f"Execution #{execution_id}: context cancelled before {middleware.name}")
                cancelled = True
                break

            if not middleware.can_process(context):
                skipped = MiddlewareResult(middleware_name=middleware.name, status=MiddlewareStatus.SKIPPED)
                skipped.mark_skipped("Guard does not apply to this request")
                pipeline_result.add_middleware_result(skipped)
                continue

            start_time = datetime.now(UTC)
            try:
                result = await middleware.process(context)
            except CoreException as e:
                result = MiddlewareResult.rejected(middleware.name, e)
            except Exception as e:
                self._logger.exception(f"Execution #{execution_id}: guard {middleware.name} crashed")
                result = MiddlewareResult(middleware_name=middleware.name, status=MiddlewareStatus.SUCCESS)
                result.mark_failed(
                    "Internal error while checking the request",
                    error_details={"exception_type": type(e).__name__},
                    error_code="GUARD_ERROR",
                    status_code=500,
                )

            if result.execution_time_ms is None:
                result.execution_time_ms = (datetime.now(UTC) - start_time).total_seconds() * 1000
            result.metadata.update({"execution_id": execution_id, "middleware_index": index})

            pipeline_result.add_middleware_result(result)
            context.add_execution_step(middleware.name)

            if not result.should_continue:
                if result.is_failed():
                    self._logger.debug(
                        f"Execution #{execution_id}: rejected by {middleware.name} "
                        f"({result.status_code} {result.error_code})"
                    )
                break

        pipeline_result.mark_completed(cancelled=cancelled)
        if not pipeline_result.allowed:
            with self._lock:
                self._rejection_count += 1
        return pipeline_result

    async def get_middleware_count(self) -> int:
        with self._lock:
            return len(self._middlewares)

    async def clear(self) -> None:
        with self._lock:
            self._middlewares.clear()
            self._invalidate_cache()
            self._execution_count = 0
            self._rejection_count = 0

    async def get_middleware_by_priority(self) -> List[AbstractMiddleware]:
        with self._lock:
            return self._get_sorted_middlewares().copy()

    async def contains_middleware(self, middleware: AbstractMiddleware) -> bool:
        with self._lock:
            return middleware in self._middlewares

    def _get_sorted_middlewares(self) -> List[AbstractMiddleware]:
        # Caller holds the lock. sorted() is stable, so equal priorities keep insertion order.
        if self._sorted_cache is None or self._cache_dirty:
            self._sorted_cache = sorted(self._middlewares, key=lambda m: int(m.priority))
            self._cache_dirty = False
        return self._sorted_cache

    def _invalidate_cache(self) -> None:
        self._cache_dirty = True

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "pipeline_name": self.name,
                "total_executions": self._execution_count,
                "rejections": self._rejection_count,
                "middleware_count": len(self._middlewares),
            }

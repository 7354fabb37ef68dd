from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


def _exception_summary(exc: BaseException) -> dict[str, str]:
    return {"type": type(exc).__name__, "message": str(exc)}


@dataclass(slots=True)
class BatchResult:
    """Per-item outcome of a bulk operation.

    A batch never stops at the first error, so `failed` and `succeeded` together
    always cover every dispatched id.
    """

    succeeded: list[Any] = field(default_factory=list)
    failed: dict[Any, dict[str, str]] = field(default_factory=dict)
    results: dict[Any, Any] = field(default_factory=dict)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total(self) -> int:
        return self.succeeded_count + self.failed_count

    @property
    def status(self) -> str:
        if not self.failed:
            return "success"
        if self.succeeded:
            return "partial"
        return "failed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "succeeded": list(self.succeeded),
            "failed": {str(key): value for key, value in self.failed.items()},
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
        }


def run_batch(
    ids: Iterable[Any],
    action: Callable[[Any], Any],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> BatchResult:
    item_ids = list(dict.fromkeys(ids))
    result = BatchResult()
    if not item_ids:
        return result

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {executor.submit(action, item_id): item_id for item_id in item_ids}
        for future in as_completed(futures):
            item_id = futures[future]
            try:
                result.results[item_id] = future.result()
            except Exception as exc:
                result.failed[item_id] = _exception_summary(exc)
                logger.warning("Batch item %s failed: %s", item_id, exc)
            else:
                result.succeeded.append(item_id)

    # Report in dispatch order.
    order = {item_id: index for index, item_id in enumerate(item_ids)}
    result.succeeded.sort(key=order.__getitem__)
    logger.info(
        "Batch finished status=%s succeeded=%d failed=%d",
        result.status,
        result.succeeded_count,
        result.failed_count,
    )
    return result

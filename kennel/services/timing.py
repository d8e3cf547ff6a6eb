"""Per-run timing context, passed explicitly to whoever wants phase timings."""

import logging
import time
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class Timings:
    """Collects elapsed milliseconds per label for one run."""

    def __init__(self) -> None:
        self._metrics: dict[str, float] = {}

    @contextmanager
    def measure(self, label: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            self._metrics[label] = round(elapsed, 2)
            logger.debug("%s: %.2fms", label, elapsed)

    def as_dict(self) -> dict[str, float]:
        return dict(self._metrics)

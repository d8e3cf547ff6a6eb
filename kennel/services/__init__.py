from .aggregator import BusinessDataAggregator, build_aggregate, fetch_with_retry
from .repository import EntityRepository, SqliteEntityRepository
from .timing import Timings

__all__ = [
    "BusinessDataAggregator", "build_aggregate", "fetch_with_retry",
    "EntityRepository", "SqliteEntityRepository", "Timings",
]

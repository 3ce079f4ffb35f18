"""Prometheus metrics for CEP Finder."""
from prometheus_client import Counter, Gauge, Histogram, Info
from cepfinder.core.enums import OutcomeKind


# Dispatch metrics
dispatch_outcomes_total = Counter(
    'cepfinder_dispatch_outcomes_total',
    'Total number of dispatches by outcome',
    ['outcome']
)

dispatch_wins_total = Counter(
    'cepfinder_dispatch_wins_total',
    'Total number of races won per source',
    ['source']
)

dispatch_duration_seconds = Histogram(
    'cepfinder_dispatch_duration_seconds',
    'Time from dispatch start to resolution in seconds',
    ['outcome'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0]
)

# Source query metrics
source_queries_total = Counter(
    'cepfinder_source_queries_total',
    'Total number of upstream source queries by result',
    ['source', 'outcome']
)

source_queries_in_flight = Gauge(
    'cepfinder_source_queries_in_flight',
    'Number of upstream source queries currently running'
)

# System info
system_info = Info(
    'cepfinder_system',
    'CEP Finder system information'
)


def record_dispatch(kind: OutcomeKind, duration: float, source: str = None) -> None:
    """
    Record a resolved dispatch.

    Args:
        kind: How the dispatch resolved
        duration: Seconds from start to resolution
        source: Winning source, if any
    """
    dispatch_outcomes_total.labels(outcome=kind.value).inc()
    dispatch_duration_seconds.labels(outcome=kind.value).observe(duration)
    if source:
        dispatch_wins_total.labels(source=source).inc()


def record_source_query(source: str, kind: OutcomeKind) -> None:
    """Record one finished source query."""
    source_queries_total.labels(source=source, outcome=kind.value).inc()


def init_system_info(version: str) -> None:
    """
    Initialize system information metric.

    Args:
        version: Application version
    """
    system_info.info({
        'version': version,
        'name': 'CEP Finder'
    })

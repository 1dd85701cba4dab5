"""Prometheus metrics for the demandas service."""

from prometheus_client import Counter, Histogram

# Request metrics
REQUEST_COUNT = Counter(
    "demandas_request_count_total",
    "Total number of HTTP requests processed",
    labelnames=["method", "route", "status"],
)

REQUEST_LATENCY = Histogram(
    "demandas_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Record lifecycle
DEMANDA_MUTATIONS = Counter(
    "demandas_mutations_total",
    "Create/update/delete operations on demand records",
    labelnames=["action", "outcome"],
)

# Audit
AUDIT_WRITE_FAILURES = Counter(
    "demandas_audit_write_failures_total",
    "Audit entries that could not be written",
    labelnames=["action"],
)

# Snapshots
SNAPSHOTS = Counter(
    "demandas_snapshots_total",
    "Snapshot attempts by kind and outcome",
    labelnames=["kind", "outcome"],
)

SNAPSHOT_SIZE = Histogram(
    "demandas_snapshot_size_bytes",
    "Size of written snapshot files",
    buckets=(1_000, 10_000, 100_000, 1_000_000, 10_000_000, 100_000_000),
)

SNAPSHOTS_PRUNED = Counter(
    "demandas_snapshots_pruned_total",
    "Snapshot index entries removed",
    labelnames=["reason"],
)

RESTORES = Counter(
    "demandas_restores_total",
    "Restore attempts by outcome",
    labelnames=["outcome"],
)

# Error metrics
ERRORS = Counter(
    "demandas_errors_total",
    "Total number of errors",
    labelnames=["error_type"],
)

from prometheus_client import Counter, Histogram

BATCH_SUBMIT_TOTAL = Counter(
    "dvtx_batch_submit_total",
    "Atomic batch submissions to the platform",
    ["status"],
)

BATCH_SUBMIT_LATENCY_SECONDS = Histogram(
    "dvtx_batch_submit_latency_seconds",
    "Latency of one atomic batch round trip",
    ["status"],
)

BATCH_OPERATIONS_TOTAL = Counter(
    "dvtx_batch_operations_total",
    "Operations submitted inside atomic batches",
    ["op_type", "status"],
)

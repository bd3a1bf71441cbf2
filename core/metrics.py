from prometheus_client import Counter

resource_writes_total = Counter(
    "canvas_resource_writes_total",
    "Topic and post writes by operation",
    ["resource", "operation"]
)

from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total order creation attempts", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)

# Lifecycle Metrics
order_status_transitions_total = Counter(
    "marketplace_order_status_transitions_total",
    "Order status transition attempts",
    ["from_status", "to_status", "outcome"],
)
order_update_conflicts_total = Counter(
    "marketplace_order_update_conflicts_total", "Status updates rejected by optimistic concurrency"
)

# Validation Metrics
order_item_validation_failures_total = Counter(
    "marketplace_order_item_validation_failures_total", "Invalid order items by reason", ["reason"]
)
order_validation_duration = Histogram("marketplace_order_validation_seconds", "Order item validation time")

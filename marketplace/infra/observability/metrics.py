from prometheus_client import Counter, Histogram


# Cart Metrics
cart_mutations_total = Counter(
    "marketplace_cart_mutations_total", "Cart mutations processed", ["action", "outcome"]
)
cart_adjustments_total = Counter(
    "marketplace_cart_adjustments_total", "Cart lines removed or clamped while reconciling", ["reason"]
)
cart_grand_total = Histogram(
    "marketplace_cart_grand_total",
    "Cart grand total distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)

# Promo Metrics
promo_applications_total = Counter(
    "marketplace_promo_applications_total", "Promo code applications", ["outcome"]
)

# Report Metrics
report_queries_total = Counter("marketplace_report_queries_total", "Paged report queries", ["report", "outcome"])
report_exports_truncated_total = Counter(
    "marketplace_report_exports_truncated_total", "Exports that hit the row cap", ["report"]
)
report_export_jobs_total = Counter(
    "marketplace_report_export_jobs_total", "Report export jobs by final status", ["report", "status"]
)

from prometheus_client import Counter, Gauge, Histogram

CATALOG_ASSEMBLIES = Counter(
    "catalog_assemblies_total",
    "Catalog assembly runs",
    ["outcome"],  # success | unavailable | corrupted
)

CATALOG_ASSEMBLY_TIME = Histogram(
    "catalog_assembly_duration_seconds",
    "Time to assemble the full catalog",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

CATALOG_ITEMS = Gauge(
    "catalog_items",
    "Items in the published catalog",
)

IMAGE_LOOKUPS = Counter(
    "image_lookups_total",
    "Item image resolutions",
    ["outcome"],  # found | missing
)

ORDERS = Counter(
    "orders_total",
    "Order compositions by fulfilment mode",
    ["mode", "outcome"],  # outcome: submitted | invalid | failed
)

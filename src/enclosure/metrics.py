"""
Prometheus metrics for monitoring enclosure requests.
"""
from prometheus_client import Counter, Histogram

# Request metrics
enclosure_requests_total = Counter(
    'enclosure_requests_total',
    'Total number of enclosure requests',
    ['status']
)

# Latency metrics
request_duration_seconds = Histogram(
    'request_duration_seconds',
    'Request latency in seconds',
    ['endpoint']
)

# Algorithm metrics
enclosure_rings_expanded = Histogram(
    'enclosure_rings_expanded',
    'Rings expanded per enclosure (including the terminating empty ring)',
    buckets=(1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144)
)

enclosure_cells_returned = Histogram(
    'enclosure_cells_returned',
    'Cells in each enclosure result',
    buckets=(1, 7, 19, 37, 61, 127, 271, 547, 1027, 5000, 20000)
)

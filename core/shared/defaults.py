"""
Centralized default values for fan-out runs.

This is the SINGLE SOURCE OF TRUTH for run defaults. The config loader, the
simulated executor and the CLI all import from here.
"""

# Demo endpoints, dispatched in this order (index = position)
DEFAULT_PAYLOADS = [
    "https://api.service.com/user",
    "https://api.service.com/products",
    "https://api.service.com/orders",
    "https://api.service.com/inventory",
    "https://api.service.com/payments",
    "https://api.service.com/shipping",
    "https://api.service.com/reviews",
    "https://api.service.com/analytics",
    "https://api.service.com/notifications",
    "https://api.service.com/recommendations",
]

# Simulated request: delay drawn uniformly from [0, MAX_DELAY_MS) milliseconds
MAX_DELAY_MS = 1000
FAILURE_RATE = 0.2  # 2 in 10 requests fail
RESPONSE_PREFIX_CHARS = 7  # Success value quotes this many leading chars of the payload

# Dispatch
CHANNEL_CAPACITY_FACTOR = 2  # Output channel holds twice the item count
MAX_CONCURRENCY = None  # None = one thread per item, no bound

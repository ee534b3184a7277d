from prometheus_client import Counter, Histogram

ORDERS_PLACED = Counter(
    "storefront_orders_placed_total",
    "Orders committed by the order engine",
)

ORDERS_REJECTED = Counter(
    "storefront_orders_rejected_total",
    "Order creations rolled back",
    ["reason"],  # item_not_found | item_unavailable | error
)

ORDER_VALUE = Histogram(
    "storefront_order_total_amount",
    "Order totals including tax and delivery",
    buckets=[10, 20, 30, 50, 75, 100, 150, 250, 500],
)

RESERVATION_OUTCOMES = Counter(
    "storefront_reservation_outcomes_total",
    "Reservation admission outcomes",
    ["outcome"],  # confirmed | fully_booked | seat_conflict | cancelled
)

CACHE_LOOKUPS = Counter(
    "storefront_cache_lookups_total",
    "Menu cache lookups",
    ["result"],  # hit | miss | error
)

EVENTS_PUBLISHED = Counter(
    "storefront_events_published_total",
    "Domain events sent to Kafka",
    ["topic", "status"],  # status: sent | failed
)

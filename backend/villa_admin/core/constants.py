CURRENCY = "INR"
TAX_RATE = 0.18
MAX_STAY_DAYS = 30
ADMIN_MAX_GUESTS = 20
BOOKING_HOLD_MINUTES = 15
DEFAULT_UNIT_COUNT = 1

# Physical units per villa, used when a villa has no inventory rows.
VILLA_INVENTORY = {
    "glass-cottage": {"total_units": 14, "room_type": "cottage"},
    "hornbill-villa": {"total_units": 4, "room_type": "villa"},
    "kingfisher-villa": {"total_units": 4, "room_type": "villa"},
}

UNIT_PREFIXES = {
    "glass-cottage": "GC",
    "hornbill-villa": "HV",
    "kingfisher-villa": "KF",
}

VILLA_STATUSES = ("active", "inactive", "maintenance")

BOOKING_STATUSES = (
    "pending",
    "confirmed",
    "checked_in",
    "checked_out",
    "completed",
    "cancelled",
    "no_show",
)

PAYMENT_STATUSES = (
    "pending",
    "paid",
    "advance_paid",
    "failed",
    "refunded",
    "partial_refund",
)

# Allowed booking status moves; anything else needs an explicit override.
BOOKING_TRANSITIONS = {
    "pending": ("confirmed", "cancelled", "no_show"),
    "confirmed": ("checked_in", "cancelled", "no_show", "pending"),
    "checked_in": ("checked_out",),
    "checked_out": ("completed",),
    "completed": (),
    "cancelled": (),
    "no_show": (),
}

UNIT_STATUSES = ("available", "maintenance", "out_of_order")

BLOCK_TYPES = ("maintenance", "owner_use", "seasonal_closure", "deep_cleaning")

SAFARI_QUERY_STATUSES = ("pending", "confirmed", "cancelled", "completed")

BOOKING_SOURCES = ("website", "admin", "phone", "walk_in", "ota")

BOOKINGS_CSV_HEADERS = [
    "Booking ID",
    "Guest Name",
    "Email",
    "Phone",
    "Villa",
    "Check-in",
    "Check-out",
    "Guests",
    "Total Amount",
    "Status",
    "Payment Status",
    "Created At",
]

REVENUE_CSV_HEADERS = ["Period", "Revenue", "Bookings", "Avg Booking Value"]

OCCUPANCY_CSV_HEADERS = [
    "Date",
    "Villa",
    "Unit",
    "Guest Name",
    "Email",
    "Phone",
    "Guests",
    "Check-in",
    "Check-out",
    "Status",
]

MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

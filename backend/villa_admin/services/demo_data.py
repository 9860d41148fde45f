"""
Catalogue data used to seed a fresh database, and served directly when no
database is configured.
"""
import copy
from datetime import datetime, timedelta

from villa_admin.core.constants import UNIT_PREFIXES, VILLA_INVENTORY

DEMO_VILLAS = [
    {
        "id": "glass-cottage",
        "name": "Glass Cottage",
        "description": (
            "A unique eco-friendly cottage with glass walls offering panoramic forest views. "
            "Perfect for nature lovers seeking a modern yet sustainable retreat."
        ),
        "base_price": 15000,
        "max_guests": 4,
        "amenities": ["Forest View", "Glass Walls", "Eco-Friendly", "Private Deck", "Air Conditioning", "Mini Bar"],
        "images": ["/images/glass-cottage/main.jpg"],
        "status": "active",
    },
    {
        "id": "hornbill-villa",
        "name": "Hornbill Villa",
        "description": (
            "Spacious family villa with traditional architecture and modern amenities. "
            "Features a beautiful garden and outdoor seating area."
        ),
        "base_price": 18000,
        "max_guests": 6,
        "amenities": ["Garden View", "Family Room", "BBQ Area", "Spacious Living", "Modern Kitchen", "Outdoor Seating"],
        "images": ["/images/hornbill/main.png", "/images/hornbill/exterior.jpg", "/images/hornbill/garden.jpg"],
        "status": "active",
    },
    {
        "id": "kingfisher-villa",
        "name": "Kingfisher Villa",
        "description": (
            "Premium lakeside villa with private pool and butler service. "
            "The ultimate luxury experience with stunning lake views."
        ),
        "base_price": 22000,
        "max_guests": 8,
        "amenities": ["Lake View", "Private Pool", "Premium Suite", "Butler Service", "Jacuzzi", "Wine Cellar"],
        "images": ["/images/kingfisher/main.jpg"],
        "status": "active",
    },
]

DEMO_PACKAGES = [
    {
        "id": "basic-stay",
        "name": "Basic Stay Package",
        "description": (
            "Comfortable accommodation with essential amenities. Perfect for guests who "
            "prefer to explore dining options outside the resort."
        ),
        "inclusions": [
            "Comfortable villa accommodation",
            "Daily housekeeping service",
            "Welcome refreshments on arrival",
            "Access to resort facilities",
            "Complimentary WiFi",
            "24/7 front desk assistance",
        ],
        "price": 0,
        "duration": "Per night",
        "images": ["/images/glass-cottage/main.jpg"],
        "is_active": True,
    },
    {
        "id": "breakfast-package",
        "name": "Breakfast Package",
        "description": (
            "Includes daily breakfast with your stay. Start your day with a delicious meal "
            "featuring local and continental options."
        ),
        "inclusions": [
            "All Basic Stay Package amenities",
            "Daily breakfast for all guests",
            "Fresh local and continental options",
            "Special dietary accommodations",
            "Early morning tea/coffee service",
            "Seasonal fruit platter",
        ],
        "price": 500,
        "duration": "Per night",
        "images": ["/images/hornbill/main.png"],
        "is_active": True,
    },
]

DEMO_SAFARI_OPTIONS = [
    {
        "id": "morning-wildlife-safari",
        "name": "Morning Wildlife Safari",
        "description": (
            "An early morning safari with the first light of day, a memorable journey through "
            "the wild landscape to see the diverse fauna and flora of the region."
        ),
        "duration": "4 hours",
        "price_per_person": 0,
        "max_persons": 6,
        "timings": [
            {"value": "early-morning", "label": "Early Morning (5:30 AM - 9:30 AM)"},
            {"value": "morning", "label": "Morning (6:00 AM - 10:00 AM)"},
        ],
        "highlights": [
            "Safari duration: 4 hours with professional guide",
            "All safety equipment and refreshments included",
            "Best wildlife viewing opportunities in early morning",
            "Photography assistance and tips included",
        ],
        "is_active": True,
    },
    {
        "id": "evening-wildlife-safari",
        "name": "Evening Wildlife Safari",
        "description": (
            "A walk through the afternoon and evening hours of the jungle, when the animals "
            "come out to drink water and the birds return to their nests."
        ),
        "duration": "3.5 hours",
        "price_per_person": 0,
        "max_persons": 6,
        "timings": [
            {"value": "afternoon", "label": "Afternoon (2:00 PM - 5:30 PM)"},
            {"value": "evening", "label": "Evening (4:00 PM - 7:30 PM)"},
        ],
        "highlights": [
            "Safari duration: 3.5 hours with professional guide",
            "Perfect for bird watching and sunset photography",
            "Refreshments and safety equipment included",
            "Guided nature walk with expert naturalist",
        ],
        "is_active": True,
    },
    {
        "id": "night-wildlife-safari",
        "name": "Night Wildlife Safari",
        "description": (
            "A night safari with night vision equipment through the dark forest with expert "
            "naturalists, looking for nocturnal wildlife."
        ),
        "duration": "3 hours",
        "price_per_person": 0,
        "max_persons": 6,
        "timings": [
            {"value": "night", "label": "Night (8:00 PM - 11:00 PM)"},
            {"value": "late-night", "label": "Late Night (9:00 PM - 12:00 AM)"},
        ],
        "highlights": [
            "Night safari duration: 3 hours with specialized equipment",
            "Night vision equipment and safety gear provided",
            "Unique nocturnal wildlife viewing experience",
            "Expert guide with extensive night safari experience",
        ],
        "is_active": True,
    },
]


def demo_villas():
    return copy.deepcopy(DEMO_VILLAS)


def demo_packages():
    return copy.deepcopy(DEMO_PACKAGES)


def demo_safari_options():
    return copy.deepcopy(DEMO_SAFARI_OPTIONS)


def demo_units(villa_id: str):
    inventory = VILLA_INVENTORY.get(villa_id)
    if not inventory:
        return []

    prefix = UNIT_PREFIXES.get(villa_id, villa_id[:2].upper())
    units = []
    for i in range(1, inventory["total_units"] + 1):
        units.append({
            "id": f"{villa_id}-unit-{i}",
            "villa_id": villa_id,
            "unit_number": f"{prefix}-{i:02d}",
            "room_type": inventory["room_type"],
            "floor": i // 4 + 1,
            "view_type": "Forest View" if i % 2 == 0 else "Garden View",
            "amenities": ["Air Conditioning", "Private Bathroom", "WiFi"],
            "status": "available",
            "notes": None,
        })
    return units


def demo_safari_queries(now: datetime = None):
    now = now or datetime.now()
    return [
        {
            "id": "demo-1",
            "booking_id": "BK001",
            "guest_name": "John Smith",
            "email": "john.smith@email.com",
            "phone": "9876543210",
            "safari_option_id": "morning-wildlife-safari",
            "safari_name": "Morning Wildlife Safari",
            "preferred_date": (now + timedelta(days=5)).date(),
            "preferred_timing": "early-morning",
            "number_of_persons": 2,
            "special_requirements": "Vegetarian meals preferred",
            "status": "pending",
            "created_at": now - timedelta(days=2),
        },
        {
            "id": "demo-2",
            "booking_id": "BK002",
            "guest_name": "Sarah Johnson",
            "email": "sarah.j@email.com",
            "phone": "9876543211",
            "safari_option_id": "evening-wildlife-safari",
            "safari_name": "Evening Wildlife Safari",
            "preferred_date": (now + timedelta(days=6)).date(),
            "preferred_timing": "evening",
            "number_of_persons": 4,
            "special_requirements": "Wheelchair accessible vehicle needed",
            "status": "confirmed",
            "response": "Confirmed for 4 persons. Wheelchair accessible vehicle arranged.",
            "responded_at": now - timedelta(days=1),
            "responded_by": "admin",
            "admin_notes": "Special vehicle arranged",
            "created_at": now - timedelta(days=3),
        },
        {
            "id": "demo-3",
            "booking_id": "BK003",
            "guest_name": "Mike Wilson",
            "email": "mike.w@email.com",
            "phone": "9876543212",
            "safari_option_id": "morning-wildlife-safari",
            "safari_name": "Morning Wildlife Safari",
            "preferred_date": (now + timedelta(days=7)).date(),
            "preferred_timing": "morning",
            "number_of_persons": 1,
            "special_requirements": "Photography equipment allowed?",
            "status": "pending",
            "created_at": now - timedelta(days=1),
        },
    ]

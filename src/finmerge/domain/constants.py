"""Reserved identifiers and fixed vocabularies shared by the import engine."""

from typing import Optional

CATEGORY_TYPES = ("expense", "income", "investment")
DEFAULT_CATEGORY_TYPE = "expense"

FREQUENCY_TYPES = ("daily", "weekly", "monthly", "yearly")
DEFAULT_FREQUENCY = "monthly"

BUDGET_PERIODS = ("monthly", "yearly")

MATCH_TYPES = ("exact", "contains", "regex")

# Local-only sentinel holding transactions the engine could not classify.
# It is seeded by the store and never synchronized.
UNCATEGORIZED_CATEGORY_ID = "00000000-0000-0000-0000-000000000000"
UNCATEGORIZED_CATEGORY_NAME = "Uncategorized"

# Rule target meaning "drop matching transactions from this and future imports"
SKIP_CATEGORY_ID = "SKIP"

# Legacy exports anchor every hierarchy on one of these three ids
ROOT_CATEGORY_TYPES = {
    "533d4482-df54-47e5-b8d8-000000000001": "expense",
    "533d4482-df54-47e5-b8d8-000000000002": "income",
    "533d4482-df54-47e5-b8d8-000000000003": "investment",
}

MAX_HIERARCHY_DEPTH = 10

DEFAULT_CATEGORY_COLOR = "#6366f1"
DEFAULT_FALLBACK_ICON = "DollarSign"

VALID_ICON_NAMES = frozenset(
    {
        "Activity",
        "Baby",
        "Banknote",
        "Beer",
        "Bike",
        "Book",
        "Briefcase",
        "Building",
        "Bus",
        "Car",
        "Cat",
        "CircleDollarSign",
        "Coffee",
        "CreditCard",
        "Dog",
        "DollarSign",
        "Dumbbell",
        "Film",
        "Fuel",
        "Gamepad2",
        "Gift",
        "GraduationCap",
        "Heart",
        "Home",
        "Landmark",
        "Laptop",
        "Music",
        "Package",
        "Phone",
        "PiggyBank",
        "Pill",
        "Plane",
        "Receipt",
        "Scissors",
        "Shirt",
        "ShoppingBag",
        "ShoppingCart",
        "Smartphone",
        "Stethoscope",
        "Train",
        "TrendingUp",
        "Utensils",
        "Wallet",
        "Wifi",
        "Wrench",
        "Zap",
    }
)


def validate_icon(icon_name: Optional[str]) -> str:
    """Return the icon if it is known, otherwise the fallback icon."""
    if not icon_name or icon_name not in VALID_ICON_NAMES:
        return DEFAULT_FALLBACK_ICON
    return icon_name

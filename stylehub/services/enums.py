"""Enumerations describing roles, garments and wear policies."""

from enum import Enum


class Role(str, Enum):
    STYLER = "styler"
    PARTNER = "partner"
    ADMIN = "admin"


class OwnerKind(str, Enum):
    """Which inventory a garment belongs to."""

    STYLER = "styler"
    PARTNER = "partner"


class Gender(str, Enum):
    """Gender affinity of a garment."""

    MALE = "male"
    FEMALE = "female"
    UNISEX = "unisex"


class StylerGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class OccasionTag(str, Enum):
    CASUAL = "casual"
    FORMAL = "formal"
    BUSINESS = "business"
    PARTY = "party"
    WEDDING = "wedding"
    SPORTS = "sports"
    BEACH = "beach"


class SkinTone(str, Enum):
    FAIR = "fair"
    LIGHT = "light"
    MEDIUM = "medium"
    TAN = "tan"
    DEEP = "deep"
    DARK = "dark"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class WearDedupPolicy(str, Enum):
    """How repeated wear events for the same garment and day are handled."""

    ALLOW = "allow"
    ONE_PER_DAY = "one_per_day"


GARMENT_CATEGORIES: frozenset[str] = frozenset(
    {
        "dress", "shirt", "pants", "jacket", "skirt", "top", "shorts",
        "suit", "blazer", "sweater", "coat", "tshirt", "frock",
        "saree", "kurta", "lehenga", "churidar", "kurti", "gown",
        "salwar suit", "anarkali", "bridal wear", "party wear",
        "crop top & skirt", "tops & tunics", "t-shirt", "jean pants",
        "palazzo", "leggings", "jackets / shrugs", "nightwear",
        "maternity wear", "abaya / burkha", "men's shirt",
        "men's t-shirt", "men's trouser", "jeans", "joggers",
        "hoodies", "sweatshirts", "sherwani", "ethnic wear",
        "kids casual wear", "newborn dress",
    }
)

MIN_OCCASION_TAGS = 1
MAX_OCCASION_TAGS = 4

"""
Outdoor space taxonomy.

Maps place type tags to an OutdoorSpaceCategory. Precedence is fixed:
exclusion beats primary beats secondary, so a visitor center inside a park
reads as indoor at that point.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from domain.models import OutdoorSpaceCategory

# Buildings and indoor venues. Any of these wins over outdoor tags.
EXCLUSION_TYPES = frozenset({
    # Generic structures
    "building", "premise", "subpremise", "house", "apartment",
    "apartment_complex", "condominium", "housing_complex", "dormitory", "lodging", "hotel",
    # Retail
    "shopping_mall", "shopping_center", "mall", "store", "supermarket", "grocery_or_supermarket",
    "convenience_store", "department_store", "clothing_store", "electronics_store",
    "furniture_store", "hardware_store", "home_goods_store", "jewelry_store", "shoe_store",
    "book_store",
    # Food and drink
    "restaurant", "cafe", "bar", "night_club", "bakery", "food_court", "meal_takeaway",
    "meal_delivery",
    # Services
    "bank", "atm", "post_office", "courthouse", "police", "fire_station", "insurance_agency",
    "accounting", "lawyer", "dentist", "doctor", "hospital", "pharmacy", "beauty_salon",
    "hair_care", "spa", "laundry",
    # Indoor entertainment and fitness
    "movie_theater", "cinema", "bowling_alley", "casino", "gym", "fitness_center", "museum",
    "art_gallery", "library", "aquarium",
    # Transport interiors and parking structures
    "parking_garage", "subway_station", "train_station", "bus_station", "transit_station",
    "airport_terminal", "gas_station",
    # Industrial
    "factory", "warehouse",
    # Education buildings
    "school", "primary_school", "secondary_school",
    # Visitor facilities found inside parks
    "visitor_center",
})

# Unambiguous outdoor destinations.
PRIMARY_TYPES = frozenset({
    "park", "national_park", "state_park", "city_park", "dog_park", "nature_reserve",
    "natural_feature", "forest", "wood", "campground", "rv_park", "trail", "hiking_area",
    "beach", "garden", "botanical_garden", "playground", "golf_course", "athletic_field",
    "pitch", "meadow", "grassland", "heath", "wetland", "ski_resort",
})

# Plausible but weaker outdoor signal.
SECONDARY_TYPES = frozenset({
    "tourist_attraction", "attraction", "plaza", "town_square", "square", "landmark",
    "historical_landmark", "monument", "memorial", "viewpoint", "amusement_park", "theme_park",
    "zoo", "stadium", "sports_complex", "marina", "cemetery", "university", "campus",
    "pedestrian", "farm",
})

_OUTDOOR_SPACE_WEIGHTS = {
    OutdoorSpaceCategory.PRIMARY: 100,
    OutdoorSpaceCategory.SECONDARY: 60,
    OutdoorSpaceCategory.EXCLUSION: -50,
    OutdoorSpaceCategory.UNKNOWN: 0,
}


@dataclass
class SpaceClassification:
    category: OutdoorSpaceCategory
    reasons: List[str] = field(default_factory=list)
    matched_types: List[str] = field(default_factory=list)


def humanize_type(place_type: str) -> str:
    """'shopping_mall' -> 'Shopping Mall'."""
    return place_type.replace("_", " ").strip().title()


def _matching(place_types: List[str], vocabulary: frozenset) -> List[str]:
    seen: List[str] = []
    for place_type in place_types:
        if place_type in vocabulary and place_type not in seen:
            seen.append(place_type)
    return seen


def classify_outdoor_space(place_types: Iterable[str]) -> SpaceClassification:
    """
    Classify a set of place type tags with ordered precedence.

    Returns the category plus one reason per matching tag of the winning
    vocabulary, e.g. "Park is a primary outdoor space".
    """
    types = [t.strip().lower() for t in place_types if t and t.strip()]

    excluded = _matching(types, EXCLUSION_TYPES)
    if excluded:
        return SpaceClassification(
            category=OutdoorSpaceCategory.EXCLUSION,
            reasons=[f"{humanize_type(t)} is likely an indoor area" for t in excluded],
            matched_types=excluded,
        )

    primary = _matching(types, PRIMARY_TYPES)
    if primary:
        return SpaceClassification(
            category=OutdoorSpaceCategory.PRIMARY,
            reasons=[f"{humanize_type(t)} is a primary outdoor space" for t in primary],
            matched_types=primary,
        )

    secondary = _matching(types, SECONDARY_TYPES)
    if secondary:
        return SpaceClassification(
            category=OutdoorSpaceCategory.SECONDARY,
            reasons=[f"{humanize_type(t)} may be a secondary outdoor space" for t in secondary],
            matched_types=secondary,
        )

    return SpaceClassification(
        category=OutdoorSpaceCategory.UNKNOWN,
        reasons=["No recognized outdoor space types found"],
    )


def classify(place_types: Iterable[str]) -> OutdoorSpaceCategory:
    return classify_outdoor_space(place_types).category


def get_outdoor_space_weight(category: OutdoorSpaceCategory) -> int:
    """Relative weight of a category when ranking candidate places."""
    return _OUTDOOR_SPACE_WEIGHTS[category]

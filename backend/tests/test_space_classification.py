from domain.models import OutdoorSpaceCategory
from services.space_classification import (
    EXCLUSION_TYPES,
    PRIMARY_TYPES,
    SECONDARY_TYPES,
    classify,
    classify_outdoor_space,
    get_outdoor_space_weight,
    humanize_type,
)


def test_vocabularies_are_disjoint():
    assert not EXCLUSION_TYPES & PRIMARY_TYPES
    assert not EXCLUSION_TYPES & SECONDARY_TYPES
    assert not PRIMARY_TYPES & SECONDARY_TYPES


def test_precedence_order():
    assert classify(["park"]) == OutdoorSpaceCategory.PRIMARY
    assert classify(["tourist_attraction"]) == OutdoorSpaceCategory.SECONDARY
    assert classify(["shopping_mall"]) == OutdoorSpaceCategory.EXCLUSION
    assert classify(["street_address"]) == OutdoorSpaceCategory.UNKNOWN
    assert classify([]) == OutdoorSpaceCategory.UNKNOWN


def test_exclusion_wins_over_outdoor_tags():
    assert classify(["park", "shopping_mall"]) == OutdoorSpaceCategory.EXCLUSION
    assert classify(["tourist_attraction", "museum"]) == OutdoorSpaceCategory.EXCLUSION
    assert classify(["tourist_attraction", "park"]) == OutdoorSpaceCategory.PRIMARY


def test_tags_are_normalized():
    assert classify([" Park "]) == OutdoorSpaceCategory.PRIMARY
    assert classify(["", None, "SHOPPING_MALL"]) == OutdoorSpaceCategory.EXCLUSION


def test_reasons_name_each_matching_tag():
    result = classify_outdoor_space(["park", "natural_feature", "tourist_attraction"])
    assert result.category == OutdoorSpaceCategory.PRIMARY
    assert result.reasons == [
        "Park is a primary outdoor space",
        "Natural Feature is a primary outdoor space",
    ]
    assert result.matched_types == ["park", "natural_feature"]

    assert classify_outdoor_space(["tourist_attraction"]).reasons == [
        "Tourist Attraction may be a secondary outdoor space"
    ]
    assert classify_outdoor_space(["shopping_mall", "park"]).reasons == [
        "Shopping Mall is likely an indoor area"
    ]
    assert classify_outdoor_space(["route"]).reasons == ["No recognized outdoor space types found"]


def test_humanize_type():
    assert humanize_type("shopping_mall") == "Shopping Mall"


def test_weights_follow_category_order():
    assert get_outdoor_space_weight(OutdoorSpaceCategory.PRIMARY) == 100
    assert get_outdoor_space_weight(OutdoorSpaceCategory.SECONDARY) == 60
    assert get_outdoor_space_weight(OutdoorSpaceCategory.UNKNOWN) == 0
    assert get_outdoor_space_weight(OutdoorSpaceCategory.EXCLUSION) < 0

import pytest
from pydantic import ValidationError
from place_search.models import GeoBounds, GeoPoint
from place_search.recall.query_builder import (
    QUERY_BY,
    QUERY_BY_WEIGHTS,
    num_typos_for,
    query_builder,
    select_sort,
)

MIAMI = GeoPoint(lat=25.77, lng=-80.19)
BOX = GeoBounds(min_lat=25, max_lat=26, min_lng=-81, max_lng=-80)


@pytest.mark.parametrize(
    "query, typos",
    [
        ("mi", 0),
        ("bbq", 0),
        ("b b q", 0),
        ("*", 0),
        ("taco", 1),
        ("pizza", 1),
        ("pi zza", 1),
        ("burger", 2),
        ("coffee shop", 2),
    ],
)
def test_typo_tolerance_by_length(query, typos):
    assert num_typos_for(query) == typos
    assert query_builder.build(query).num_typos == typos


def test_typo_tolerance_is_monotonic():
    previous = 0
    for length in range(1, 12):
        typos = num_typos_for("x" * length)
        assert typos >= previous
        previous = typos


def test_field_weights_are_fixed():
    engine_query = query_builder.build("pizza", geo_point=MIAMI, autocomplete=True)
    assert engine_query.query_by == QUERY_BY
    assert engine_query.query_by_weights == QUERY_BY_WEIGHTS == "5,3,2,1,1"
    assert QUERY_BY.split(",")[0] == "name"


def test_sort_text_query_with_geo():
    sort = select_sort(MIAMI, None, "coffee")
    assert sort == "_text_match:desc,location(25.77, -80.19):asc,popularity:desc"


@pytest.mark.parametrize("query", ["", "*"])
def test_sort_wildcard_with_geo(query):
    assert select_sort(MIAMI, None, query) == "location(25.77, -80.19):asc,popularity:desc"


def test_sort_geo_wins_over_bounds():
    assert select_sort(MIAMI, BOX, "*") == "location(25.77, -80.19):asc,popularity:desc"


def test_sort_bounds_wildcard():
    assert select_sort(None, BOX, "*") == "popularity:desc"


def test_sort_bounds_with_text_falls_back_to_default():
    assert select_sort(None, BOX, "pizza") == "_text_match:desc,popularity:desc"


def test_sort_default():
    assert select_sort(None, None, "pizza") == "_text_match:desc,popularity:desc"
    assert select_sort(None, None, "*") == "_text_match:desc,popularity:desc"


def test_no_filters_means_no_filter_by():
    engine_query = query_builder.build("pizza")
    assert engine_query.filter_by is None
    assert "filter_by" not in engine_query.to_params()


def test_radius_filter_needs_geo_point():
    assert query_builder.build("pizza", radius_km=10).filter_by is None
    assert query_builder.build("pizza", geo_point=MIAMI).filter_by is None
    engine_query = query_builder.build("pizza", geo_point=MIAMI, radius_km=25)
    assert engine_query.filter_by == "location:(25.77, -80.19, 25 km)"


def test_bounds_filter():
    engine_query = query_builder.build("*", bounds=BOX)
    assert engine_query.filter_by == "geocodes_lat:[25..26] && geocodes_lng:[-81..-80]"


def test_all_filters_are_anded():
    engine_query = query_builder.build(
        "pizza",
        geo_point=MIAMI,
        radius_km=2.5,
        bounds=BOX,
        category="Pizzeria",
        locality="Miami",
        region="FL",
        country="US",
    )
    assert engine_query.filter_by.split(" && ") == [
        "location:(25.77, -80.19, 2.5 km)",
        "geocodes_lat:[25..26]",
        "geocodes_lng:[-81..-80]",
        "categories:Pizzeria",
        "location_locality:=Miami",
        "location_region:=FL",
        "location_country:=US",
    ]


def test_filter_values_with_syntax_characters_are_quoted():
    engine_query = query_builder.build("*", locality="Washington, D.C.")
    assert engine_query.filter_by == "location_locality:=`Washington, D.C.`"


def test_fixed_engine_parameters():
    params = query_builder.build("pizza", page=3, limit=50).to_params()
    assert params["q"] == "pizza"
    assert params["page"] == 3
    assert params["per_page"] == 50
    assert params["prioritize_exact_match"] == "true"
    assert params["prioritize_token_position"] == "true"
    assert params["typo_tokens_threshold"] == 1
    assert params["drop_tokens_threshold"] == 2
    assert params["text_match_type"] == "max_score"
    assert params["highlight_full_fields"] == "name"
    assert params["highlight_affix_num_tokens"] == 4
    assert "prefix" not in params


def test_empty_query_becomes_wildcard():
    assert query_builder.build("").q == "*"


def test_autocomplete_only_adds_prefix():
    kwargs = dict(geo_point=MIAMI, radius_km=10, category="Cafe", page=2, limit=10)
    plain = query_builder.build("cof", **kwargs).to_params()
    prefixed = query_builder.build("cof", autocomplete=True, **kwargs).to_params()
    assert prefixed.pop("prefix") == "true"
    assert prefixed == plain


def test_engine_query_is_frozen():
    engine_query = query_builder.build("pizza")
    with pytest.raises(ValidationError):
        engine_query.q = "burger"


def test_non_positive_radius_adds_no_filter():
    assert query_builder.build("pizza", geo_point=MIAMI, radius_km=0).filter_by is None
    assert query_builder.build("pizza", geo_point=MIAMI, radius_km=-3).filter_by is None

import pytest

from models.metrics import LocationContext
from services.emissions.gas_prices import DEFAULT_GAS_PRICE, GasPriceTable


@pytest.mark.parametrize(
    "ctx,expected",
    [
        (LocationContext(country="US", region="Texas"), 3.10),
        (LocationContext(country="US", region="California"), 4.80),
        (LocationContext(country="US", region="Nowhereville"), 3.50),
        (LocationContext(country="US"), 3.50),
        (LocationContext(country="CA", region="Alberta"), 3.85),
        (LocationContext(country="GB", region="Scotland"), 6.80),
        (LocationContext(country="ZZ"), DEFAULT_GAS_PRICE),
        (LocationContext(region="Texas"), DEFAULT_GAS_PRICE),
        (LocationContext(), DEFAULT_GAS_PRICE),
        (None, DEFAULT_GAS_PRICE),
        ({"country": "DE"}, 6.50),
    ],
)
def test_gas_price_lookup(gas_prices, ctx, expected):
    assert gas_prices.get_gas_price_for_location(ctx) == expected


def test_default_price_is_global_average():
    assert DEFAULT_GAS_PRICE == 3.80
    assert GasPriceTable(entries=[]).get_gas_price_for_location({"country": "US"}) == 3.80


def test_cost_per_km():
    # 25 mpg = 40.2335 km per gallon
    assert GasPriceTable.calculate_cost_per_km(3.5, 25) == pytest.approx(3.5 / 40.2335)


@pytest.mark.parametrize(
    "ctx",
    [
        None,
        LocationContext(country="US", region="Texas"),
        LocationContext(country="NL"),
        LocationContext(country="ZZ"),
    ],
)
def test_cost_range_is_ordered(gas_prices, ctx):
    r = gas_prices.get_cost_range(ctx)
    assert r["min"] <= r["average"] <= r["max"]
    assert r["price_per_gallon"] == gas_prices.get_gas_price_for_location(ctx)


def test_cost_range_values_for_default_price(gas_prices):
    r = gas_prices.get_cost_range()
    assert r == {"min": 0.07, "max": 0.13, "average": 0.09, "price_per_gallon": 3.80}


# ---- Mapbox context parsing ----

AUSTIN_CONTEXT = [
    {"id": "postcode.8405", "text": "78701"},
    {"id": "place.9128", "text": "Austin", "wikidata": "Q16559"},
    {"id": "region.1973", "text": "Texas", "short_code": "US-TX"},
    {"id": "country.8940", "text": "United States", "short_code": "us"},
]


def test_parse_country_and_region(gas_prices):
    ctx = gas_prices.parse_location_context(AUSTIN_CONTEXT)
    assert ctx == LocationContext(country="US", region="Texas")
    assert gas_prices.get_gas_price_for_location(ctx) == 3.10


def test_parse_country_from_id_when_short_code_missing(gas_prices):
    ctx = gas_prices.parse_location_context([{"id": "country.gb42", "text": "United Kingdom"}])
    assert ctx.country == "GB"
    assert ctx.region is None


def test_parse_hyphenated_short_code_fallback(gas_prices):
    ctx = gas_prices.parse_location_context(
        [{"id": "place.1", "text": "California", "short_code": "us-ca"}]
    )
    assert ctx == LocationContext(country="US", region="California")


def test_hyphen_fallback_keeps_explicit_region(gas_prices):
    ctx = gas_prices.parse_location_context(
        [
            {"id": "region.1", "text": "Ontario"},
            {"id": "district.2", "text": "Toronto Division", "short_code": "ca-on"},
        ]
    )
    assert ctx == LocationContext(country="CA", region="Ontario")


@pytest.mark.parametrize(
    "items",
    [
        None,
        [],
        [{"id": "place.1", "text": "Somewhere"}],
        [{"id": "region.1", "text": "Texas"}],
        ["not-a-dict", 42, None],
        [{"text": "no id"}, {"id": None, "short_code": None}],
        [{"id": "place.1", "short_code": "a-b-c"}],
    ],
)
def test_parse_tolerates_partial_input(gas_prices, items):
    assert gas_prices.parse_location_context(items) is None

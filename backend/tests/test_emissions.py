import pytest

from core.exceptions import UnknownModeError, ValidationError
from core.rounding import round_half_up
from models.metrics import LocationContext
from models.transport import TRANSPORT_MODES


@pytest.mark.parametrize("mode", ["walking", "cycling", "driving", "transit"])
@pytest.mark.parametrize("distance", [0, 1, 499, 1609, 10000, 123456.7])
def test_carbon_emissions_formula(calculator, mode, distance):
    m = calculator.calculate_metrics(distance, mode)
    expected = round_half_up(distance / 1000 * TRANSPORT_MODES[mode].emissions_factor, 3)
    assert m.carbon_emissions == expected
    assert m.carbon_emissions >= 0
    assert m.estimated_cost >= 0
    assert m.details.distance_km == distance / 1000


@pytest.mark.parametrize("mode", ["walking", "cycling"])
@pytest.mark.parametrize("distance", [0, 800, 5000, 42195])
def test_active_modes_are_zero_emission_and_rated_a(calculator, mode, distance):
    m = calculator.calculate_metrics(distance, mode)
    assert m.carbon_emissions == 0
    assert m.environmental_rating == "A"
    assert m.calories is not None and m.calories >= 0


def test_walking_one_mile(calculator):
    m = calculator.calculate_metrics(1609, "walking")
    assert m.carbon_emissions == 0
    assert m.calories == 72  # 1.609 km * 45 kcal
    assert m.environmental_rating == "A"
    assert m.estimated_cost == 0
    assert m.cost_range is None


@pytest.mark.parametrize("distance,calories", [(100, 5), (500, 23), (900, 41)])
def test_calories_round_halves_up(calculator, distance, calories):
    assert calculator.calculate_metrics(distance, "walking").calories == calories


@pytest.mark.parametrize("distance,cost", [(500, 0.08), (4500, 0.68)])
def test_transit_cost_rounds_halves_up(calculator, distance, cost):
    assert calculator.calculate_metrics(distance, "transit").estimated_cost == cost


@pytest.mark.parametrize(
    "x,places,expected",
    [(22.5, 0, 23), (4.5, 0, 5), (0.075, 2, 0.08), (0.0445, 3, 0.045), (-2.5, 0, -2)],
)
def test_round_half_up(x, places, expected):
    assert round_half_up(x, places) == expected


def test_driving_ten_km_without_location(calculator):
    m = calculator.calculate_metrics(10000, "driving")
    # 10 km * 0.18 kg/km
    assert m.carbon_emissions == pytest.approx(1.8)
    assert m.environmental_rating == "D"
    assert m.estimated_cost == pytest.approx(4.5)
    assert m.cost_range is None
    assert m.calories is None
    assert "1.8 kg CO2" in m.details.breakdown
    assert "10.0 km" in m.details.breakdown


def test_transit_is_rated_b(calculator):
    m = calculator.calculate_metrics(10000, "transit")
    assert m.carbon_emissions == pytest.approx(0.89)
    assert m.environmental_rating == "B"
    assert m.estimated_cost == pytest.approx(1.5)
    assert "0.89" in m.details.breakdown


def test_driving_with_location_uses_gas_price_range(calculator):
    ctx = LocationContext(country="US", region="Texas")
    m = calculator.calculate_metrics(10000, "driving", location_context=ctx)
    # Texas 3.10 USD/gal -> per km 0.06 / 0.08 / 0.11 at 35 / 25 / 18 mpg
    assert m.cost_range is not None
    assert m.cost_range.min == pytest.approx(0.6)
    assert m.cost_range.average == pytest.approx(0.8)
    assert m.cost_range.max == pytest.approx(1.1)
    assert m.estimated_cost == m.cost_range.average
    assert m.cost_range.min <= m.cost_range.average <= m.cost_range.max
    # emissions do not depend on the location
    assert m.carbon_emissions == pytest.approx(1.8)


def test_location_context_ignored_for_non_driving(calculator):
    ctx = LocationContext(country="US", region="California")
    m = calculator.calculate_metrics(10000, "transit", location_context=ctx)
    assert m.cost_range is None
    assert m.estimated_cost == pytest.approx(1.5)


def test_unknown_mode_fails_fast(calculator):
    with pytest.raises(UnknownModeError) as exc:
        calculator.calculate_metrics(1000, "teleport")
    assert exc.value.code == "UNKNOWN_MODE"


def test_negative_distance_rejected(calculator):
    with pytest.raises(ValidationError):
        calculator.calculate_metrics(-1, "walking")


@pytest.mark.parametrize(
    "carbon,distance_km,expected",
    [
        (0.0, 0.0, "A"),
        (0.0, 10.0, "A"),
        (0.5, 10.0, "A"),  # 0.05 inclusive
        (0.51, 10.0, "B"),
        (1.0, 10.0, "B"),  # 0.10 inclusive
        (1.5, 10.0, "C"),
        (2.5, 10.0, "D"),
        (2.51, 10.0, "E"),
        (4.0, 10.0, "E"),
    ],
)
def test_environmental_rating_thresholds(calculator, carbon, distance_km, expected):
    assert calculator.environmental_rating(carbon, distance_km) == expected


def test_rating_uses_rounded_emissions(calculator):
    # 1 m of driving: 0.00018 kg rounds to 0.0 before the rating is derived
    m = calculator.calculate_metrics(1, "driving")
    assert m.carbon_emissions == 0
    assert m.environmental_rating == "A"


@pytest.mark.parametrize(
    "mode,distances,tiers",
    [
        ("walking", [500, 2000, 5000], 3),
        ("cycling", [1000, 5000, 20000], 3),
        ("driving", [1000, 3000, 20000], 3),
        ("transit", [1000, 20000], 2),
    ],
)
def test_health_impact_bands(calculator, mode, distances, tiers):
    messages = {calculator.calculate_metrics(d, mode).health_impact for d in distances}
    assert len(messages) == tiers


def test_health_impact_band_edges(calculator):
    below = calculator.calculate_metrics(999, "walking").health_impact
    at = calculator.calculate_metrics(1000, "walking").health_impact
    assert below != at
    assert "~45 calories" in at


def test_compare_sorted_and_stable(calculator):
    rows = calculator.compare_transport_modes(5000, ["driving", "cycling", "transit", "walking"])
    assert [r.mode for r in rows] == ["cycling", "walking", "transit", "driving"]
    emissions = [r.carbon_emissions for r in rows]
    assert emissions == sorted(emissions)


def test_compare_keeps_input_order_on_ties(calculator):
    rows = calculator.compare_transport_modes(5000, ["walking", "cycling"])
    assert [r.mode for r in rows] == ["walking", "cycling"]
    rows = calculator.compare_transport_modes(5000, ["cycling", "walking"])
    assert [r.mode for r in rows] == ["cycling", "walking"]


def test_compare_summary(calculator):
    result = calculator.compare_summary(5000, ["driving", "walking", "transit"])
    s = result.summary
    assert s.best_option.mode == "walking"
    assert s.worst_option.mode == "driving"
    assert s.carbon_savings == pytest.approx(0.9)
    assert s.cost_savings == pytest.approx(2.25)
    assert s.recommendations.recommended == ["cycling", "transit"]


def test_compare_summary_requires_modes(calculator):
    with pytest.raises(ValidationError):
        calculator.compare_summary(5000, [])


@pytest.mark.parametrize(
    "distance_km,recommended,avoid",
    [
        (0.5, ["walking"], ["driving"]),
        (0.999, ["walking"], ["driving"]),
        (1.0, ["walking", "cycling"], ["driving"]),
        (2.99, ["walking", "cycling"], ["driving"]),
        (3.0, ["cycling", "transit"], []),
        (7.99, ["cycling", "transit"], []),
        (8.0, ["transit", "driving"], []),
        (250, ["transit", "driving"], []),
    ],
)
def test_recommendations(calculator, distance_km, recommended, avoid):
    recs = calculator.get_recommendations(distance_km)
    assert recs.recommended == recommended
    assert recs.avoid == avoid
    assert recs.message


def test_describe_modes(calculator):
    modes = {m["id"]: m for m in calculator.describe_modes()}
    assert set(modes) == {"walking", "cycling", "driving", "transit"}
    assert modes["walking"]["emissionsDescription"] == "Zero emissions"
    assert modes["walking"]["costDescription"] == "Free"
    assert modes["walking"]["healthBenefits"] == "Burns ~45 calories per km"
    assert modes["driving"]["emissionsDescription"] == "0.18 kg CO2 per km"
    assert modes["driving"]["costDescription"] == "~$0.45 per km"
    assert "healthBenefits" not in modes["driving"]


def test_methodology(calculator):
    m = calculator.get_methodology("driving")
    assert m.emissions_factor == 0.18
    assert m.sources
    with pytest.raises(UnknownModeError):
        calculator.get_methodology("hovercraft")

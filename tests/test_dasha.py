import pytest

from dasha import (
    ANTARDASHA,
    DASHA_YEARS,
    MAHADASHA,
    PRATYANTARDASHA,
    WeightedPeriod,
    period_from_payload,
    period_to_payload,
    periods_to_dataframe,
    subdivide,
    vimshottari_weights,
    weights_from_mapping,
)
from intervals import TimeInterval
from planets import Planet


def test_planet_metadata_is_total():
    for planet in Planet:
        assert len(planet.abbreviation) == 2
        assert planet.symbol
        assert planet.color.startswith("#")
    assert Planet.MERCURY.abbreviation == "Me"
    assert Planet.RAHU.symbol == "☊"


def test_planet_parse():
    assert Planet.parse("SATURN") is Planet.SATURN
    assert Planet.parse(" venus ") is Planet.VENUS
    assert Planet.parse("ke") is Planet.KETU
    with pytest.raises(ValueError):
        Planet.parse("Pluto")


def test_weight_bounds():
    with pytest.raises(ValueError):
        WeightedPeriod(Planet.SUN, 0)
    with pytest.raises(ValueError):
        WeightedPeriod(Planet.SUN, 100.5)
    assert WeightedPeriod(Planet.SUN, 100).weight_percent == 100


def test_vimshottari_weights_start_with_lord():
    weights = vimshottari_weights(Planet.SATURN)
    assert [weight.planet for weight in weights][:3] == [Planet.SATURN, Planet.MERCURY, Planet.KETU]
    assert len(weights) == len(DASHA_YEARS)
    assert sum(weight.weight_percent for weight in weights) == pytest.approx(100.0)


def test_subdivide_tags_planets_in_order():
    parent = TimeInterval.parse("2026-01-01", "2036-01-01")
    weights = weights_from_mapping({"Moon": 8.33, "Mars": 5.83, "Rahu": 15.0})
    periods = subdivide(parent, weights)

    assert [period.planet for period in periods] == [Planet.MOON, Planet.MARS, Planet.RAHU]
    assert all(period.level == ANTARDASHA and period.children is None for period in periods)
    # Weights are used as given, the last period absorbs the remainder.
    assert periods[-1].end == parent.end


def test_period_payload_without_subtree_is_unresolved():
    period = period_from_payload({"planet": "Jupiter", "startDate": "2001-01-01", "endDate": "2017-01-01"})
    assert period.planet is Planet.JUPITER
    assert period.children is None
    assert not period.is_resolved
    assert "antardasha" not in period_to_payload(period)


def test_period_payload_reads_nested_levels():
    payload = {
        "planet": "Rahu",
        "startDate": "2001-01-01T00:00:00+00:00",
        "endDate": "2019-01-01T00:00:00+00:00",
        "antardasha": {
            "sequence": [
                {
                    "planet": "Rahu",
                    "startDate": "2001-01-01T00:00:00+00:00",
                    "endDate": "2003-09-13T00:00:00+00:00",
                    "pratyantardasha": [
                        {"planet": "Rahu", "startDate": "2001-01-01T00:00:00+00:00", "endDate": "2001-05-26T00:00:00+00:00"},
                    ],
                },
                {"planet": "Jupiter", "startDate": "2003-09-13T00:00:00+00:00", "endDate": "2006-02-06T00:00:00+00:00"},
            ]
        },
    }
    period = period_from_payload(payload)

    assert period.level == MAHADASHA
    assert [child.planet for child in period.children] == [Planet.RAHU, Planet.JUPITER]
    assert period.children[0].children[0].level == PRATYANTARDASHA
    assert period.children[1].children is None
    assert period_to_payload(period) == payload


def test_period_payload_requires_dates():
    with pytest.raises(ValueError):
        period_from_payload({"planet": "Sun", "startDate": "2001-01-01"})


def test_periods_dataframe_keeps_order():
    parent = TimeInterval.parse("2000-01-01", "2020-01-01")
    periods = subdivide(parent, vimshottari_weights(Planet.VENUS))
    df = periods_to_dataframe(periods, active=periods[2])

    assert list(df["Planet"]) == [period.planet.display_name for period in periods]
    assert list(df.columns) == ["Planet", "Abbr", "Start", "End", "Level", "Current"]
    assert df["Current"].sum() == 1
    assert df.loc[2, "Current"]


def test_sub_period_keys_are_read_at_their_own_level():
    mahadasha = period_from_payload(
        {
            "planet": "Mars",
            "startDate": "2036-01-01",
            "endDate": "2043-01-01",
            "pratyantardasha": [{"planet": "Mars", "startDate": "2036-01-01", "endDate": "2036-05-28"}],
        }
    )
    assert mahadasha.children is None

    antardasha = period_from_payload(
        {
            "planet": "Mars",
            "startDate": "2036-01-01",
            "endDate": "2036-05-28",
            "antardasha": {"sequence": [{"planet": "Mars", "startDate": "2036-01-01", "endDate": "2036-01-09"}]},
        },
        level=ANTARDASHA,
    )
    assert antardasha.children is None

    pratyantardasha = period_from_payload(
        {
            "planet": "Mars",
            "startDate": "2036-01-01",
            "endDate": "2036-01-09",
            "pratyantardasha": [{"planet": "Mars", "startDate": "2036-01-01", "endDate": "2036-01-02"}],
        },
        level=PRATYANTARDASHA,
    )
    assert pratyantardasha.children is None

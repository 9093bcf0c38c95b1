from __future__ import annotations

import pytest

from fuelrecon.domain.model import Coordinates, MatchScope
from fuelrecon.domain.reconciliation import Matcher
from tests.helpers.fuel import CEBU, QUEZON_CITY, make_record, make_station


@pytest.fixture
def matcher() -> Matcher:
    return Matcher()


def test_best_station_prefers_in_city_brand_match(matcher: Matcher) -> None:
    shell = make_station("Shell Ayala", brand="Shell")
    petron = make_station("Petron Ayala")
    record = make_record(area="Makati", brand="Petron")

    match = matcher.find_best_station_for_price(record, [shell, petron])

    assert match is not None
    assert match.station is petron
    assert match.scope is MatchScope.CITY
    assert match.confidence == pytest.approx(1.0)


def test_best_station_keeps_first_candidate_on_ties(matcher: Matcher) -> None:
    first = make_station("Petron Ayala")
    second = make_station("Petron Buendia")

    match = matcher.find_best_station_for_price(make_record(), [first, second])

    assert match is not None
    assert match.station is first


def test_best_station_widens_search_when_area_has_no_candidate(matcher: Matcher) -> None:
    petron_qc = make_station("Petron EDSA", city="Quezon City", coordinates=QUEZON_CITY)
    record = make_record(area="Makati City", brand="Petron")

    match = matcher.find_best_station_for_price(record, [petron_qc])

    assert match is not None
    assert match.station is petron_qc
    assert match.scope is MatchScope.FUZZY
    assert match.confidence == pytest.approx(0.73)


def test_wider_candidate_must_beat_weak_in_area_match(matcher: Matcher) -> None:
    shell_makati = make_station("Shell Ayala", brand="Shell")
    petron_qc = make_station("Petron EDSA", city="Quezon City", coordinates=QUEZON_CITY)
    record = make_record(area="Makati City", brand="Petron")

    match = matcher.find_best_station_for_price(record, [shell_makati, petron_qc])

    assert match is not None
    assert match.station is petron_qc
    assert match.scope is MatchScope.FUZZY


def test_best_station_returns_none_below_threshold(matcher: Matcher) -> None:
    shell_cebu = make_station("Shell Mango", brand="Shell", city="Cebu City", coordinates=CEBU)

    assert matcher.find_best_station_for_price(make_record(), [shell_cebu]) is None
    assert matcher.find_best_station_for_price(make_record(), []) is None


def test_best_station_penalizes_missing_price(matcher: Matcher) -> None:
    match = matcher.find_best_station_for_price(make_record(common_price=0.0), [make_station()])

    assert match is not None
    assert match.confidence == pytest.approx(0.9)
    assert not match.has_valid_price


def test_find_stations_ranks_city_matches_before_fuzzy(matcher: Matcher) -> None:
    caltex_makati = make_station("Caltex Ayala", brand="Caltex")
    petron_qc = make_station("Petron EDSA", city="Quezon City", coordinates=QUEZON_CITY)
    petron_makati = make_station("Petron Ayala")
    unbranded_makati = make_station("Metro Gas", brand="Metro Gas")
    record = make_record(area="NCR", brand="Petron")

    matches = matcher.find_stations_for_price(
        record, [caltex_makati, petron_qc, unbranded_makati, petron_makati]
    )

    assert [match.station for match in matches] == [petron_qc, petron_makati]
    assert all(match.scope is MatchScope.CITY for match in matches)


def test_find_stations_city_group_outranks_higher_fuzzy_score(matcher: Matcher) -> None:
    pasay = Coordinates(14.5378, 121.0014)
    fuzzy = make_station("Metro Gas Pasay", brand="Metro Gas", city="Pasay City", coordinates=pasay)
    in_city = make_station("Metro Fuel Ayala", brand="Metro Fuel")
    record = make_record(area="Makati City", brand="Metro Gas")

    matches = matcher.find_stations_for_price(record, [fuzzy, in_city])

    assert [match.station for match in matches] == [in_city, fuzzy]
    assert [match.scope for match in matches] == [MatchScope.CITY, MatchScope.FUZZY]
    assert matches[0].confidence < matches[1].confidence


def test_find_prices_for_station_sorted_by_confidence(matcher: Matcher) -> None:
    station = make_station()
    in_city = make_record("Diesel", area="Makati City")
    regional = make_record("Diesel", area="NCR")
    other_brand = make_record("Diesel", brand="Shell")

    matches = matcher.find_prices_for_station(station, [regional, other_brand, in_city])

    assert [match.record for match in matches] == [in_city, regional]
    assert matches[0].confidence > matches[1].confidence

from __future__ import annotations

from pinna.core.geo import distance
from pinna.models.places_model import Place, Position
from pinna.services import Proximity_service


def _place(place_id: str, lat: float, lng: float) -> Place:
    return Place(id=place_id, title=f"Place {place_id}", latitude=lat, longitude=lng)


PLACES = [
    _place("far", 57.90, 12.20),
    _place("near", 57.7011, 11.9501),
    _place("mid", 57.75, 12.00),
]


def test_rank_without_position_keeps_server_order():
    assert Proximity_service.rank(PLACES, None) == PLACES


def test_rank_sorts_ascending_by_distance():
    here = Position(latitude=57.70, longitude=11.95)
    ranked = Proximity_service.rank(PLACES, here)

    assert [p.id for p in ranked] == ["near", "mid", "far"]
    distances = [distance(here, p) for p in ranked]
    assert distances == sorted(distances)


def test_rank_keeps_input_order_for_equal_distances():
    here = Position(latitude=0.0, longitude=0.0)
    # Same distance from the equator origin, mirrored around it
    tied = [
        _place("east", 0.0, 1.0),
        _place("north", 1.0, 0.0),
        _place("west", 0.0, -1.0),
        _place("south", -1.0, 0.0),
    ]
    assert [p.id for p in Proximity_service.rank(tied, here)] == ["east", "north", "west", "south"]


def test_rank_does_not_mutate_input():
    original = list(PLACES)
    Proximity_service.rank(PLACES, Position(latitude=57.70, longitude=11.95))
    assert PLACES == original


def test_rank_with_distance_reports_unknown_without_position():
    ranked = Proximity_service.rank_with_distance(PLACES, None)
    assert [r.place.id for r in ranked] == ["far", "near", "mid"]
    assert all(r.distance_km is None for r in ranked)


def test_rank_with_distance_matches_rank_order():
    here = Position(latitude=57.70, longitude=11.95)
    ranked = Proximity_service.rank_with_distance(PLACES, here)
    assert [r.place for r in ranked] == Proximity_service.rank(PLACES, here)
    assert ranked[0].distance_km < 0.2


def test_format_distance():
    assert Proximity_service.format_distance(1.23456) == "1.23 km"
    assert Proximity_service.format_distance(None) == "Distance unknown"

from typing import Optional, Sequence

from pinna.core.geo import distance
from pinna.models.places_model import Place, Position, RankedPlace


def rank(places: Sequence[Place], position: Optional[Position]) -> list[Place]:
    """
    Orders places nearest-first from the given position.
    Without a position the server order is returned untouched. sorted() is
    stable, so equal distances keep their input order.
    """
    if position is None:
        return list(places)
    return sorted(places, key=lambda place: distance(position, place))


def rank_with_distance(places: Sequence[Place], position: Optional[Position]) -> list[RankedPlace]:
    if position is None:
        return [RankedPlace(place=place) for place in places]

    measured = [(distance(position, place), place) for place in places]
    measured.sort(key=lambda item: item[0])
    return [RankedPlace(place=place, distance_km=km) for km, place in measured]


def format_distance(km: Optional[float]) -> str:
    if km is None:
        return "Distance unknown"
    return f"{km:.2f} km"

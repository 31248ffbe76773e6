"""
Location policy.

Which warehouse locations each entity type may be moved to. Used to reject
invalid moves before any network call and to list destinations in the UI.
"""

from typing import Optional, Union

from models.scan import EntityType, Location
from utils.text_utils import strip_accents


BOX_LOCATIONS = frozenset({
    Location.PACKING,
    Location.BODEGA,
    Location.VENTA,
    Location.TRANSITO,
})

# Pallets can also be reserved for a sale
PALLET_LOCATIONS = BOX_LOCATIONS | {Location.PREVENTA}

LOCATIONS_BY_ENTITY: dict[EntityType, frozenset[Location]] = {
    EntityType.BOX: BOX_LOCATIONS,
    EntityType.PALLET: PALLET_LOCATIONS,
}

# Display order for destination pickers
LOCATION_ORDER = [
    Location.PACKING,
    Location.BODEGA,
    Location.PREVENTA,
    Location.VENTA,
    Location.TRANSITO,
]


def parse_location(value: Union[str, Location, None]) -> Optional[Location]:
    """
    Parse a location name leniently: ' bodega ', 'Tránsito' → Location.

    Returns:
        Location, or None if the name is unknown
    """
    if isinstance(value, Location):
        return value
    if not value:
        return None
    name = strip_accents(str(value)).strip().upper()
    try:
        return Location(name)
    except ValueError:
        return None


def valid_locations(entity_type: EntityType) -> frozenset[Location]:
    """Destinations allowed for an entity type."""
    return LOCATIONS_BY_ENTITY[EntityType(entity_type)]


def is_valid_target(entity_type: EntityType, location: Union[str, Location, None]) -> bool:
    """Check if `location` is an allowed destination for `entity_type`."""
    parsed = parse_location(location)
    if parsed is None:
        return False
    return parsed in valid_locations(entity_type)


def ordered_locations(entity_type: EntityType) -> list[Location]:
    """Allowed destinations in display order."""
    allowed = valid_locations(entity_type)
    return [loc for loc in LOCATION_ORDER if loc in allowed]

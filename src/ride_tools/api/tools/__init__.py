"""Endpoint implementations.

Each module holds the plain functions behind one group of endpoints; the
registry wires them to endpoint names and parameter models.
"""

from __future__ import annotations

from ride_tools.api.tools.constructs import (
    create_construct,
    delete_all,
    demolish,
    dump_construct,
    get_stats,
    list_all,
    list_all_segments,
    start_test,
)
from ride_tools.api.tools.entrance import derive_portals, find_station, place_entrance_exit
from ride_tools.api.tools.placement import (
    delete_last_piece,
    get_session,
    get_valid_next_pieces,
    locate_placed_element,
    place_piece,
    resolve_next_connection,
)

__all__ = [
    # Constructs
    "create_construct",
    "delete_all",
    "demolish",
    "dump_construct",
    "get_stats",
    "list_all",
    "list_all_segments",
    "start_test",
    # Entrance/exit
    "derive_portals",
    "find_station",
    "place_entrance_exit",
    # Track placement
    "delete_last_piece",
    "get_session",
    "get_valid_next_pieces",
    "locate_placed_element",
    "place_piece",
    "resolve_next_connection",
]

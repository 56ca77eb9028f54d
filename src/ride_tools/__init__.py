"""
ride-tools: Remote-control server for building amusement ride track.

Exposes a newline-delimited JSON protocol over TCP through which a client
creates constructs, places track pieces one at a time, asks which pieces may
legally come next, undoes placements and places entrances and exits. The
server keeps a placement history per construct and reports when a track
closes into a circuit.

Modules:
    track: Piece catalog, exit states, adjacency rules and coordinates
    world: World interface and the in-memory sandbox world
    api: Framing, dispatcher, endpoint registry, sessions and TCP server
    config: Hierarchical TOML configuration
    cli: Command-line entry points

Quick Start::

    from ride_tools.track import legal_next_pieces, PieceType

    state, pieces = legal_next_pieces(PieceType.FLAT_TO_UP_25)
"""

__version__ = "0.1.0"

from ride_tools.exceptions import RideToolsError

__all__ = ["RideToolsError", "__version__"]

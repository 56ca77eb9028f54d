"""
Piece catalog and adjacency CLI commands.

    rtt pieces [--format table|json] [--group GROUP]
    rtt next <pieceType> [--station]
"""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from ride_tools.track.pieces import PIECE_CATALOG, piece_name
from ride_tools.track.rules import legal_next_pieces
from ride_tools.track.states import EXIT_STATES, is_known_piece


def run_pieces(output_format: str = "table", group: str | None = None) -> int:
    """List the piece catalog with each piece's exit state."""
    pieces = [
        (int(piece), info)
        for piece, info in PIECE_CATALOG.items()
        if group is None or info.group == group
    ]

    if output_format == "json":
        data = [
            {
                "type": piece,
                "name": piece_name(piece),
                "description": info.description,
                "group": info.group,
                "exitState": EXIT_STATES[piece].value,
            }
            for piece, info in pieces
        ]
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    if not pieces:
        console.print(f"[dim]No pieces in group '{group}'[/dim]")
        return 0

    table = Table(title="Track Pieces")
    table.add_column("Id", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Group", style="dim")
    table.add_column("Exit State", style="green")

    for piece, info in pieces:
        table.add_row(
            str(piece), piece_name(piece), info.description, info.group, EXIT_STATES[piece].value
        )

    console.print(table)
    console.print(f"[dim]Total: {len(pieces)} piece(s)[/dim]")
    return 0


def run_next(piece_type: int, is_station: bool = False, output_format: str = "table") -> int:
    """Show which pieces may legally follow ``piece_type``."""
    state, legal = legal_next_pieces(piece_type, is_station)
    successors = sorted(legal)

    if output_format == "json":
        data = {
            "lastPieceType": piece_type,
            "stateCategory": state.value if state else None,
            "validPieces": successors,
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    if not is_station and not is_known_piece(piece_type):
        console.print(f"[yellow]Unknown piece type {piece_type}, treated as flat[/yellow]")

    console.print(f"\n[bold]After {piece_name(piece_type)}[/bold] (exit state: {state.value})\n")

    table = Table(title="Legal Next Pieces")
    table.add_column("Id", justify="right")
    table.add_column("Name", style="cyan")
    for piece in successors:
        table.add_row(str(piece), piece_name(piece))

    console.print(table)
    return 0

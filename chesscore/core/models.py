"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass


@dataclass
class GameModel:
    """
    Transport-safe representation of a chess game used between API, Service, DB, and Game layers.

    The starting FEN + the moves played are enough to rebuild the full game (history and captured pieces included).
    Current FEN and status are stored for convenience of readers that do not want to replay.
    """

    starting_fen: str
    current_fen: str
    moves_uci: list[str]
    status: str

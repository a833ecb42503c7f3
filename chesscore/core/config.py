"""
Configuration of the engine.

Defaults live in the pydantic models below. A TOML file can override them:

    database_url = "sqlite:///games.db"
    log_level = "DEBUG"

    [search]
    max_depth = 4
    time_limit = 2.5   # seconds

    [evaluation]
    mobility = 4

`load_settings()` reads the file named by the CHESSCORE_CONFIG environment variable (default: chesscore.toml).
"""

import os
import tomllib
from datetime import timedelta
from pathlib import Path
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chesscore.chess.pieces import PieceType

CONFIG_ENV_VAR = "CHESSCORE_CONFIG"
DEFAULT_CONFIG_PATH = "chesscore.toml"

# Centipawns: the material points (1, 3, 3, 5, 9) times 100.
DEFAULT_PIECE_VALUES: dict[str, int] = {
    "PAWN": 100,
    "KNIGHT": 300,
    "BISHOP": 300,
    "ROOK": 500,
    "QUEEN": 900,
    "KING": 0,
}


class SearchConfig(BaseModel):
    """
    Budget of a single search.

    * max_depth: deepest iteration (in half-moves) of iterative deepening
    * time_limit: stop searching after this long (checked periodically)
    * node_limit: stop searching after visiting this many nodes
    """

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=3, ge=1)
    time_limit: Optional[timedelta] = None
    node_limit: Optional[int] = Field(default=None, ge=1)
    use_transposition_table: bool = True
    table_size: int = Field(default=1 << 18, ge=1)
    # number of nodes between two checks of the time / node budget
    check_interval: int = Field(default=512, ge=1)


class EvalWeights(BaseModel):
    """
    Weights of the evaluation terms (centipawns). Open parameters: not tuned.
    """

    model_config = ConfigDict(frozen=True)

    piece_values: dict[str, int] = Field(
        default_factory=lambda: DEFAULT_PIECE_VALUES.copy()
    )
    # per pseudo-legal move more than the opponent
    mobility: int = 5
    # per own pawn directly in front of (or diagonally in front of) the king
    king_shield: int = 10
    doubled_pawn: int = 30
    isolated_pawn: int = 20
    passed_pawn: int = 50

    @field_validator("piece_values")
    @classmethod
    def validate_piece_values(cls, value: dict[str, int]) -> dict[str, int]:
        unknown = [name for name in value if name.upper() not in PieceType.__members__]
        if unknown:
            raise ValueError(
                f"Unknown piece type(s): {', '.join(unknown)}. Pick from {', '.join(PieceType.__members__)}"
            )
        values = DEFAULT_PIECE_VALUES.copy()
        values.update({name.upper(): points for name, points in value.items()})
        return values

    def piece_value(self, piece_type: PieceType) -> int:
        return self.piece_values[piece_type.name]


class EngineSettings(BaseModel):
    search: SearchConfig = Field(default_factory=SearchConfig)
    evaluation: EvalWeights = Field(default_factory=EvalWeights)
    database_url: str = "sqlite:///chesscore.db"
    log_level: str = "INFO"

    @classmethod
    def load_from_toml(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> Self:
        """Defaults, overridden by whatever the TOML file sets. A missing file means: defaults only."""
        path = Path(path)
        if not path.exists():
            return cls()
        with path.open("rb") as f:
            raw = tomllib.load(f)
        return cls.model_validate(raw)


def load_settings() -> EngineSettings:
    return EngineSettings.load_from_toml(
        os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    )

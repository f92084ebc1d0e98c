# Tile constants centralized for modular imports.
# Values double as the ASCII map symbols.
WALL = "#"
PATH = "."
START = "S"
END = "E"

TILE_TYPES = (WALL, PATH, START, END)

__all__ = ["WALL", "PATH", "START", "END", "TILE_TYPES"]

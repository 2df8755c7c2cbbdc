# Tile labels double as the characters of the text dump
WALL = "X"
FREE = " "
EXIT = "S"
HERO = "H"
DRAGON = "D"
ITEM = "E"  # the sword

LABELS = frozenset({WALL, FREE, EXIT, HERO, DRAGON, ITEM})
OPEN_LABELS = LABELS - {WALL}
ENTITY_LABELS = (ITEM, DRAGON, HERO)

TILE_TYPES = {
    WALL: "wall",
    FREE: "free",
    EXIT: "exit",
    HERO: "hero",
    DRAGON: "dragon",
    ITEM: "item",
}

__all__ = ["WALL", "FREE", "EXIT", "HERO", "DRAGON", "ITEM", "LABELS", "OPEN_LABELS", "ENTITY_LABELS", "TILE_TYPES"]

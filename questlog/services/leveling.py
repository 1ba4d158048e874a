"""User level derived from accumulated XP."""

import math

from questlog.schemas.base import BaseSchema

BASE_XP = 100
XP_EXPONENT = 1.5
MAX_LEVEL = 100


class LevelInfo(BaseSchema):
    """Where a total XP value sits on the level curve."""

    level: int
    current_xp: int
    xp_for_next_level: int


def xp_for_level(level: int) -> int:
    """XP needed to go from level-1 to level."""
    if level <= 1:
        return 0
    return math.floor(BASE_XP * (level - 1) ** XP_EXPONENT)


def level_from_xp(total_xp: int) -> LevelInfo:
    """Walk the curve until the next level costs more than what is left."""
    level = 1
    xp_used = 0
    while level < MAX_LEVEL:
        needed = xp_for_level(level + 1)
        if total_xp < xp_used + needed:
            break
        xp_used += needed
        level += 1

    return LevelInfo(
        level=level,
        current_xp=total_xp - xp_used,
        xp_for_next_level=xp_for_level(level + 1) if level < MAX_LEVEL else 0,
    )

# app/services/levels.py

# Inclusive upper bound of member count for each level; anything above is level 4
LEVEL_THRESHOLDS = ((1, 10), (2, 100), (3, 1000))
MAX_LEVEL = 4


def party_level(member_count: int) -> int:
    """Map an active member count to its size tier (1-4)."""
    for level, upper in LEVEL_THRESHOLDS:
        if member_count <= upper:
            return level
    return MAX_LEVEL

"""Display name validation."""

import re
from typing import Iterable

from lanmafia.config import NameRules
from .exceptions import ValidationError


def validate_player_name(name: str, taken: Iterable[str], rules: NameRules) -> str:
    """Validate a display name for a joining player.

    Args:
        name: Raw name as typed by the player.
        taken: Names already in the roster.
        rules: Length, character and restricted-word rules.

    Returns:
        The trimmed name.

    Raises:
        ValidationError: If the name breaks any rule.
    """
    if not isinstance(name, str):
        raise ValidationError("Name must be text", {"name": name})

    clean = name.strip()
    if len(clean) < rules.min_length:
        raise ValidationError(
            f"Name must be at least {rules.min_length} characters",
            {"name": clean, "min_length": rules.min_length},
        )
    if len(clean) > rules.max_length:
        raise ValidationError(
            f"Name must be at most {rules.max_length} characters",
            {"name": clean, "max_length": rules.max_length},
        )
    if not re.match(rules.allowed_pattern, clean):
        raise ValidationError(
            "Name can only contain letters, numbers, spaces, hyphens, underscores, and periods",
            {"name": clean},
        )

    lowered = clean.lower()
    parts = set(re.split(r"[\s._-]+", lowered))
    for word in rules.restricted_words:
        if word.lower() in parts:
            raise ValidationError("Name contains restricted words", {"name": clean, "word": word})

    if any(existing.strip().lower() == lowered for existing in taken):
        raise ValidationError("Name is already taken", {"name": clean})

    return clean

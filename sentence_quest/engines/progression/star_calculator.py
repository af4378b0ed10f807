"""
Star Calculator - converts hints used during a mission into a star rating.

- 0 hints: 3 stars
- 1 hint: 2 stars
- 2+ hints: 1 star

Stars are never zero: every completed mission earns at least one.
"""

from sentence_quest.engines.progression.errors import InvalidInputError

MIN_STARS = 1
MAX_STARS = 3

STAR_MESSAGES = {
    3: "Perfect! You're a superstar!",
    2: "Great job! You did it!",
    1: "Good work! Keep practicing!",
}


def calculate_stars(hints_used: int) -> int:
    """Star rating for a completed mission given the number of hints used."""
    if hints_used < 0:
        raise InvalidInputError("hints_used must be non-negative")
    if hints_used == 0:
        return 3
    if hints_used == 1:
        return 2
    return 1


def clamp_stars(stars: int) -> int:
    """Normalize a client-reported star count into [MIN_STARS, MAX_STARS]."""
    return min(MAX_STARS, max(MIN_STARS, stars))


def star_message(stars: int) -> str:
    """Encouragement shown on the mission-complete screen."""
    return STAR_MESSAGES[clamp_stars(stars)]

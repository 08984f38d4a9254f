"""
Scoring constants for the favorites recommender. Keep these simple and documented.
"""

from typing import Final

# Query planning weights
FAVORITE_TAG_WEIGHT: Final[int] = 5  # explicit signal: a tag the user favorited
ITEM_SIGNAL_WEIGHT: Final[int] = 1  # implicit signal: per tag/cast on a favorited item

# Candidate scoring
FAVORITE_TAG_MATCH_BONUS: Final[int] = 10
TAG_MATCH_MULTIPLIER: Final[int] = 2
CAST_MATCH_MULTIPLIER: Final[int] = 3

MAX_RECOMMENDATION_LIMIT: Final[int] = 50

PREFERENCE_KEY: Final[str] = "{prefix}{user_id}"

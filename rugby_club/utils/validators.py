"""
Common field validators used by the repositories before writing rows.
"""

import re
from datetime import date, datetime
from typing import Any, Optional

FINAL_SCORE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


class FieldValidators:
    """Collection of reusable field validators."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
        return bool(re.match(pattern, email))

    @staticmethod
    def validate_username(username: str) -> bool:
        """Validate username format (alphanumeric, underscore, hyphen, dot)."""
        pattern = r"^[a-zA-Z0-9_.-]{3,32}$"
        return bool(re.match(pattern, username))

    @staticmethod
    def validate_date_range(start: date, end: date) -> bool:
        """Validate end date is not before start date."""
        if not isinstance(start, (date, datetime)) or not isinstance(end, (date, datetime)):
            return False
        start_date = start.date() if isinstance(start, datetime) else start
        end_date = end.date() if isinstance(end, datetime) else end
        return end_date >= start_date

    @staticmethod
    def validate_final_score(final_score: str) -> bool:
        """Validate an "ours - theirs" score string such as "24 - 17"."""
        return isinstance(final_score, str) and bool(FINAL_SCORE_PATTERN.match(final_score))

    @staticmethod
    def validate_choice(value: Any, allowed_values: list[Any]) -> bool:
        """Validate value is in allowed choices."""
        return value in allowed_values


def parse_final_score(final_score: Optional[str]) -> Optional[tuple[int, int]]:
    """Split "ours - theirs" into two ints, or None when the score is unusable."""
    if not final_score:
        return None
    match = FINAL_SCORE_PATTERN.match(final_score)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))

"""
Utility functions for the application
"""
from typing import Optional


def release_year(release_date: Optional[str]) -> Optional[int]:
    """
    Extract the year from a TMDb release date

    Args:
        release_date: Raw release date, usually 'YYYY-MM-DD'

    Returns:
        Four digit year, or None if the date is missing or malformed
    """
    if not release_date:
        return None
    try:
        return int(release_date[:4])
    except ValueError:
        return None

"""Matchers for as-of joins.

An as-of join finds a candidate right key for each left key (the nearest
prior or next one) and then asks a matcher whether to accept it::

    matcher(left_key, candidate_key) -> bool

Example:
    >>> from datetime import datetime, timedelta
    >>> accept = within(timedelta(minutes=1))
    >>> accept(datetime(2024, 1, 1, 9, 30, 45), datetime(2024, 1, 1, 9, 30))
    True
    >>> accept(datetime(2024, 1, 1, 9, 32), datetime(2024, 1, 1, 9, 30))
    False
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from timespine.core.errors import InvalidParameterError

Matcher = Callable[[Any, Any], bool]


def within(tolerance: Any, *, inclusive: bool = True) -> Matcher:
    """Accept candidates whose distance from the left key is at most ``tolerance``.

    ``tolerance`` must be the type of ``key - key`` (a number for numeric
    keys, a ``timedelta`` for datetimes). With ``inclusive=False`` a
    candidate exactly ``tolerance`` away is rejected.
    """
    if tolerance < tolerance * 0:
        raise InvalidParameterError("tolerance", tolerance, "tolerance must be >= 0")

    if inclusive:
        def matcher(left: Any, candidate: Any) -> bool:
            return abs(left - candidate) <= tolerance
    else:
        def matcher(left: Any, candidate: Any) -> bool:
            return abs(left - candidate) < tolerance

    return matcher


def any_key(left: Any, candidate: Any) -> bool:
    """Accept every candidate."""
    return True


__all__ = ["Matcher", "within", "any_key"]

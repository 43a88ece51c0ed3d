import math

WAITING_UPDATE = "waiting update"
REACHED = "Reached"


def format_eta(remaining: float, rate_per_second: float) -> str:
    if rate_per_second <= 0:
        return WAITING_UPDATE
    seconds = math.ceil(remaining / rate_per_second)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{math.ceil(seconds / 60)}m"
    if seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    return f"{seconds / 86400:.1f}d"


def describe_remaining(remaining: float, rate_per_second: float) -> str:
    """Caller-side wrapper: a non-positive remainder is reported as reached."""
    if remaining <= 0:
        return REACHED
    return format_eta(remaining, rate_per_second)

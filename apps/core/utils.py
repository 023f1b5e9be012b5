# apps/core/utils.py

import hashlib


def user_color(username: str) -> str:
    """
    Stable colour derived from the username
    Used for avatars, since users have no picture
    """
    hash_hex = hashlib.md5(username.encode()).hexdigest()
    return f"#{hash_hex[:6]}"


def user_initials(user) -> str:
    """
    Ex: Ada Lovelace -> "AL", ada (no names) -> "A"
    """
    first = (user.first_name or '').strip()
    last = (user.last_name or '').strip()
    if first:
        return (first[0] + (last[0] if last else '')).upper()
    return (user.username or '?')[0].upper()


def parse_position(value):
    """
    Validates a position coming from a request body
    Returns a non-negative int or raises ValueError
    """
    if isinstance(value, bool):
        raise ValueError("position must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("position must be an integer")
    try:
        position = int(value)
    except (TypeError, ValueError):
        raise ValueError("position must be an integer")
    if position < 0:
        raise ValueError("position must be zero or positive")
    return position

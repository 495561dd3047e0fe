"""Shard path law for mini image files.

The directory of a mini's image is a pure function of its id: the first
decimal digit, then the second decimal digit (``"0"`` for single-digit ids).
Only the first two digits are ever used, so every shard lives inside the
pre-provisioned 10x10 skeleton.
"""

from __future__ import annotations

SHARD_DIGITS = tuple(str(d) for d in range(10))


def shard_path(mini_id: int) -> tuple[str, str]:
    """Return ``(x, y)`` shard segments for a mini id.

    >>> shard_path(7)
    ('7', '0')
    >>> shard_path(42)
    ('4', '2')
    >>> shard_path(123)
    ('1', '2')
    """
    if isinstance(mini_id, bool) or not isinstance(mini_id, int):
        raise TypeError(f"mini id must be an int, got {type(mini_id).__name__}")
    if mini_id < 1:
        raise ValueError(f"mini id must be positive, got {mini_id}")

    digits = str(mini_id)
    return digits[0], digits[1] if len(digits) > 1 else "0"


def image_filename(mini_id: int, extension: str = "webp") -> str:
    return f"{mini_id}.{extension}"


def thumbnail_url(mini_id: int, prefix: str, extension: str = "webp") -> str:
    """Public URL of the thumbnail, e.g. ``/images/minis/4/2/42.webp``."""
    x, y = shard_path(mini_id)
    return f"{prefix.rstrip('/')}/{x}/{y}/{image_filename(mini_id, extension)}"


def original_url(mini_id: int, prefix: str, extension: str = "webp") -> str:
    """Public URL of the original, e.g. ``/images/minis/originals/4/2/42.webp``."""
    x, y = shard_path(mini_id)
    return (
        f"{prefix.rstrip('/')}/originals/{x}/{y}/"
        f"{image_filename(mini_id, extension)}"
    )

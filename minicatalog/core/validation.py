"""Mini input validation.

Runs before any transaction is opened. Trims text, applies the writer
defaults and de-duplicates association lists while keeping first-seen order.
"""

from typing import Iterable, Optional

from minicatalog.core.errors import ValidationError
from minicatalog.core.logging import get_logger
from minicatalog.core.models import MiniInput, NormalizedMini

logger = get_logger(__name__)

DEFAULT_QUANTITY = 1


def require_text(value: Optional[str], field: str) -> str:
    """Trimmed non-empty string or ValidationError."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def coerce_quantity(value) -> int:
    """Missing, zero or negative quantities become 1."""
    if value is None or value == "":
        return DEFAULT_QUANTITY
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"quantity must be an integer, got {value!r}", field="quantity"
        ) from None
    return quantity if quantity >= 1 else DEFAULT_QUANTITY


def coerce_optional_id(value, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"{field} must be an integer id, got {value!r}", field=field
        ) from None


def unique_ids(values: Optional[Iterable], field: str) -> tuple[int, ...]:
    """Integer ids, duplicates dropped, order kept."""
    if not values:
        return ()
    seen: dict[int, None] = {}
    for value in values:
        if isinstance(value, bool):
            raise ValidationError(f"{field} contains a non-integer id", field=field)
        try:
            seen[int(value)] = None
        except (TypeError, ValueError):
            raise ValidationError(
                f"{field} contains a non-integer id: {value!r}", field=field
            ) from None
    return tuple(seen)


def unique_tags(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Trimmed tag names, blanks skipped, exact duplicates dropped.

    Matching is case-sensitive: "Hero" and "hero" are two tags.
    """
    if not values:
        return ()
    seen: dict[str, None] = {}
    for value in values:
        if not isinstance(value, str):
            raise ValidationError("tags must be strings", field="tags")
        name = value.strip()
        if not name:
            logger.debug("Skipping blank tag name")
            continue
        seen[name] = None
    return tuple(seen)


def normalize_mini_input(
    data: MiniInput,
    default_painted_by_id: int,
    default_base_size_id: int,
) -> NormalizedMini:
    """Validate a MiniInput and apply defaults."""
    name = require_text(data.name, "name")
    location = require_text(data.location, "location")

    type_ids = unique_ids(data.type_ids, "type_ids")
    proxy_type_ids = unique_ids(data.proxy_type_ids, "proxy_type_ids")
    both_roles = sorted(set(type_ids) & set(proxy_type_ids))
    if both_roles:
        raise ValidationError(
            f"type ids {both_roles} cannot be both regular and proxy types",
            field="proxy_type_ids",
        )

    painted_by_id = coerce_optional_id(data.painted_by_id, "painted_by_id")
    base_size_id = coerce_optional_id(data.base_size_id, "base_size_id")

    return NormalizedMini(
        name=name,
        location=location,
        description=optional_text(data.description),
        quantity=coerce_quantity(data.quantity),
        painted_by_id=painted_by_id or default_painted_by_id,
        base_size_id=base_size_id or default_base_size_id,
        product_set_id=coerce_optional_id(data.product_set_id, "product_set_id")
        or None,
        category_ids=unique_ids(data.category_ids, "category_ids"),
        type_ids=type_ids,
        proxy_type_ids=proxy_type_ids,
        tags=unique_tags(data.tags),
    )

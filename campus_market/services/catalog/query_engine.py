"""
In-memory catalog search.

Turns an already fetched collection of listings and a set of user criteria
into the ordered sequence the storefront renders. The engine never touches
the data store: callers fetch with ``ListingService.fetch_active_listings``
and hand the result over once it resolved.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Iterable, Optional, Protocol, Sequence, TypeVar

from campus_market.models.enums.category import ALL_CATEGORIES, Category
from campus_market.models.enums.condition import Condition
from campus_market.models.enums.sort_order import SortOrder
from campus_market.services.exceptions import InvalidCriteria


class CatalogItem(Protocol):
    """The attributes the engine reads from a listing."""

    id: str
    title: str
    category: Any
    condition: Any
    price: Any
    negotiable: bool
    created_at: Any


ItemT = TypeVar("ItemT", bound=CatalogItem)


@dataclass(frozen=True)
class CatalogCriteria:
    term: str = ""
    category: Category | str = ALL_CATEGORIES
    min_price: Any = 0
    max_price: Any = None  # None means no upper bound
    conditions: Iterable[Condition | str] = ()
    negotiable_only: bool = False
    sort: SortOrder | str = SortOrder.NEWEST


@dataclass(frozen=True)
class ValidatedCriteria:
    term: str
    category: Optional[Category]
    min_price: Decimal
    max_price: Optional[Decimal]
    conditions: frozenset[Condition]
    negotiable_only: bool
    sort: SortOrder


@dataclass
class CatalogResult(Generic[ItemT]):
    items: list[ItemT] = field(default_factory=list)
    total: int = 0


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidCriteria(field_name, "must be a number")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidCriteria(field_name, f"'{value}' is not a number")
    if not number.is_finite():
        raise InvalidCriteria(field_name, "must be a finite number")
    if number < 0:
        raise InvalidCriteria(field_name, "must not be negative")
    return number


def _to_enum(enum_cls, value: Any, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidCriteria(
            field_name, f"'{value}' is not one of: {allowed}"
        )


def validate_criteria(criteria: CatalogCriteria) -> ValidatedCriteria:
    """
    Normalise criteria and reject anything the engine cannot evaluate.

    :raises InvalidCriteria: naming the first offending field.
    """
    if criteria.term is None:
        term = ""
    elif isinstance(criteria.term, str):
        term = criteria.term.strip().casefold()
    else:
        raise InvalidCriteria("term", "must be text")

    category = None
    if criteria.category is not None and criteria.category != ALL_CATEGORIES:
        category = _to_enum(Category, criteria.category, "category")

    min_price = _to_decimal(
        0 if criteria.min_price is None else criteria.min_price, "min_price"
    )
    max_price = None
    if criteria.max_price is not None:
        max_price = _to_decimal(criteria.max_price, "max_price")
        if min_price > max_price:
            raise InvalidCriteria(
                "price_range",
                f"min_price {min_price} is greater than max_price {max_price}",
            )

    if isinstance(criteria.conditions, (str, Condition)):
        raise InvalidCriteria("conditions", "must be a collection of conditions")
    conditions = frozenset(
        _to_enum(Condition, condition, "conditions")
        for condition in (criteria.conditions or ())
    )

    if not isinstance(criteria.negotiable_only, bool):
        raise InvalidCriteria("negotiable_only", "must be true or false")

    sort = _to_enum(SortOrder, criteria.sort or SortOrder.NEWEST, "sort")

    return ValidatedCriteria(
        term=term,
        category=category,
        min_price=min_price,
        max_price=max_price,
        conditions=conditions,
        negotiable_only=criteria.negotiable_only,
        sort=sort,
    )


def build_predicate(criteria: ValidatedCriteria) -> Callable[[CatalogItem], bool]:
    """Combine the active facets into one predicate (logical AND)."""
    checks: list[Callable[[CatalogItem], bool]] = []

    if criteria.term:
        term = criteria.term
        checks.append(lambda item: term in (item.title or "").casefold())
    if criteria.category is not None:
        category = criteria.category
        checks.append(lambda item: item.category == category)

    min_price, max_price = criteria.min_price, criteria.max_price
    if max_price is None:
        checks.append(lambda item: item.price >= min_price)
    else:
        checks.append(lambda item: min_price <= item.price <= max_price)

    if criteria.conditions:
        conditions = criteria.conditions
        checks.append(lambda item: item.condition in conditions)
    if criteria.negotiable_only:
        checks.append(lambda item: bool(item.negotiable))

    return lambda item: all(check(item) for check in checks)


# key function and direction per sort order, ids break ties for a total order
_SORT_KEYS: dict[SortOrder, tuple[Callable[[CatalogItem], tuple], bool]] = {
    SortOrder.NEWEST: (lambda item: (item.created_at, item.id), True),
    SortOrder.PRICE_ASC: (lambda item: (item.price, item.id), False),
    SortOrder.PRICE_DESC: (lambda item: (item.price, item.id), True),
}


def query_catalog(
    listings: Sequence[ItemT], criteria: CatalogCriteria | None = None
) -> CatalogResult[ItemT]:
    """
    Filter and order ``listings`` according to ``criteria``.

    The input is never mutated. Calling it twice with the same arguments
    yields the same ordered output.

    :param listings: listings fetched by the caller, in any order.
    :param criteria: search, facet and sort choices; defaults match everything.
    :return: the matching listings in display order and their count.
    :raises InvalidCriteria: when a criterion is malformed.
    """
    validated = validate_criteria(criteria or CatalogCriteria())
    predicate = build_predicate(validated)

    matches = [listing for listing in listings if predicate(listing)]
    key, descending = _SORT_KEYS[validated.sort]
    ordered = sorted(matches, key=key, reverse=descending)

    return CatalogResult(items=ordered, total=len(ordered))

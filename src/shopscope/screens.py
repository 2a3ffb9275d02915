"""Built-in list screens: products, orders and users.

Each :class:`ScreenConfig` is the whole configuration surface of one list
screen: which fields the search box looks at, which filter controls it
has, the default sort, page sizes, bulk status options and the summary
statistics shown above the table.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .models import OrderStatus, ProductStatus, UserRole, UserStatus
from .view.fields import FieldAccessor, Record, parse_datetime, record_id, to_number, to_text
from .view.filters import FilterDefinition, FilterKind
from .view.pagination import PAGE_SIZE_OPTIONS
from .view.sorting import SortDirection, SortSpec, TypeHint

StatsFn = Callable[[Sequence[Record]], dict[str, int]]


@dataclass(frozen=True)
class StatusAction:
    label: str
    status: str


RowActionsFn = Callable[[Record], tuple[StatusAction, ...]]


def format_money(value: Any, currency: str = "KSh") -> str:
    return f"{currency} {to_number(value):,.0f}"


def format_date(value: Any) -> str:
    parsed = parse_datetime(value)
    return parsed.strftime("%b %d, %Y") if parsed else ""


@dataclass(frozen=True)
class Column:
    """One table column: what it reads, how it sorts, how it displays."""

    key: str
    title: str
    field: FieldAccessor
    type_hint: TypeHint = TypeHint.STRING
    sortable: bool = True
    money: bool = False
    formatter: Callable[[Record], str] | None = None

    def display(self, record: Record, currency: str = "KSh") -> str:
        if self.formatter is not None:
            return self.formatter(record)
        value = self.field.get(record)
        if self.money:
            return format_money(value, currency)
        if self.type_hint is TypeHint.DATE:
            return format_date(value)
        if self.type_hint is TypeHint.NUMERIC:
            number = to_number(value)
            return f"{number:,.0f}" if number == int(number) else f"{number:,.2f}"
        return to_text(value)

    @property
    def sort_spec(self) -> SortSpec:
        return SortSpec(self.field, SortDirection.DESCENDING, self.type_hint)


@dataclass(frozen=True)
class ScreenConfig:
    name: str
    title: str
    resource: str
    columns: tuple[Column, ...]
    search_fields: tuple[FieldAccessor, ...]
    filter_definitions: tuple[FilterDefinition, ...]
    default_sort: SortSpec
    stats: StatsFn
    page_size_options: tuple[int, ...] = PAGE_SIZE_OPTIONS
    default_page_size: int = 10
    status_options: tuple[str, ...] = ()
    status_endpoint: bool = False
    debounce_ms: int | None = None
    search_placeholder: str = "Search..."
    stat_labels: dict[str, str] = field(default_factory=dict)
    item_name: str = "record"
    row_actions: RowActionsFn | None = None

    def column(self, key: str) -> Column:
        """Column by key, field name or full ``a|b`` field spec."""
        paths = tuple(p.strip() for p in key.split("|") if p.strip())
        for col in self.columns:
            if col.key == key or col.field.name == key or col.field.paths == paths:
                return col
        raise KeyError(f"{self.name} has no column {key!r}")

    def filter_definition(self, key: str) -> FilterDefinition:
        for definition in self.filter_definitions:
            if definition.key == key:
                return definition
        raise KeyError(f"{self.name} has no filter {key!r}")

    def zeroed_stats(self) -> dict[str, int]:
        return {key: 0 for key in self.stats(())}

    def status_actions(self, record: Record) -> tuple[StatusAction, ...]:
        """Per-row status shortcuts offered for *record*."""
        return self.row_actions(record) if self.row_actions else ()


# ---------------------------------------------------------------------------
# Shared accessors
# ---------------------------------------------------------------------------

_STATUS = FieldAccessor.of("status")
_CREATED = FieldAccessor.of("createdAt|createdDate")

_PRICE = FieldAccessor.of("price|unitPrice")
_STOCK = FieldAccessor.of("stock|quantity|inventory")

_ORDER_TOTAL = FieldAccessor.of("totalAmount|total|totalPrice")
_CUSTOMER_NAME = FieldAccessor.of("customer.name|customerName|user.name|shippingAddress.fullName")
_CUSTOMER_EMAIL = FieldAccessor.of("customer.email|customerEmail|user.email")


def _count(records: Sequence[Record], predicate: Callable[[Record], bool]) -> int:
    return sum(1 for r in records if predicate(r))


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

LOW_STOCK_THRESHOLD = 10


def product_stats(records: Sequence[Record]) -> dict[str, int]:
    def stock(r: Record) -> float:
        return to_number(_STOCK.get(r))

    return {
        "total": len(records),
        "active": _count(records, lambda r: _STATUS.get(r) in ("active", "published")),
        "out_of_stock": _count(records, lambda r: stock(r) <= 0),
        "low_stock": _count(records, lambda r: 0 < stock(r) <= LOW_STOCK_THRESHOLD),
    }


def order_stats(records: Sequence[Record]) -> dict[str, int]:
    return {
        "total": len(records),
        "pending": _count(records, lambda r: _STATUS.get(r) == OrderStatus.PENDING.value),
        "processing": _count(records, lambda r: _STATUS.get(r) == OrderStatus.PROCESSING.value),
        "delivered": _count(records, lambda r: _STATUS.get(r) == OrderStatus.DELIVERED.value),
    }


def user_stats(records: Sequence[Record]) -> dict[str, int]:
    role = FieldAccessor.of("role")
    return {
        "total": len(records),
        "active": _count(records, lambda r: _STATUS.get(r) == UserStatus.ACTIVE.value),
        "admins": _count(records, lambda r: role.get(r) == UserRole.ADMIN.value),
        "moderators": _count(records, lambda r: role.get(r) == UserRole.MODERATOR.value),
    }


def order_number(record: Record) -> str:
    """``ORD-`` plus the last 8 characters of the order id, upper-cased."""
    raw = to_text(FieldAccessor.of("orderNumber").get(record)) or record_id(record)
    if not raw:
        return "N/A"
    return f"ORD-{raw[-8:].upper()}"


def order_actions(record: Record) -> tuple[StatusAction, ...]:
    """Forward transitions of a pending or processing order."""
    status = _STATUS.get(record)
    if status == OrderStatus.PENDING.value:
        return (
            StatusAction("Mark as processing", OrderStatus.PROCESSING.value),
            StatusAction("Cancel order", OrderStatus.CANCELLED.value),
        )
    if status == OrderStatus.PROCESSING.value:
        return (
            StatusAction("Mark as shipped", OrderStatus.SHIPPED.value),
            StatusAction("Cancel order", OrderStatus.CANCELLED.value),
        )
    return ()


def user_actions(record: Record) -> tuple[StatusAction, ...]:
    if _STATUS.get(record) == UserStatus.ACTIVE.value:
        return (StatusAction("Deactivate", UserStatus.INACTIVE.value),)
    return (StatusAction("Activate", UserStatus.ACTIVE.value),)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

PRODUCTS = ScreenConfig(
    name="products",
    title="Products",
    resource="admin/products",
    columns=(
        Column("name", "Name", FieldAccessor.of("name")),
        Column("sku", "SKU", FieldAccessor.of("sku"), sortable=False),
        Column("category", "Category", FieldAccessor.of("category")),
        Column("price", "Price", _PRICE, TypeHint.NUMERIC, money=True),
        Column("stock", "Stock", _STOCK, TypeHint.NUMERIC),
        Column("status", "Status", _STATUS),
        Column("createdAt", "Created", _CREATED, TypeHint.DATE),
    ),
    search_fields=tuple(FieldAccessor.of(f) for f in ("name", "description", "category", "sku", "tags")),
    filter_definitions=(
        FilterDefinition("category", FilterKind.EQUALITY, FieldAccessor.of("category"), "Category", (
            "Electronics", "Clothing", "Home & Kitchen", "Books", "Sports & Outdoors",
            "Beauty & Personal Care", "Toys & Games", "Automotive", "Health & Household", "Other",
        )),
        FilterDefinition("status", FilterKind.EQUALITY, _STATUS, "Status",
                         tuple(s.value for s in ProductStatus)),
        FilterDefinition("priceRange", FilterKind.NUMERIC_RANGE, _PRICE, "Price"),
        FilterDefinition("stockRange", FilterKind.NUMERIC_RANGE, _STOCK, "Stock"),
        FilterDefinition("dateRange", FilterKind.DATE_RANGE, _CREATED, "Created"),
    ),
    default_sort=SortSpec(_CREATED, SortDirection.DESCENDING, TypeHint.DATE),
    stats=product_stats,
    status_options=(
        ProductStatus.ACTIVE.value,
        ProductStatus.INACTIVE.value,
        ProductStatus.OUT_OF_STOCK.value,
        ProductStatus.DRAFT.value,
    ),
    search_placeholder="Search products by name, SKU, category or tags...",
    stat_labels={"total": "Total", "active": "Active", "out_of_stock": "Out of stock", "low_stock": "Low stock"},
    item_name="product",
)

ORDERS = ScreenConfig(
    name="orders",
    title="Orders",
    resource="admin/orders",
    columns=(
        Column("orderNumber", "Order", FieldAccessor.of("orderNumber|_id|id"), formatter=order_number),
        Column("customer", "Customer", _CUSTOMER_NAME),
        Column("email", "Email", _CUSTOMER_EMAIL, sortable=False),
        Column("createdAt", "Date", _CREATED, TypeHint.DATE),
        Column("total", "Total", _ORDER_TOTAL, TypeHint.NUMERIC, money=True),
        Column("status", "Status", _STATUS),
    ),
    search_fields=(
        FieldAccessor.of("orderNumber|_id|id"),
        _CUSTOMER_NAME,
        _CUSTOMER_EMAIL,
        _STATUS,
    ),
    filter_definitions=(
        FilterDefinition("status", FilterKind.EQUALITY, _STATUS, "Status",
                         tuple(s.value for s in OrderStatus)),
        FilterDefinition("totalRange", FilterKind.NUMERIC_RANGE, _ORDER_TOTAL, "Total"),
        FilterDefinition("dateRange", FilterKind.DATE_RANGE, _CREATED, "Date"),
    ),
    default_sort=SortSpec(_CREATED, SortDirection.DESCENDING, TypeHint.DATE),
    stats=order_stats,
    status_options=tuple(s.value for s in OrderStatus),
    status_endpoint=True,
    debounce_ms=500,
    search_placeholder="Search orders by number, customer or status...",
    stat_labels={"total": "Total", "pending": "Pending", "processing": "Processing", "delivered": "Delivered"},
    item_name="order",
    row_actions=order_actions,
)

USERS = ScreenConfig(
    name="users",
    title="Users",
    resource="admin/users",
    columns=(
        Column("name", "Name", FieldAccessor.of("name")),
        Column("email", "Email", FieldAccessor.of("email")),
        Column("role", "Role", FieldAccessor.of("role")),
        Column("status", "Status", _STATUS),
        Column("createdAt", "Joined", _CREATED, TypeHint.DATE),
        Column("lastLogin", "Last login", FieldAccessor.of("lastLogin"), TypeHint.DATE),
    ),
    search_fields=tuple(FieldAccessor.of(f) for f in ("name", "email", "phone")),
    filter_definitions=(
        FilterDefinition("role", FilterKind.EQUALITY, FieldAccessor.of("role"), "Role",
                         tuple(r.value for r in UserRole)),
        FilterDefinition("status", FilterKind.EQUALITY, _STATUS, "Status",
                         tuple(s.value for s in UserStatus)),
    ),
    default_sort=SortSpec(_CREATED, SortDirection.DESCENDING, TypeHint.DATE),
    stats=user_stats,
    status_options=tuple(s.value for s in UserStatus),
    search_placeholder="Search users by name, email or phone...",
    stat_labels={"total": "Total", "active": "Active", "admins": "Admins", "moderators": "Moderators"},
    item_name="user",
    row_actions=user_actions,
)

SCREENS: dict[str, ScreenConfig] = {s.name: s for s in (PRODUCTS, ORDERS, USERS)}


def get_screen(name: str) -> ScreenConfig:
    try:
        return SCREENS[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown screen {name!r}; expected one of {', '.join(SCREENS)}") from None

# zopos/domain/models.py

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from utils.timeutils import parse_timestamp

Number = Union[int, float]


def _as_number(value: Any) -> Number:
    """Coerce a JSON value to a number, 0 when it isn't one."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


def _as_quantity(value: Any) -> int:
    qty = _as_number(value)
    return max(0, int(qty))


@dataclass
class Product:
    """
    One row of the products table.

    `quantities` is the per-size quantity map (zopos_qty), e.g. {"S": 10, "M": 5}.
    Keys are free-form labels and keep the order the store returned them in.
    """
    id: str
    name: str
    price: Number
    quantities: Dict[str, int] = field(default_factory=dict)
    is_active: bool = True
    image_url: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def total_stock(self) -> int:
        return sum(self.quantities.values())

    def quantity_for(self, size: str) -> int:
        return self.quantities.get(size, 0)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        # the catalog owner writes `title`; older rows only have `name`
        name = row.get("title") or row.get("name") or ""
        raw_qty = row.get("zopos_qty") or {}
        if not isinstance(raw_qty, dict):
            raw_qty = {}

        return cls(
            id=str(row["id"]),
            name=name,
            price=_as_number(row.get("price")),
            quantities={str(size): _as_quantity(qty) for size, qty in raw_qty.items()},
            is_active=row.get("is_active", True) is not False,
            image_url=row.get("image_url"),
            category=row.get("category"),
            description=row.get("description"),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass
class ScanMatch:
    product: Product
    size: str
    code: str

    @property
    def quantity(self) -> int:
        return self.product.quantity_for(self.size)


@dataclass
class CartLine:
    """
    Represents one line of the checkout cart.
    Transient: lives in the Streamlit session only.
    """
    product: Product
    size: str
    quantity: int

    @property
    def unit_price(self) -> Number:
        return self.product.price

    @property
    def line_total(self) -> Number:
        return self.product.price * self.quantity


@dataclass
class SaleItem:
    product_id: str
    product_name: str
    size: str
    quantity: int
    unit_price: Number
    total_price: Number

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaleItem":
        quantity = _as_quantity(data.get("quantity"))
        unit_price = _as_number(data.get("unit_price"))
        total_price = data.get("total_price")
        return cls(
            product_id=str(data.get("product_id") or ""),
            product_name=str(data.get("product_name") or ""),
            size=str(data.get("size") or ""),
            quantity=quantity,
            unit_price=unit_price,
            total_price=_as_number(total_price) if total_price is not None else unit_price * quantity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "size": self.size,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
        }


@dataclass
class Sale:
    """
    A completed checkout (zopos_sales row).
    Only `hidden` changes after creation.
    """
    id: str
    items: List[SaleItem]
    total_amount: Number
    items_count: int
    created_at: Optional[datetime] = None
    sale_date: Optional[datetime] = None
    seller_id: Optional[str] = None
    hidden: bool = False

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Sale":
        raw_items = row.get("items") or []
        if not isinstance(raw_items, list):
            raw_items = []
        items = [SaleItem.from_dict(item) for item in raw_items if isinstance(item, dict)]

        return cls(
            id=str(row.get("id") or ""),
            items=items,
            total_amount=_as_number(row.get("total_amount")),
            items_count=_as_quantity(row.get("items_count")),
            created_at=parse_timestamp(row.get("created_at")),
            sale_date=parse_timestamp(row.get("sale_date")),
            seller_id=row.get("seller_id"),
            hidden=bool(row.get("hidden")),
        )

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.created_at or self.sale_date


@dataclass
class Receipt:
    sale_id: str
    lines: List[SaleItem]
    total: Number
    items_count: int
    created_at: datetime


@dataclass
class SalesSummary:
    revenue: Number = 0
    transactions: int = 0
    items_sold: int = 0
    average: float = 0.0


@dataclass
class ItemAggregate:
    product_name: str
    size: str
    quantity: int = 0
    revenue: Number = 0


@dataclass
class PeriodAggregate:
    key: str  # e.g. "17/10/2026", "semaine du 12/10/2026", "octobre 2026"
    start: date
    revenue: Number = 0
    transactions: int = 0


@dataclass
class UserProfile:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    role: str = "vendeur"
    suspended: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserProfile":
        return cls(
            id=str(row["id"]),
            email=row.get("email") or "",
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            phone=row.get("phone"),
            role=row.get("role") or "vendeur",
            suspended=bool(row.get("suspended")),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

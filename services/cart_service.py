# services/cart_service.py
import logging
from typing import Iterable, List, Optional, Tuple

from domain.models import CartLine, Number, Product, ScanMatch
from services.scan_service import resolve_scan

logger = logging.getLogger(__name__)


class Cart:
    """
    Checkout cart kept in st.session_state.
    One line per (product, size); adding the same pair again bumps its quantity.
    """

    def __init__(self, lines: Optional[List[CartLine]] = None):
        self.lines: List[CartLine] = list(lines or [])

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def _find(self, product_id: str, size: str) -> Optional[CartLine]:
        return next(
            (line for line in self.lines if line.product.id == product_id and line.size == size),
            None,
        )

    def add(self, product: Product, size: str, quantity: int = 1) -> CartLine:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        existing = self._find(product.id, size)
        if existing:
            existing.quantity += quantity
            return existing

        line = CartLine(product=product, size=size, quantity=quantity)
        self.lines.append(line)
        return line

    def scan(self, code: str, products: Iterable[Product]) -> Tuple[bool, str, Optional[ScanMatch]]:
        """
        Resolve a scanned code and add one unit of it.
        Unknown codes and sold-out sizes leave the cart unchanged.
        """
        ok, msg, match = resolve_scan(code, products)
        if ok:
            self.add(match.product, match.size, 1)
        else:
            logger.info("Scan rejected: %s", msg)
        return ok, msg, match

    def remove(self, index: int) -> None:
        if 0 <= index < len(self.lines):
            del self.lines[index]

    def update_quantity(self, index: int, quantity: int) -> None:
        if quantity < 1:
            return
        if 0 <= index < len(self.lines):
            self.lines[index].quantity = quantity

    def total(self) -> Number:
        return sum(line.line_total for line in self.lines)

    def items_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def clear(self) -> None:
        self.lines.clear()

# services/stock_service.py
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from data_integrator import fetch_product, update_product_quantities
from domain.errors import StoreError
from domain.models import CartLine, Product, Sale
from utils.settings import DEFAULT_SIZES

logger = logging.getLogger(__name__)


def decrement_quantity_map(qty_map: Mapping[str, int], size: str, sold: int) -> Dict[str, int]:
    """
    Copy of `qty_map` with `sold` units taken off `size`.
    Never goes below 0: selling more than is on hand clamps to 0.
    """
    updated = dict(qty_map)
    updated[size] = max(0, updated.get(size, 0) - sold)
    return updated


def restore_quantity_map(qty_map: Mapping[str, int], size: str, sold: int) -> Dict[str, int]:
    updated = dict(qty_map)
    updated[size] = updated.get(size, 0) + sold
    return updated


def with_default_sizes(qty_map: Optional[Mapping[str, int]]) -> Dict[str, int]:
    """Default sizes at 0, overridden by whatever the product already has."""
    merged = {size: 0 for size in DEFAULT_SIZES}
    merged.update(qty_map or {})
    return merged


def total_stock(product: Product) -> int:
    return product.total_stock


def _clean_quantity(value: Any) -> int:
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, qty)


def set_product_quantities(product_id: str, qty_map: Mapping[str, Any]) -> Tuple[bool, str, Dict[str, int]]:
    """
    Manual adjustment from the products screen.
    Empty size labels are dropped; bad or negative counts become 0.
    """
    cleaned = {
        str(size).strip(): _clean_quantity(qty)
        for size, qty in qty_map.items()
        if str(size).strip()
    }

    ok, msg, _ = update_product_quantities(product_id, cleaned)
    if not ok:
        logger.error("Error updating quantities of %s: %s", product_id, msg)
        return False, "Erreur lors de la mise à jour des quantités", cleaned

    logger.info("Quantities of %s set to %s", product_id, cleaned)
    return True, "Quantités mises à jour", cleaned


def apply_sale_to_stock(lines: Iterable[CartLine]) -> Tuple[bool, str, int]:
    """
    Take sold quantities off the products, one update per cart line, in order.

    Each update rewrites the product's whole size map from the snapshot taken
    at scan time, so changes made elsewhere in between are overwritten.
    Stops at the first failed update; earlier updates stay applied.

    Returns (ok, message, lines_applied)
    """
    # maps already written during this checkout, so two sizes of the same
    # product don't overwrite each other
    written: Dict[str, Dict[str, int]] = {}
    applied = 0

    for line in lines:
        product = line.product
        current = written.get(product.id, product.quantities)
        new_map = decrement_quantity_map(current, line.size, line.quantity)

        ok, msg, _ = update_product_quantities(product.id, new_map)
        if not ok:
            logger.error(
                "Stock update failed for %s (%s) after %d line(s): %s",
                product.id,
                line.size,
                applied,
                msg,
            )
            return False, msg, applied

        written[product.id] = new_map
        product.quantities = new_map
        applied += 1

    return True, "Stock updated", applied


def restore_sale_stock(sale: Sale) -> Tuple[bool, str, int]:
    """
    Give back the quantities of a sale, item by item: re-read the product,
    add the sold quantity to its size, write the map.

    Nothing ties the items together: a failure leaves earlier items restored.
    Items whose product no longer exists are skipped.

    Returns (ok, message, items_restored)
    """
    restored = 0

    for item in sale.items:
        try:
            product = fetch_product(item.product_id)
        except StoreError as e:
            logger.error("Restore of sale %s stopped at %s: %s", sale.id, item.product_id, e)
            return False, str(e), restored

        if product is None:
            logger.warning("Product %s of sale %s no longer exists, skipping", item.product_id, sale.id)
            continue

        new_map = restore_quantity_map(product.quantities, item.size, item.quantity)
        ok, msg, _ = update_product_quantities(product.id, new_map)
        if not ok:
            logger.error("Restore of sale %s failed for %s (%s): %s", sale.id, product.id, item.size, msg)
            return False, msg, restored

        restored += 1

    return True, "Stock restored", restored

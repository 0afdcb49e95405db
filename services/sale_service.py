# services/sale_service.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from data_integrator import insert_sale, set_sale_hidden, delete_sale as delete_sale_row
from domain.models import Receipt, Sale, SaleItem
from services.cart_service import Cart
from services.stock_service import apply_sale_to_stock, restore_sale_stock
from utils.timeutils import parse_timestamp

logger = logging.getLogger(__name__)

GENERIC_SALE_ERROR = "Erreur lors de l'enregistrement de la vente"


def build_sale_payload(
        cart: Cart,
        seller_id: Optional[str] = None,
        now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the zopos_sales row for the current cart.

    Each item snapshots the product name and unit price, so later catalog
    edits don't change the history:
      {
        "product_id": str,
        "product_name": str,
        "size": str,
        "quantity": int,
        "unit_price": number,
        "total_price": number,
      }
    """
    now = now or datetime.now(timezone.utc)

    items = [
        SaleItem(
            product_id=line.product.id,
            product_name=line.product.name,
            size=line.size,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.line_total,
        ).to_dict()
        for line in cart
    ]

    payload: Dict[str, Any] = {
        "total_amount": cart.total(),
        "items_count": cart.items_count(),
        "items": items,
        "sale_date": now.isoformat(),
    }
    if seller_id:
        payload["seller_id"] = seller_id
    return payload


def checkout(cart: Cart, seller_id: Optional[str] = None) -> Tuple[bool, str, Optional[Receipt]]:
    """
    Record the sale, then take the sold quantities off the stock.

    The two steps are not atomic. If a stock update fails after the sale row
    is in, the sale stays recorded, the receipt is still returned and
    ok is False.

    Returns (ok, message, receipt)
    """
    if len(cart) == 0:
        return False, "Le panier est vide", None

    now = datetime.now(timezone.utc)
    payload = build_sale_payload(cart, seller_id=seller_id, now=now)

    ok, msg, sale = insert_sale(payload)
    if not ok:
        logger.error("Error processing payment: %s", msg)
        return False, GENERIC_SALE_ERROR, None

    receipt = Receipt(
        sale_id=sale.id,
        lines=[SaleItem.from_dict(item) for item in payload["items"]],
        total=payload["total_amount"],
        items_count=payload["items_count"],
        created_at=sale.created_at or parse_timestamp(now),
    )

    ok, msg, applied = apply_sale_to_stock(cart.lines)
    if not ok:
        logger.error(
            "Sale %s recorded but stock only updated for %d of %d line(s): %s",
            sale.id,
            applied,
            len(cart),
            msg,
        )
        return False, "Vente enregistrée, mais le stock n'a pas pu être mis à jour", receipt

    logger.info("Sale %s recorded: %s items, total %s", sale.id, receipt.items_count, receipt.total)
    cart.clear()
    return True, "Vente enregistrée", receipt


def hide_sale(sale_id: str, hidden: bool = True) -> Tuple[bool, str]:
    """
    Soft delete: the sale leaves the history list but still counts in totals.
    """
    ok, msg, _ = set_sale_hidden(sale_id, hidden)
    if not ok:
        logger.error("Error hiding sale %s: %s", sale_id, msg)
        return False, "Erreur lors du masquage de la vente"
    return True, "Vente masquée" if hidden else "Vente affichée"


def delete_sale(sale: Sale) -> Tuple[bool, str]:
    """
    Hard delete: put the sold quantities back, then remove the row.
    The row is kept when the stock could not be fully restored.
    """
    ok, msg, restored = restore_sale_stock(sale)
    if not ok:
        logger.error("Sale %s not deleted, stock restored for %d item(s): %s", sale.id, restored, msg)
        return False, "Erreur lors de la restauration du stock"

    ok, msg, _ = delete_sale_row(sale.id)
    if not ok:
        logger.error("Stock of sale %s restored but row not deleted: %s", sale.id, msg)
        return False, "Erreur lors de la suppression de la vente"

    logger.info("Sale %s deleted, %d item(s) restocked", sale.id, restored)
    return True, "Vente supprimée"

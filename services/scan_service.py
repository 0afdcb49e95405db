# services/scan_service.py
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from domain.models import Product, ScanMatch
from utils.short_code import generate_short_code

logger = logging.getLogger(__name__)


def iter_short_codes(products: Iterable[Product]) -> Iterator[Tuple[Product, str, str]]:
    """
    Yield (product, size, code) for every size of every product,
    in catalog order then quantity-map order.
    """
    for product in products:
        for size in product.quantities:
            try:
                code = generate_short_code(product.id, size)
            except ValueError:
                # empty id or size label in the catalog: nothing to print or scan
                logger.warning("Skipping product %r size %r: cannot build a code", product.id, size)
                continue
            yield product, size, code


def find_by_short_code(code: str, products: Iterable[Product]) -> Optional[ScanMatch]:
    """
    Resolve a scanned code against the catalog snapshot.

    First exact match wins; when two pairs share a code the one that comes
    first in catalog order is returned. Returns None when nothing matches.
    """
    scanned = (code or "").strip()
    if not scanned:
        return None

    for product, size, candidate in iter_short_codes(products):
        logger.debug("Product: %s (%s), Size: %s, Code: %s", product.name, product.id, size, candidate)
        if candidate == scanned:
            return ScanMatch(product=product, size=size, code=candidate)

    logger.info('Barcode scanned: "%s" - NOT FOUND', scanned)
    return None


def resolve_scan(code: str, products: Iterable[Product]) -> Tuple[bool, str, Optional[ScanMatch]]:
    """
    Checkout-side scan: lookup plus the stock check.
    Returns (ok, message, match)
    """
    scanned = (code or "").strip()
    match = find_by_short_code(scanned, products)

    if match is None:
        return False, f"Produit non trouvé pour le code: {scanned}", None

    if match.quantity <= 0:
        return False, f"Taille {match.size} épuisée", match

    return True, f"{match.product.name} ({match.size}) ajouté", match


def find_collisions(products: Iterable[Product]) -> Dict[str, List[Tuple[str, str]]]:
    """
    Codes shared by more than one (product id, size) pair.
    Diagnostic only: scanning such a code still resolves to the first pair.
    """
    seen: Dict[str, List[Tuple[str, str]]] = {}
    for product, size, code in iter_short_codes(products):
        seen.setdefault(code, []).append((product.id, size))

    return {code: pairs for code, pairs in seen.items() if len(pairs) > 1}

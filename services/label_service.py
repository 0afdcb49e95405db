# services/label_service.py
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import requests
from docx import Document
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Inches, Pt

from domain.models import Product
from services.scan_service import iter_short_codes
from utils.barcode import ensure_barcode_image
from utils.formatting import format_price
from utils.settings import BARCODE_IMG_DIR

logger = logging.getLogger(__name__)

LABEL_COLUMNS = 3


def product_labels(product: Product) -> List[Dict[str, object]]:
    """
    One entry per size of the product:
      {"size": "M", "code": "557603", "quantity": 5, "price_display": "25k"}
    """
    return [
        {
            "size": size,
            "code": code,
            "quantity": product.quantity_for(size),
            "price_display": format_price(product.price),
        }
        for _, size, code in iter_short_codes([product])
    ]


def barcode_png_bytes(code: str, img_dir: Union[str, Path] = BARCODE_IMG_DIR) -> bytes:
    path = ensure_barcode_image(code, img_dir)
    return Path(path).read_bytes()


def download_image(
        url: Optional[str],
        *,
        timeout_seconds: int = 10,
        max_download_retries: int = 3,
) -> Optional[bytes]:
    """Fetch the product photo. None when there is no url or every attempt failed."""
    if not url:
        return None

    last_error = None
    for attempt in range(1, max_download_retries + 1):
        try:
            resp = requests.get(url, timeout=timeout_seconds)
            resp.raise_for_status()
            return resp.content
        except requests.RequestException as e:
            last_error = e
            logger.warning(
                "Download failed (%d/%d): %s",
                attempt,
                max_download_retries,
                e,
            )

    logger.error("Giving up downloading image %s: %s", url, last_error)
    return None


def build_label_sheet(
        product: Product,
        output_path: str,
        img_dir: Union[str, Path] = BARCODE_IMG_DIR,
        with_image: bool = True,
) -> str:
    """
    Write a DOCX sheet with one label per size of the product:
    name, size, price, barcode and the code in clear text.
    Returns output_path.
    """
    labels = product_labels(product)
    doc = Document()
    doc.add_heading(product.name, level=1)

    if not labels:
        doc.add_paragraph("Aucune taille définie pour ce produit.")
        doc.save(output_path)
        return output_path

    image = download_image(product.image_url) if with_image else None

    rows = (len(labels) + LABEL_COLUMNS - 1) // LABEL_COLUMNS
    table = doc.add_table(rows=rows, cols=LABEL_COLUMNS)
    table.style = "Table Grid"

    for i, label in enumerate(labels):
        cell = table.cell(i // LABEL_COLUMNS, i % LABEL_COLUMNS)

        title = cell.paragraphs[0].add_run(product.name)
        title.bold = True
        title.font.size = Pt(10)

        if image:
            try:
                cell.add_paragraph().add_run().add_picture(io.BytesIO(image), width=Inches(0.8))
            except UnrecognizedImageError:
                logger.warning("Image of %s is not a picture, label printed without it", product.id)
                image = None

        cell.add_paragraph(f"Taille: {label['size']}  -  {label['price_display']}")

        img_path = ensure_barcode_image(label["code"], img_dir)
        cell.add_paragraph().add_run().add_picture(img_path, width=Inches(1.6))

        code_run = cell.add_paragraph().add_run(label["code"])
        code_run.font.size = Pt(9)

    doc.save(output_path)
    logger.info("Label sheet for %s written to %s (%d labels)", product.id, output_path, len(labels))
    return output_path

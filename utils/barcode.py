# zopos/utils/barcode.py

from pathlib import Path
from typing import Union

from barcode import Code128
from barcode.writer import ImageWriter

from utils.settings import BARCODE_IMG_DIR


def ensure_barcode_image(code: str, img_dir: Union[str, Path] = BARCODE_IMG_DIR) -> str:
    """
    Generate a Code128 barcode image for `code` if it doesn't exist yet.
    Returns the path to the PNG file.
    """
    if not code or not isinstance(code, str):
        raise ValueError("code must be a non-empty string")

    folder = Path(img_dir)
    folder.mkdir(parents=True, exist_ok=True)

    filename = folder / f"{code}.png"
    if filename.exists():
        return str(filename)

    # python-barcode appends the extension itself
    barcode = Code128(code, writer=ImageWriter())
    full = Path(barcode.save(str(filename.with_suffix(""))))

    if full != filename and full.exists():
        full.rename(filename)

    return str(filename)

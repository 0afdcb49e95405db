# utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SCHEMA = os.getenv("SCHEMA", "public")

PRODUCTS_TABLE = os.getenv("PRODUCTS_TABLE", "zo-products")
SALES_TABLE = os.getenv("SALES_TABLE", "zopos_sales")
USERS_TABLE = os.getenv("USERS_TABLE", "zop-users")

BARCODE_IMG_DIR = os.getenv("BARCODE_IMG_DIR", "barcodes")
TOP_N = int(os.getenv("TOP_N", 5))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# sizes offered by the quantity editor when a product has none yet
DEFAULT_SIZES = ("M", "L", "XL", "2XL", "3XL", "4XL", "5XL")

# day boundaries for the sales filters are taken in this timezone
TIMEZONE = os.getenv("TIMEZONE", "UTC")

import logging
from typing import Dict, List, Any, Tuple, Optional

from supabase import create_client, Client, ClientOptions

from domain.errors import StoreError
from domain.models import Product, Sale, UserProfile
from utils.settings import (
    SUPABASE_URL,
    SUPABASE_KEY,
    SUPABASE_SERVICE_ROLE_KEY,
    SCHEMA,
    PRODUCTS_TABLE,
    SALES_TABLE,
    USERS_TABLE,
)
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)

_client: Optional[Client] = None
_admin_client: Optional[Client] = None


def get_client() -> Client:
    """Supabase client with the anon key, created on first use."""
    global _client
    if _client is None:
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
        _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    return _client


def create_session_client() -> Client:
    """
    New anon-key client for one browser session's auth state.
    Sign-in and sign-out go through it so sessions never share an identity.
    """
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(
        SUPABASE_URL,
        SUPABASE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def get_admin_client() -> Client:
    """
    Client with the service-role key, for user administration only.
    It never keeps a session of its own.
    """
    global _admin_client
    if _admin_client is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError("Set SUPABASE_SERVICE_ROLE_KEY to manage users")
        _admin_client = create_client(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
    return _admin_client


def _table(table_name: str, client: Optional[Client] = None):
    return (client or get_client()).schema(SCHEMA).table(table_name)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def fetch_products() -> List[Product]:
    """
    Full catalog snapshot, in the order the store returns it.
    Scan resolution depends on this order when two codes collide.
    """
    try:
        resp = _table(PRODUCTS_TABLE).select("*").execute()
    except Exception as e:
        raise StoreError("Fetch products", e) from e

    if getattr(resp, "error", None):
        raise StoreError("Fetch products", resp.error)

    return [Product.from_row(row) for row in (resp.data or [])]


def fetch_product(product_id: str) -> Optional[Product]:
    try:
        resp = (
            _table(PRODUCTS_TABLE)
            .select("*")
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise StoreError(f"Fetch product {product_id}", e) from e

    if getattr(resp, "error", None):
        raise StoreError(f"Fetch product {product_id}", resp.error)

    if resp.data:
        return Product.from_row(resp.data[0])
    return None


def update_product_quantities(
        product_id: str,
        qty_map: Dict[str, int],
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Rewrite the whole zopos_qty map of one product.
    Returns (ok, message, updated_row)
    """
    try:
        resp = (
            _table(PRODUCTS_TABLE)
            .update({"zopos_qty": qty_map})
            .eq("id", product_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", None

        updated = resp.data[0] if resp.data else None
        return True, "Updated", updated

    except Exception as e:
        return False, str(e), None


def delete_product(product_id: str) -> Tuple[bool, str, None]:
    try:
        resp = (
            _table(PRODUCTS_TABLE)
            .delete()
            .eq("id", product_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}", None

        return True, "Deleted", None

    except Exception as e:
        return False, str(e), None


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------

def fetch_sales(include_hidden: bool = True) -> List[Sale]:
    """Sales history, newest first."""
    try:
        resp = (
            _table(SALES_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise StoreError("Fetch sales", e) from e

    if getattr(resp, "error", None):
        raise StoreError("Fetch sales", resp.error)

    sales = [Sale.from_row(row) for row in (resp.data or [])]
    if include_hidden:
        return sales
    return [sale for sale in sales if not sale.hidden]


def insert_sale(payload: Dict[str, Any]) -> Tuple[bool, str, Optional[Sale]]:
    """
    Insert one sale row.
    Returns (ok, message, inserted_sale)
    """
    try:
        resp = (
            _table(SALES_TABLE)
            .insert(payload)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        if not resp.data:
            return False, "Insert failed: no data returned", None

        return True, "Inserted", Sale.from_row(resp.data[0])

    except Exception as e:
        return False, str(e), None


def set_sale_hidden(sale_id: str, hidden: bool = True) -> Tuple[bool, str, None]:
    try:
        resp = (
            _table(SALES_TABLE)
            .update({"hidden": hidden})
            .eq("id", sale_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", None

        return True, "Hidden" if hidden else "Visible", None

    except Exception as e:
        return False, str(e), None


def delete_sale(sale_id: str) -> Tuple[bool, str, None]:
    try:
        resp = (
            _table(SALES_TABLE)
            .delete()
            .eq("id", sale_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}", None

        return True, "Deleted", None

    except Exception as e:
        return False, str(e), None


# ---------------------------------------------------------------------------
# User profiles
# ---------------------------------------------------------------------------

def fetch_user_profile(user_id: str) -> Optional[UserProfile]:
    try:
        resp = (
            _table(USERS_TABLE)
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise StoreError(f"Fetch profile {user_id}", e) from e

    if getattr(resp, "error", None):
        raise StoreError(f"Fetch profile {user_id}", resp.error)

    if resp.data:
        return UserProfile.from_row(resp.data[0])
    return None


def fetch_users() -> List[UserProfile]:
    try:
        resp = (
            _table(USERS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise StoreError("Fetch users", e) from e

    if getattr(resp, "error", None):
        raise StoreError("Fetch users", resp.error)

    return [UserProfile.from_row(row) for row in (resp.data or [])]


def insert_user_profile(
        row: Dict[str, Any],
        client: Optional[Client] = None,
) -> Tuple[bool, str, Optional[UserProfile]]:
    """
    Insert a zop-users row. `client` lets the admin actions write
    with the service-role key.
    Returns (ok, message, inserted_profile)
    """
    try:
        now = now_iso()
        payload = {"created_at": now, "updated_at": now, **row}
        resp = (
            _table(USERS_TABLE, client)
            .insert(payload)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        inserted = UserProfile.from_row(resp.data[0]) if resp.data else None
        return True, "Inserted", inserted

    except Exception as e:
        return False, str(e), None


def update_user_profile(
        user_id: str,
        changes: Dict[str, Any],
        client: Optional[Client] = None,
) -> Tuple[bool, str, None]:
    try:
        resp = (
            _table(USERS_TABLE, client)
            .update({**changes, "updated_at": now_iso()})
            .eq("id", user_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", None

        return True, "Updated", None

    except Exception as e:
        return False, str(e), None


def delete_user_profile(user_id: str, client: Optional[Client] = None) -> Tuple[bool, str, None]:
    try:
        resp = (
            _table(USERS_TABLE, client)
            .delete()
            .eq("id", user_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}", None

        return True, "Deleted", None

    except Exception as e:
        logger.error("Error deleting profile %s: %s", user_id, e)
        return False, str(e), None

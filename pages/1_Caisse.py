import logging

import streamlit as st
import pandas as pd

from data_integrator import fetch_products
from domain.errors import StoreError
from element_component import require_login
from services.cart_service import Cart
from services.sale_service import checkout
from utils.formatting import format_price, format_date_fr

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Caisse", page_icon="🧾")
st.sidebar.header("🧾 Caisse")

profile = require_login()

# -------------------------------------------------------------------
# Session state defaults
# -------------------------------------------------------------------

if "cart" not in st.session_state:
    st.session_state["cart"] = Cart()
st.session_state.setdefault("receipt", None)
st.session_state.setdefault("scan_message", None)

cart: Cart = st.session_state["cart"]


def on_scan():
    code = st.session_state["barcode_input"]
    st.session_state["barcode_input"] = ""
    if not code.strip():
        return

    # fresh catalog on every scan, quantities may have moved since the last one
    try:
        products = fetch_products()
    except StoreError as e:
        logger.error("Error fetching product: %s", e)
        st.session_state["scan_message"] = (False, "Erreur lors de la recherche du produit")
        return

    ok, msg, _ = cart.scan(code, products)
    st.session_state["scan_message"] = (ok, msg)


st.subheader("Point de Vente (POS)")
st.caption("Scannez les codes-barres pour ajouter des produits")

# -------------------------------------------------------------------
# Scanner
# -------------------------------------------------------------------

st.text_input("Code...", key="barcode_input", on_change=on_scan)

if st.session_state["scan_message"]:
    ok, msg = st.session_state["scan_message"]
    if ok:
        st.toast(msg)
    else:
        st.error(msg)
    st.session_state["scan_message"] = None

# -------------------------------------------------------------------
# Cart
# -------------------------------------------------------------------

st.subheader(f"Panier ({cart.items_count()})")

if len(cart) == 0:
    st.info("Le panier est vide")
else:
    for i, line in enumerate(cart.lines):
        col_name, col_qty, col_total, col_rm = st.columns([3, 1.5, 1, 0.5])
        col_name.markdown(f"**{line.product.name}**  \nTaille {line.size} • {format_price(line.unit_price)}")
        new_qty = col_qty.number_input(
            "Qté",
            min_value=1,
            step=1,
            value=line.quantity,
            key=f"qty_{line.product.id}_{line.size}_{line.quantity}",
            label_visibility="collapsed",
        )
        if new_qty != line.quantity:
            cart.update_quantity(i, int(new_qty))
            st.rerun()
        col_total.write(format_price(line.line_total))
        if col_rm.button("✖", key=f"rm_{line.product.id}_{line.size}"):
            cart.remove(i)
            st.rerun()

    st.markdown(f"### Total: {format_price(cart.total())}")

    col_pay, col_clear = st.columns(2)
    with col_pay:
        if st.button("Encaisser", type="primary"):
            ok, msg, receipt = checkout(cart, seller_id=profile.id)
            if receipt:
                st.session_state["receipt"] = receipt
            if ok:
                st.rerun()
            else:
                st.error(msg)
    with col_clear:
        if st.button("Vider le panier"):
            cart.clear()
            st.rerun()

# -------------------------------------------------------------------
# Receipt
# -------------------------------------------------------------------

receipt = st.session_state["receipt"]
if receipt:
    st.divider()
    st.subheader("Reçu")
    st.caption(f"Vente {receipt.sale_id} • {format_date_fr(receipt.created_at, with_time=True)}")
    df = pd.DataFrame(
        [
            {
                "Produit": item.product_name,
                "Taille": item.size,
                "Qté": item.quantity,
                "Prix": format_price(item.unit_price),
                "Total": format_price(item.total_price),
            }
            for item in receipt.lines
        ]
    )
    st.dataframe(df, hide_index=True, width="stretch")
    st.markdown(f"**Total: {format_price(receipt.total)}** ({receipt.items_count} articles)")
    if st.button("Nouvelle vente"):
        st.session_state["receipt"] = None
        st.rerun()

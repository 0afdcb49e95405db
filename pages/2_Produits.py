import logging
import tempfile
from pathlib import Path

import streamlit as st
import pandas as pd

from data_integrator import fetch_products, delete_product
from domain.errors import StoreError
from element_component import confirmation_dialog, show_outcome, require_login
from services.label_service import product_labels, barcode_png_bytes, build_label_sheet
from services.scan_service import find_collisions
from services.stock_service import set_product_quantities, with_default_sizes
from utils.formatting import format_price

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Produits", page_icon="👗")
st.sidebar.header("👗 Produits")

require_login()
show_outcome("product_state")

try:
    products = fetch_products()
except StoreError as e:
    logger.error("Error fetching products: %s", e)
    st.error("Erreur lors du chargement des produits")
    st.stop()

products.sort(key=lambda p: p.created_at.isoformat() if p.created_at else "", reverse=True)

st.subheader("Produits")
st.caption(f"{len(products)} produit{'s' if len(products) != 1 else ''} • Stock Zo POS")

if not products:
    st.info("Aucun produit")
    st.stop()

# -------------------------------------------------------------------
# Catalog table
# -------------------------------------------------------------------

df_products = pd.DataFrame(
    [
        {
            "Produit": p.name,
            "Catégorie": p.category or "-",
            "Prix": format_price(p.price),
            "Stock": p.total_stock,
            "Tailles": ", ".join(f"{size}: {qty}" for size, qty in p.quantities.items()) or "-",
            "Actif": "Oui" if p.is_active else "Non",
        }
        for p in products
    ]
)
st.dataframe(df_products, hide_index=True, width="stretch")

collisions = find_collisions(products)
if collisions:
    st.warning(
        "Codes partagés par plusieurs tailles (le premier produit trouvé sera scanné): "
        + ", ".join(sorted(collisions))
    )

st.divider()

# -------------------------------------------------------------------
# One product: quantities and labels
# -------------------------------------------------------------------

by_label = {f"{p.name} ({p.id})": p for p in products}
selected_label = st.selectbox("Produit", by_label.keys(), index=None, placeholder="Choisir un produit")

if selected_label is None:
    st.stop()

product = by_label[selected_label]

with st.form("qty_form"):
    st.subheader("Quantités par taille")
    merged = with_default_sizes(product.quantities)
    new_qty = {}
    cols = st.columns(4)
    for i, (size, qty) in enumerate(merged.items()):
        new_qty[size] = cols[i % 4].number_input(size, min_value=0, step=1, value=int(qty), key=f"q_{product.id}_{size}")

    extra_size = st.text_input("Nouvelle taille (optionnel)")
    extra_qty = st.number_input("Quantité", min_value=0, step=1, key=f"q_{product.id}__new")

    if st.form_submit_button("Enregistrer"):
        if extra_size.strip():
            new_qty[extra_size.strip()] = extra_qty
        ok, msg, _ = set_product_quantities(product.id, new_qty)
        st.session_state["product_state"] = (ok, msg)
        st.rerun()

st.subheader("Étiquettes")
labels = product_labels(product)
if labels:
    st.dataframe(
        pd.DataFrame(labels).rename(
            columns={"size": "Taille", "code": "Code", "quantity": "Stock", "price_display": "Prix"}
        ),
        hide_index=True,
    )

    cols = st.columns(min(len(labels), 4))
    for i, label in enumerate(labels):
        cols[i % len(cols)].download_button(
            f"Code-barres {label['size']}",
            data=barcode_png_bytes(label["code"]),
            file_name=f"{product.name}-{label['size']}-{label['code']}.png",
            mime="image/png",
            key=f"dl_{product.id}_{label['size']}",
        )

    if st.button("Générer la planche d'étiquettes"):
        with st.spinner("Génération..."):
            out_path = Path(tempfile.gettempdir()) / f"etiquettes-{product.id}.docx"
            build_label_sheet(product, str(out_path))
        st.download_button(
            "Télécharger la planche (.docx)",
            data=out_path.read_bytes(),
            file_name=out_path.name,
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
else:
    st.info("Ajoutez des tailles pour générer des étiquettes")

st.divider()

if st.button("Supprimer ce produit", type="secondary"):
    def _delete():
        ok, msg, _ = delete_product(product.id)
        if not ok:
            logger.error("Error deleting product %s: %s", product.id, msg)
            return False, "Erreur lors de la suppression du produit"
        return True, "Produit supprimé"

    confirmation_dialog({"Produit": product.name}, _delete, "product_state", key="del_product")

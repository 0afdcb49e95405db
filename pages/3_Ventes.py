import logging

import streamlit as st
import pandas as pd

from data_integrator import fetch_sales
from domain.errors import StoreError
from element_component import confirmation_dialog, show_outcome, require_login
from services.analytics_service import filter_by_period, search_sales, summarize, visible_sales
from services.sale_service import hide_sale, delete_sale
from services.user_service import can_manage_users
from utils.formatting import format_price, format_date_fr

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Ventes", page_icon="📒")
st.sidebar.header("📒 Ventes")

profile = require_login()
show_outcome("sale_state")

st.subheader("Ventes")
st.caption("Historique des transactions POS")

try:
    sales = fetch_sales()
except StoreError as e:
    logger.error("Error fetching sales: %s", e)
    st.error("Erreur lors du chargement des ventes")
    st.stop()

# -------------------------------------------------------------------
# Filters
# -------------------------------------------------------------------

col_search, col_start, col_end = st.columns(3)
query = col_search.text_input("Rechercher", placeholder="Nom de produit ou code...")
start_date = col_start.date_input("Date début", value=None, format="DD/MM/YYYY")
end_date = col_end.date_input("Date fin", value=None, format="DD/MM/YYYY")

in_period = filter_by_period(sales, start_date, end_date)
listed = search_sales(visible_sales(in_period), query)

# hidden sales still count in the totals
summary = summarize(in_period)

c1, c2, c3, c4 = st.columns(4)
c1.metric("Chiffre d'affaires", format_price(summary.revenue))
c2.metric("Transactions", summary.transactions)
c3.metric("Articles vendus", summary.items_sold)
c4.metric("Panier moyen", format_price(round(summary.average)))

st.divider()

if not listed:
    st.info("Aucune vente")
    st.stop()

df_sales = pd.DataFrame(
    [
        {
            "Date": format_date_fr(sale.timestamp, with_time=True) if sale.timestamp else "-",
            "Vente": sale.id,
            "Articles": sale.items_count,
            "Total": format_price(sale.total_amount),
        }
        for sale in listed
    ]
)
st.dataframe(df_sales, hide_index=True, width="stretch")

# -------------------------------------------------------------------
# Details and admin actions
# -------------------------------------------------------------------

by_id = {sale.id: sale for sale in listed}
selected_id = st.selectbox("Détails de la vente", by_id.keys(), index=None, placeholder="Choisir une vente")

if selected_id is None:
    st.stop()

sale = by_id[selected_id]

st.dataframe(
    pd.DataFrame(
        [
            {
                "Produit": item.product_name,
                "Code": item.product_id,
                "Taille": item.size,
                "Qté": item.quantity,
                "Prix": format_price(item.unit_price),
                "Total": format_price(item.total_price),
            }
            for item in sale.items
        ]
    ),
    hide_index=True,
    width="stretch",
)

if can_manage_users(profile.role):
    col_hide, col_delete = st.columns(2)
    with col_hide:
        if st.button("Masquer"):
            confirmation_dialog(
                {"Vente": sale.id, "Total": format_price(sale.total_amount)},
                lambda: hide_sale(sale.id),
                "sale_state",
                key="hide_sale",
            )
    with col_delete:
        if st.button("Supprimer et remettre en stock", type="primary"):
            confirmation_dialog(
                {"Vente": sale.id, "Articles": sale.items_count, "Total": format_price(sale.total_amount)},
                lambda: delete_sale(sale),
                "sale_state",
                key="delete_sale",
            )

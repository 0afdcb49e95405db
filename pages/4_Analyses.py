import logging

import streamlit as st
import pandas as pd

from data_integrator import fetch_sales
from domain.errors import StoreError
from element_component import require_login
from services.analytics_service import (
    filter_by_period,
    summarize,
    top_products,
    best_periods,
    worst_periods,
)
from utils.formatting import format_price
from utils.settings import TOP_N

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Analyses", page_icon="📈")
st.sidebar.header("📈 Analyses")

require_login()

GRANULARITY_LABELS = {
    "Jour": "day",
    "Semaine": "week",
    "Mois": "month",
}

try:
    sales = fetch_sales()
except StoreError as e:
    logger.error("Error fetching sales: %s", e)
    st.error("Erreur lors du chargement des ventes")
    st.stop()

col_start, col_end, col_gran = st.columns(3)
start_date = col_start.date_input("Date début", value=None, format="DD/MM/YYYY")
end_date = col_end.date_input("Date fin", value=None, format="DD/MM/YYYY")
granularity = GRANULARITY_LABELS[col_gran.selectbox("Regrouper par", GRANULARITY_LABELS.keys())]

sales = filter_by_period(sales, start_date, end_date)
summary = summarize(sales)

c1, c2, c3 = st.columns(3)
c1.metric("Chiffre d'affaires", format_price(summary.revenue))
c2.metric("Transactions", summary.transactions)
c3.metric("Panier moyen", format_price(round(summary.average)))

st.divider()

st.subheader(f"Top {TOP_N} produits")
top = top_products(sales, TOP_N)
if top:
    st.dataframe(
        pd.DataFrame(
            [
                {"Produit": g.product_name, "Taille": g.size, "Qté": g.quantity, "CA": format_price(g.revenue)}
                for g in top
            ]
        ),
        hide_index=True,
        width="stretch",
    )
else:
    st.info("Aucune vente sur la période")


def _periods_frame(periods):
    return pd.DataFrame(
        [
            {"Période": p.key, "CA": format_price(p.revenue), "Transactions": p.transactions}
            for p in periods
        ]
    )


col_best, col_worst = st.columns(2)
with col_best:
    st.subheader("Meilleures périodes")
    best = best_periods(sales, granularity, TOP_N)
    if best:
        st.dataframe(_periods_frame(best), hide_index=True)
        st.bar_chart(pd.DataFrame({"CA": [p.revenue for p in best]}, index=[p.key for p in best]))
with col_worst:
    st.subheader("Périodes les plus faibles")
    worst = worst_periods(sales, granularity, TOP_N)
    if worst:
        st.dataframe(_periods_frame(worst), hide_index=True)

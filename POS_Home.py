import pandas as pd
import streamlit as st

from domain.errors import PosError
from element_component import get_session
from utils.formatting import format_money

st.set_page_config(
    page_title="POS Dashboard",
    page_icon="🧾"
)

st.sidebar.header("🧾 Dashboard")

session = get_session()
symbol = session.settings.currency_symbol

try:
    receipts = session.receipts.list_receipts()
except PosError as e:
    st.error(f"Could not load receipts: {e}")
    st.stop()

col_receipts, col_today, col_products = st.columns(3)
col_receipts.metric("Receipts", len(receipts))
col_today.metric("Today's Sales", format_money(session.receipts.sales_today(receipts), symbol))
col_products.metric("Products", len(session.catalog))

st.subheader("Sales per day")
sales_by_day = session.receipts.sales_by_day(receipts)

if sales_by_day:
    df_sales = pd.DataFrame(
        {"Date": list(sales_by_day.keys()), "Total": [float(v) for v in sales_by_day.values()]}
    ).set_index("Date")
    st.line_chart(df_sales)
else:
    st.info("No sales yet.")

low_stock = session.catalog.low_stock(session.settings.low_stock_threshold)
if low_stock:
    st.warning(f"{len(low_stock)} product(s) running low on stock")

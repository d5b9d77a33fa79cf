import streamlit as st

from domain.errors import PosError
from element_component import get_session, show_receipt

st.set_page_config(
    page_title="Receipts",
    page_icon="🧾"
)

st.sidebar.header("🧾 Receipts / Orders")

session = get_session()
symbol = session.settings.currency_symbol

try:
    receipts = session.receipts.list_receipts()
except PosError as e:
    st.error(f"Error fetching receipts: {e}")
    st.stop()

if not receipts:
    st.info("No receipts found.")
    st.stop()

receipt_id = st.text_input("Find receipt by number")
if receipt_id:
    found = session.receipts.get_receipt(receipt_id.strip(), receipts)
    if found is None:
        st.warning(f"Receipt {receipt_id} not found")
    else:
        show_receipt(found, symbol, session.settings.tz)
        st.stop()

for receipt in receipts:
    with st.container(border=True):
        show_receipt(receipt, symbol, session.settings.tz)

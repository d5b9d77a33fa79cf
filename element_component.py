import logging
import os
from datetime import tzinfo

import pandas as pd
import streamlit as st

from config import load_settings
from data_integrator import SupabaseStore
from domain.errors import PartialStockUpdateFailure, PosError
from domain.models import PAYMENT_METHODS, Receipt
from services.session import PosSession
from services.totals_service import line_total
from supabase_client import get_client
from utils.formatting import format_discount, format_money, format_timestamp


def setup_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@st.cache_resource
def get_store() -> SupabaseStore:
    settings = load_settings()
    return SupabaseStore(get_client(settings), settings)


def get_session() -> PosSession:
    """
    One PosSession per browser session, loaded with the catalog on first use.
    """
    if "pos_session" not in st.session_state:
        setup_logging()
        settings = load_settings()
        session = PosSession(get_store(), settings)
        try:
            session.refresh_catalog()
        except PosError as e:
            st.error(f"Could not load products: {e}")
        st.session_state["pos_session"] = session
    return st.session_state["pos_session"]


def receipt_lines_frame(receipt: Receipt, symbol: str) -> pd.DataFrame:
    rows = [
        {
            "Item": line.name,
            "Qty": line.quantity,
            "Price": format_money(line.price, symbol),
            "Discount": format_discount(line.discount),
            "Total": format_money(line_total(line), symbol),
        }
        for line in receipt.items
    ]
    return pd.DataFrame(rows, columns=["Item", "Qty", "Price", "Discount", "Total"])


def show_receipt(receipt: Receipt, symbol: str, tz: tzinfo):
    st.markdown(f"**Receipt #{receipt.id}**")
    st.caption(
        f"{format_timestamp(receipt.timestamp, tz)} · "
        f"{PAYMENT_METHODS.get(receipt.payment_method, receipt.payment_method)} · "
        f"{receipt.cashier or '-'}"
    )
    st.dataframe(receipt_lines_frame(receipt, symbol), hide_index=True)
    st.markdown(f"Subtotal: {format_money(receipt.subtotal, symbol)}")
    st.markdown(f"**Total: {format_money(receipt.total, symbol)}**")


@st.dialog("Confirm")
def checkout_confirmation_dialog(session: PosSession, payment_method: str, state_name: str):
    symbol = session.settings.currency_symbol
    totals = session.totals()

    st.write(f"{session.cart.item_count} item(s), paid by {PAYMENT_METHODS[payment_method]}")
    st.markdown(f"**Total: {format_money(totals.total, symbol)}**")

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Yes", type="primary", key="confirm_checkout_yes"):
            try:
                receipt = session.checkout(payment_method)
            except PartialStockUpdateFailure as e:
                st.session_state[state_name] = e.receipt
                st.warning(
                    f"Receipt {e.receipt.id} saved, but stock was not updated for: "
                    f"{', '.join(e.failed_ids)}. Please correct stock manually."
                )
                return
            except PosError as e:
                st.error(str(e))
                return

            st.session_state[state_name] = receipt
            st.rerun()
    with col_no:
        if st.button("No"):
            st.rerun()

import streamlit as st

from domain.errors import PosError
from domain.models import PAYMENT_METHODS
from element_component import checkout_confirmation_dialog, get_session, show_receipt
from services.totals_service import line_total
from utils.formatting import format_money

st.set_page_config(
    page_title="Point of Sale",
    page_icon="🛒"
)

st.sidebar.header("🛒 Point of Sale")

session = get_session()
symbol = session.settings.currency_symbol

if "last_receipt" not in st.session_state:
    st.session_state["last_receipt"] = None

col_products, col_cart = st.columns([3, 2])

# -------------------------------------------------------------------
# Product grid
# -------------------------------------------------------------------

with col_products:
    st.subheader("Products")

    search = st.text_input("Search name or barcode", key="pos_search")
    categories = ["all"] + sorted({p.category for p in session.catalog.products})
    category = st.selectbox("Category", categories, key="pos_category")

    # a scanned barcode goes straight into the cart
    scanned = session.catalog.find_by_barcode(search.strip())
    if scanned and scanned.stock > 0 and st.button(f"Add scanned: {scanned.name}"):
        session.add_to_cart(scanned)
        st.rerun()

    products = session.catalog.available(search, category)
    if not products:
        st.info("No products in stock match the filter.")

    for product in products:
        c_name, c_price, c_btn = st.columns([3, 1.5, 1])
        c_name.markdown(f"**{product.name}**  \n{product.category} · stock {product.stock}")
        c_price.write(format_money(product.price, symbol))
        if c_btn.button("Add", key=f"add_{product.id}"):
            session.add_to_cart(product)
            st.rerun()

# -------------------------------------------------------------------
# Cart
# -------------------------------------------------------------------

with col_cart:
    st.subheader("Cart")

    if session.cart.is_empty:
        st.caption("Cart is empty.")

    for line in session.cart.lines:
        st.markdown(f"**{line.name}** · {format_money(line.price, symbol)}")
        c_qty, c_disc, c_del = st.columns([1, 1, 1])
        qty = c_qty.number_input(
            "Qty", min_value=0, step=1, value=line.quantity, key=f"qty_{line.id}"
        )
        disc = c_disc.number_input(
            "Disc %", min_value=0, max_value=100, step=1, value=line.discount, key=f"disc_{line.id}"
        )
        if qty != line.quantity:
            session.set_quantity(line.id, int(qty))
            st.rerun()
        if disc != line.discount:
            session.set_discount(line.id, int(disc))
            st.rerun()
        if c_del.button("Remove", key=f"del_{line.id}"):
            session.remove_from_cart(line.id)
            st.rerun()
        st.caption(f"Line total: {format_money(line_total(line), symbol)}")

    totals = session.totals()
    st.divider()
    st.write(f"Subtotal: {format_money(totals.subtotal, symbol)}")
    st.markdown(f"**Total: {format_money(totals.total, symbol)}**")

    payment_method = st.selectbox(
        "Payment method",
        list(PAYMENT_METHODS.keys()),
        format_func=lambda k: PAYMENT_METHODS[k],
        key="payment_method",
    )

    if st.button("Complete Transaction", type="primary"):
        if session.cart.is_empty:
            st.error("Please add items to cart before checkout.")
        else:
            checkout_confirmation_dialog(session, payment_method, "last_receipt")

    if st.button("Clear Cart"):
        session.clear_cart()
        st.rerun()

    if st.button("Reload Products"):
        try:
            session.refresh_catalog()
        except PosError as e:
            st.error(str(e))
        else:
            st.rerun()

if st.session_state["last_receipt"] is not None:
    st.divider()
    st.success("Transaction complete")
    show_receipt(st.session_state["last_receipt"], symbol, session.settings.tz)

import pandas as pd
import streamlit as st

from domain.errors import PosError
from domain.models import CATEGORIES
from element_component import get_session
from utils.formatting import format_money

st.set_page_config(
    page_title="Manage Products",
    page_icon="📦"
)

st.sidebar.header("📦 Manage Products")

session = get_session()
symbol = session.settings.currency_symbol
threshold = session.settings.low_stock_threshold

# -------------------------------------------------------------------
# Inventory summary
# -------------------------------------------------------------------

col_total, col_low, col_out, col_units = st.columns(4)
col_total.metric("Products", len(session.catalog))
col_low.metric("Low Stock", len(session.catalog.low_stock(threshold)))
col_out.metric("Out of Stock", len(session.catalog.out_of_stock()))
col_units.metric("Units in Stock", session.catalog.total_units())


def stock_status(stock: int) -> str:
    if stock == 0:
        return "Out of stock"
    if stock < threshold:
        return "Low stock"
    return "In stock"


search = st.text_input("Search")
category = st.selectbox("Category", ["all"] + list(CATEGORIES))
products = session.catalog.search(search, category)

df_products = pd.DataFrame(
    [
        {
            "Name": p.name,
            "Category": p.category,
            "Price": format_money(p.price, symbol),
            "Stock": p.stock,
            "Status": stock_status(p.stock),
            "Barcode": p.barcode or "-",
        }
        for p in products
    ],
    columns=["Name", "Category", "Price", "Stock", "Status", "Barcode"],
)
st.dataframe(df_products, width='stretch', hide_index=True)

# -------------------------------------------------------------------
# Add product
# -------------------------------------------------------------------

with st.form("product_input_form", enter_to_submit=False):
    st.subheader("Add Product")
    name = st.text_input("Name *")
    price = st.number_input("Price *", min_value=0.0, step=0.01, format="%.2f")
    new_category = st.selectbox("Category *", CATEGORIES)
    stock = st.number_input("Stock Quantity *", min_value=0, step=1)
    description = st.text_input("Description")
    barcode = st.text_input("Barcode")

    if st.form_submit_button("Submit"):
        try:
            product = session.create_product(
                {
                    "name": name,
                    "price": price,
                    "category": new_category,
                    "stock": int(stock),
                    "description": description,
                    "barcode": barcode,
                }
            )
        except (PosError, ValueError) as e:
            st.error(str(e))
        else:
            st.success(f"{product.name} has been added successfully.")

# -------------------------------------------------------------------
# Edit / delete product
# -------------------------------------------------------------------

if session.catalog.products:
    st.subheader("Edit Product")
    by_label = {f"{p.name} ({p.id})": p for p in session.catalog.products}
    selected = by_label[st.selectbox("Product", list(by_label.keys()))]

    with st.form("product_edit_form", enter_to_submit=False):
        edit_name = st.text_input("Name", value=selected.name)
        edit_price = st.number_input("Price", min_value=0.0, step=0.01, format="%.2f", value=float(selected.price))
        edit_category = st.selectbox(
            "Category",
            CATEGORIES,
            index=CATEGORIES.index(selected.category) if selected.category in CATEGORIES else 0,
        )
        edit_stock = st.number_input("Stock Quantity", min_value=0, step=1, value=selected.stock)
        edit_description = st.text_input("Description", value=selected.description or "")
        edit_barcode = st.text_input("Barcode", value=selected.barcode or "")

        col_save, col_delete = st.columns(2)
        save = col_save.form_submit_button("Save")
        delete = col_delete.form_submit_button("Delete")

        if save:
            try:
                session.update_product(
                    selected.id,
                    {
                        "name": edit_name,
                        "price": edit_price,
                        "category": edit_category,
                        "stock": int(edit_stock),
                        "description": edit_description,
                        "barcode": edit_barcode,
                    },
                )
            except (PosError, ValueError) as e:
                st.error(str(e))
            else:
                st.rerun()

        if delete:
            try:
                session.delete_product(selected.id)
            except PosError as e:
                st.error(str(e))
            else:
                st.rerun()

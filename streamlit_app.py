import os

import requests
import streamlit as st

from client import ShortenerClient, ShortenerClientError

API_BASE_DEFAULT = os.getenv("API_BASE", "http://localhost:8000")

# Streamlit expects page_title instead of title
st.set_page_config(page_title="URL Shortener", layout="wide")

st.title("URL Shortener")
st.caption("Shorten links and track how often they are visited.")

with st.expander("Settings", expanded=False):
    api_base = st.text_input("API base URL", value=API_BASE_DEFAULT, help="Backend base URL")

client = ShortenerClient(api_base)

with st.form("shorten", clear_on_submit=True):
    long_url = st.text_input("Long URL", placeholder="https://example.com/very/long/path")
    submitted = st.form_submit_button("Shorten", type="primary")

if submitted:
    if not long_url.strip():
        st.error("Please provide a URL to shorten.")
    else:
        try:
            data = client.shorten(long_url.strip())
            st.success("Short URL created")
            st.code(data["short_url"])
        except ShortenerClientError as exc:
            st.error(exc.detail)
        except requests.RequestException as exc:
            st.error(f"Request failed: {exc}")

st.subheader("Your links")

try:
    links = client.list_urls()
except (ShortenerClientError, requests.RequestException) as exc:
    st.error(f"Could not load links: {exc}")
    links = []

if not links:
    st.info("No links yet.")

for link in links:
    short_col, original_col, clicks_col, created_col, action_col = st.columns([2, 4, 1, 2, 1])
    short_col.markdown(f"[{link['short_code']}]({link['short_url']})")
    original_col.write(link["original_url"])
    clicks_col.write(link["click_count"])
    created_col.write(link["created_at"][:10])
    if action_col.button("Delete", key=f"delete-{link['id']}"):
        try:
            client.delete_url(link["id"])
        except (ShortenerClientError, requests.RequestException) as exc:
            st.error(f"Delete failed: {exc}")
        else:
            st.rerun()

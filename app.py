# =========================
# file: app.py
# =========================
from __future__ import annotations

import streamlit as st

from core.config import configure_logging
from tools.timeline_builder_ui import render_timeline_builder


def main():
    configure_logging()
    st.set_page_config(page_title="Day-Of Timeline Suite", layout="wide")
    st.title("💍 Day-Of Timeline Suite")

    st.sidebar.header("Tools")
    tool = st.sidebar.radio("Choose a tool", ["Timeline Builder"], index=0)

    if tool == "Timeline Builder":
        render_timeline_builder()


if __name__ == "__main__":
    main()

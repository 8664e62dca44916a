import streamlit as st


def render_sidebar():
    """
    Sidebar with links back to the dashboard and to the line explorer.
    """
    with st.sidebar:
        st.page_link("Home.py", label="Dashboard", icon="📊", use_container_width=True)
        st.page_link("pages/1_Line_Explorer.py", label="Line Explorer", icon="📈", use_container_width=True)
        st.markdown("---")

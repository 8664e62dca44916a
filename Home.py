import asyncio

import streamlit as st

from chartkit.dashboard import Dashboard
from chartkit.log import setup_logging
from chartkit.nav import render_sidebar
from chartkit.render_scheduler import ManualFrameClock, RenderScheduler
from chartkit.surface import Container, Host
from chartkit.viewer import render_chart_card

setup_logging()

st.set_page_config(
    page_title="TV Energy Charts",
    page_icon="📊",
    layout="wide"
)

render_sidebar()

# --- Sidebar: card size ---
st.sidebar.title("⚙️ Layout")
card_width = st.sidebar.slider("Card width (px)", 280, 900, 520, step=20)
card_height = st.sidebar.slider("Card height (px)", 280, 700, 360, step=20)

st.title("📊 Television energy & electricity prices")
st.markdown("Four small multiples built from the same data pipeline, scales and palette.")

# ==========================================
# MOUNT & LOAD
# ==========================================
host = Host()
for selector in ("#scatter-chart", "#donut-chart", "#bar-chart", "#line-chart"):
    host.mount(Container(selector, 320, 300))

clock = ManualFrameClock()
dashboard = Dashboard(host, RenderScheduler(clock, host.observe_size))
asyncio.run(dashboard.start())

# Size changes arrive after the loads queued their renders; one frame draws them all
for selector in ("#scatter-chart", "#donut-chart", "#bar-chart", "#line-chart"):
    host.query(selector).resize(card_width, card_height)
clock.tick()

# ==========================================
# SMALL MULTIPLES
# ==========================================
titles = {
    "#scatter-chart": "Energy use vs star rating",
    "#donut-chart": "Average energy by screen technology",
    "#bar-chart": "55\" TVs: mean energy by screen technology",
    "#line-chart": "Average spot price",
}

col1, col2 = st.columns(2)
for i, (selector, title) in enumerate(titles.items()):
    container = host.query(selector)
    with (col1 if i % 2 == 0 else col2):
        st.subheader(title)
        if selector in dashboard.errors:
            st.error(str(dashboard.errors[selector]))
            continue
        legend = next(iter(container.legends.values()), [])
        render_chart_card(container.to_svg(), card_height, legend, ready=container.ready,
                          file_name=selector.lstrip("#"))

dashboard.destroy()

st.markdown("---")
st.caption("chartkit v1.0")

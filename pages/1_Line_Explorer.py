import asyncio

import streamlit as st

from chartkit.charts import focus_marker, init_line_chart
from chartkit.log import setup_logging
from chartkit.nav import render_sidebar
from chartkit.render_scheduler import ManualFrameClock, RenderScheduler
from chartkit.settings import LINE_SOURCE, data_source
from chartkit.surface import Container, Host, render_svg
from chartkit.viewer import render_chart_card

setup_logging()

st.set_page_config(layout="wide", page_title="Line Explorer")
render_sidebar()

st.sidebar.title("⚙️ Calibration")
st.sidebar.markdown("### Dimensions")
width = st.sidebar.number_input("Width (px)", 340, 1600, 900, step=20)
height = st.sidebar.number_input("Height (px)", 320, 900, 420, step=20)

st.title("📈 Average spot price")

# ==========================================
# MOUNT, LOAD, RENDER
# ==========================================
host = Host()
container = host.mount(Container("#line-chart", width, height))
clock = ManualFrameClock()
errors = []

chart = init_line_chart(host, "#line-chart", data_source(LINE_SOURCE), RenderScheduler(clock, host.observe_size),
                        on_error=errors.append)
asyncio.run(chart.load())
clock.tick()

if errors:
    st.error(str(errors[0]))
    st.stop()

# ==========================================
# POINTER INSPECTION
# ==========================================
_, _, inner_w, _ = chart.config.plot_size(width, height)
pointer_x = st.slider("Pointer position (px from the left of the plot)", 0.0, float(inner_w),
                      float(inner_w) / 2, step=1.0)

focus = chart.inspect(pointer_x)
shapes = list(container.shapes)
if focus is not None:
    shapes += focus_marker(focus)
    c1, c2 = st.columns(2)
    c1.metric("Year", focus.record.attrs["year"])
    c2.metric("Average price ($ per MWh)", f"{focus.record.value:.0f}")

render_chart_card(render_svg(shapes, *container.canvas_size), height, ready=container.ready, file_name="line-chart")

chart.destroy()

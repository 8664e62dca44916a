import html
from typing import List, Optional, Sequence, Tuple

import streamlit.components.v1 as components


def legend_html(entries: Sequence[Tuple[str, str]]) -> str:
    items = []
    for label, colour in entries:
        items.append(
            f'<span class="chart-legend__item">'
            f'<span class="chart-legend__swatch" style="background:{html.escape(colour)}"></span>'
            f'{html.escape(label)}</span>'
        )
    return f'<div class="chart-legend">{"".join(items)}</div>'


def render_chart_card(svg_string: str, height_px: float, legend: Optional[List[Tuple[str, str]]] = None,
                      ready: bool = True, file_name: str = "chart"):
    """
    Shows one chart's SVG with its legend and an SVG download button.
    While `ready` is False the card shows the loading placeholder instead.
    """
    svg_safe = svg_string.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
    legend_block = legend_html(legend or [])
    body = "<div class='chart-placeholder'>Loading…</div>" if not ready else "<div id='svg-wrapper'></div>"

    html_code = f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <style>
            body {{ margin: 0; padding: 0; background: white;
                    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; }}
            #svg-wrapper svg {{ display: block; width: 100%; height: {height_px}px; }}
            .chart-placeholder {{ height: {height_px}px; display: flex; align-items: center;
                                  justify-content: center; color: #94a3b8; }}
            .chart-legend {{ display: flex; gap: 14px; flex-wrap: wrap; padding: 6px 10px; font-size: 13px; color: #334155; }}
            .chart-legend__item {{ display: inline-flex; align-items: center; gap: 6px; }}
            .chart-legend__swatch {{ width: 12px; height: 12px; border-radius: 3px; display: inline-block; }}
            .btn {{ background-color: #2196F3; border: none; color: white; padding: 4px 10px;
                    font-size: 12px; cursor: pointer; border-radius: 4px; margin: 4px 10px; }}
        </style>
    </head>
    <body>
        {body}
        {legend_block}
        <button class="btn" onclick="downloadSVG()" title="Download Scalable Vector">SVG</button>
        <script>
            const rawSvg = `{svg_safe}`;
            const wrapper = document.getElementById('svg-wrapper');
            if (wrapper && rawSvg) {{
                const doc = new DOMParser().parseFromString(rawSvg, "image/svg+xml");
                wrapper.prepend(doc.documentElement);
            }}

            function downloadSVG() {{
                const blob = new Blob([rawSvg], {{type: "image/svg+xml;charset=utf-8"}});
                const link = document.createElement("a");
                link.href = URL.createObjectURL(blob);
                link.download = "{html.escape(file_name)}.svg";
                link.click();
            }}
        </script>
    </body>
    </html>
    """

    components.html(html_code, height=int(height_px) + 80, scrolling=False)

"""
chartkit: small-multiple statistical charts (bar, donut, line, scatter)
rendered from tabular data into resizable SVG containers.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]

"""Renderer exports."""

from stubforge.render.renderer import HEADER, render_unit
from stubforge.render.writer import CodeWriter

__all__ = ["HEADER", "CodeWriter", "render_unit"]

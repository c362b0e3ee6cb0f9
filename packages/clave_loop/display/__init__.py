"""Clave Loop Display"""

from .terminal_renderer import TerminalRenderer, build_row, cell_width

__all__ = ["TerminalRenderer", "build_row", "cell_width"]

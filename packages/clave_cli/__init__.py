"""Clave CLI - command-line interface for claveloop"""

__version__ = "0.1.0"

"""Paquete raíz de judistats."""

__version__ = "0.1.0"

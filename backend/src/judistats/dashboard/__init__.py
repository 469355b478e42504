"""Consultas del tablero sobre los CSV mensuales."""

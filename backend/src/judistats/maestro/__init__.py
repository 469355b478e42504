"""Pipeline maestro: Google Sheets -> base relacional -> datos de gráfico."""

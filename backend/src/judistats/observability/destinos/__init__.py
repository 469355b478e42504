"""Destinos de eventos del bus de observabilidad."""

"""Servicios del core: composición de peticiones y el cliente de recursos."""

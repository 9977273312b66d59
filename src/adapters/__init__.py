"""Adaptadores de I/O: transporte httpx y serialización Pydantic.

Cada módulo implementa un Protocol de `core.interfaces`.
"""

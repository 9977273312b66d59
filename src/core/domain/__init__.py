"""Modelos y entidades del dominio.

Por qué:
- Aquí viven los valores inmutables con los que se direcciona un recurso
  (locators, query params, sesión) y la descripción de cada petición.
- El dominio no conoce httpx ni la CLI: solo conceptos del contrato REST.
"""

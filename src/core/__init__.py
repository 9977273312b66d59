"""Core del cliente REST: dominio, contratos, servicios y configuración.

El core no conoce httpx ni la CLI; solo depende de los Protocol de
`core.interfaces`.
"""

"""Configuración del cliente REST.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el adaptador HTTP y la CLI lean la misma config.

La URL base, la API key y la contraseña deben vivir en un fichero de
configuración protegido (`.env` del proyecto o del usuario), nunca en código.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "rest-resource"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class ClientSettings(BaseSettings):
    """Configuración del endpoint REST.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="REST_RESOURCE_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: HttpUrl = Field(
        default="http://localhost:8080",
        validate_default=True,
        description="URL base del servicio (p.ej. https://api.example.com).",
    )
    api_key: str | None = Field(
        default=None,
        description="Usuario para Basic Auth (api-key).",
    )
    api_password: str | None = Field(
        default=None,
        description="Contraseña para Basic Auth (api-password).",
    )
    disable_certificate_validation: bool = Field(
        default=False,
        description="No validar certificados TLS (solo para certificados autofirmados).",
    )
    with_logging: bool = Field(
        default=False,
        description="Registrar cada petición/respuesta en el logger del adaptador HTTP.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="rest-resource/0.1",
        min_length=1,
        description="User-Agent enviado en cada petición.",
    )

    @property
    def has_credentials(self) -> bool:
        return self.api_key is not None and self.api_password is not None

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class GeneralSettings(BaseSettings):
    """Configuracion general"""

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Nivel de logging: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


class ColoreSettings(BaseSettings):
    """Configuracion de conexion con el servicio Colore"""

    COLORE_BASE_URI: str = Field(
        default="http://localhost:9240",
        description="URL base del servicio Colore"
    )
    COLORE_APP: Optional[str] = Field(
        default=None,
        description="Namespace (app) por defecto bajo el cual se guardan los documentos"
    )
    COLORE_USER_AGENT: str = Field(
        default="Colore Client",
        description="User Agent enviado en cada request"
    )
    COLORE_BACKTRACE: bool = Field(
        default=False,
        description="Pedir backtraces de debug a Colore en cada llamada"
    )
    COLORE_TIMEOUT: float = Field(
        default=60.0,
        description="Timeout en segundos para cada request"
    )

    @field_validator("COLORE_BASE_URI")
    @classmethod
    def validate_base_uri(cls, v):
        """Remover trailing slash de la URL"""
        if v.endswith("/"):
            return v.rstrip("/")
        return v

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


class LoggingSettings(BaseSettings):
    """Configuracion de logging"""

    LOG_FILE: Optional[str] = Field(
        default=None,
        description="Archivo de log (si es None solo se loguea a consola)"
    )
    LOG_RETENTION_DAYS: int = Field(
        default=7,
        description="Dias de logs rotados a mantener"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


class Settings(BaseSettings):
    """
    Clase principal que agrupa todas las configuraciones
    Uso: from colore.config.settings import settings
         settings.COLORE_BASE_URI, settings.LOG_LEVEL, etc
    """

    # Subconfigurations
    general: GeneralSettings = GeneralSettings()
    colore: ColoreSettings = ColoreSettings()
    logging: LoggingSettings = LoggingSettings()

    # Shortcuts para acceso directo
    @property
    def LOG_LEVEL(self) -> str:
        return self.general.LOG_LEVEL

    @property
    def COLORE_BASE_URI(self) -> str:
        return self.colore.COLORE_BASE_URI

    @property
    def COLORE_APP(self) -> Optional[str]:
        return self.colore.COLORE_APP

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Singleton instance
@lru_cache()
def get_settings() -> Settings:
    """
    Obtener instancia singleton de Settings
    Uso: from colore.config.settings import get_settings
         settings = get_settings()
    """
    return Settings()


# Instancia global (para imports directos)
settings = get_settings()

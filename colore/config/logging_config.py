"""
Configuración de logging para aplicaciones que usan el cliente Colore.

La librería solo emite logs via logging.getLogger(...); quien la integra
decide a dónde van llamando a setup_logging():
- Consola (stdout) siempre
- Archivo con rotación diaria si LOG_FILE está configurado
"""

import logging
import sys
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

from colore.config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(service_name: str = "colore", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configura el logger raíz para un servicio.

    Args:
        service_name: Nombre del servicio (solo para el mensaje inicial)
        log_file: Ruta del archivo de log. Si es None se usa LOG_FILE de settings;
                  si ambos son None no se crea handler de archivo.

    Returns:
        Logger raíz configurado
    """
    log_level = getattr(logging, settings.general.LOG_LEVEL.upper(), logging.INFO)
    log_file = log_file or settings.logging.LOG_FILE

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Limpiar handlers existentes (evita duplicados en reloads)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Handler 1: Consola (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Handler 2: Archivo con rotación diaria
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=log_path,
            when="midnight",
            interval=1,
            backupCount=settings.logging.LOG_RETENTION_DAYS,
            encoding="utf-8",
            utc=False
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        # Sufijo para archivos rotados: colore.log.2026-01-23
        file_handler.suffix = "%Y-%m-%d"

        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging iniciado [{service_name}] → {log_file or 'stdout'}")

    return root_logger

"""
Colore - Cliente para el servicio de almacenamiento y conversión de documentos.

Componentes:
- http/: ColoreClient, construcción y envío de requests
- error_mapper: Traducción de respuestas fallidas a errores tipados
- errors: Jerarquía de excepciones (ColoreUnavailable, ClientError, ServerError)
- tempfiles: Staging de uploads en archivos temporales
"""

import logging

from colore.constants import CURRENT
from colore.errors import (
    ErrorKind,
    ColoreError,
    ColoreUnavailable,
    APIError,
    ClientError,
    ServerError,
)
from colore.error_mapper import ErrorMapper
from colore.http import ColoreClient

__version__ = "0.1.0"

# Sin salida salvo que la aplicación configure logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CURRENT",
    "ColoreClient",
    # Errors
    "ErrorKind",
    "ErrorMapper",
    "ColoreError",
    "ColoreUnavailable",
    "APIError",
    "ClientError",
    "ServerError",
]

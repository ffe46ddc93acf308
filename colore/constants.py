from enum import Enum


# Nombre de la version "actual" de un documento
CURRENT = "current"


class HttpMethod(str, Enum):
    """Metodos HTTP usados contra Colore"""
    
    HEAD = "HEAD"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    
    @property
    def sends_form(self) -> bool:
        """Los parametros van en el body (form/multipart) y no en el query string"""
        return self in (HttpMethod.POST, HttpMethod.PUT)


class ResponseKind(str, Enum):
    """Tipo de payload que espera cada llamada"""
    
    JSON = "json"      # Envelope decodificado (dict)
    BINARY = "binary"  # Bytes crudos, sin tocar


# Mensajes de error

UNAVAILABLE_MESSAGE = "The Colore storage system is unavailable"
UNKNOWN_ERROR_MESSAGE = "Unknown error (see response_body)"

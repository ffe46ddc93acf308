"""
Colore Client - Cliente HTTP para el servicio de documentos Colore.

Maneja la comunicación con los endpoints de Colore:
- HEAD   /                                             : ping
- PUT    /document/{app}/{doc_id}/{filename}           : crear documento
- POST   /document/{app}/{doc_id}/{filename}           : nueva versión
- POST   /document/{app}/{doc_id}/title/{title}        : cambiar título
- POST   /document/{app}/{doc_id}/{version}/{filename}/{action} : pedir conversión
- DELETE /document/{app}/{doc_id}[/{version}]          : borrar documento o versión
- GET    /document/{app}/{doc_id}[/{version}/{filename}] : info o contenido
- POST   /convert                                      : conversión síncrona
"""

import logging
import mimetypes
import os
import uuid
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

import httpx

from colore.config.settings import settings
from colore.constants import CURRENT, HttpMethod, ResponseKind, UNKNOWN_ERROR_MESSAGE
from colore.error_mapper import ErrorMapper
from colore.errors import ServerError
from colore.tempfiles import Content, staged_content

DEFAULT_LOGGER_NAME = "colore.client"

FilePart = Tuple[str, BinaryIO, str]


class ColoreClient:
    """Cliente síncrono para Colore. Cada operación hace exactamente un request."""

    # Endpoints
    DOCUMENT_ENDPOINT = "/document"
    CONVERT_ENDPOINT = "/convert"
    FILE_FIELD = "file"

    def __init__(
        self,
        app: Optional[str] = None,
        base_uri: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        backtrace: Optional[bool] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Inicializar cliente. Los valores no indicados se toman de settings.

        Args:
            app: Namespace bajo el cual se guardan todos los documentos (por defecto COLORE_APP)
            base_uri: URL base de Colore (http:// o https://)
            logger: Logger para trazar requests/responses (por defecto no emite nada
                    salvo que la aplicación configure logging)
            backtrace: Pedir backtraces de debug a Colore en cada llamada
            user_agent: Header User-Agent
            timeout: Timeout en segundos por request
            transport: Transport httpx alternativo (tests, proxies)
        """
        app = app or settings.colore.COLORE_APP
        if not app:
            raise ValueError("app es obligatorio (argumento o COLORE_APP) y no puede estar vacío")

        base_uri = (base_uri or settings.colore.COLORE_BASE_URI).rstrip("/")
        if httpx.URL(base_uri).scheme not in ("http", "https"):
            raise ValueError(f"base_uri inválida, falta http:// o https://: {base_uri!r}")

        self.app = app
        self.base_uri = base_uri
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.backtrace = settings.colore.COLORE_BACKTRACE if backtrace is None else backtrace
        self.user_agent = user_agent or settings.colore.COLORE_USER_AGENT
        self.timeout = settings.colore.COLORE_TIMEOUT if timeout is None else timeout

        self.error_mapper = ErrorMapper()
        self._http = httpx.Client(
            base_url=self.base_uri,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            transport=transport
        )

    def __enter__(self) -> "ColoreClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Cerrar el cliente httpx subyacente."""
        self._http.close()

    @staticmethod
    def generate_doc_id() -> str:
        """Generar un doc_id razonablemente único para la app (UUID4)."""
        return str(uuid.uuid4())

    def ping(self) -> bool:
        """
        Probar la conexión con Colore.

        Returns:
            True si Colore responde con éxito

        Raises:
            ColoreUnavailable si no se puede conectar, ClientError/ServerError si responde con error
        """
        self._send_request(HttpMethod.HEAD, "/")
        return True

    def create_document(
        self,
        doc_id: str,
        filename: str,
        content: Content,
        title: Optional[str] = None,
        author: Optional[str] = None,
        actions: Optional[List[str]] = None,
        callback_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Guardar un documento nuevo en Colore.

        Args:
            doc_id: Identificador único del documento
            filename: Nombre del archivo (se descarta cualquier directorio)
            content: bytes, str o stream legible con el contenido
            title: Descripción corta opcional
            author: Autor opcional
            actions: Conversiones a ejecutar una vez guardado (ej: ["ocr", "ocr_text"])
            callback_url: URL donde Colore enviará el resultado de cada conversión

        Returns:
            Envelope estándar (status, description, path)

        Raises:
            ClientError si ya existe un documento con ese doc_id
        """
        params = self._build_params(
            title=title,
            author=author,
            actions=actions,
            callback_url=callback_url
        )
        base_filename = os.path.basename(filename)
        path = f"{self._url_for_base(doc_id)}/{self._encode_param(base_filename)}"

        with staged_content(content) as fh:
            return self._send_request(
                HttpMethod.PUT,
                path,
                params,
                ResponseKind.JSON,
                file=self._file_part(base_filename, fh)
            )

    def update_document(
        self,
        doc_id: str,
        filename: str,
        content: Content,
        author: Optional[str] = None,
        actions: Optional[List[str]] = None,
        callback_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Actualizar un documento: crea una nueva versión con el archivo recibido.

        Args:
            doc_id: Identificador del documento
            filename: Nombre del archivo (se descarta cualquier directorio)
            content: bytes, str o stream legible con el contenido
            author: Autor opcional de la nueva versión
            actions: Conversiones a ejecutar una vez guardado
            callback_url: URL donde Colore enviará el resultado de cada conversión

        Returns:
            Envelope estándar

        Raises:
            ClientError si el documento no existe
        """
        params = self._build_params(
            author=author,
            actions=actions,
            callback_url=callback_url
        )
        base_filename = os.path.basename(filename)
        path = f"{self._url_for_base(doc_id)}/{self._encode_param(base_filename)}"

        with staged_content(content) as fh:
            return self._send_request(
                HttpMethod.POST,
                path,
                params,
                ResponseKind.JSON,
                file=self._file_part(base_filename, fh)
            )

    def update_title(self, doc_id: str, title: str) -> Dict[str, Any]:
        """Cambiar el título de un documento. ClientError si no existe."""
        path = f"{self._url_for_base(doc_id)}/title/{self._encode_param(title)}"
        return self._send_request(HttpMethod.POST, path, self._build_params(), ResponseKind.JSON)

    def request_conversion(
        self,
        doc_id: str,
        filename: str,
        action: str,
        version: str = CURRENT,
        callback_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Pedir una conversión asíncrona de una versión guardada.

        Colore responde de inmediato (status 202); el resultado se envía
        a callback_url cuando termina.
        """
        params = self._build_params(callback_url=callback_url)
        path = f"{self.path_for(doc_id, filename, version)}/{action}"
        return self._send_request(HttpMethod.POST, path, params, ResponseKind.JSON)

    def delete_document(self, doc_id: str) -> Dict[str, Any]:
        """Borrar un documento con todas sus versiones."""
        return self._send_request(
            HttpMethod.DELETE,
            self._url_for_base(doc_id),
            self._build_params(),
            ResponseKind.JSON
        )

    def delete_version(self, doc_id: str, version: str) -> Dict[str, Any]:
        """
        Borrar una versión de un documento.

        La versión actual no se puede borrar: primero hay que apuntar
        "current" a otra versión (Colore responde con ClientError).
        """
        return self._send_request(
            HttpMethod.DELETE,
            f"{self._url_for_base(doc_id)}/{version}",
            self._build_params(),
            ResponseKind.JSON
        )

    def get_document(self, doc_id: str, filename: str, version: str = CURRENT) -> bytes:
        """
        Descargar el contenido de un documento.

        Para servir archivos es preferible acceder directo via un proxy
        (nginx) usando path_for(), sin cargar a Colore.

        Returns:
            Bytes del archivo, sin modificar
        """
        return self._send_request(
            HttpMethod.GET,
            self.path_for(doc_id, filename, version),
            self._build_params(),
            ResponseKind.BINARY
        )

    def get_document_info(self, doc_id: str) -> Dict[str, Any]:
        """Obtener info de un documento (current_version, versions, title, ...)."""
        return self._send_request(
            HttpMethod.GET,
            self._url_for_base(doc_id),
            self._build_params(),
            ResponseKind.JSON
        )

    def convert(self, content: Content, action: str, language: Optional[str] = "en") -> bytes:
        """
        Conversión síncrona de un archivo que no se guarda en Colore.

        Args:
            content: bytes, str o stream legible
            action: Conversión a ejecutar (ej: "ocr_text")
            language: Idioma del archivo, solo relevante para OCR

        Returns:
            Bytes del resultado

        Raises:
            ClientError si no hay tarea para esa acción y ese tipo de contenido
        """
        params = self._build_params(action=action, language=language)

        # Sin nombre de archivo el part va como application/octet-stream; Colore detecta el tipo real
        with staged_content(content) as fh:
            return self._send_request(
                HttpMethod.POST,
                self.CONVERT_ENDPOINT,
                params,
                ResponseKind.BINARY,
                file=self._file_part(os.path.basename(fh.name), fh)
            )

    def path_for(self, doc_id: str, filename: str, version: str = CURRENT) -> str:
        """
        Ruta de un archivo guardado: /document/{app}/{doc_id}/{version}/{basename}

        No hace I/O; sirve también para armar URLs de acceso directo.
        """
        return f"{self._url_for_base(doc_id)}/{version}/{os.path.basename(filename)}"

    def _url_for_base(self, doc_id: str) -> str:
        return f"{self.DOCUMENT_ENDPOINT}/{self.app}/{doc_id}"

    def _build_params(self, **options: Any) -> Dict[str, Any]:
        """
        Armar parámetros de la operación.

        Las opciones en None se omiten; las listas de acciones van como "actions[]".
        """
        params: Dict[str, Any] = {}
        for name, value in options.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                params[f"{name}[]"] = [str(v) for v in value]
            else:
                params[name] = value
        if self.backtrace:
            params["backtrace"] = "true"
        return params

    def _file_part(self, filename: str, fh: BinaryIO) -> FilePart:
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return (filename, fh, content_type)

    @staticmethod
    def _encode_param(param: str) -> str:
        # Espacios como %20, no como "+"
        return quote(param, safe="")

    def _send_request(
        self,
        method: HttpMethod,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        expect: ResponseKind = ResponseKind.BINARY,
        file: Optional[FilePart] = None
    ) -> Union[Dict[str, Any], bytes]:
        """
        Ejecutar un request y decodificar según lo que espera la llamada.

        Args:
            method: Método HTTP
            path: Ruta relativa a base_uri
            params: Query string (HEAD/GET/DELETE) o campos del form (POST/PUT)
            expect: JSON (envelope) o BINARY (bytes crudos)
            file: Parte de archivo para multipart (nombre, archivo, content-type)

        Returns:
            dict si expect es JSON, bytes si es BINARY

        Raises:
            ColoreUnavailable, ClientError o ServerError
        """
        params = params or {}
        self.logger.debug(f"Send {method.value}: {path}")
        self.logger.debug(f"  params: {params!r}")

        request_kwargs: Dict[str, Any] = {}
        if method.sends_form:
            request_kwargs["data"] = params
            if file is not None:
                request_kwargs["files"] = {self.FILE_FIELD: file}
        elif params:
            request_kwargs["params"] = params

        try:
            response = self._http.request(method.value, path, **request_kwargs)
        except httpx.TransportError as e:
            raise self.error_mapper.from_transport_error(e) from e

        if response.is_success:
            if expect == ResponseKind.JSON:
                self.logger.debug(f"  received : {response.text}")
                try:
                    return response.json()
                except ValueError as e:
                    raise ServerError(0, UNKNOWN_ERROR_MESSAGE, None, response.content) from e

            self.logger.debug(f"  received : [BINARY {len(response.content)} bytes]")
            return response.content

        self.logger.debug(f"  received {response.status_code}: {response.reason_phrase}")
        raise self.error_mapper.from_response(response.content)

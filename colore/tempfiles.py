"""
Staging de contenido en archivos temporales.

Los uploads se copian a un archivo en disco en lugar de leerse completos
en memoria, de modo que un stream de cientos de MB no infla el proceso.

Uso:
    from colore.tempfiles import staged_content

    with staged_content(open("grande.pdf", "rb")) as fh:
        client.post(url, files={"file": ("grande.pdf", fh)})
    # Al salir del bloque el archivo temporal ya no existe
"""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Union

logger = logging.getLogger(__name__)

# Tamaño de bloque para copiar streams
COPY_CHUNK_SIZE = 1024 * 1024

Content = Union[bytes, bytearray, memoryview, str, BinaryIO]


def _write_content(content: Content, target: BinaryIO) -> None:
    """Escribir el contenido (bytes, str o stream legible) en el archivo destino."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        target.write(content)
    elif isinstance(content, str):
        target.write(content.encode("utf-8"))
    elif hasattr(content, "read"):
        shutil.copyfileobj(content, target, COPY_CHUNK_SIZE)
    else:
        raise TypeError(
            f"Contenido no soportado: {type(content).__name__} "
            "(se esperaba bytes, str o un stream legible)"
        )


@contextmanager
def staged_content(content: Content, prefix: str = "colore") -> Iterator[BinaryIO]:
    """
    Copiar el contenido a un archivo temporal y entregarlo abierto para lectura.

    El archivo se cierra y se elimina al salir del bloque, haya error o no.

    Args:
        content: bytes, str (se codifica en UTF-8) o stream binario legible
        prefix: Prefijo del nombre del archivo temporal

    Yields:
        Archivo temporal abierto en modo "rb", posicionado al inicio
    """
    fd, path = tempfile.mkstemp(prefix=prefix)
    try:
        with os.fdopen(fd, "wb") as tmp:
            _write_content(content, tmp)

        logger.debug(f"Contenido preparado en {path} ({os.path.getsize(path)} bytes)")

        with open(path, "rb") as staged:
            yield staged
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass

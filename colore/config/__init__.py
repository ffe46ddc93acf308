"""
Configuración del cliente Colore (pydantic-settings) y setup de logging.

Uso:
    from colore.config.settings import settings

    settings.colore.COLORE_BASE_URI
"""

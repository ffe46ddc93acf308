"""
Subpaquete HTTP - Cliente para comunicación con Colore.

Uso:
    from colore.http import ColoreClient
    
    with ColoreClient(app="myapp", base_uri="http://localhost:9240") as client:
        doc_id = client.generate_doc_id()
        client.create_document(doc_id, "informe.pdf", open("informe.pdf", "rb"))
        data = client.get_document(doc_id, "informe.pdf")
"""

from colore.http.colore_client import ColoreClient

__all__ = [
    "ColoreClient",
]

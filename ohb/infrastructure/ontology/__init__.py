"""Ontology infrastructure - rdflib-based document loading."""

from .rdflib_loader import RdflibDocumentLoader, ONTOLOGY_FILE_SUFFIXES

__all__ = [
    "RdflibDocumentLoader",
    "ONTOLOGY_FILE_SUFFIXES",
]

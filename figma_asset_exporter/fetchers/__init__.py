"""Fetchers package for retrieving Figma documents and render links."""

from .document_fetcher import DocumentFetcher, find_exportable_nodes
from .render_link_fetcher import IMPORT_BATCH_SIZE, RenderLinkFetcher, chunk

__all__ = [
    'DocumentFetcher',
    'find_exportable_nodes',
    'RenderLinkFetcher',
    'chunk',
    'IMPORT_BATCH_SIZE'
]

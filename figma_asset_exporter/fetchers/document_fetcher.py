"""Fetching of Figma documents and selection of exportable nodes."""

import dataclasses
import logging
from typing import Iterable, List, Optional

from ..figma_client import FigmaClient
from ..models import DocumentNode, ProjectDocument
from ..name_resolver import UniqueNameResolver


class DocumentFetcher:
    """Retrieves the typed document tree of a Figma project."""

    def __init__(self, client: FigmaClient, logger: Optional[logging.Logger] = None):
        """
        Initialize document fetcher.

        Args:
            client: Authenticated FigmaClient for the current run
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.client = client
        self.logger = logger or logging.getLogger('figma_asset_exporter.fetchers.document')

    def fetch_document(self, project_id: str) -> ProjectDocument:
        """
        Fetch document info from the Figma API.

        A single attempt is made; AuthError, NotFoundError and NetworkError
        from the client propagate unchanged.

        Args:
            project_id: ID of the Figma file

        Returns:
            Decoded ProjectDocument
        """
        self.logger.info(f"Fetching Figma file '{project_id}'")
        document = ProjectDocument.from_dict(self.client.get_json(f"files/{project_id}"))
        self.logger.info(
            f"Fetched '{document.name}' (version {document.version}, "
            f"{document.count_nodes()} nodes)"
        )
        return document


def find_exportable_nodes(
    nodes: Iterable[DocumentNode],
    name_resolver: UniqueNameResolver
) -> List[DocumentNode]:
    """
    Find nodes whose type is exportable or that carry export settings.

    The walk is depth-first pre-order. A selected node is copied with its name
    resolved through ``name_resolver``; its children are still visited, so a
    Frame nested in a Frame yields two entries. The resolver is shared across
    the whole tree.

    Args:
        nodes: Top-level nodes to walk (usually the document's pages)
        name_resolver: Resolver shared for the whole export run

    Returns:
        Selected node copies in traversal order
    """
    result: List[DocumentNode] = []
    stack = list(reversed(list(nodes)))

    while stack:
        node = stack.pop()
        if node.is_exportable():
            result.append(dataclasses.replace(node, name=name_resolver.get(node.name)))
        stack.extend(reversed(node.children))

    return result


__all__ = ['DocumentFetcher', 'find_exportable_nodes']

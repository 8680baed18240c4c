"""Batched retrieval of SVG render links from the Figma images endpoint."""

import dataclasses
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence, TypeVar

from ..exceptions import EmptyProjectError
from ..figma_client import FigmaClient
from ..models import DocumentNode, ImageResponse

T = TypeVar('T')

IMPORT_BATCH_SIZE = 100
EMPTY_PROJECT_MESSAGE = (
    "It looks like the Figma document you imported doesn't have any exportable elements. "
    "Try adding some and re-syncing."
)


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into contiguous lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class RenderLinkFetcher:
    """
    Maps nodes to links of their SVG rendering in the cloud.

    Node ids are split into batches of at most ``batch_size``; one images
    request per batch runs on a thread pool. The join is first-failure-wins:
    when a batch fails, batches not yet started are cancelled and the error
    is re-raised. Batches already in flight run to completion but their
    results are discarded.
    """

    def __init__(
        self,
        client: FigmaClient,
        batch_size: int = IMPORT_BATCH_SIZE,
        max_workers: int = 4,
        logger: Optional[logging.Logger] = None
    ):
        if not 1 <= batch_size <= IMPORT_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {IMPORT_BATCH_SIZE}")
        self.client = client
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger('figma_asset_exporter.fetchers.render_links')

    def fetch_batch(self, ids: List[str], project_id: str) -> Dict[str, Optional[str]]:
        """Request SVG render links for one batch of node ids."""
        params = {
            'format': 'svg',
            'ids': ','.join(ids),
            'svg_include_id': 'true'
        }
        response = ImageResponse.from_dict(self.client.get_json(f"images/{project_id}", params=params))

        if response.err:
            self.logger.warning(f"Figma reported an error rendering {len(ids)} node(s): {response.err}")

        missing = [node_id for node_id in ids if not response.images.get(node_id)]
        if missing:
            self.logger.debug(f"No rendering returned for {len(missing)} node(s): {missing[:10]}")

        return response.images

    def get_render_links(self, nodes: Sequence[DocumentNode], project_id: str) -> List[DocumentNode]:
        """
        Populate ``render_url`` on every node.

        Args:
            nodes: Exportable nodes, in traversal order
            project_id: ID of the Figma file

        Returns:
            Nodes in the same order with ``render_url`` set (None when Figma
            returned no rendering for a node)

        Raises:
            EmptyProjectError: If ``nodes`` is empty; no request is made
        """
        batches = chunk([node.id for node in nodes], self.batch_size)
        if not batches:
            raise EmptyProjectError(EMPTY_PROJECT_MESSAGE)

        self.logger.info(f"Requesting render links for {len(nodes)} node(s) in {len(batches)} batch(es)")

        images: Dict[str, Optional[str]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.fetch_batch, batch, project_id) for batch in batches]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

            for future in futures:
                if future in done and future.exception() is not None:
                    for pending in not_done:
                        pending.cancel()
                    raise future.exception()

            # Submission order keeps the merge deterministic.
            for future in futures:
                images.update(future.result())

        return [dataclasses.replace(node, render_url=images.get(node.id)) for node in nodes]


__all__ = ['chunk', 'RenderLinkFetcher', 'IMPORT_BATCH_SIZE', 'EMPTY_PROJECT_MESSAGE']

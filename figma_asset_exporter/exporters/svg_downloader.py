"""SVG downloader placing rendered nodes into per-type folders."""

import logging
import re
import sys
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tqdm import tqdm

from ..exceptions import DownloadError
from ..figma_client import FigmaClient
from ..logger import ProgressTracker
from ..models import DocumentNode, NodeType

FOLDERS: Dict[NodeType, str] = {
    NodeType.SLICE: 'slices',
    NodeType.GROUP: 'groups',
    NodeType.COMPONENT: 'groups',
    NodeType.FRAME: 'frames',
}
DEFAULT_FOLDER = FOLDERS[NodeType.SLICE]

ILLEGAL_CHARACTERS = re.compile(r'[/?<>\\:*|"]')
CONTROL_CHARACTERS = re.compile(r'[\x00-\x1f\x80-\x9f]')
RESERVED_NAMES = re.compile(r'^\.+$')
WINDOWS_RESERVED_NAMES = re.compile(r'^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$', re.IGNORECASE)
WINDOWS_TRAILING = re.compile(r'[. ]+$')
MAX_FILENAME_BYTES = 255
SVG_EXTENSION = '.svg'
MAX_STEM_BYTES = MAX_FILENAME_BYTES - len(SVG_EXTENSION)


def folder_for(node_type: NodeType) -> str:
    """Type folder for a node type, unmapped types land in slices."""
    return FOLDERS.get(node_type, DEFAULT_FOLDER)


def _truncate_utf8(text: str, max_bytes: int) -> str:
    encoded = text.encode('utf-8')
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


def sanitize_file_name(name: str, max_bytes: int = MAX_FILENAME_BYTES) -> str:
    """
    Strip characters that are unsafe in file names.

    Removes path separators and reserved punctuation, control characters,
    ``.``/``..``, Windows device names and trailing dots or spaces, then
    truncates to ``max_bytes`` UTF-8 bytes. May return an empty string.
    """
    sanitized = ILLEGAL_CHARACTERS.sub('', name)
    sanitized = CONTROL_CHARACTERS.sub('', sanitized)
    sanitized = RESERVED_NAMES.sub('', sanitized)
    sanitized = WINDOWS_RESERVED_NAMES.sub('', sanitized)
    sanitized = WINDOWS_TRAILING.sub('', sanitized)
    sanitized = _truncate_utf8(sanitized, max_bytes)
    # truncation can expose a trailing dot or space again
    return WINDOWS_TRAILING.sub('', sanitized)


def create_folders(root: Union[str, Path], folders: Mapping[Any, str] = FOLDERS) -> List[Path]:
    """Ensure every distinct folder in ``folders`` exists under ``root``."""
    root = Path(root)
    created = []
    for folder in sorted(set(folders.values())):
        path = root / folder
        path.mkdir(parents=True, exist_ok=True)
        created.append(path)
    return created


class SvgDownloader:
    """
    Downloads rendered SVGs for exportable nodes.

    Files land in ``<output_root>/<type folder>/<sanitized name>.svg``. Nodes
    without a render URL are skipped. Downloads run on a thread pool with a
    first-failure-wins join: the failing node's error is wrapped in
    DownloadError, queued downloads are cancelled and in-flight ones are left
    to finish.
    """

    def __init__(
        self,
        client: FigmaClient,
        max_workers: int = 4,
        show_progress: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        self.client = client
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.logger = logger or logging.getLogger('figma_asset_exporter.exporters.svg_downloader')

    def file_stem(self, node: DocumentNode) -> str:
        """Sanitized file name without extension, falling back to the node id."""
        stem = sanitize_file_name(node.name, MAX_STEM_BYTES)
        if not stem:
            stem = sanitize_file_name(node.id.replace(':', '-'), MAX_STEM_BYTES)
        return stem

    def target_path(self, node: DocumentNode, output_root: Union[str, Path]) -> Path:
        """Local path a node's SVG is written to."""
        return Path(output_root) / folder_for(node.type) / f"{self.file_stem(node)}{SVG_EXTENSION}"

    def plan_targets(self, nodes: Sequence[DocumentNode], output_root: Union[str, Path]) -> List[Path]:
        """
        Assign every node a distinct destination.

        Names that only collide after sanitizing or truncation get a ``-N``
        suffix that always survives the byte limit.
        """
        taken = set()
        targets = []
        for node in nodes:
            destination = self.target_path(node, output_root)
            stem = destination.stem
            counter = 0
            while destination in taken:
                counter += 1
                suffix = f"-{counter}"
                unique_stem = _truncate_utf8(stem, MAX_STEM_BYTES - len(suffix)) + suffix
                destination = destination.with_name(f"{unique_stem}{SVG_EXTENSION}")
            if counter:
                self.logger.debug(f"File name for '{node.name}' adjusted to {destination.name}")
            taken.add(destination)
            targets.append(destination)
        return targets

    def download_node(
        self,
        node: DocumentNode,
        output_root: Union[str, Path],
        destination: Optional[Path] = None
    ) -> Path:
        """Download one node's SVG, wrapping failures with the node name."""
        destination = destination or self.target_path(node, output_root)
        try:
            self.client.download_file(node.render_url, destination)
        except Exception as e:
            raise DownloadError(node.name, e) from e
        return destination

    def download_all(self, nodes: Sequence[DocumentNode], output_root: Union[str, Path]) -> Dict[str, Any]:
        """
        Download every node that has a render URL.

        Args:
            nodes: Nodes with ``render_url`` populated
            output_root: Export directory

        Returns:
            Statistics dictionary (total, downloaded, skipped, files)

        Raises:
            DownloadError: On the first failed download
        """
        downloadable = [node for node in nodes if node.render_url]
        skipped = len(nodes) - len(downloadable)
        if skipped:
            self.logger.info(f"Skipping {skipped} node(s) without a rendering")
        targets = self.plan_targets(downloadable, output_root)

        files: List[str] = []
        with ProgressTracker(len(downloadable), item_type="SVG files") as tracker:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(self.download_node, node, output_root, destination)
                    for node, destination in zip(downloadable, targets)
                ]
                self._join(futures, tracker)

                for future in futures:
                    files.append(str(future.result()))

        return {
            'total': len(nodes),
            'downloaded': len(files),
            'skipped': skipped,
            'files': files
        }

    def _join(self, futures: List, tracker: ProgressTracker) -> None:
        """Wait for all downloads, raising the first failure."""
        progress = None
        if self._should_show_progress() and futures:
            progress = tqdm(total=len(futures), desc="Downloading SVGs", leave=False)

        pending = set(futures)
        try:
            while pending:
                done, pending = wait(pending, return_when=FIRST_EXCEPTION)
                for future in done:
                    error = future.exception()
                    tracker.increment(success=error is None)
                    if progress is not None:
                        progress.update(1)
                    if error is not None:
                        for queued in pending:
                            queued.cancel()
                        self.logger.error(str(error))
                        raise error
        finally:
            if progress is not None:
                progress.close()

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        return self.show_progress and sys.stdout.isatty()


__all__ = [
    'FOLDERS',
    'DEFAULT_FOLDER',
    'folder_for',
    'sanitize_file_name',
    'create_folders',
    'SvgDownloader'
]

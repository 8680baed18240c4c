"""
Export orchestrator for coordinating the complete SVG export pipeline.

Stages run strictly in order and any failure aborts the run:
ValidateSource → ValidateToken → FetchDocument → CreateFolders →
FilterExportable → FetchRenderLinks → Download → Done.
Folders and files written before a failure are left in place.
"""

import logging
import time
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..config_loader import get_nested
from ..exceptions import FigmaExportError, InvalidSourceError, MissingTokenError, OutputError
from ..exporters.svg_downloader import FOLDERS, SvgDownloader, create_folders
from ..fetchers.document_fetcher import DocumentFetcher, find_exportable_nodes
from ..fetchers.render_link_fetcher import IMPORT_BATCH_SIZE, RenderLinkFetcher
from ..figma_client import FigmaClient
from ..models import DocumentNode, ProjectDocument, ProjectReference
from ..name_resolver import UniqueNameResolver
from ..project_url import can_parse, parse_project_reference
from .export_report import ExportReport

ProgressReporter = Callable[[str], None]


class ExportStage(Enum):
    """Pipeline stages, in execution order."""
    START = "start"
    VALIDATE_SOURCE = "validate_source"
    VALIDATE_TOKEN = "validate_token"
    FETCH_DOCUMENT = "fetch_document"
    CREATE_FOLDERS = "create_folders"
    FILTER_EXPORTABLE = "filter_exportable"
    FETCH_RENDER_LINKS = "fetch_render_links"
    DOWNLOAD = "download"
    DONE = "done"


class ExportOrchestrator:
    """Central coordinator sequencing fetch, filter, render-link and download stages."""

    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[FigmaClient] = None,
        logger: Optional[logging.Logger] = None,
        on_progress: Optional[ProgressReporter] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Configuration dictionary
            client: Optional pre-built FigmaClient; when omitted a client is
                created from config for each run and closed afterwards
            logger: Optional logger instance
            on_progress: Optional progress sink, defaults to logging at INFO
        """
        self.config = config
        self.client = client
        self.logger = logger or logging.getLogger('figma_asset_exporter.orchestrator')
        self.on_progress = on_progress or self.logger.info

        self.batch_size = get_nested(config, 'export.batch_size', IMPORT_BATCH_SIZE)
        self.max_workers = get_nested(config, 'export.max_workers', 4)
        self.show_progress = get_nested(config, 'export.progress_bars', True)

        self.current_stage = ExportStage.START

    @contextmanager
    def _stage(self, stage: ExportStage) -> Iterator[None]:
        """Record the running stage and tag escaping export errors with it."""
        self.current_stage = stage
        self.logger.debug(f"Entering stage: {stage.value}")
        try:
            yield
        except FigmaExportError as e:
            if e.stage is None:
                e.stage = stage.value
            self.logger.error(f"Export failed during {stage.value}: {e.message}")
            raise
        except OSError as e:
            self.logger.error(f"Export failed during {stage.value}: {e}")
            raise OutputError(
                f"Cannot write export output: {e.strerror or e}",
                path=str(e.filename) if e.filename is not None else None,
                stage=stage.value
            ) from e
        except Exception:
            self.logger.error(f"Unexpected error during {stage.value}", exc_info=True)
            raise

    def _validate_source(self, source: str) -> ProjectReference:
        with self._stage(ExportStage.VALIDATE_SOURCE):
            if not can_parse(source):
                raise InvalidSourceError('Invalid source file.')

            reference = parse_project_reference(source)
            if reference is None:
                raise InvalidSourceError(
                    'Error parsing data from the provided URL. '
                    'Please make sure it is a valid Figma project URL.'
                )
            return reference

    def _validate_token(self, token: Optional[str]) -> str:
        with self._stage(ExportStage.VALIDATE_TOKEN):
            token = token or get_nested(self.config, 'figma.api_token')
            if self.client is None and not token:
                raise MissingTokenError(
                    'Figma requires a token in order to perform the export. Please set one '
                    '(figma.api_token in the config, the FIGMA_TOKEN environment variable '
                    'or --token) and try again'
                )
            return token

    @contextmanager
    def _session(self, token: Optional[str]) -> Iterator[FigmaClient]:
        """Yield the injected client, or a client scoped to this run."""
        if self.client is not None:
            yield self.client
            return

        with FigmaClient.from_config(self.config, api_token=token) as client:
            yield client

    def _fetch_exportable(
        self,
        client: FigmaClient,
        reference: ProjectReference,
        out: Optional[Path]
    ) -> Tuple[ProjectDocument, List[DocumentNode]]:
        """Fetch the document, optionally create folders, and select exportable nodes."""
        with self._stage(ExportStage.FETCH_DOCUMENT):
            self.on_progress('Fetching information from Figma.')
            document = DocumentFetcher(client, self.logger).fetch_document(reference.id)

        if out is not None:
            with self._stage(ExportStage.CREATE_FOLDERS):
                create_folders(out, FOLDERS)

        with self._stage(ExportStage.FILTER_EXPORTABLE):
            nodes = find_exportable_nodes(document.document.children, UniqueNameResolver())
            self.logger.info(f"Found {len(nodes)} exportable node(s) in '{document.name}'")

        return document, nodes

    def export_svg(self, source: str, out: Optional[str] = None, token: Optional[str] = None) -> Dict[str, Any]:
        """
        Export SVG contents from ``source`` into the ``out`` folder.

        Args:
            source: Figma project URL (or .figma file reference)
            out: Output directory, defaults to export.output_directory
            token: Figma access token, overrides figma.api_token

        Returns:
            Export report dictionary

        Raises:
            FigmaExportError: Subclass identifying the failed stage
        """
        start_time = time.time()
        out_dir = Path(out or get_nested(self.config, 'export.output_directory', './figma-export'))

        reference = self._validate_source(source)
        token = self._validate_token(token)

        with self._session(token) as client:
            document, nodes = self._fetch_exportable(client, reference, out_dir)

            with self._stage(ExportStage.FETCH_RENDER_LINKS):
                self.on_progress('Fetching SVG elements from Figma.')
                fetcher = RenderLinkFetcher(
                    client,
                    batch_size=self.batch_size,
                    max_workers=self.max_workers,
                    logger=self.logger
                )
                nodes = fetcher.get_render_links(nodes, reference.id)

            with self._stage(ExportStage.DOWNLOAD):
                self.on_progress('Downloading SVG elements.')
                downloader = SvgDownloader(
                    client,
                    max_workers=self.max_workers,
                    show_progress=self.show_progress,
                    logger=self.logger
                )
                download_stats = downloader.download_all(nodes, out_dir)

        self.current_stage = ExportStage.DONE
        duration = time.time() - start_time
        self.logger.info(f"Export complete in {duration:.2f}s")

        return ExportReport(self.logger).generate_report(
            document=document,
            reference=reference,
            nodes=nodes,
            download_stats=download_stats,
            output_directory=str(out_dir),
            duration=duration
        )

    def preview(self, source: str, token: Optional[str] = None) -> List[DocumentNode]:
        """
        Dry run: list the nodes an export would write, without touching disk.

        Args:
            source: Figma project URL
            token: Figma access token, overrides figma.api_token

        Returns:
            Exportable nodes with resolved names
        """
        reference = self._validate_source(source)
        token = self._validate_token(token)

        with self._session(token) as client:
            _, nodes = self._fetch_exportable(client, reference, None)

        self.current_stage = ExportStage.DONE
        return nodes


__all__ = ['ExportOrchestrator', 'ExportStage', 'ProgressReporter']

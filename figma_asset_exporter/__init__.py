"""
Figma Asset Exporter

Syncs cloud-hosted Figma design assets into a local file tree grouped by
element type.

Features:
- Figma project URL parsing
- Selection of exportable nodes (slices, groups, components, frames and
  nodes with explicit export settings) across the whole document
- Deterministic de-duplication of node names
- Batched SVG render requests with concurrent fan-out
- Concurrent downloads into slices/, groups/ and frames/
- YAML configuration with ${ENV_VAR} substitution
- Colored console logging, optional rotating log file, JSON run reports

Basic Usage:
    export FIGMA_TOKEN=<personal access token>
    figma-export https://www.figma.com/file/<id>/<name> --out ./assets

Example Configuration (config.yaml):
    figma:
        api_token: ${FIGMA_TOKEN}

    export:
        output_directory: "./figma-export"
        batch_size: 100
        max_workers: 4
"""

__version__ = "1.0.0"
__description__ = "Export Figma slices, groups, components and frames as SVG files"

from .models import (
    DocumentNode,
    ImageResponse,
    NodeType,
    ProjectDocument,
    ProjectReference
)
from .exceptions import (
    AuthError,
    DownloadError,
    EmptyProjectError,
    FigmaApiError,
    FigmaExportError,
    InvalidSourceError,
    MissingTokenError,
    NetworkError,
    NotFoundError,
    OutputError,
    ResponseDecodeError
)
from .config_loader import ConfigLoader, get_nested
from .logger import setup_logging, ProgressTracker, log_section, log_config
from .figma_client import FigmaClient
from .name_resolver import UniqueNameResolver
from .project_url import can_parse, looks_like_source_file, parse_project_reference
from .fetchers import DocumentFetcher, RenderLinkFetcher, chunk, find_exportable_nodes
from .exporters import SvgDownloader, create_folders, sanitize_file_name
from .orchestrator import ExportOrchestrator, ExportReport, ExportStage

__all__ = [
    '__version__',
    '__description__',

    # Core data models
    'DocumentNode',
    'ImageResponse',
    'NodeType',
    'ProjectDocument',
    'ProjectReference',

    # Errors
    'FigmaExportError',
    'InvalidSourceError',
    'MissingTokenError',
    'EmptyProjectError',
    'OutputError',
    'DownloadError',
    'FigmaApiError',
    'AuthError',
    'NotFoundError',
    'NetworkError',
    'ResponseDecodeError',

    # Configuration
    'ConfigLoader',
    'get_nested',

    # Logging
    'setup_logging',
    'ProgressTracker',
    'log_section',
    'log_config',

    # Pipeline
    'FigmaClient',
    'UniqueNameResolver',
    'parse_project_reference',
    'looks_like_source_file',
    'can_parse',
    'DocumentFetcher',
    'find_exportable_nodes',
    'RenderLinkFetcher',
    'chunk',
    'SvgDownloader',
    'create_folders',
    'sanitize_file_name',
    'ExportOrchestrator',
    'ExportReport',
    'ExportStage',
]

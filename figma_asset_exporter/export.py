#!/usr/bin/env python3
"""
Figma Asset Exporter - Main CLI Entry Point

Syncs the exportable nodes of a Figma project (slices, groups, components and
frames) into a local folder tree as SVG files.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import yaml

from . import __version__
from .config_loader import ConfigLoader, get_nested
from .exceptions import FigmaExportError, InvalidSourceError, MissingTokenError
from .exporters.svg_downloader import folder_for
from .logger import log_config, log_section, setup_logging
from .models import DocumentNode
from .orchestrator import ExportOrchestrator, ExportReport

DEFAULT_CONFIG_PATH = 'config.yaml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='figma-export',
        description="Export SVG assets from a Figma project into a local folder tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export using FIGMA_TOKEN from the environment
  figma-export https://www.figma.com/file/ABC123/My-Design --out ./assets

  # Use a config file
  figma-export https://www.figma.com/file/ABC123/My-Design --config config.yaml

  # Preview exportable nodes without downloading
  figma-export https://www.figma.com/file/ABC123/My-Design --dry-run

  # Verbose logging
  figma-export https://www.figma.com/file/ABC123/My-Design -vv
        """
    )

    parser.add_argument('source', help='Figma project URL')

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '-o', '--out',
        type=str,
        help='Output directory (default: export.output_directory or ./figma-export)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--token',
        type=str,
        help='Figma personal access token (default: figma.api_token or $FIGMA_TOKEN)'
    )

    parser.add_argument(
        '--batch-size',
        type=int,
        help='Node ids per render request, at most 100'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='Concurrent render requests and downloads'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='List exportable nodes without creating folders or downloading'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write a JSON report of the export to this path'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def load_configuration(args: argparse.Namespace) -> dict:
    """Load the config file (or defaults), overlay CLI args and validate."""
    if args.config:
        config = ConfigLoader.load(args.config)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        config = ConfigLoader.load(DEFAULT_CONFIG_PATH)
    else:
        config = ConfigLoader.default_config()

    config = ConfigLoader.merge_with_args(config, args)
    ConfigLoader.validate(config)
    return config


def _print_preview(nodes: List[DocumentNode]) -> None:
    """Print the nodes a real export would download."""
    print("\n" + "=" * 60)
    print("EXPORT PREVIEW (DRY RUN)")
    print("=" * 60)
    print(f"\nExportable nodes: {len(nodes)}\n")
    for node in nodes:
        print(f"  {folder_for(node.type) + '/':<10} {node.name}  [{node.raw_type} {node.id}]")
    print("\n" + "=" * 60)


def run_export(config: dict, args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the export pipeline and print its report."""
    orchestrator = ExportOrchestrator(config, logger=logger, on_progress=print)

    if args.dry_run:
        nodes = orchestrator.preview(args.source)
        _print_preview(nodes)
        logger.info("Dry-run complete. No changes made.")
        return 0

    report = orchestrator.export_svg(args.source)

    report_generator = ExportReport(logger)
    print("\n" + report_generator.format_console_report(report))

    if args.report:
        try:
            report_generator.export_json_report(report, args.report)
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {str(e)}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_configuration(args)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML in configuration file: {e}", file=sys.stderr)
        return 2

    logger = setup_logging(
        verbosity=args.verbose,
        log_file=get_nested(config, 'logging.file'),
        level=get_nested(config, 'logging.level')
    )

    log_section("Figma Asset Exporter")
    logger.info(f"Version: {__version__}")
    log_config(config)

    try:
        return run_export(config, args, logger)
    except (InvalidSourceError, MissingTokenError) as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 2
    except FigmaExportError as e:
        print(f"ERROR: Export failed during {e.stage or 'export'}: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

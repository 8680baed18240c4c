"""
Export report generator for summarizing a finished run.

Reports are plain dictionaries so they can be printed to the console or
written to JSON.
"""

import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..exporters.svg_downloader import folder_for
from ..models import DocumentNode, ProjectDocument, ProjectReference


class ExportReport:
    """Builds and formats export run reports."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('figma_asset_exporter.orchestrator.report')

    def generate_report(
        self,
        document: ProjectDocument,
        reference: ProjectReference,
        nodes: Sequence[DocumentNode],
        download_stats: Dict[str, Any],
        output_directory: str,
        duration: float
    ) -> Dict[str, Any]:
        """
        Generate export report.

        Args:
            document: Fetched project document
            reference: Project reference parsed from the source URL
            nodes: Exportable nodes with render links
            download_stats: Statistics returned by SvgDownloader.download_all
            output_directory: Export directory
            duration: Run duration in seconds

        Returns:
            Export report dictionary
        """
        folders = Counter(folder_for(node.type) for node in nodes if node.render_url)

        report = {
            'summary': {
                'project_id': reference.id,
                'project_name': document.name,
                'version': document.version,
                'last_modified': document.last_modified.isoformat() if document.last_modified else None,
                'output_directory': output_directory,
                'exportable_nodes': len(nodes),
                'downloaded': download_stats.get('downloaded', 0),
                'skipped': download_stats.get('skipped', 0),
                'folders': dict(sorted(folders.items())),
                'duration': duration,
                'duration_formatted': self._format_duration(duration)
            },
            'nodes': self._build_node_list(nodes),
            'timestamp': datetime.now().isoformat()
        }

        self.logger.info(
            f"Report generated: {report['summary']['downloaded']} downloaded, "
            f"{report['summary']['skipped']} skipped"
        )
        return report

    @staticmethod
    def _build_node_list(nodes: Sequence[DocumentNode]) -> List[Dict[str, Any]]:
        entries = []
        for node in nodes:
            entry = node.to_dict()
            entry['folder'] = folder_for(node.type)
            entries.append(entry)
        return entries

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            return f"{int(seconds // 60)}m {int(seconds % 60)}s"
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m {int(seconds % 60)}s"

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Export report dictionary

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        sections = [
            "=" * 60,
            "FIGMA EXPORT REPORT",
            "=" * 60,
            "",
            "Summary:",
            f"  Project:     {summary.get('project_name', 'unknown')} ({summary.get('project_id', '?')})",
            f"  Version:     {summary.get('version') or 'n/a'}",
            f"  Output:      {summary.get('output_directory', '')}",
            f"  Exportable:  {summary.get('exportable_nodes', 0)}",
            f"  Downloaded:  {summary.get('downloaded', 0)}",
            f"  Skipped:     {summary.get('skipped', 0)}",
            f"  Duration:    {summary.get('duration_formatted', '0s')}",
        ]

        folders = summary.get('folders', {})
        if folders:
            sections.append("")
            sections.append("Folders:")
            for folder, count in folders.items():
                sections.append(f"  {folder + '/':<12} {count}")

        sections.append("=" * 60)
        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: str) -> None:
        """
        Export report to JSON file.

        Args:
            report: Export report dictionary
            filepath: Output file path
        """
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)

        self.logger.info(f"JSON report exported to {filepath}")


__all__ = ['ExportReport']

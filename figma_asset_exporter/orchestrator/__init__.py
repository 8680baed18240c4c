"""
Orchestration package for coordinating export pipeline stages.

Sequences fetch, filter, render-link and download stages and builds the
run report.
"""

from .export_orchestrator import ExportOrchestrator, ExportStage
from .export_report import ExportReport

__all__ = [
    'ExportOrchestrator',
    'ExportStage',
    'ExportReport'
]

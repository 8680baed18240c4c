"""SVG export package.

Writes rendered Figma nodes to disk, one folder per node type:
- slices/: SLICE nodes and any type without a dedicated folder
- groups/: GROUP and COMPONENT nodes
- frames/: FRAME nodes

Configuration Referenced:
- export.output_directory: Base output path for exported files
- export.max_workers: Concurrent downloads
- export.progress_bars: Enable/disable tqdm progress bars
"""

from .svg_downloader import FOLDERS, SvgDownloader, create_folders, folder_for, sanitize_file_name

__all__ = [
    'FOLDERS',
    'SvgDownloader',
    'create_folders',
    'folder_for',
    'sanitize_file_name'
]

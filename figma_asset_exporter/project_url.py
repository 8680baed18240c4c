"""Parsing of Figma project URLs and source identifiers."""

import re
from typing import Optional
from urllib.parse import unquote, urlparse

from .models import DEFAULT_PROJECT_NAME, ProjectReference

FIGMA_HOST = 'figma.com'
FIGMA_FILE_PATTERN = re.compile(r'\.figma$')


def parse_project_reference(source: str) -> Optional[ProjectReference]:
    """
    Parse a Figma project URL into a ProjectReference.

    ``https://www.figma.com/file/<id>/<name>`` yields ``ProjectReference(id, name)``.
    Anything that is not a URL on the Figma host, or has no project id, yields
    ``None``.

    Args:
        source: A Figma project URL

    Returns:
        ProjectReference or None if the URL can't be parsed
    """
    if not source or not isinstance(source, str):
        return None

    try:
        parsed = urlparse(source.strip())
        host = parsed.hostname
    except ValueError:
        return None

    if not parsed.path or not host:
        return None

    if host != FIGMA_HOST and not host.endswith('.' + FIGMA_HOST):
        return None

    paths = parsed.path.split('/')
    project_id = paths[2] if len(paths) > 2 else ''
    if not project_id:
        return None

    display_name = unquote(paths[3]) if len(paths) > 3 and paths[3] else DEFAULT_PROJECT_NAME
    return ProjectReference(id=project_id, display_name=display_name)


def looks_like_source_file(source: str) -> bool:
    """Check if ``source`` looks like a local ``.figma`` file."""
    return bool(source) and bool(FIGMA_FILE_PATTERN.search(source))


def can_parse(source: str) -> bool:
    """Check if ``source`` is a .figma file or a Figma project URL."""
    return looks_like_source_file(source) or parse_project_reference(source) is not None


__all__ = ['FIGMA_HOST', 'parse_project_reference', 'looks_like_source_file', 'can_parse']

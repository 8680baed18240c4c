"""Data models for the Figma asset export pipeline.

Figma API responses are decoded into these dataclasses at the client boundary.
Any shape mismatch raises ``ResponseDecodeError`` instead of leaking a
``KeyError`` or ``TypeError`` into the pipeline.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from dateutil.parser import isoparse

from .exceptions import ResponseDecodeError

logger = logging.getLogger('figma_asset_exporter.models')

DEFAULT_PROJECT_NAME = 'Untitled'


class NodeType(Enum):
    """Figma node types the exporter distinguishes."""
    SLICE = "SLICE"
    GROUP = "GROUP"
    FRAME = "FRAME"
    COMPONENT = "COMPONENT"
    OTHER = "OTHER"

    @classmethod
    def from_wire(cls, value: Any) -> 'NodeType':
        """Map a Figma ``type`` string to a NodeType, unknown types become OTHER."""
        try:
            node_type = cls(value)
        except ValueError:
            return cls.OTHER
        return node_type


EXPORTABLE_TYPES = frozenset({NodeType.SLICE, NodeType.GROUP, NodeType.FRAME, NodeType.COMPONENT})


def _require(data: Dict[str, Any], key: str, expected_type: type, context: str) -> Any:
    """Fetch a required key from a decoded JSON object and check its type."""
    if key not in data:
        raise ResponseDecodeError(f"Missing '{key}' in {context}")
    value = data[key]
    if not isinstance(value, expected_type):
        raise ResponseDecodeError(
            f"Expected '{key}' in {context} to be {expected_type.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


@dataclass
class DocumentNode:
    """A node of a Figma document tree."""

    id: str
    name: str
    type: NodeType = NodeType.OTHER
    raw_type: str = NodeType.OTHER.value
    children: List['DocumentNode'] = field(default_factory=list)
    export_settings: List[Any] = field(default_factory=list)
    render_url: Optional[str] = None

    def is_exportable(self) -> bool:
        """Check if node type is exportable or node carries explicit export settings."""
        return self.type in EXPORTABLE_TYPES or len(self.export_settings) > 0

    def iter_descendants(self, include_self: bool = False) -> Iterator['DocumentNode']:
        """Yield the subtree in depth-first pre-order."""
        stack = [self] if include_self else list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize node without its children."""
        return {
            'id': self.id,
            'name': self.name,
            'type': self.raw_type,
            'export_settings': len(self.export_settings),
            'render_url': self.render_url
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'DocumentNode':
        """Decode a node and its subtree from a Figma API node object.

        Decoding walks the subtree with an explicit stack, so arbitrarily deep
        documents do not hit the interpreter's recursion limit.
        """
        root, children_data = cls._decode_node(data)
        stack = [(root, children_data)]
        while stack:
            parent, pending = stack.pop()
            for child_data in pending:
                child, grandchildren = cls._decode_node(child_data)
                parent.children.append(child)
                if grandchildren:
                    stack.append((child, grandchildren))
        return root

    @classmethod
    def _decode_node(cls, data: Any) -> Tuple['DocumentNode', List[Any]]:
        """Decode a single node, returning it with its undecoded children."""
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"Expected node object, got {type(data).__name__}")

        node_id = _require(data, 'id', str, 'node')
        name = data.get('name', '')
        if not isinstance(name, str):
            raise ResponseDecodeError(f"Node '{node_id}' has a non-string name")

        raw_type = data.get('type', NodeType.OTHER.value)
        if not isinstance(raw_type, str):
            raise ResponseDecodeError(f"Node '{node_id}' has a non-string type")

        export_settings = data.get('exportSettings') or []
        if not isinstance(export_settings, list):
            raise ResponseDecodeError(f"Node '{node_id}' has malformed exportSettings")

        children_data = data.get('children') or []
        if not isinstance(children_data, list):
            raise ResponseDecodeError(f"Node '{node_id}' has malformed children")

        node = cls(
            id=node_id,
            name=name,
            type=NodeType.from_wire(raw_type),
            raw_type=raw_type,
            export_settings=list(export_settings)
        )
        return node, children_data


@dataclass(frozen=True)
class ProjectReference:
    """Project id and display name extracted from a Figma URL."""

    id: str
    display_name: str = DEFAULT_PROJECT_NAME


@dataclass
class ProjectDocument:
    """Decoded ``files/{id}`` response."""

    name: str
    document: DocumentNode
    last_modified: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    version: Optional[str] = None

    def count_nodes(self) -> int:
        """Count all nodes below the document root."""
        return sum(1 for _ in self.document.iter_descendants())

    @classmethod
    def from_dict(cls, data: Any) -> 'ProjectDocument':
        """Decode a Figma file response."""
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"Expected file object, got {type(data).__name__}")

        document = DocumentNode.from_dict(_require(data, 'document', dict, 'file response'))

        last_modified = None
        raw_last_modified = data.get('lastModified')
        if raw_last_modified:
            try:
                last_modified = isoparse(raw_last_modified)
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse lastModified '{raw_last_modified}': {e}")

        version = data.get('version')
        return cls(
            name=data.get('name') or DEFAULT_PROJECT_NAME,
            document=document,
            last_modified=last_modified,
            thumbnail_url=data.get('thumbnailUrl') or data.get('thumbnailURL'),
            version=str(version) if version is not None else None
        )


@dataclass
class ImageResponse:
    """Decoded ``images/{id}`` response: node id to rendered image URL."""

    err: Optional[str] = None
    images: Dict[str, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> 'ImageResponse':
        """Decode a Figma image render response."""
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"Expected image response object, got {type(data).__name__}")

        err = data.get('err')
        if err is not None and not isinstance(err, str):
            err = str(err)

        images = data.get('images') or {}
        if not isinstance(images, dict):
            raise ResponseDecodeError("Expected 'images' in image response to be an object")

        for node_id, url in images.items():
            if url is not None and not isinstance(url, str):
                raise ResponseDecodeError(f"Image URL for node '{node_id}' is not a string")

        return cls(err=err, images=dict(images))


__all__ = [
    'NodeType',
    'EXPORTABLE_TYPES',
    'DEFAULT_PROJECT_NAME',
    'DocumentNode',
    'ProjectReference',
    'ProjectDocument',
    'ImageResponse'
]

"""
Template Stores

A template store is an addressable collection of template descriptors found
below a root directory. Stores discover their templates once, lazily, on first
access, and keep the result as an immutable snapshot for the process lifetime.

Concurrency:
- Discovery runs behind a lock with a double check, so concurrent first
  accesses trigger exactly one scan and nobody observes a partial catalog.
- After discovery, reads are lock-free: they see one tuple reference.
- rebuild() scans into a fresh tuple and swaps the reference in one
  assignment, so readers see either the old or the new snapshot.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from cvrender.contexts.templating.exceptions import InvalidTemplateDescriptorError
from cvrender.contexts.templating.logger import _log_debug, _log_info, _log_warning
from cvrender.contexts.templating.metadata_loader import (
    METADATA_FILENAME,
    load_template_metadata,
)
from cvrender.contexts.templating.template_metadata import TemplateMetadata

BUNDLED_TEMPLATES_PATH = Path(__file__).parent / "templates"


class _Snapshot:
    """Immutable view of one discovery pass."""

    __slots__ = ("templates", "by_id")

    def __init__(self, templates: Tuple[TemplateMetadata, ...]):
        self.templates = templates
        by_id: Dict[str, TemplateMetadata] = {}
        for template in templates:
            # Within one store the first descriptor (in sorted path order) wins
            by_id.setdefault(template.id, template)
        self.by_id = by_id


class TemplateStore(ABC):
    """
    Capability contract shared by every template store.

    Subclasses only decide where descriptors come from (_discover); caching,
    lookup and rebuild behaviour live here.
    """

    #: Registry key under which the source resolver finds this store
    registry_key: str = ""

    def __init__(self):
        self._snapshot: Optional[_Snapshot] = None
        self._lock = threading.Lock()
        self.discovery_count = 0

    def find_all(self) -> List[TemplateMetadata]:
        """All templates of this store, in discovery order."""
        return list(self._loaded().templates)

    def find_by_id(self, template_id: str) -> Optional[TemplateMetadata]:
        """The template with this id, or None."""
        return self._loaded().by_id.get(template_id)

    def exists_by_id(self, template_id: str) -> bool:
        return template_id in self._loaded().by_id

    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def rebuild(self) -> int:
        """
        Rediscover templates and atomically replace the snapshot.

        Returns:
            Number of templates in the new snapshot
        """
        with self._lock:
            snapshot = self._scan()
            self._snapshot = snapshot
        _log_info(f"Rebuilt {self.describe()}: {len(snapshot.templates)} templates")
        return len(snapshot.templates)

    def describe(self) -> str:
        return f"{type(self).__name__}({self.root})"

    @property
    @abstractmethod
    def root(self) -> Path:
        """Directory scanned for descriptors."""

    def _loaded(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            # Another caller may have finished discovery while we waited
            if self._snapshot is None:
                self._snapshot = self._scan()
            return self._snapshot

    def _scan(self) -> _Snapshot:
        self.discovery_count += 1
        return _Snapshot(tuple(self._discover()))

    def _discover(self) -> List[TemplateMetadata]:
        """
        Load every descriptor below root.

        A descriptor that fails to load is logged and skipped. A missing root or
        zero descriptors yields an empty list.
        """
        root = self.root
        if not root.exists():
            _log_warning(f"Template base path does not exist: {root}")
            return []
        if not root.is_dir():
            _log_warning(f"Template base path is not a directory: {root}")
            return []

        metadata_files = sorted(root.rglob(METADATA_FILENAME))
        if not metadata_files:
            _log_warning(f"No {METADATA_FILENAME} files found in: {root}")
            return []

        _log_debug(f"Found {len(metadata_files)} metadata files in {root}")

        templates = []
        for metadata_file in metadata_files:
            try:
                templates.append(load_template_metadata(metadata_file))
            except InvalidTemplateDescriptorError as e:
                _log_warning(f"Failed to load template metadata from {metadata_file}: {e}")
        _log_info(f"Discovered {len(templates)} templates in {self.describe()}")
        return templates


class BundledTemplateStore(TemplateStore):
    """Templates shipped inside the package."""

    registry_key = "bundled"

    def __init__(self, base_path: Path = None):
        super().__init__()
        self._root = Path(base_path) if base_path is not None else BUNDLED_TEMPLATES_PATH

    @property
    def root(self) -> Path:
        return self._root


class FilesystemTemplateStore(TemplateStore):
    """Templates found below a configured filesystem directory."""

    registry_key = "filesystem"

    def __init__(self, base_path: Path):
        super().__init__()
        self._root = Path(base_path)

    @property
    def root(self) -> Path:
        return self._root

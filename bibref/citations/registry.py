"""Style listing and CSL template resolution.

Built-in styles are known to the formatting delegate and never touch the
disk. User styles are CSL files in the directory named by the
``imported_csl_styles_path`` preference: listing them parses each file's
``style/info/title`` concurrently, while loading a template for rendering
happens lazily, once per key, through the TemplateCache.
"""

from __future__ import annotations

import asyncio
import io
import logging
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import msgspec
from citeproc import CitationStylesStyle

from bibref.citations.styles import BUILTIN_STYLES
from bibref.config import Preferences
from bibref.exceptions import StyleLoadError
from bibref.logs import LogService, catch_and_log

logger = logging.getLogger(__name__)

CSL_EXTENSION = ".csl"
DEFAULT_STYLE = "apa"


class StyleDescriptor(msgspec.Struct, frozen=True):
    """Listing entry for a style: key and display name."""

    key: str
    name: str


BUILTIN_DESCRIPTORS: tuple[StyleDescriptor, ...] = tuple(
    StyleDescriptor(key=key, name=style.name) for key, style in BUILTIN_STYLES.items()
)


@dataclass
class StyleTemplate:
    """A CSL template loaded from disk."""

    key: str
    source: bytes
    style: CitationStylesStyle


@dataclass
class StyleResolution:
    """Outcome of resolving a requested style key."""

    key: str
    requested: str
    template: StyleTemplate | None = None

    @property
    def builtin(self) -> bool:
        """Check if the resolved style is rendered by the built-in delegate."""
        return self.template is None

    @property
    def fallback(self) -> bool:
        """Check if the requested style was replaced by the default."""
        return self.key != self.requested


def compile_template(key: str, path: Path) -> StyleTemplate:
    """Read and compile a CSL style file.

    Raises:
        StyleLoadError: If the file cannot be read or is not valid CSL.
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        raise StyleLoadError(key, str(e)) from e

    try:
        style = CitationStylesStyle(io.BytesIO(source), validate=False)
    except Exception as e:
        raise StyleLoadError(key, str(e)) from e

    return StyleTemplate(key=key, source=source, style=style)


class TemplateCache:
    """Process-lifetime cache of compiled CSL templates.

    Each key is written at most once and never invalidated, so a style file
    changed on disk after its first load is not picked up. Concurrent first
    loads of one key are serialised by a per-key lock.
    """

    def __init__(self):
        self._templates: dict[str, StyleTemplate] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __contains__(self, key: str) -> bool:
        return key in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, key: str) -> StyleTemplate | None:
        """Get a cached template."""
        return self._templates.get(key)

    def load(self, key: str, path: Path) -> StyleTemplate:
        """Return the cached template for ``key``, loading it on first use."""
        template = self._templates.get(key)
        if template is not None:
            self._hits += 1
            return template

        with self._lock_for(key):
            template = self._templates.get(key)
            if template is None:
                self._misses += 1
                template = compile_template(key, path)
                self._templates[key] = template
                logger.debug(f"Loaded CSL template {key} from {path}")
            else:
                self._hits += 1

        return template

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    def stats(self) -> dict:
        """Get cache statistics."""
        return {"hits": self._hits, "misses": self._misses, "size": len(self)}


def parse_style_file(path: Path) -> StyleDescriptor | None:
    """Read the display name of a CSL file.

    Returns:
        Descriptor keyed by the file stem, or None if the file cannot be
        read or has no ``style/info/title``.
    """
    try:
        root = ET.fromstring(path.read_bytes())
    except (OSError, ET.ParseError):
        return None

    if root.tag.rsplit("}", 1)[-1] != "style":
        return None

    title = root.find("{*}info/{*}title")
    if title is None or not (title.text or "").strip():
        return None

    return StyleDescriptor(key=path.stem, name=title.text.strip())


class StyleRegistry:
    """Registry of available citation styles."""

    def __init__(
        self,
        preferences: Preferences | None = None,
        cache: TemplateCache | None = None,
        log_service: LogService | None = None,
    ):
        self.preferences = preferences or Preferences()
        self.cache = cache if cache is not None else TemplateCache()
        self.log_service = log_service or LogService()

    @property
    def styles_path(self) -> Path | None:
        """Directory holding user CSL files, if configured."""
        value = self.preferences.get("imported_csl_styles_path")
        if not value:
            return None
        return Path(value).expanduser()

    def is_builtin(self, key: str) -> bool:
        """Check if key names a built-in style."""
        return key in BUILTIN_STYLES

    def template_path(self, key: str) -> Path | None:
        """Path of the CSL file backing a custom style."""
        if self.styles_path is None:
            return None
        return self.styles_path / f"{key}{CSL_EXTENSION}"

    async def load_styles(self) -> list[StyleDescriptor]:
        """List built-in styles followed by styles found on disk.

        Every candidate file is parsed in its own task; files that fail to
        parse are left out. Discovered styles are sorted by key.
        """
        styles = list(BUILTIN_DESCRIPTORS)

        directory = self.styles_path
        if directory is None:
            return styles
        if not directory.is_dir():
            self.log_service.warn(
                f"CSL styles folder not found: {directory}", source="StyleRegistry"
            )
            return styles

        candidates = sorted(
            p for p in directory.iterdir() if p.is_file() and p.suffix == CSL_EXTENSION
        )
        results = await asyncio.gather(
            *(asyncio.to_thread(parse_style_file, path) for path in candidates)
        )

        discovered = sorted(
            (r for r in results if r is not None), key=lambda style: style.key
        )
        return styles + discovered

    @catch_and_log(
        "Failed to load CSL styles.",
        "StyleRegistry",
        fallback=lambda: list(BUILTIN_DESCRIPTORS),
    )
    def list_styles(self) -> list[StyleDescriptor]:
        """Synchronous wrapper around :meth:`load_styles`."""
        return asyncio.run(self.load_styles())

    def resolve(self, key: str | None) -> StyleResolution:
        """Resolve a style key for rendering.

        Built-in keys resolve without disk access. Custom keys are loaded on
        first use; a missing file is logged and resolves to ``apa``.

        Raises:
            StyleLoadError: If the file exists but is not a usable template.
        """
        key = key or DEFAULT_STYLE
        if self.is_builtin(key):
            return StyleResolution(key=key, requested=key)

        path = self.template_path(key)
        if path is None or not path.exists():
            self.log_service.error(
                f"CSL template file: {key}{CSL_EXTENSION} not found.",
                "",
                True,
                "StyleRegistry",
            )
            return StyleResolution(key=DEFAULT_STYLE, requested=key)

        template = self.cache.load(key, path)
        return StyleResolution(key=key, requested=key, template=template)

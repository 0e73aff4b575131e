"""Abstract base class for document emitters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ..core.errors import EmitterError
from ..core.fonts import FontCache
from ..core.models import (
    CONTENT_TYPES,
    EXTENSIONS,
    DocumentMetadata,
    GenerationResult,
    OutputFormat,
    PositionedBlock,
)
from ..core.shaping import Shaper
from ..layout.engine import page_count
from ..layout.geometry import PageGeometry

log = logging.getLogger(__name__)


class BaseGenerator(ABC):
    """Every emitter inherits from this class.

    Emitters turn a positioned block stream into the bytes of one output
    format. They share the injected :class:`FontCache` and page geometry
    with the layout engine that produced the stream, so coordinates and
    font metrics agree.
    """

    format: OutputFormat  # set by subclasses

    def __init__(
        self,
        fonts: FontCache | None = None,
        *,
        geometry: PageGeometry | None = None,
        shaper: Shaper | None = None,
    ) -> None:
        self.fonts = fonts or FontCache()
        self.geometry = geometry or PageGeometry()
        self.shaper = shaper or Shaper(enabled=self.fonts.supports_persian)

    def emit(self, positioned: Sequence[PositionedBlock], metadata: DocumentMetadata) -> bytes:
        """Render *positioned* into document bytes.

        Any writer failure is raised as :class:`EmitterError`.
        """
        try:
            return self._build(positioned, metadata)
        except EmitterError:
            raise
        except Exception as exc:
            log.error("%s emitter failed: %s", self.format.value, exc)
            raise EmitterError(self.format.value, exc) from exc

    def generate(
        self,
        positioned: Sequence[PositionedBlock],
        metadata: DocumentMetadata,
        *,
        name: str = "document",
    ) -> GenerationResult:
        """Emit and wrap the bytes with filename and content type."""
        data = self.emit(positioned, metadata)
        return GenerationResult(
            format=self.format,
            filename=self._safe_filename(name, EXTENSIONS[self.format]),
            content_type=CONTENT_TYPES[self.format],
            data=data,
            page_count=page_count(positioned),
        )

    @abstractmethod
    def _build(self, positioned: Sequence[PositionedBlock], metadata: DocumentMetadata) -> bytes:
        ...

    # -- Helpers ---------------------------------------------------------

    @staticmethod
    def _safe_filename(name: str, ext: str) -> str:
        """Create a filesystem-safe filename."""
        safe = "".join(c if c.isalnum() or c in "-_ " else "_" for c in name)
        safe = safe.strip().replace(" ", "_")[:80] or "document"
        return f"{safe}.{ext}"

    @staticmethod
    def _ensure_dir(path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def save(cls, result: GenerationResult, output_dir: Path) -> Path:
        """Write *result* into *output_dir* and return the file path."""
        path = cls._ensure_dir(output_dir) / result.filename
        try:
            path.write_bytes(result.data)
        except OSError as exc:
            raise EmitterError(result.format.value, exc) from exc
        return path

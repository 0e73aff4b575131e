"""Process-wide font registry with lazy, single-assignment resolution.

A :class:`FontCache` is built once at startup and handed to the layout
measurer and the emitters. The first lookup of a logical font name probes
an ordered list of candidate TrueType files (relative to the working
directory), registers the first loadable one with ReportLab under a
name derived from its path and caches the result. Two caches pointing at
different files therefore never share a ReportLab font name. When no
candidate loads, the name resolves to a standard PDF font that cannot
render Persian glyphs; generation continues.

Concurrent first lookups may probe the filesystem twice, but
``dict.setdefault`` guarantees every caller ends up with the same
:class:`ResolvedFont` for a given name.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

log = logging.getLogger(__name__)

PERSIAN = "persian"
PERSIAN_BOLD = "persian-bold"

FONT_PATH_ENV = "RTLDOCS_FONT_PATH"

DEFAULT_CANDIDATES: dict[str, tuple[str, ...]] = {
    PERSIAN: (
        "fonts/Vazirmatn-Regular.ttf",
        "assets/fonts/Vazirmatn-Regular.ttf",
        "fonts/Vazir-Regular.ttf",
        "fonts/Vazir.ttf",
        "assets/fonts/Vazir.ttf",
    ),
    PERSIAN_BOLD: (
        "fonts/Vazirmatn-Bold.ttf",
        "assets/fonts/Vazirmatn-Bold.ttf",
        "fonts/Vazir-Bold.ttf",
    ),
}

FALLBACK_FONTS: dict[str, str] = {
    PERSIAN: "Helvetica",
    PERSIAN_BOLD: "Helvetica-Bold",
}

_REPORTLAB_NAMES: dict[str, str] = {
    PERSIAN: "RtlDocsPersian",
    PERSIAN_BOLD: "RtlDocsPersianBold",
}

# ReportLab keeps one font registry per process; a file is registered once
# under a name derived from its path.
_REGISTERED: dict[Path, str] = {}


@dataclass(frozen=True)
class ResolvedFont:
    """A font registered with ReportLab under ``name``."""
    logical_name: str
    name: str
    path: Path | None = None

    @property
    def is_fallback(self) -> bool:
        return self.path is None

    @property
    def supports_persian(self) -> bool:
        return self.path is not None


class FontCache:
    """Maps logical font names to registered ReportLab fonts.

    Parameters
    ----------
    candidates
        Ordered candidate paths per logical name. Relative paths are
        resolved against *base_dir* (default: the working directory).
    base_dir
        Directory relative candidates are resolved against.
    use_env
        Prepend the path in ``RTLDOCS_FONT_PATH`` to the Persian
        candidates.
    """

    def __init__(
        self,
        candidates: dict[str, Sequence[str | Path]] | None = None,
        *,
        base_dir: str | Path | None = None,
        use_env: bool = True,
    ) -> None:
        merged: dict[str, list[str | Path]] = {
            k: list(v) for k, v in DEFAULT_CANDIDATES.items()
        }
        if candidates is not None:
            for name, paths in candidates.items():
                merged[name] = list(paths)
        env_path = os.environ.get(FONT_PATH_ENV) if use_env else None
        if env_path:
            merged.setdefault(PERSIAN, []).insert(0, env_path)
        self._candidates = merged
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._resolved: dict[str, ResolvedFont] = {}

    @classmethod
    def empty(cls) -> "FontCache":
        """A cache with no candidates; every lookup falls back."""
        return cls({PERSIAN: (), PERSIAN_BOLD: ()}, use_env=False)

    # -- lookup ----------------------------------------------------------

    def resolve(self, logical_name: str = PERSIAN) -> ResolvedFont:
        cached = self._resolved.get(logical_name)
        if cached is not None:
            return cached
        resolved = self._probe(logical_name)
        return self._resolved.setdefault(logical_name, resolved)

    def regular(self) -> ResolvedFont:
        return self.resolve(PERSIAN)

    def bold(self) -> ResolvedFont:
        """Bold face; falls back to the regular Persian face when only it exists."""
        font = self.resolve(PERSIAN_BOLD)
        if font.is_fallback and self.regular().supports_persian:
            return self.regular()
        return font

    @property
    def supports_persian(self) -> bool:
        return self.regular().supports_persian

    def candidates(self, logical_name: str) -> list[Path]:
        return [self._absolute(p) for p in self._candidates.get(logical_name, ())]

    def snapshot(self) -> dict[str, ResolvedFont]:
        return dict(self._resolved)

    # -- internals -------------------------------------------------------

    def _absolute(self, path: str | Path) -> Path:
        p = Path(path).expanduser()
        if p.is_absolute():
            return p
        return (self._base_dir or Path.cwd()) / p

    def _probe(self, logical_name: str) -> ResolvedFont:
        rl_name = _REPORTLAB_NAMES.get(logical_name, logical_name)
        for path in self.candidates(logical_name):
            if not path.is_file():
                continue
            name = _register(rl_name, path)
            if name is not None:
                log.debug("Font %s resolved to %s as %s", logical_name, path, name)
                return ResolvedFont(logical_name, name, path)

        fallback = FALLBACK_FONTS.get(logical_name, "Helvetica")
        log.warning(
            "Persian font %r unavailable (tried %d paths); falling back to %s",
            logical_name,
            len(self._candidates.get(logical_name, ())),
            fallback,
        )
        return ResolvedFont(logical_name, fallback, None)


def _register(prefix: str, path: Path) -> str | None:
    """Register the font at *path* and return its ReportLab name."""
    key = path.resolve()
    registered = _REGISTERED.get(key)
    if registered is not None:
        return registered
    digest = hashlib.sha1(str(key).encode("utf-8")).hexdigest()[:8]
    font = _load_ttf(f"{prefix}-{digest}", key)
    if font is None:
        return None
    return _REGISTERED.setdefault(key, font.fontName)


def _load_ttf(name: str, path: Path) -> TTFont | None:
    try:
        font = TTFont(name, str(path))
    except (TTFError, OSError) as exc:
        log.warning("Could not load font %s: %s", path, exc)
        return None
    pdfmetrics.registerFont(font)
    return font


def describe(cache: FontCache, names: Iterable[str] = (PERSIAN, PERSIAN_BOLD)) -> list[tuple[str, str, str]]:
    """(logical name, registered name, path) rows for diagnostics."""
    rows = []
    for name in names:
        font = cache.resolve(name)
        rows.append((name, font.name, str(font.path) if font.path else "-"))
    return rows

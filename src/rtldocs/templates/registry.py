"""Registry of named, pure content generators.

Templates refer to generators by name so a :class:`TemplateConfig` stays
plain data (JSON/YAML serializable). A generator receives the record and
the article's merged parameters and returns one of

* ``str``: paragraph text (``\\n\\n`` separates paragraphs)
* ``list[str]``: bullet items / paragraphs
* ``list[tuple[str, str]]``: key/value pairs
* ``list[list[str]]``: table rows

Generators must be total over the record: a missing optional field drops
the corresponding line, it never raises.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from ..core.errors import TemplateError
from ..core.models import Record

ContentGenerator = Callable[[Record, Mapping[str, Any]], Any]

_REGISTRY: dict[str, ContentGenerator] = {}


def content_generator(name: str) -> Callable[[ContentGenerator], ContentGenerator]:
    """Register the decorated function under *name*."""

    def decorator(func: ContentGenerator) -> ContentGenerator:
        existing = _REGISTRY.get(name)
        if existing is not None and existing is not func:
            raise TemplateError(f"Content generator {name!r} is already registered")
        _REGISTRY[name] = func
        return func

    return decorator


def get_generator(name: str) -> ContentGenerator:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise TemplateError(f"Unknown content generator {name!r}") from None


def registered_generators() -> list[str]:
    return sorted(_REGISTRY)

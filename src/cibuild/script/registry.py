"""Explicit language -> profile registry.

Profiles register themselves with ``@register_profile``; the profile
modules are imported once at the bottom of this file, so the registry is
complete before the first lookup.
"""

from __future__ import annotations

from typing import Callable

from cibuild.errors import UnknownLanguageError
from cibuild.script.base import Script

DEFAULT_LANGUAGE = "generic"

_PROFILE_REGISTRY: dict[str, type[Script]] = {}


def register_profile(name: str, *aliases: str) -> Callable[[type[Script]], type[Script]]:
    """Decorator to register a profile under a language name and aliases."""

    def decorator(cls: type[Script]) -> type[Script]:
        cls.name = name
        for key in (name, *aliases):
            if key in _PROFILE_REGISTRY:
                raise ValueError(f"Language '{key}' is already registered")
            _PROFILE_REGISTRY[key] = cls
        return cls

    return decorator


def normalize_language(language: str | None) -> str:
    return str(language or DEFAULT_LANGUAGE).strip().lower().replace("-", "_")


def get_profile(language: str | None) -> type[Script]:
    """Look up the profile for a language identifier."""
    key = normalize_language(language)
    profile = _PROFILE_REGISTRY.get(key)
    if profile is None:
        raise UnknownLanguageError(key, list_languages())
    return profile


def list_languages() -> list[str]:
    return sorted(_PROFILE_REGISTRY)


from cibuild.script import langs  # noqa: E402, F401

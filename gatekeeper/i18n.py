"""
Message translation.

Every user-facing string is an English msgid passed through a ``gettext``
callable. The translations object is built once per app from settings and
handed to whoever needs it; nothing here is module-global state.
"""

from __future__ import annotations

import gettext
from typing import Callable

DOMAIN = "gatekeeper"

Gettext = Callable[[str], str]


def passthrough(message: str) -> str:
    return message


def load_translations(locale_dir: str, language: str) -> gettext.NullTranslations:
    """Compiled catalog for ``language``, or the English msgids when missing."""
    return gettext.translation(
        DOMAIN, localedir=locale_dir, languages=[language], fallback=True
    )

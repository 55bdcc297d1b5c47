"""JustPing authentication core.

Exposes :func:`justping.factory.create_app` so callers can
``from justping import create_app``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]

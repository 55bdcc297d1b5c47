"""HTTP surface: versioned blueprint registries mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*parts: str) -> str:
    segments = [p.strip("/") for p in parts if p and p.strip("/")]
    return "/" + "/".join(segments)


def register_blueprint_group(app: Flask, *, base_prefix: str, entries: Iterable[tuple[Blueprint, str]]) -> None:
    """Mount each ``(blueprint, relative_prefix)`` under ``base_prefix``.

    Parameters
    ----------
    app:
        Application receiving the blueprints.
    base_prefix:
        Version root, e.g. ``"/api/v1"``.
    entries:
        Pairs from a version's ``REGISTRY``; an empty relative prefix mounts
        the blueprint at the version root (``/api/v1/health``).
    """
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=_join(base_prefix, relative))


def init_app(app: Flask) -> None:
    from justping.api import v1

    register_blueprint_group(
        app,
        base_prefix=_join(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION),
        entries=v1.REGISTRY,
    )


__all__ = ["init_app", "register_blueprint_group"]

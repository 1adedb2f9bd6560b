"""Fitter configuration for the phenobias package.

Controls which registered :class:`~phenobias.fitters.LinearModelFitter`
the bias-correction entry points use when no ``fitter=`` argument is
passed.

Resolution order (first match wins):
    1. Programmatic override via :func:`set_fitter`.
    2. The ``PHENOBIAS_FITTER`` environment variable.
    3. The default, ``"ols"``.

Valid fitter names are those in the fitter registry (``"ols"``,
``"gee"``, and anything added with
:func:`~phenobias.fitters.register_fitter`), case-insensitive.

Examples:
    Select the estimating-equations fit from the shell::

        export PHENOBIAS_FITTER=gee

    Or programmatically::

        import phenobias
        phenobias.set_fitter("gee")

    Restore the default resolution order::

        phenobias.set_fitter("auto")
"""

from __future__ import annotations

import os
import warnings

_DEFAULT_FITTER = "ols"

# Sentinel indicating "no programmatic override has been set".
_fitter_override: str | None = None


def _registered_fitters() -> set[str]:
    """Names currently in the fitter registry."""
    # Deferred: phenobias.fitters imports this module.
    from .fitters import _FITTERS

    return set(_FITTERS)


def get_fitter() -> str:
    """Return the active fitter name.

    Resolution order:
        1. Value set by :func:`set_fitter` (unless ``"auto"``).
        2. ``PHENOBIAS_FITTER`` environment variable.
        3. ``"ols"``.

    An environment value that names no registered fitter is ignored
    with a ``UserWarning``.

    Returns:
        A registered fitter name.
    """
    # 1. Programmatic override
    if _fitter_override is not None and _fitter_override != "auto":
        return _fitter_override

    # 2. Environment variable
    env = os.environ.get("PHENOBIAS_FITTER", "").strip().lower()
    if env:
        if env in _registered_fitters():
            return env
        warnings.warn(
            f"PHENOBIAS_FITTER={env!r} is not a registered fitter; "
            f"using {_DEFAULT_FITTER!r}.",
            UserWarning,
            stacklevel=2,
        )

    # 3. Default
    return _DEFAULT_FITTER


def set_fitter(name: str) -> None:
    """Override the fitter selection.

    Args:
        name: A registered fitter name or ``"auto"``
            (case-insensitive).  ``"auto"`` restores the default
            resolution order.

    Raises:
        ValueError: If *name* is not a registered fitter.
    """
    global _fitter_override
    normalised = name.strip().lower()
    valid = _registered_fitters() | {"auto"}
    if normalised not in valid:
        raise ValueError(f"Unknown fitter '{name}'. Choose from: {sorted(valid)}")
    _fitter_override = normalised

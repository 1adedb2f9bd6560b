"""Link-scale rescaling of the corrected association.

The corrected coefficient β* = β / (μ₁ − μ₀) is a risk difference per
unit of the covariate.  Dividing by a function of the estimated
prevalence p₀ = mean(p) maps it (to first order) onto the scale of the
association of interest:

    =========  ====================  ===========================
    Link       Divisor               Interpretation of β*
    =========  ====================  ===========================
    identity   1                     risk difference
    log        p₀                    log relative risk
    logit      p₀ (1 − p₀)           log odds ratio
    =========  ====================  ===========================

``"ident"`` is accepted as an alias for ``"identity"``.
"""

from __future__ import annotations

from collections.abc import Callable

from .exceptions import ConfigurationError


def _identity_scale(prevalence: float) -> float:  # noqa: ARG001
    return 1.0


def _log_scale(prevalence: float) -> float:
    return prevalence


def _logit_scale(prevalence: float) -> float:
    return prevalence * (1.0 - prevalence)


_LINK_SCALES: dict[str, Callable[[float], float]] = {
    "identity": _identity_scale,
    "log": _log_scale,
    "logit": _logit_scale,
}

_LINK_ALIASES = {"ident": "identity"}


def resolve_link(link: str) -> str:
    """Normalise *link* to its canonical name.

    Names are case-insensitive and surrounding whitespace is ignored.

    Raises:
        ConfigurationError: If *link* is not a supported link function.
    """
    if isinstance(link, str):
        key = link.strip().lower()
        key = _LINK_ALIASES.get(key, key)
        if key in _LINK_SCALES:
            return key
    raise ConfigurationError(
        f"unsupported link function {link!r}. "
        f"Choose from: {sorted(_LINK_SCALES)}"
    )


def link_scale(link: str, prevalence: float) -> float:
    """Return the divisor that maps β* onto the *link* scale."""
    return _LINK_SCALES[resolve_link(link)](prevalence)

"""Formatted ASCII table display for bias-correction results.

The table mirrors the statsmodels summary style: a top panel with the
correction settings (method, link, fitter, class means, prevalence)
and a bottom panel listing, per predictor, the uncorrected slope from
the score regression next to the bias-corrected association.
"""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._results import BiasCorrectionResult


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_val(val: object, fmt: str = ".4f") -> str:
    """Format a numeric value for display; ``None`` and NaN become ``'N/A'``."""
    if val is None:
        return "N/A"
    if isinstance(val, float) and (val != val):  # nan check
        return "N/A"
    if isinstance(val, (int, float)):
        return f"{val:{fmt}}"
    return str(val)


def _render_rows(rows: list[tuple[str, str, str, str]]) -> None:
    """Print ``(left_label, left_value, right_label, right_value)`` rows.

    The left pair is flush-left in 40 columns; the right pair is
    right-aligned in the remaining 40.
    """
    for ll, lv, rl, rv in rows:
        left = f"{ll:<16}{lv:<24}" if ll else f"{'':<40}"
        right = f"{rl:>27} {rv:>12}" if rl else ""
        print(f"{left}{right}")


def print_correction_table(
    result: BiasCorrectionResult,
    *,
    title: str = "Bias-Corrected Association",
) -> None:
    """Print a bias-correction result as an 80-column ASCII table.

    Args:
        result: Result returned by :func:`~phenobias.adjust_known_means`
            or :func:`~phenobias.adjust_unknown_means`.
        title: Title for the output table.
    """
    print("=" * 80)
    for line in textwrap.wrap(title, width=78):
        print(f"{line:^80}")
    print("=" * 80)

    means_label = "Known" if result.method == "known" else "Estimated"
    rows = [
        ("Class Means:", means_label, "No. Observations:", str(result.n_observations)),
        ("Link:", result.link, "Prevalence:", _fmt_val(result.prevalence)),
        ("Fitter:", result.fitter, "mu1 - mu0:", _fmt_val(result.denominator)),
        ("", "", "mu0:", _fmt_val(result.mu0)),
        ("", "", "mu1:", _fmt_val(result.mu1)),
    ]
    if result.method == "unknown":
        trim = result.trim_counts
        rows.extend(
            [
                (
                    "Cutpoint:",
                    _fmt_val(result.cutpoint, ".3f"),
                    "Est. True Controls:",
                    _fmt_val(trim.true_controls if trim else None, ".2f"),
                ),
                (
                    "Sensitivity:",
                    _fmt_val(result.sensitivity, ".3f"),
                    "Control Trim:",
                    _fmt_val(trim.rank0cut if trim else None, ".2f"),
                ),
                (
                    "Specificity:",
                    _fmt_val(result.specificity, ".3f"),
                    "Case Trim:",
                    _fmt_val(trim.rank1cut if trim else None, ".2f"),
                ),
            ]
        )
    _render_rows(rows)

    print("-" * 80)

    # ── Table geometry (W = 80 chars) ─────────────────────────── #
    #   Predictor (fc=40, left) | Uncorrected (20, right)
    #   | Corrected (20, right)
    fc = 40
    print(f"{'Predictor':<{fc}}{'Uncorrected':>20}{'Corrected':>20}")
    print("-" * 80)
    fitted = list(result.fitted_coefs)[1:]
    for i, name in enumerate(result.predictor_names):
        trunc = _truncate(name, fc - 2)
        raw_str = _fmt_val(float(fitted[i]))
        cor_str = _fmt_val(float(result.corrected_coefs[i]))
        print(f"{trunc:<{fc}}{raw_str:>20}{cor_str:>20}")

    # ── Notes ──────────────────────────────────────────────────── #
    notes: list[str] = []
    if result.denominator != result.denominator:  # nan check
        notes.append(
            "mu1 - mu0 is undefined (an estimated class mean is NaN); "
            "check that the trimmed case and control groups are non-empty."
        )
    elif result.denominator < 0:
        notes.append(
            "mu1 < mu0: the corrected associations change sign relative "
            "to the score regression."
        )
    if result.link == "identity":
        notes.append("Corrected associations are risk differences.")
    elif result.link == "log":
        notes.append("Corrected associations approximate log relative risks.")
    else:
        notes.append("Corrected associations approximate log odds ratios.")

    print("=" * 80)
    if notes:
        print("Notes:")
        for note in notes:
            print(
                textwrap.fill(
                    note, width=80, initial_indent="  ", subsequent_indent="    "
                )
            )
    print()

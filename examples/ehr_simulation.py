"""
Simulated EHR cohort: bias correction with a probabilistic phenotype

Demonstrates:
- The attenuation of a score-regression slope when a probabilistic
  phenotype stands in for true disease status
- ``bias_adjust_known`` when the class-conditional mean scores are known
- ``bias_adjust_unknown`` when they are estimated from a cutpoint with
  known sensitivity and specificity
- All three link scales and both built-in fitters
"""

import numpy as np
import pandas as pd

from phenobias import (
    adjust_known_means,
    adjust_unknown_means,
    bias_adjust_known,
    bias_adjust_unknown,
    dichotomize,
    print_correction_table,
)

# ============================================================================
# Simulate a cohort
# ============================================================================
#
# True disease status follows a linear-probability model so that the
# identity-link correction has an exact target:
#   P(Y = 1 | X, W) = 0.1 + 0.3 X + 0.2 W,  X, W ~ U(0, 1)
# The phenotype score is Beta(6, 2) in cases (mean 0.75) and Beta(2, 6)
# in controls (mean 0.25).

rng = np.random.default_rng(2019)
n = 10_000
X = pd.Series(rng.uniform(size=n), name="exposure")
W = pd.Series(rng.uniform(size=n), name="age_scaled")
y = rng.binomial(1, 0.1 + 0.3 * X + 0.2 * W)
p = pd.Series(np.where(y == 1, rng.beta(6, 2, n), rng.beta(2, 6, n)), name="pheprob")

# ============================================================================
# Known class means
# ============================================================================

known = adjust_known_means(p, X, W, mu0=0.25, mu1=0.75)
print_correction_table(known, title="Known class means (identity link)")
print(f"Uncorrected slopes: {known.fitted_coefs[1:]}")
print(f"Corrected slopes:   {known.corrected_coefs}  (truth: [0.3, 0.2])")

# ============================================================================
# Unknown class means: estimate S and C at the 0.5 cutpoint
# ============================================================================
#
# In practice sensitivity and specificity come from a chart-reviewed
# validation subset; here they are computed against the simulated truth.

pstar = 0.5
hatY = dichotomize(p.to_numpy(), pstar)
S = float(np.mean(hatY[y == 1]))
C = float(np.mean(1 - hatY[y == 0]))
print(f"Cutpoint {pstar}: sensitivity = {S:.3f}, specificity = {C:.3f}")

unknown = adjust_unknown_means(p, X, W, S=S, C=C, pstar=pstar)
print_correction_table(unknown, title="Estimated class means (identity link)")

# ============================================================================
# Link scales
# ============================================================================

for link in ("identity", "log", "logit"):
    est = bias_adjust_unknown(p, X, W, S, C, pstar, link=link)
    print(f"{link:>8}: {est}")

# ============================================================================
# Fitters agree
# ============================================================================

ols = bias_adjust_known(p, X, W, 0.25, 0.75, fitter="ols")
gee = bias_adjust_known(p, X, W, 0.25, 0.75, fitter="gee")
assert np.allclose(ols, gee), (ols, gee)
print("OLS and GEE fitters agree.")

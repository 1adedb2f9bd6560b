"""Tests for the LinearModelFitter protocol and built-in fitters."""

from dataclasses import dataclass

import numpy as np
import pytest

import phenobias._config as _cfg
from phenobias.exceptions import DimensionError, FittingError
from phenobias.fitters import (
    _FITTERS,
    GEEFitter,
    LinearModelFitter,
    OLSFitter,
    register_fitter,
    resolve_fitter,
)

# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def rng():
    return np.random.default_rng(42)


@pytest.fixture()
def score_data(rng):
    n = 200
    X = rng.standard_normal(n)
    W = rng.standard_normal(n)
    p = 0.4 + 0.1 * X - 0.05 * W + rng.standard_normal(n) * 0.05
    return p, X, W


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch):
    monkeypatch.delenv("PHENOBIAS_FITTER", raising=False)
    monkeypatch.setattr(_cfg, "_fitter_override", None)


def _lstsq(p, X, W):
    design = np.column_stack([np.ones_like(p), X, W])
    return np.linalg.lstsq(design, p, rcond=None)[0]


# ------------------------------------------------------------------ #
# Protocol conformance
# ------------------------------------------------------------------ #


class TestProtocolConformance:
    @pytest.mark.parametrize("cls", [OLSFitter, GEEFitter])
    def test_isinstance_check(self, cls):
        assert isinstance(cls(), LinearModelFitter)

    def test_names(self):
        assert OLSFitter().name == "ols"
        assert GEEFitter().name == "gee"

    def test_string_is_not_a_fitter(self):
        assert not isinstance("ols", LinearModelFitter)


# ------------------------------------------------------------------ #
# Fitting
# ------------------------------------------------------------------ #


@pytest.mark.parametrize("cls", [OLSFitter, GEEFitter])
class TestFit:
    def test_matches_least_squares(self, cls, score_data):
        p, X, W = score_data
        coefs = cls().fit(p, [X, W])
        assert coefs.shape == (3,)
        np.testing.assert_allclose(coefs, _lstsq(p, X, W), atol=1e-6)

    def test_accepts_matrix(self, cls, score_data):
        p, X, W = score_data
        from_list = cls().fit(p, [X, W])
        from_matrix = cls().fit(p, np.column_stack([X, W]))
        np.testing.assert_allclose(from_list, from_matrix)

    def test_coefficient_order(self, cls, rng):
        n = 100
        X = rng.standard_normal(n)
        W = rng.standard_normal(n)
        p = 0.5 + 0.2 * X - 0.1 * W + rng.standard_normal(n) * 1e-6
        np.testing.assert_allclose(cls().fit(p, [X, W]), [0.5, 0.2, -0.1], atol=1e-5)

    def test_collinear_predictors_raise(self, cls, score_data):
        p, X, _ = score_data
        with pytest.raises(FittingError, match="rank-deficient"):
            cls().fit(p, [X, 2.0 * X])

    def test_constant_predictor_raises(self, cls, score_data):
        p, X, _ = score_data
        with pytest.raises(FittingError, match="rank-deficient"):
            cls().fit(p, [X, np.ones_like(X)])

    def test_too_few_observations_raise(self, cls):
        with pytest.raises(FittingError):
            cls().fit(np.array([0.1, 0.9]), [np.array([0.0, 1.0]), np.array([1.0, 0.0])])

    def test_non_finite_raises(self, cls, score_data):
        p, X, W = score_data
        X = X.copy()
        X[3] = np.nan
        with pytest.raises(FittingError, match="finite"):
            cls().fit(p, [X, W])

    def test_misaligned_raises(self, cls, score_data):
        p, X, W = score_data
        with pytest.raises(DimensionError):
            cls().fit(p[:-1], np.column_stack([X, W]))


def test_gee_equals_ols(score_data):
    p, X, W = score_data
    np.testing.assert_allclose(
        GEEFitter().fit(p, [X, W]), OLSFitter().fit(p, [X, W]), atol=1e-6
    )


# ------------------------------------------------------------------ #
# resolve_fitter / register_fitter
# ------------------------------------------------------------------ #


class TestResolveFitter:
    def test_default_is_ols(self):
        assert isinstance(resolve_fitter(), OLSFitter)

    def test_follows_config(self):
        _cfg.set_fitter("gee")
        assert isinstance(resolve_fitter(None), GEEFitter)

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("PHENOBIAS_FITTER", "gee")
        assert resolve_fitter().name == "gee"

    def test_by_name_case_insensitive(self):
        assert isinstance(resolve_fitter("GEE"), GEEFitter)

    def test_instance_passthrough(self):
        fitter = GEEFitter()
        assert resolve_fitter(fitter) is fitter

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown fitter"):
            resolve_fitter("ridge")

    def test_wrong_type_raises(self):
        with pytest.raises(TypeError):
            resolve_fitter(3)  # type: ignore[arg-type]


@dataclass(frozen=True)
class _ConstantFitter:
    @property
    def name(self) -> str:
        return "constant"

    def fit(self, response, predictors):
        return np.zeros(1 + len(predictors))


class TestRegisterFitter:
    def test_register_and_resolve(self):
        register_fitter("constant", _ConstantFitter)
        try:
            assert resolve_fitter("constant").name == "constant"
        finally:
            _FITTERS.pop("constant", None)

    def test_mixed_case_name_resolves(self):
        register_fitter("Constant", _ConstantFitter)
        try:
            assert "constant" in _FITTERS
            assert resolve_fitter("Constant").name == "constant"
            assert resolve_fitter("constant").name == "constant"
        finally:
            _FITTERS.pop("constant", None)

    def test_rejects_non_fitter(self):
        class NotAFitter:
            pass

        with pytest.raises(TypeError, match="does not implement"):
            register_fitter("bad", NotAFitter)

    def test_rejects_uninstantiable(self):
        class NeedsArgs:
            def __init__(self, x):
                self.x = x

        with pytest.raises(TypeError, match="could not be instantiated"):
            register_fitter("bad", NeedsArgs)

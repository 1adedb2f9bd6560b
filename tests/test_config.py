"""Tests for the fitter configuration system."""

import os
from dataclasses import dataclass

import numpy as np
import pytest

from phenobias._config import get_fitter, set_fitter
from phenobias.fitters import _FITTERS, register_fitter, resolve_fitter


@dataclass(frozen=True)
class _LstsqFitter:
    @property
    def name(self) -> str:
        return "lstsq"

    def fit(self, response, predictors):
        design = np.column_stack([np.ones(len(response)), *predictors])
        return np.linalg.lstsq(design, response, rcond=None)[0]


class TestGetFitter:
    """Tests for get_fitter() resolution order."""

    def setup_method(self):
        """Reset state before each test."""
        import phenobias._config as _cfg
        _cfg._fitter_override = None
        os.environ.pop("PHENOBIAS_FITTER", None)

    def teardown_method(self):
        """Reset state after each test."""
        import phenobias._config as _cfg
        _cfg._fitter_override = None
        os.environ.pop("PHENOBIAS_FITTER", None)

    def test_default_is_ols(self):
        assert get_fitter() == "ols"

    def test_env_var_overrides_default(self):
        os.environ["PHENOBIAS_FITTER"] = "gee"
        assert get_fitter() == "gee"

    def test_env_var_case_insensitive(self):
        os.environ["PHENOBIAS_FITTER"] = " GEE "
        assert get_fitter() == "gee"

    def test_unknown_env_var_warns_and_falls_back(self):
        os.environ["PHENOBIAS_FITTER"] = "ridge"
        with pytest.warns(UserWarning, match="not a registered fitter"):
            assert get_fitter() == "ols"

    def test_env_var_accepts_registered_fitter(self):
        register_fitter("lstsq", _LstsqFitter)
        try:
            os.environ["PHENOBIAS_FITTER"] = "lstsq"
            assert get_fitter() == "lstsq"
            assert resolve_fitter().name == "lstsq"
        finally:
            _FITTERS.pop("lstsq", None)

    def test_programmatic_override_wins_over_env(self):
        os.environ["PHENOBIAS_FITTER"] = "ols"
        set_fitter("gee")
        assert get_fitter() == "gee"

    def test_auto_restores_default(self):
        set_fitter("gee")
        assert get_fitter() == "gee"
        set_fitter("auto")
        assert get_fitter() == "ols"


class TestSetFitter:
    """Tests for set_fitter() validation."""

    def setup_method(self):
        import phenobias._config as _cfg
        _cfg._fitter_override = None

    def teardown_method(self):
        import phenobias._config as _cfg
        _cfg._fitter_override = None

    def test_accepts_valid_names(self):
        for name in ("ols", "gee", "auto"):
            set_fitter(name)  # should not raise

    def test_case_insensitive(self):
        set_fitter("GEE")
        assert get_fitter() == "gee"

    def test_rejects_invalid_name(self):
        with pytest.raises(ValueError, match="Unknown fitter"):
            set_fitter("lasso")

    def test_accepts_registered_fitter(self):
        register_fitter("lstsq", _LstsqFitter)
        try:
            set_fitter("LSTSQ")
            assert get_fitter() == "lstsq"
            assert resolve_fitter().name == "lstsq"
        finally:
            _FITTERS.pop("lstsq", None)

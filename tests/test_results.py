"""Tests for the BiasCorrectionResult object."""

import dataclasses
import json

import numpy as np
import pytest

from phenobias._results import BiasCorrectionResult, _numpy_to_python
from phenobias.misclassification import ClassMeans, TrimCounts


@pytest.fixture()
def unknown_result():
    return BiasCorrectionResult(
        corrected_coefs=np.array([0.4, -0.2]),
        fitted_coefs=np.array([0.3, 0.2, -0.1]),
        predictor_names=["bmi", "age"],
        method="unknown",
        link="identity",
        denominator=0.5,
        mu0=0.2,
        mu1=0.7,
        prevalence=np.float64(0.35),
        n_observations=100,
        fitter="ols",
        cutpoint=0.5,
        sensitivity=0.9,
        specificity=0.8,
        trim_counts=TrimCounts(
            true_controls=60.0,
            rank0cut=8.0,
            rank1cut=6.0,
            n_observed_controls=62,
            n_observed_cases=38,
        ),
        class_means=ClassMeans(mu0=0.2, mu1=0.7, n_controls_used=54, n_cases_used=32),
    )


class TestDictAccess:
    def test_getitem(self, unknown_result):
        assert unknown_result["link"] == "identity"

    def test_getitem_missing(self, unknown_result):
        with pytest.raises(KeyError):
            unknown_result["nope"]

    def test_get_default(self, unknown_result):
        assert unknown_result.get("nope", 3) == 3

    def test_contains(self, unknown_result):
        assert "mu1" in unknown_result
        assert "nope" not in unknown_result
        assert 1 not in unknown_result


class TestToDict:
    def test_json_serialisable(self, unknown_result):
        d = unknown_result.to_dict()
        json.dumps(d)
        assert d["corrected_coefs"] == [0.4, -0.2]
        assert isinstance(d["prevalence"], float)

    def test_nested_dataclasses_flattened(self, unknown_result):
        d = unknown_result.to_dict()
        assert d["trim_counts"]["rank0cut"] == 8.0
        assert d["class_means"]["n_cases_used"] == 32

    def test_missing_nested_is_none(self, unknown_result):
        known = dataclasses.replace(
            unknown_result, method="known", trim_counts=None, class_means=None
        )
        d = known.to_dict()
        assert d["trim_counts"] is None
        assert d["class_means"] is None


class TestImmutability:
    def test_frozen(self, unknown_result):
        with pytest.raises(dataclasses.FrozenInstanceError):
            unknown_result.link = "log"  # type: ignore[misc]


class TestToSeries:
    def test_index_and_name(self, unknown_result):
        s = unknown_result.to_series()
        assert list(s.index) == ["bmi", "age"]
        assert s.name == "corrected_identity"
        assert s["age"] == pytest.approx(-0.2)


class TestNumpyToPython:
    def test_nested(self):
        out = _numpy_to_python({"a": np.int64(2), "b": [np.float32(0.5)], "c": (np.bool_(True),)})
        assert out == {"a": 2, "b": [0.5], "c": (1,)}
        assert type(out["a"]) is int

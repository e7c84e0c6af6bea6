# tests/special/test_hypergeometric.py
import math

import numpy as np
import pytest
from scipy.special import hyp1f1, iv

from manifoldmeasures.config import option_context
from manifoldmeasures.special.hypergeometric import (
    hypergeometric_0f0,
    hypergeometric_0f1,
    hypergeometric_1f1,
    log_hypergeometric_0f1,
    log_hypergeometric_1f1,
    log_hypergeometric_pfq,
    log_hypergeometric_series,
)


def approx(a, b, tol=1e-10):
    return abs(a - b) <= tol * max(1.0, abs(b))


class TestScalarArgument:
    def test_0f1_bessel_closed_form(self):
        # 0F1(; b; x^2/4) = Gamma(b) (x/2)^(1-b) I_(b-1)(x)
        b, x = 1.5, 3.0
        expected = math.gamma(b) * (0.5 * x) ** (1.0 - b) * iv(b - 1.0, x)
        assert approx(hypergeometric_0f1(b, 0.25 * x * x), expected)

    def test_0f1_negative_argument(self):
        # 0F1(; 1/2; -z^2/4) = cos(z)
        z = 1.2
        assert approx(hypergeometric_0f1(0.5, -0.25 * z * z), math.cos(z))

    def test_1f1_kummer_identity(self):
        # 1F1(1/2; 1; z) = e^(z/2) I_0(z/2)
        for z in (0.3, 2.0, 15.0):
            assert approx(hypergeometric_1f1(0.5, 1.0, z), math.exp(0.5 * z) * iv(0.0, 0.5 * z))

    def test_1f1_matches_scipy(self):
        assert approx(hypergeometric_1f1(1.5, 2.5, -3.0), hyp1f1(1.5, 2.5, -3.0))

    def test_1f1_large_argument_stays_finite(self):
        out = log_hypergeometric_1f1(0.5, 1.5, 2000.0)
        assert np.isfinite(out)
        # 1F1(a; b; z) ~ Gamma(b)/Gamma(a) e^z z^(a - b)
        expected = math.lgamma(1.5) - math.lgamma(0.5) + 2000.0 - math.log(2000.0)
        assert out == pytest.approx(expected, rel=1e-6)

    def test_zero_argument(self):
        assert log_hypergeometric_0f1(2.0, 0.0) == 0.0
        assert log_hypergeometric_1f1(1.0, 3.0, np.zeros((3, 3))) == 0.0

    def test_0f0(self):
        assert approx(hypergeometric_0f0(1.5), math.exp(1.5))


class TestMatrixArgument:
    def test_0f0_is_exp_trace(self):
        X = np.array([[1.0, 0.2], [0.2, -0.5]])
        assert approx(log_hypergeometric_pfq((), (), X), np.trace(X))

    def test_rank_one_reduces_to_scalar(self):
        v = np.array([1.0, 2.0, 2.0]) / 3.0
        X = 2.5 * np.outer(v, v)
        assert approx(log_hypergeometric_1f1(0.5, 1.5, X), math.log(hyp1f1(0.5, 1.5, 2.5)))
        assert approx(log_hypergeometric_0f1(1.5, X), log_hypergeometric_0f1(1.5, 2.5))

    def test_general_matrix_needs_series_opt_in(self):
        X = np.diag([1.0, 0.5])
        with pytest.raises(NotImplementedError):
            log_hypergeometric_pfq((), (1.5,), X)

    @pytest.mark.parametrize("alpha", [2.0, 1.0, 0.5])
    def test_equal_parameters_give_exp_trace(self, alpha):
        # a = b cancels, leaving 0F0 = exp(tr X)
        X = np.diag([0.4, -0.3, 0.2])
        with option_context(hypergeometric_max_degree=30):
            assert approx(log_hypergeometric_pfq((1.5,), (1.5,), X, alpha=alpha), 0.3)

    @pytest.mark.parametrize("alpha", [2.0, 1.0, 0.5])
    def test_series_with_equal_parameters_is_exp_trace(self, alpha):
        # no cancellation here: the partition sum itself gives exp(tr X)
        eigs = [0.3, -0.2]
        out = log_hypergeometric_series((1.25,), (1.25,), eigs, alpha=alpha, max_degree=40)
        assert approx(out, 0.1, tol=1e-9)

    def test_series_matches_scalar_function_for_one_eigenvalue(self):
        out = log_hypergeometric_series((0.5,), (1.5,), [1.3], alpha=2.0, max_degree=80)
        assert approx(out, math.log(hyp1f1(0.5, 1.5, 1.3)), tol=1e-10)

    def test_series_factorizes_for_0f0(self):
        out = log_hypergeometric_series((), (), [0.5, 0.25], alpha=1.0, max_degree=40)
        assert approx(out, 0.75, tol=1e-9)

    def test_matrix_0f1_with_series(self):
        # the value is independent of eigenvector basis
        Q, _ = np.linalg.qr(np.array([[1.0, 2.0], [0.5, -1.0]]))
        D = np.diag([0.6, 0.2])
        with option_context(hypergeometric_max_degree=40):
            a = log_hypergeometric_0f1(1.5, D)
            b = log_hypergeometric_0f1(1.5, Q @ D @ Q.T)
        assert approx(a, b)
        assert a > 0.0

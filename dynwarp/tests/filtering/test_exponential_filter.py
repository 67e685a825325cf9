import numpy as np
import pytest

from dynwarp import option_context
from dynwarp.filtering import Edges, RecursiveExponentialFilter, a_from_sigma

ALL_EDGES = list(Edges)
ZERO_SLOPE_EDGES = [Edges.INPUT_ZERO_SLOPE, Edges.OUTPUT_ZERO_SLOPE]


class TestFilterParameter:
    def test_zero_sigma(self):
        assert a_from_sigma(0.0) == 0.0

    def test_range_and_monotonicity(self):
        sigmas = [0.1, 0.5, 1.0, 2.0, 10.0, 100.0]
        a = [a_from_sigma(sigma) for sigma in sigmas]
        assert all(0.0 < ai < 1.0 for ai in a)
        assert all(a0 < a1 for a0, a1 in zip(a[:-1], a[1:]))

    def test_known_value(self):
        # for sigma = 2, a = (1 + 4 - 3) / 4
        assert a_from_sigma(2.0) == pytest.approx(0.5)


class TestRecursiveExponentialFilter:
    def test_defaults(self):
        ref = RecursiveExponentialFilter(3.0)
        assert ref.sigma == 3.0
        assert ref.a == pytest.approx(a_from_sigma(3.0))
        assert ref.edges is Edges.OUTPUT_ZERO_SLOPE

    def test_edges_option(self):
        with option_context("filtering.edges", "input_zero_value"):
            ref = RecursiveExponentialFilter(3.0)
        assert ref.edges is Edges.INPUT_ZERO_VALUE
        assert RecursiveExponentialFilter(3.0).edges is Edges.OUTPUT_ZERO_SLOPE

    @pytest.mark.parametrize("sigma", [-1.0, float("inf"), float("nan")])
    def test_invalid_sigma(self, sigma):
        with pytest.raises(ValueError):
            RecursiveExponentialFilter(sigma)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            RecursiveExponentialFilter(1.0, edges="zero_padding")
        with pytest.raises(ValueError):
            RecursiveExponentialFilter(1.0).set_edges("mirror")

    def test_parse_edges(self):
        assert Edges.parse("INPUT_ZERO_SLOPE") is Edges.INPUT_ZERO_SLOPE
        assert Edges.parse(Edges.OUTPUT_ZERO_VALUE) is Edges.OUTPUT_ZERO_VALUE
        assert Edges.INPUT_ZERO_VALUE.input_anchored
        assert not Edges.OUTPUT_ZERO_SLOPE.input_anchored
        assert Edges.OUTPUT_ZERO_SLOPE.zero_slope
        assert not Edges.INPUT_ZERO_VALUE.zero_slope

    @pytest.mark.parametrize(
        "x", [[], np.ones((3, 2)), [1.0, np.nan, 2.0], [np.inf, 1.0]]
    )
    def test_invalid_sequences(self, x):
        with pytest.raises(ValueError):
            RecursiveExponentialFilter(1.0).filter(x)

    @pytest.mark.parametrize("edges", ALL_EDGES)
    def test_identity(self, edges):
        x = np.random.default_rng(0).normal(size=30)
        ref = RecursiveExponentialFilter(0.0, edges=edges)
        y = ref.filter(x)
        assert y is not x
        np.testing.assert_array_equal(y, x)

    @pytest.mark.parametrize("edges", ALL_EDGES)
    @pytest.mark.parametrize("n", [1, 2, 3, 5, 17])
    def test_length_preserved(self, edges, n):
        x = np.arange(n, dtype=float)
        y = RecursiveExponentialFilter(2.0, edges=edges).filter(x)
        assert y.shape == (n,)
        assert np.all(np.isfinite(y))

    @pytest.mark.parametrize("edges", ALL_EDGES)
    def test_single_sample(self, edges):
        y = RecursiveExponentialFilter(5.0, edges=edges).filter([4.0])
        np.testing.assert_array_equal(y, [4.0])

    @pytest.mark.parametrize("edges", ZERO_SLOPE_EDGES)
    @pytest.mark.parametrize("sigma", [0.5, 1.0, 3.0, 10.0, 50.0])
    @pytest.mark.parametrize("n", [2, 3, 10, 101])
    def test_constant_preserved(self, edges, sigma, n):
        x = np.full(n, 2.5)
        y = RecursiveExponentialFilter(sigma, edges=edges).filter(x)
        np.testing.assert_allclose(y, x, rtol=1e-9)

    @pytest.mark.parametrize("edges", [Edges.INPUT_ZERO_VALUE, Edges.OUTPUT_ZERO_VALUE])
    def test_zero_value_edges_decay(self, edges):
        x = np.full(101, 2.5)
        y = RecursiveExponentialFilter(5.0, edges=edges).filter(x)
        assert y[0] < 2.5
        assert y[-1] < 2.5
        assert y[50] == pytest.approx(2.5, rel=1e-3)

    @pytest.mark.parametrize("edges", ALL_EDGES)
    def test_impulse_response(self, edges):
        # sigma = 2 gives a = 0.5, h[n] = 0.5^|n| / 3 away from the edges
        x = np.zeros(201)
        x[100] = 1.0
        y = RecursiveExponentialFilter(2.0, edges=edges).filter(x)
        expected = 0.5 ** np.abs(np.arange(-10, 11)) / 3.0
        np.testing.assert_allclose(y[90:111], expected, rtol=1e-9, atol=1e-15)
        assert np.sum(y) == pytest.approx(1.0, rel=1e-9)

    @pytest.mark.parametrize("edges", ALL_EDGES)
    def test_variance_decreases(self, edges):
        x = np.random.default_rng(42).normal(size=5000)
        variances = [
            np.var(RecursiveExponentialFilter(sigma, edges=edges).filter(x))
            for sigma in [0.0, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0]
        ]
        assert all(v0 > v1 for v0, v1 in zip(variances[:-1], variances[1:]))

    def test_input_not_modified(self):
        x = np.random.default_rng(1).normal(size=50)
        x_before = x.copy()
        ref = RecursiveExponentialFilter(3.0)
        y = ref.filter(x)
        np.testing.assert_array_equal(x, x_before)

        # filtering in place through reassignment gives the same result
        x = ref.filter(x)
        np.testing.assert_array_equal(x, y)

    def test_accepts_lists(self):
        ref = RecursiveExponentialFilter(1.0)
        y = ref.filter([1.0, 2.0, 3.0])
        assert isinstance(y, np.ndarray)
        np.testing.assert_array_equal(y, ref.apply(np.array([1.0, 2.0, 3.0])))

    def test_edges_differ(self):
        x = np.linspace(0.0, 10.0, 40)
        results = [RecursiveExponentialFilter(4.0, edges=e).filter(x) for e in ALL_EDGES]
        for i in range(len(results)):
            for j in range(i + 1, len(results)):
                assert not np.allclose(results[i], results[j])

        ref = RecursiveExponentialFilter(4.0, edges=Edges.INPUT_ZERO_SLOPE)
        ref.set_edges("output_zero_slope")
        np.testing.assert_array_equal(ref.filter(x), results[ALL_EDGES.index(Edges.OUTPUT_ZERO_SLOPE)])

    def test_zero_slope_at_output_edges(self):
        x = np.linspace(0.0, 10.0, 200)
        y = RecursiveExponentialFilter(10.0, edges=Edges.OUTPUT_ZERO_SLOPE).filter(x)
        interior_slope = y[100] - y[99]
        assert abs(y[1] - y[0]) < 0.5 * interior_slope
        assert abs(y[-1] - y[-2]) < 0.5 * interior_slope

    def test_repr(self):
        assert repr(RecursiveExponentialFilter(2.0, edges="input_zero_value")) == (
            "RecursiveExponentialFilter(sigma=2.0, edges=input_zero_value)"
        )

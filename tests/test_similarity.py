"""
Tests for the similarity functions.
"""

import math

import pytest

from memvec import DimensionMismatchError, cosine, dot_product, euclidean, get_similarity


class TestCosine:
    """Tests for cosine()."""

    def test_identical_vectors_score_one(self):
        assert cosine([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors_score_zero(self):
        assert cosine([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors_score_minus_one(self):
        assert cosine([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_scale_invariant(self):
        assert cosine([1.0, 2.0, 3.0], [10.0, 20.0, 30.0]) == pytest.approx(1.0)

    def test_symmetric(self):
        a, b = [0.1, 0.7, -0.2], [0.5, -0.3, 0.9]
        assert cosine(a, b) == pytest.approx(cosine(b, a))

    def test_zero_vector_scores_zero(self):
        """Zero vectors score 0.0 instead of NaN."""
        score = cosine([0.0, 0.0], [1.0, 1.0])
        assert score == 0.0
        assert not math.isnan(score)

    def test_returns_python_float(self):
        assert isinstance(cosine([1.0, 0.0], [1.0, 1.0]), float)

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError, match="3 != 2"):
            cosine([1.0, 2.0, 3.0], [1.0, 2.0])

    def test_dimension_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            cosine([1.0], [1.0, 2.0])


class TestOtherFunctions:
    """Tests for dot_product() and euclidean()."""

    def test_dot_product(self):
        assert dot_product([1.0, 2.0, 3.0], [4.0, 5.0, 6.0]) == pytest.approx(32.0)

    def test_euclidean_identical_is_one(self):
        assert euclidean([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_euclidean_decreases_with_distance(self):
        near = euclidean([0.0, 0.0], [1.0, 0.0])
        far = euclidean([0.0, 0.0], [3.0, 4.0])
        assert near == pytest.approx(0.5)
        assert far == pytest.approx(1.0 / 6.0)
        assert near > far

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            dot_product([1.0], [1.0, 2.0])
        with pytest.raises(DimensionMismatchError):
            euclidean([1.0], [1.0, 2.0])


class TestGetSimilarity:
    """Tests for get_similarity()."""

    @pytest.mark.parametrize("name,expected", [
        ("cosine", cosine),
        ("COSINE", cosine),
        ("dot", dot_product),
        ("dot-product", dot_product),
        ("euclidean", euclidean),
        ("l2", euclidean),
    ])
    def test_lookup_by_name(self, name, expected):
        assert get_similarity(name) is expected

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown similarity"):
            get_similarity("manhattan")

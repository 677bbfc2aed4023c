"""
Correlation Analyzer Tests

Covers exact symmetry, the zero-variance guard and the empty dataset.
"""

import numpy as np
import pytest

from citation_engine.services.correlation import (
    CORRELATION_LABELS,
    calculate_correlation_matrix,
    pearson_correlation,
)


class TestPearsonCorrelation:

    def test_perfect_negative(self):
        r = pearson_correlation(np.array([1.0, 2.0, 3.0]), np.array([3.0, 2.0, 1.0]))
        assert r == pytest.approx(-1.0)

    def test_zero_variance_returns_zero(self):
        r = pearson_correlation(np.array([5.0, 5.0, 5.0]), np.array([1.0, 2.0, 3.0]))
        assert r == 0.0

    def test_empty_columns(self):
        assert pearson_correlation(np.array([]), np.array([])) == 0.0

    def test_matches_numpy_corrcoef(self):
        x = np.array([80.0, 10.0, 50.0, 33.0])
        y = np.array([70.0, 5.0, 50.0, 60.0])
        assert pearson_correlation(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1])


class TestCorrelationMatrix:

    def test_labels_and_shape(self, scenario_sources):
        result = calculate_correlation_matrix(scenario_sources)
        assert result.labels == ["Mention Rate", "SOA", "Sentiment", "Citations"]
        assert result.labels == CORRELATION_LABELS
        assert len(result.matrix) == 4
        assert all(len(row) == 4 for row in result.matrix)

    def test_exactly_symmetric(self, scenario_sources, four_quadrant_sources):
        for dataset in (scenario_sources, four_quadrant_sources):
            m = calculate_correlation_matrix(dataset).matrix
            for i in range(4):
                for j in range(4):
                    assert m[i][j] == m[j][i]

    def test_unit_diagonal(self, four_quadrant_sources):
        m = calculate_correlation_matrix(four_quadrant_sources).matrix
        assert [m[i][i] for i in range(4)] == [1.0, 1.0, 1.0, 1.0]

    def test_values_within_bounds(self, four_quadrant_sources):
        m = np.array(calculate_correlation_matrix(four_quadrant_sources).matrix)
        assert np.all(m <= 1.0)
        assert np.all(m >= -1.0)

    def test_identical_columns_correlate_fully(self, make_source):
        sources = [
            make_source("a.com", mentionRate=10, shareOfAnswer=10, sentiment=30, citations=3),
            make_source("b.com", mentionRate=40, shareOfAnswer=40, sentiment=10, citations=1),
            make_source("c.com", mentionRate=70, shareOfAnswer=70, sentiment=20, citations=9),
        ]
        m = calculate_correlation_matrix(sources).matrix
        assert m[0][1] == pytest.approx(1.0)

    def test_zero_variance_column(self, make_source):
        sources = [
            make_source("a.com", mentionRate=10, shareOfAnswer=5, sentiment=50, citations=3),
            make_source("b.com", mentionRate=40, shareOfAnswer=15, sentiment=50, citations=1),
        ]
        m = calculate_correlation_matrix(sources).matrix
        sentiment = CORRELATION_LABELS.index("Sentiment")
        assert m[sentiment][sentiment] == 0.0
        assert all(m[sentiment][j] == 0.0 for j in range(4))
        assert all(not np.isnan(v) for row in m for v in row)

    def test_single_source_is_all_zero(self, make_source):
        m = calculate_correlation_matrix([make_source("a.com", mentionRate=10, citations=4)]).matrix
        assert m == [[0.0] * 4 for _ in range(4)]

    def test_empty_dataset(self):
        result = calculate_correlation_matrix([])
        assert result.labels == []
        assert result.matrix == []

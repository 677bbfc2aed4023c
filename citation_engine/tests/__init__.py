'''
Citation Engine Test Suite

Test Modules:
-------------
- test_statistics.py: Median, nearest-rank percentile, non-finite filtering
- test_normalization.py: Upstream alias resolution, coercion, sentiment scales
- test_scoring.py: Value score formula and normalization bounds
- test_classification.py: Dataset thresholds, quadrant cascade, zone view
- test_correlation.py: Symmetric Pearson matrix and zero-variance guard
- test_takeaways.py: Takeaway rules and selection
- test_trends_filters.py: Trend selection, trend aggregation, numeric filters,
  source type distribution
- test_scheduler.py: Deferred scoring, cancellation, memo cache
- test_api.py: HTTP surface via FastAPI TestClient

Running Tests:
--------------
    pip install -e ".[test]"
    pytest citation_engine/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []

"""
Quadrant Classification Test Module

Covers the dataset-relative thresholds, the four-rule cascade, the
degenerate single-source and identical-row datasets, the atomic
score-and-classify pass and the zone view.

Expected values in the scenario tests are hand-computed from the formulas in
citation_engine/services/classification.py.
"""

import pytest

from citation_engine.core.config import Settings
from citation_engine.models import Quadrant, QuadrantCounts, Zone
from citation_engine.services.classification import (
    classification_composite_score,
    classify_quadrant,
    classify_zones,
    compute_dataset_thresholds,
    count_quadrants,
    evaluate_quadrant_predicates,
    score_and_classify,
    zone_score,
)
from citation_engine.services.scoring import compute_normalization_bounds


def _by_name(rows):
    return {r.name: r for r in rows}


# =============================================================================
# Thresholds
# =============================================================================


@pytest.mark.scenario
class TestDatasetThresholds:

    def test_scenario_thresholds(self, scenario_sources):
        t = compute_dataset_thresholds(scenario_sources)
        assert t.mentionMedian == 50
        assert t.soaMedian == 50
        assert t.sentimentMedian == pytest.approx(0.9)
        assert t.citationsMedian == pytest.approx(0.5)
        assert t.compositeMedian == pytest.approx(0.5)
        assert t.compositeTopQuartile == pytest.approx(0.805)
        assert t.maxCitations == 50

    def test_composite_scores(self, scenario_sources):
        bounds = compute_normalization_bounds(scenario_sources)
        composites = [classification_composite_score(s, bounds) for s in scenario_sources]
        assert composites == pytest.approx([0.805, 0.2465, 0.5])

    def test_empty_dataset_thresholds_are_zero(self):
        t = compute_dataset_thresholds([])
        assert t.mentionMedian == 0
        assert t.compositeTopQuartile == 0


# =============================================================================
# Cascade
# =============================================================================


@pytest.mark.scenario
class TestQuadrantCascade:

    def test_reference_scenario(self, scenario_sources):
        scored = _by_name(score_and_classify(scenario_sources))
        assert scored["a.com"].quadrant == Quadrant.PRIORITY
        assert scored["b.com"].quadrant not in (Quadrant.PRIORITY, Quadrant.REPUTATION)
        assert scored["b.com"].quadrant == Quadrant.MONITOR
        assert scored["c.com"].quadrant == Quadrant.REPUTATION

    def test_b_fails_composite_healthy(self, scenario_sources):
        thresholds = compute_dataset_thresholds(scenario_sources)
        p = evaluate_quadrant_predicates(scenario_sources[1], thresholds)
        assert not p.visibility_strong
        assert p.sentiment_positive
        assert not p.composite_healthy

    def test_one_source_per_quadrant(self, four_quadrant_sources):
        scored = _by_name(score_and_classify(four_quadrant_sources))
        assert scored["x.com"].quadrant == Quadrant.PRIORITY
        assert scored["y.com"].quadrant == Quadrant.GROWTH
        assert scored["z.com"].quadrant == Quadrant.MONITOR
        assert scored["w.com"].quadrant == Quadrant.REPUTATION

    def test_priority_takes_precedence_over_reputation(self, four_quadrant_sources):
        # x.com is visible with above-median sentiment and citations too,
        # but rule order alone must decide
        thresholds = compute_dataset_thresholds(four_quadrant_sources)
        assert classify_quadrant(four_quadrant_sources[0], thresholds) == Quadrant.PRIORITY

    def test_single_source_is_priority(self, make_source):
        only = make_source("solo.com", mentionRate=3, shareOfAnswer=1, sentiment=5, citations=0)
        scored = score_and_classify([only])
        assert len(scored) == 1
        assert scored[0].quadrant == Quadrant.PRIORITY

    def test_identical_sources_share_one_quadrant(self, identical_sources):
        scored = score_and_classify(identical_sources)
        assert {s.quadrant for s in scored} == {Quadrant.PRIORITY}

    def test_empty_dataset(self):
        assert score_and_classify([]) == []
        assert count_quadrants([]) == QuadrantCounts()


# =============================================================================
# Score-and-classify pass
# =============================================================================


class TestScoreAndClassify:

    def test_counts_sum_to_dataset_size(self, four_quadrant_sources, scenario_sources):
        for dataset in (four_quadrant_sources, scenario_sources, four_quadrant_sources[:2]):
            counts = count_quadrants(score_and_classify(dataset))
            assert counts.total == len(dataset)

    def test_idempotent(self, scenario_sources):
        first = score_and_classify(scenario_sources)
        second = score_and_classify(scenario_sources)
        assert [(s.valueScore, s.quadrant) for s in first] == [
            (s.valueScore, s.quadrant) for s in second
        ]

    def test_preserves_input_fields_and_order(self, scenario_sources):
        scored = score_and_classify(scenario_sources)
        assert [s.name for s in scored] == ["a.com", "b.com", "c.com"]
        assert scored[0].citations == 50
        assert scored[0].valueScore == pytest.approx(73.0)

    def test_rescoring_scored_rows(self, scenario_sources):
        scored = score_and_classify(scenario_sources)
        rescored = score_and_classify(scored)
        assert [s.quadrant for s in rescored] == [s.quadrant for s in scored]

    def test_unknown_source_type_is_tolerated(self, make_source):
        scored = score_and_classify([make_source("pod.fm", sourceType="podcast", mentionRate=10)])
        assert scored[0].sourceType == "podcast"


# =============================================================================
# Zone view
# =============================================================================


class TestZones:

    def test_one_source_per_zone(self, four_quadrant_sources):
        zoned = _by_name(classify_zones(four_quadrant_sources))
        assert zoned["x.com"].zone == Zone.MARKET_LEADERS
        assert zoned["y.com"].zone == Zone.GROWTH_BETS
        assert zoned["z.com"].zone == Zone.MONITOR_IMPROVE
        assert zoned["w.com"].zone == Zone.REPUTATION_RISKS

    def test_zone_scores_are_on_percent_scale(self, four_quadrant_sources):
        zoned = _by_name(classify_zones(four_quadrant_sources))
        assert zoned["x.com"].score == pytest.approx(91.0)
        assert zoned["y.com"].score == pytest.approx(59.5)
        assert zoned["w.com"].score == pytest.approx(32.5)

    def test_scenario_zones(self, scenario_sources):
        zoned = _by_name(classify_zones(scenario_sources))
        assert zoned["a.com"].zone == Zone.MARKET_LEADERS
        assert zoned["b.com"].zone == Zone.MONITOR_IMPROVE
        assert zoned["c.com"].zone == Zone.MONITOR_IMPROVE

    def test_explicit_settings_drive_zone_scores(self, four_quadrant_sources):
        mention_only = Settings(
            composite_weight_mention=1.0,
            composite_weight_soa=0.0,
            composite_weight_sentiment=0.0,
            composite_weight_citations=0.0,
        )
        zoned = _by_name(classify_zones(four_quadrant_sources, mention_only))
        assert zoned["x.com"].score == pytest.approx(90.0)
        assert zoned["y.com"].score == pytest.approx(10.0)
        assert zone_score(four_quadrant_sources[2], 100.0, mention_only) == pytest.approx(50.0)

    def test_empty(self):
        assert classify_zones([]) == []

import pytest

from core.column_mapping import (
    MappingAggregator,
    MatchCandidate,
    MatchStrategy,
    OptimalAssignment,
    RawColumn,
    get_strategy,
)

NORMALIZED = MatchStrategy.NORMALIZED
SYNONYM = MatchStrategy.SYNONYM


def aggregate(registry, candidates, aggregator=None):
    columns = [RawColumn(header, index) for index, header in enumerate(candidates)]
    by_column = {column: candidates[column.header] for column in columns}
    return (aggregator or MappingAggregator()).aggregate(columns, by_column, registry)


def test_field_goes_to_strongest_column(registry):
    result = aggregate(registry, {
        "A": [MatchCandidate("name", 0.9, NORMALIZED)],
        "B": [MatchCandidate("name", 0.85, NORMALIZED), MatchCandidate("tags", 0.7, SYNONYM)],
    })
    assert result.recommended_mapping == {"A": "name", "B": "tags"}


def test_no_field_assigned_twice(registry):
    result = aggregate(registry, {
        "A": [MatchCandidate("name", 0.9, NORMALIZED)],
        "B": [MatchCandidate("name", 0.8, NORMALIZED)],
        "C": [MatchCandidate("name", 0.7, SYNONYM)],
    })
    assert result.recommended_mapping == {"A": "name"}
    assert result.unmapped_columns == ["B", "C"]


def test_equal_confidence_prefers_stronger_strategy(registry):
    result = aggregate(registry, {
        "A": [MatchCandidate("name", 0.85, SYNONYM)],
        "B": [MatchCandidate("name", 0.85, NORMALIZED)],
    })
    assert result.recommended_mapping == {"B": "name"}


def test_full_tie_prefers_earlier_column(registry):
    result = aggregate(registry, {
        "A": [MatchCandidate("name", 0.85, NORMALIZED)],
        "B": [MatchCandidate("name", 0.85, NORMALIZED)],
    })
    assert result.recommended_mapping == {"A": "name"}


def test_low_confidence_is_reported_but_not_mapped(registry):
    result = aggregate(registry, {"A": [MatchCandidate("tags", 0.4, MatchStrategy.FUZZY)]})
    assert result.recommended_mapping == {}
    detected = result.detected_columns[0]
    assert detected.mapped is False
    assert detected.field == "tags"
    assert detected.confidence == 0.4
    assert result.confidence == 0.0


def test_column_without_candidates(registry):
    result = aggregate(registry, {"A": []})
    detected = result.detected_columns[0]
    assert detected.field is None
    assert detected.strategy is None
    assert detected.confidence == 0.0


def test_missing_required_fields_reduce_confidence(registry):
    result = aggregate(registry, {
        "A": [MatchCandidate("name", 1.0, MatchStrategy.EXACT)],
        "B": [MatchCandidate("tags", 0.8, SYNONYM)],
    })
    assert result.missing_required_fields == ["model", "workspace"]
    assert result.confidence == pytest.approx(0.9 * 1 / 3, abs=1e-4)


def test_overall_confidence():
    assert MappingAggregator.overall_confidence([], 0, 3) == 0.0
    assert MappingAggregator.overall_confidence([1.0, 0.8], 2, 2) == 0.9
    assert MappingAggregator.overall_confidence([0.6], 0, 0) == 0.6


def test_result_carries_registry_version(registry):
    result = aggregate(registry, {"A": []})
    assert result.registry_version == registry.version
    assert result.delimiter is None


def test_optimal_strategy_maximizes_total_confidence(registry):
    candidates = {
        "A": [MatchCandidate("name", 0.9, NORMALIZED), MatchCandidate("tags", 0.85, SYNONYM)],
        "B": [MatchCandidate("name", 0.88, NORMALIZED)],
    }
    greedy = aggregate(registry, candidates)
    assert greedy.recommended_mapping == {"A": "name"}

    optimal = aggregate(registry, candidates, MappingAggregator(strategy=OptimalAssignment()))
    assert optimal.recommended_mapping == {"A": "tags", "B": "name"}


def test_unknown_strategy():
    with pytest.raises(ValueError):
        get_strategy("random")

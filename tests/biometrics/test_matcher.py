from __future__ import annotations

import pytest

from src.attendance_admission.attendance_admission.biometrics.matcher import (
    EmbeddingMatcher,
    cosine_similarity,
    euclidean_distance,
    threshold_for,
)
from src.attendance_admission.attendance_admission.core.exceptions import EmbeddingDimensionError
from tests.fakes import pair_at


def test_single_pose_within_both_bounds_matches():
    stored, probe = pair_at(0.15, 0.95)

    result = EmbeddingMatcher().match(probe, [stored])

    assert result.is_match
    assert result.distance == pytest.approx(0.15)
    assert result.similarity == pytest.approx(0.95)
    assert result.threshold == 0.20
    assert result.compared == 1


def test_multi_pose_needs_similarity_as_well_as_distance():
    stored, probe = pair_at(0.22, 0.88)

    result = EmbeddingMatcher().match(probe, [stored, [-5.0, -5.0]])

    assert result.distance == pytest.approx(0.22)
    assert result.threshold == 0.25
    assert not result.is_match


def test_pose_count_changes_distance_threshold():
    stored, probe = pair_at(0.22, 0.95)

    assert not EmbeddingMatcher().match(probe, [stored]).is_match
    assert EmbeddingMatcher().match(probe, [stored, [9.0, 9.0]]).is_match


def test_best_match_is_minimum_distance():
    stored, probe = pair_at(0.1, 0.99)

    result = EmbeddingMatcher().match(probe, [[4.0, 4.0], stored, [-1.0, 2.0]])

    assert result.best_index == 1
    assert result.compared == 3


def test_length_mismatch_raises():
    with pytest.raises(EmbeddingDimensionError):
        EmbeddingMatcher().match([0.1, 0.2, 0.3], [[0.1, 0.2]])
    with pytest.raises(EmbeddingDimensionError):
        EmbeddingMatcher().match([0.1, 0.2], [[0.1, 0.2], [0.1, 0.2, 0.3]])


def test_zero_vector_similarity_is_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)


def test_threshold_for_pose_count():
    assert threshold_for(1) == 0.20
    assert threshold_for(3) == 0.25

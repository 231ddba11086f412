from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..core.constants import (
    MULTI_POSE_DISTANCE_THRESHOLD,
    SIMILARITY_THRESHOLD,
    SINGLE_POSE_DISTANCE_THRESHOLD,
)
from ..core.exceptions import EmbeddingDimensionError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    is_match: bool
    distance: float
    similarity: float
    best_index: int
    compared: int
    threshold: float


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    va, vb = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise EmbeddingDimensionError(f"Embedding length mismatch: {va.size} vs {vb.size}")
    return float(np.linalg.norm(va - vb))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    va, vb = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise EmbeddingDimensionError(f"Embedding length mismatch: {va.size} vs {vb.size}")
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


def threshold_for(pose_count: int) -> float:
    """Multi-pose profiles get a slightly looser distance bound."""
    return MULTI_POSE_DISTANCE_THRESHOLD if pose_count > 1 else SINGLE_POSE_DISTANCE_THRESHOLD


class EmbeddingMatcher:
    """So khớp embedding khuôn mặt với hồ sơ đã đăng ký của chính người dùng.

    Chọn embedding có khoảng cách Euclid nhỏ nhất; chấp nhận khi khoảng cách
    <= threshold(n) VÀ cosine >= 0.92.
    """

    def __init__(self, *, similarity_threshold: float = SIMILARITY_THRESHOLD):
        self._similarity_threshold = similarity_threshold

    def match(self, probe: Sequence[float], stored: Sequence[Sequence[float]]) -> MatchResult:
        if not stored:
            raise ValidationError("No stored embeddings to compare against")

        lengths = {len(e) for e in stored}
        if len(lengths) != 1:
            raise EmbeddingDimensionError(f"Stored embeddings have mixed lengths: {sorted(lengths)}")
        if len(probe) not in lengths:
            raise EmbeddingDimensionError(
                f"Probe length {len(probe)} does not match stored length {next(iter(lengths))}"
            )

        matrix = np.asarray(stored, dtype=float)
        vector = np.asarray(probe, dtype=float)
        distances = np.linalg.norm(matrix - vector, axis=1)
        best = int(np.argmin(distances))

        distance = float(distances[best])
        similarity = cosine_similarity(matrix[best], vector)
        threshold = threshold_for(len(stored))
        is_match = distance <= threshold and similarity >= self._similarity_threshold

        logger.debug(
            "Face match: distance=%.4f similarity=%.4f index=%d/%d threshold=%.2f match=%s",
            distance, similarity, best, len(stored), threshold, is_match,
        )
        return MatchResult(
            is_match=is_match,
            distance=distance,
            similarity=similarity,
            best_index=best,
            compared=len(stored),
            threshold=threshold,
        )

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..common.validators import require_vector
from ..core.constants import EXPECTED_EMBEDDING_SIZE
from ..core.exceptions import EmbeddingDimensionError, ValidationError
from .repository import FaceProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentResult:
    user_id: str
    poses_stored: int
    dimension: int


class EnrollmentService:
    """Use case: đăng ký (hoặc ghi đè) hồ sơ khuôn mặt của một người dùng.

    Accepts the multi-pose `face_embeddings` list or a legacy single
    `face_embedding`. Every pose must share one dimensionality; a size other
    than the expected one is logged but still stored.
    """

    def __init__(self, profiles: FaceProfileRepository, *, expected_size: int = EXPECTED_EMBEDDING_SIZE):
        self._profiles = profiles
        self._expected_size = expected_size

    def enroll(
        self,
        user_id: str,
        *,
        face_embeddings: Optional[Sequence[Any]] = None,
        face_embedding: Optional[Sequence[Any]] = None,
    ) -> EnrollmentResult:
        if face_embeddings:
            raw = list(face_embeddings)
        elif face_embedding:
            raw = [face_embedding]
        else:
            raise ValidationError("face_embeddings or face_embedding is required")

        poses = [require_vector(e, f"face_embeddings[{i}]") for i, e in enumerate(raw)]
        lengths = {len(p) for p in poses}
        if len(lengths) != 1:
            raise EmbeddingDimensionError(f"All poses must share one length, got {sorted(lengths)}")

        dimension = lengths.pop()
        if dimension != self._expected_size:
            logger.warning(
                "Enrolling user %s with embedding size %d (expected %d)",
                user_id, dimension, self._expected_size,
            )

        self._profiles.upsert(user_id=user_id, embeddings=poses)
        logger.info("Stored %d pose(s) for user %s", len(poses), user_id)
        return EnrollmentResult(user_id=user_id, poses_stored=len(poses), dimension=dimension)

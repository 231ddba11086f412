from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Embedding, FaceProfile


class FaceProfileRepository(Protocol):
    def get_for_user(self, user_id: str) -> Optional[FaceProfile]:
        raise NotImplementedError

    def upsert(self, *, user_id: str, embeddings: Sequence[Embedding]) -> None:
        raise NotImplementedError

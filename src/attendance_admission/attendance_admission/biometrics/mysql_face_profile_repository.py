from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .model import Embedding, FaceProfile
from .repository import FaceProfileRepository


class MySQLFaceProfileRepository(FaceProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: str) -> Optional[FaceProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, face_embeddings FROM face_profiles WHERE user_id=%s",
                (str(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            raw = load_json(r["face_embeddings"]) or []
            return FaceProfile(
                user_id=str(r["user_id"]),
                embeddings=tuple(tuple(float(v) for v in e) for e in raw),
            )

    def upsert(self, *, user_id: str, embeddings: Sequence[Embedding]) -> None:
        dimension = len(embeddings[0]) if embeddings else 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO face_profiles(user_id, face_embeddings, dimension)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    face_embeddings=VALUES(face_embeddings),
                    dimension=VALUES(dimension)
                """,
                (str(user_id), dump_json([list(e) for e in embeddings]), dimension),
            )

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .model import AlignmentInstruction, AlignmentStatus, FaceObservation, FrameSize

CENTER_X_RANGE = (0.15, 0.85)
CENTER_Y_RANGE = (0.10, 0.90)
FACE_RATIO_RANGE = (0.10, 0.80)
MOVE_CLOSER_BELOW = 0.15
MAX_ABS_YAW = 35.0
MAX_ABS_ROLL = 25.0


@dataclass(frozen=True)
class AlignmentResult:
    status: AlignmentStatus
    aligned: bool
    instruction: Optional[AlignmentInstruction] = None
    center_x: Optional[float] = None
    center_y: Optional[float] = None
    face_ratio: Optional[float] = None


def _inside(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return low < value < high


class AlignmentGate:
    """Kiểm tra khuôn mặt đã nằm đúng khung chưa trước khi lấy embedding.

    Stateless: mỗi khung hình được đánh giá độc lập.
    """

    def check(self, faces: Sequence[FaceObservation], frame: FrameSize) -> AlignmentResult:
        if not faces:
            return AlignmentResult(status=AlignmentStatus.NO_FACE, aligned=False)
        if len(faces) > 1:
            return AlignmentResult(status=AlignmentStatus.MULTIPLE_FACES, aligned=False)

        face = faces[0]
        cx = face.box.center_x / frame.width
        cy = face.box.center_y / frame.height
        ratio = face.box.width / frame.width

        centered = _inside(cx, CENTER_X_RANGE) and _inside(cy, CENTER_Y_RANGE)
        sized = _inside(ratio, FACE_RATIO_RANGE)
        straight = abs(face.yaw) < MAX_ABS_YAW and abs(face.roll) < MAX_ABS_ROLL

        # First failing rule decides the hint
        if not sized:
            instruction = (
                AlignmentInstruction.MOVE_CLOSER if ratio < MOVE_CLOSER_BELOW else AlignmentInstruction.MOVE_BACK
            )
        elif not centered:
            instruction = AlignmentInstruction.CENTER_FACE
        elif not straight:
            instruction = AlignmentInstruction.LOOK_STRAIGHT
        else:
            instruction = AlignmentInstruction.HOLD_STILL

        return AlignmentResult(
            status=AlignmentStatus.SINGLE_FACE,
            aligned=centered and sized and straight,
            instruction=instruction,
            center_x=cx,
            center_y=cy,
            face_ratio=ratio,
        )

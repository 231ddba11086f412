from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..biometrics.alignment import AlignmentGate, AlignmentResult
from ..biometrics.frames import FrameChannel
from ..biometrics.liveness import LivenessGate
from ..biometrics.matcher import EmbeddingMatcher, MatchResult
from ..biometrics.model import FaceObservation, FrameSize, LivenessState
from ..core.enums import Capability, CapabilityStatus
from .model import FrameAnalysis, QueuedEvent, SubmitResult
from .offline_queue import OfflineQueue
from .permissions import CapabilityPlatform, PermissionArbiter
from .settings import ClientSettings
from .submitter import AttendanceSubmitter
from .sync import SyncWorker
from .transport import AdmissionClient


class AttendanceClient:
    """Điểm truy cập duy nhất cho ứng dụng trên thiết bị chấm công."""

    def __init__(
        self,
        *,
        submitter: AttendanceSubmitter,
        queue: OfflineQueue,
        arbiter: PermissionArbiter,
        matcher: Optional[EmbeddingMatcher] = None,
        alignment: Optional[AlignmentGate] = None,
        liveness: Optional[LivenessGate] = None,
        sync: Optional[SyncWorker] = None,
    ):
        self._submitter = submitter
        self._queue = queue
        self._arbiter = arbiter
        self._matcher = matcher or EmbeddingMatcher()
        self._alignment = alignment or AlignmentGate()
        self._liveness = liveness or LivenessGate()
        self.sync = sync

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        token_provider: Callable[[], Optional[str]],
        platform: CapabilityPlatform,
    ) -> "AttendanceClient":
        client = AdmissionClient(
            settings.api_url,
            token_provider,
            probe_timeout=settings.probe_timeout,
            submit_timeout=settings.submit_timeout,
        )
        queue = OfflineQueue(settings.queue_path)
        submitter = AttendanceSubmitter(client, queue, settings=settings)
        return cls(
            submitter=submitter,
            queue=queue,
            arbiter=PermissionArbiter(platform, wait_seconds=settings.permission_wait_seconds),
            sync=SyncWorker(submitter, interval=settings.sync_interval_seconds),
        )

    def match_face(self, probe: Sequence[float], stored: Sequence[Sequence[float]]) -> MatchResult:
        return self._matcher.match(probe, stored)

    def check_alignment(self, faces: Sequence[FaceObservation], frame_size: FrameSize) -> AlignmentResult:
        return self._alignment.check(faces, frame_size)

    def check_liveness(self, face: FaceObservation) -> LivenessState:
        return self._liveness.observe(face)

    def reset_liveness(self) -> None:
        self._liveness.reset()

    def analyze_frame(self, faces: Sequence[FaceObservation], frame_size: FrameSize) -> FrameAnalysis:
        """Liveness only advances on frames where the face is aligned."""
        alignment = self.check_alignment(faces, frame_size)
        liveness = self.check_liveness(faces[0]) if alignment.aligned else self._liveness.state
        return FrameAnalysis(alignment=alignment, liveness=liveness)

    def open_camera(
        self,
        on_analysis: Callable[[FrameAnalysis], None],
        *,
        min_interval: float = 0.0,
    ) -> FrameChannel:
        """Frame channel for the camera callback.

        The camera offers `(faces, frame_size)` tuples; busy frames are dropped
        and each processed frame is reported through `on_analysis`.
        """

        def handle(frame: Tuple[Sequence[FaceObservation], FrameSize]) -> None:
            faces, frame_size = frame
            on_analysis(self.analyze_frame(faces, frame_size))

        channel = FrameChannel(handle, min_interval=min_interval)
        channel.start()
        return channel

    def submit_attendance(self, event: Mapping[str, Any]) -> SubmitResult:
        return self._submitter.submit_attendance(event)

    def pending_queue_count(self) -> int:
        return self._queue.pending_count()

    def failed_events(self) -> List[QueuedEvent]:
        return self._queue.list_failed()

    def request_capability(self, kind: Capability) -> CapabilityStatus:
        return self._arbiter.request_permission(kind)

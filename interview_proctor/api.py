"""
Proctoring API - FastAPI endpoints for interview proctoring

Endpoints:
- POST /api/proctor/start - Start a proctoring session
- POST /api/proctor/frame - Submit one frame analysis result
- GET /api/proctor/status - Live session status
- POST /api/proctor/stop - Stop the session and get the final report
- GET /api/proctor/health - Module health check
"""

import base64
import binascii
import logging
from typing import Dict, List, Optional, Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from .config import settings
from .engine import ProctoringEngine
from .errors import InvalidInputError, NoActiveSessionError, SessionAlreadyActiveError
from .reports import build_monitor_status, build_report, export_report
from .signals import DetectedObject, FrameSignal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proctor", tags=["Proctoring"])


def get_engine(request: Request) -> ProctoringEngine:
    """The engine owned by the running application"""
    return request.app.state.engine


# ============== Request/Response Models ==============

class StartSessionRequest(BaseModel):
    """Request to start a proctoring session"""
    candidate_label: str = Field(..., description="Candidate name or identifier")


class StartSessionResponse(BaseModel):
    """Response after starting a session"""
    session_id: str
    status: str
    message: str


class KeypointModel(BaseModel):
    x: float
    y: float
    z: Optional[float] = None


class DetectedObjectModel(BaseModel):
    label: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class FrameSignalRequest(BaseModel):
    """One frame analysis result from the perception models"""
    face_count: int = Field(..., ge=0, description="Number of faces in the frame")
    gaze_keypoints: Optional[List[KeypointModel]] = Field(None, description="Face-mesh keypoints of the first face")
    detected_objects: List[DetectedObjectModel] = Field(default_factory=list)

    def to_signal(self) -> FrameSignal:
        keypoints = None
        if self.gaze_keypoints is not None:
            keypoints = tuple((point.x, point.y) for point in self.gaze_keypoints)
        return FrameSignal(
            face_count=self.face_count,
            gaze_keypoints=keypoints,
            detected_objects=tuple(
                DetectedObject(label=obj.label, confidence=obj.confidence)
                for obj in self.detected_objects
            ),
        )


class FrameSignalResponse(BaseModel):
    """Events emitted for a frame and the live score"""
    processed: bool
    events: List[Dict[str, Any]]
    integrity_score: int
    event_counts: Dict[str, int]


class SessionStatusResponse(BaseModel):
    """Current engine status"""
    is_active: bool
    session_id: Optional[str] = None
    candidate_label: Optional[str] = None
    integrity_score: int
    event_counts: Dict[str, int]
    monitor_status: Dict[str, Dict[str, str]]
    duration_seconds: float


class StopSessionRequest(BaseModel):
    """Request to stop the active session"""
    recording_base64: Optional[str] = Field(None, description="Base64 encoded recorded media")
    export: bool = Field(False, description="Also write the report to the report directory")


# ============== API Endpoints ==============

@router.post("/start", response_model=StartSessionResponse)
async def start_session(request: StartSessionRequest, engine: ProctoringEngine = Depends(get_engine)):
    """
    Start a new proctoring session.

    Only one session may be active; a second start is rejected and the
    running session is left untouched.
    """
    try:
        session = engine.start(request.candidate_label)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionAlreadyActiveError as e:
        logger.warning(f"Rejected start: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(f"Started proctoring session: {session.id}")

    return StartSessionResponse(
        session_id=session.id,
        status="active",
        message="Proctoring session started successfully"
    )


@router.post("/frame", response_model=FrameSignalResponse)
async def submit_frame(request: FrameSignalRequest, engine: ProctoringEngine = Depends(get_engine)):
    """
    Submit one frame analysis result.

    Frames arriving while no session is active are ignored rather than
    rejected, since the capture loop may race the end of a session.
    """
    processed = engine.is_active
    events = engine.analyze_frame(request.to_signal())

    return FrameSignalResponse(
        processed=processed,
        events=[event.to_dict() for event in events],
        integrity_score=engine.integrity_score,
        event_counts=engine.event_counts()
    )


@router.get("/status", response_model=SessionStatusResponse)
async def get_session_status(engine: ProctoringEngine = Depends(get_engine)):
    """
    Get current status of the proctoring engine.
    """
    session = engine.current_session

    if session is None:
        return SessionStatusResponse(
            is_active=False,
            integrity_score=engine.integrity_score,
            event_counts={},
            monitor_status=build_monitor_status([]),
            duration_seconds=0.0
        )

    duration = (engine.clock() - session.started_at).total_seconds()

    return SessionStatusResponse(
        is_active=True,
        session_id=session.id,
        candidate_label=session.candidate_label,
        integrity_score=session.integrity_score,
        event_counts=session.event_counts(),
        monitor_status=build_monitor_status(session.events),
        duration_seconds=max(0.0, duration)
    )


@router.post("/stop")
async def stop_session(request: StopSessionRequest, engine: ProctoringEngine = Depends(get_engine)) -> Dict[str, Any]:
    """
    Stop the active session and get the final report.

    Pending absence/gaze countdowns are discarded without firing. If the
    report cannot be written to disk the report is still returned, with
    `export_error` set instead of `report_path`.
    """
    recording = None
    if request.recording_base64 is not None:
        try:
            recording = base64.b64decode(request.recording_base64, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=400, detail="Invalid recording data")

    try:
        session = engine.end(recording=recording)
    except NoActiveSessionError as e:
        raise HTTPException(status_code=404, detail=str(e))

    report = build_report(session)
    document = report.to_dict()

    if request.export:
        try:
            path = export_report(report, settings.REPORT_DIR)
        except OSError as e:
            # The session is already closed; the report is still returned
            logger.error(f"Failed to export report for {session.id}: {e}")
            document["export_error"] = str(e)
        else:
            document["report_path"] = str(path)

    logger.info(f"Session {session.id} stopped: score={report.integrity_score}")
    return document


# ============== Health Check ==============

@router.get("/health")
async def health_check(engine: ProctoringEngine = Depends(get_engine)):
    """Health check for proctoring module"""
    return {
        "status": "healthy",
        "active_session": engine.is_active,
        "module": "proctoring"
    }

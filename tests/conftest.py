"""
Pytest Configuration for Proctoring Tests
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from interview_proctor import FrameSignal, DetectedObject, ProctoringEngine


class FakeClock:
    """Controllable clock; time only moves when advanced"""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


def make_keypoints(nose_x: float, eye_x: float = 300.0, count: int = 468):
    """Face-mesh keypoints with both eye corners at eye_x and the nose tip at nose_x"""
    points = [(eye_x, 200.0)] * count
    points[1] = (nose_x, 240.0)
    return points


LOOKING_AT_SCREEN = make_keypoints(nose_x=305.0)
LOOKING_AWAY = make_keypoints(nose_x=400.0)


def frame(face_count=1, keypoints=None, objects=()):
    """Build a FrameSignal; objects are (label, confidence) pairs"""
    return FrameSignal(
        face_count=face_count,
        gaze_keypoints=keypoints,
        detected_objects=tuple(DetectedObject(label, conf) for label, conf in objects),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Engine with reference thresholds and a fake clock"""
    return ProctoringEngine(clock=clock)


@pytest.fixture
def app(clock):
    """FastAPI app with a fresh engine per test"""
    from interview_proctor.main import app
    app.state.engine = ProctoringEngine(clock=clock)
    return app


@pytest.fixture
def client(app):
    """FastAPI test client"""
    return TestClient(app)

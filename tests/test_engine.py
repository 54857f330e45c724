"""
Tests for the Proctoring Engine

Tests:
1. Session lifecycle and illegal transitions
2. Face-absence and gaze-away debouncing
3. Non-debounced multiple-face and object events
4. Score folding and event ordering within a frame
"""
import pytest

from interview_proctor import (
    EventKind,
    InvalidInputError,
    NoActiveSessionError,
    ProctoringEngine,
    SessionAlreadyActiveError,
    SessionState,
    Severity,
)

from conftest import FakeClock, LOOKING_AT_SCREEN, LOOKING_AWAY, frame


def feed(engine, clock, signals, step=1.0):
    """Feed signals one per tick, advancing the clock after each"""
    events = []
    for signal in signals:
        events.extend(engine.analyze_frame(signal))
        clock.advance(step)
    return events


class TestSessionLifecycle:
    """Test start / end transitions"""

    @pytest.mark.parametrize("label", ["Alice", "  Bob  ", "candidate-42", "李"])
    def test_start_then_end_is_clean(self, engine, label):
        """Test start then immediate end gives an empty closed session"""
        engine.start(label)
        session = engine.end()

        assert session.state == SessionState.CLOSED
        assert session.events == ()
        assert session.integrity_score == 100
        assert session.ended_at >= session.started_at

    def test_label_is_trimmed(self, engine):
        session = engine.start("  Alice ")
        assert session.candidate_label == "Alice"

    @pytest.mark.parametrize("label", ["", "   ", "\t\n", None])
    def test_start_rejects_empty_label(self, engine, label):
        """Test empty labels fail with InvalidInputError"""
        with pytest.raises(InvalidInputError):
            engine.start(label)

        assert engine.is_active is False

    def test_start_while_active_fails(self, engine, clock):
        """Test second start fails and leaves the first session untouched"""
        first = engine.start("Alice")
        engine.analyze_frame(frame(face_count=2))
        events_before = first.events
        score_before = first.integrity_score

        with pytest.raises(SessionAlreadyActiveError):
            engine.start("Mallory")

        assert engine.current_session is first
        assert first.candidate_label == "Alice"
        assert first.events == events_before
        assert first.integrity_score == score_before
        assert first.is_active

    def test_end_while_idle_fails(self, engine):
        with pytest.raises(NoActiveSessionError):
            engine.end()

    def test_end_twice_fails(self, engine):
        engine.start("Alice")
        engine.end()

        with pytest.raises(NoActiveSessionError):
            engine.end()

    def test_engine_keeps_no_reference_after_end(self, engine):
        engine.start("Alice")
        closed = engine.end()

        assert engine.current_session is None
        assert engine.is_active is False
        assert engine.integrity_score == 100
        assert engine.event_counts() == {}
        assert closed.is_closed

    def test_new_session_after_end(self, engine):
        """Test a fresh session starts with an empty ledger and full score"""
        engine.start("Alice")
        engine.analyze_frame(frame(objects=[("cell phone", 0.9)]))
        first = engine.end()

        second = engine.start("Bob")

        assert second.id != first.id
        assert second.events == ()
        assert second.integrity_score == 100
        assert len(first.events) == 1

    def test_duration_uses_clock(self, engine, clock):
        session = engine.start("Alice")
        clock.advance(125)
        engine.end()

        assert session.duration_seconds == 125.0


class TestIdleAnalysis:
    """Test frames outside a session are tolerated"""

    def test_analyze_while_idle_is_noop(self, engine):
        assert engine.analyze_frame(frame(face_count=3, objects=[("book", 0.8)])) == []

    def test_analyze_after_end_is_noop(self, engine):
        engine.start("Alice")
        session = engine.end()

        assert engine.analyze_frame(frame(face_count=2)) == []
        assert session.events == ()

    def test_failed_perception_tick_is_noop(self, engine, clock):
        """Test a None signal leaves the ledger and timers alone"""
        session = engine.start("Alice")
        engine.analyze_frame(frame(face_count=0))
        clock.advance(11)

        assert engine.analyze_frame(None) == []
        assert session.events == ()
        assert engine.face_timer.pending is True


class TestFaceAbsence:
    """Test face-absence debouncing"""

    def test_short_absence_does_not_fire(self, engine, clock):
        """Test three absent frames 4s apart (8s < 10s) then presence"""
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=0)] * 3, step=4)
        events += engine.analyze_frame(frame(face_count=1))
        session = engine.end()

        assert events == []
        assert session.events == ()
        assert session.integrity_score == 100

    def test_sustained_absence_fires_once(self, engine, clock):
        """Test 21 seconds of absence yields exactly one face_missing event"""
        session = engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=0)] * 21)

        assert len(events) == 1
        event = events[0]
        assert event.kind == EventKind.FACE_MISSING
        assert event.severity == Severity.HIGH
        assert event.details.duration_seconds == 10.0
        assert event.details.threshold_seconds == 10.0
        assert event.description == "No face detected for more than 10 seconds"
        assert session.integrity_score == 90

    def test_fires_exactly_at_deadline(self, engine, clock):
        engine.start("Alice")
        engine.analyze_frame(frame(face_count=0))

        clock.advance(9.999)
        assert engine.analyze_frame(frame(face_count=0)) == []

        clock.advance(0.001)
        assert len(engine.analyze_frame(frame(face_count=0))) == 1

    def test_late_detection_on_stalled_cadence(self, engine, clock):
        """Test a stalled driver detects the deadline late, once"""
        engine.start("Alice")
        engine.analyze_frame(frame(face_count=0))
        clock.advance(30)

        events = engine.analyze_frame(frame(face_count=0))
        clock.advance(1)
        events += engine.analyze_frame(frame(face_count=0))

        assert len(events) == 1
        assert events[0].details.duration_seconds == 30.0

    def test_presence_rearms_after_firing(self, engine, clock):
        """Test absence -> fire -> presence -> absence fires again"""
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=0)] * 11)
        events += feed(engine, clock, [frame(face_count=1)])
        events += feed(engine, clock, [frame(face_count=0)] * 11)

        kinds = [event.kind for event in events]
        assert kinds == [EventKind.FACE_MISSING, EventKind.FACE_MISSING]

    def test_presence_interrupt_restarts_countdown(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=0)] * 8)
        events += feed(engine, clock, [frame(face_count=1)])
        events += feed(engine, clock, [frame(face_count=0)] * 8)

        assert events == []

    def test_multiple_faces_counts_as_presence(self, engine, clock):
        engine.start("Alice")
        feed(engine, clock, [frame(face_count=0)] * 5)
        feed(engine, clock, [frame(face_count=2)])

        assert engine.face_timer.pending is False

    def test_end_discards_pending_timer(self, engine, clock):
        """Test ending mid-countdown does not report the near miss"""
        engine.start("Alice")
        feed(engine, clock, [frame(face_count=0)] * 9)
        clock.advance(20)

        session = engine.end()

        assert session.events == ()
        assert engine.face_timer.pending is False

    def test_start_resets_timers(self, clock):
        """Test a new session never inherits a countdown"""
        engine = ProctoringEngine(clock=clock)
        engine.face_timer.poll(clock())
        engine.gaze_timer.poll(clock())
        clock.advance(60)

        engine.start("Alice")

        assert engine.face_timer.pending is False
        assert engine.gaze_timer.pending is False
        assert engine.analyze_frame(frame(face_count=0)) == []


class TestGazeAway:
    """Test gaze-away debouncing"""

    def test_sustained_gaze_away_fires_once(self, engine, clock):
        session = engine.start("Alice")

        events = feed(engine, clock, [frame(keypoints=LOOKING_AWAY)] * 12)

        assert len(events) == 1
        event = events[0]
        assert event.kind == EventKind.FOCUS_LOSS
        assert event.severity == Severity.MEDIUM
        assert event.details.duration_seconds == 5.0
        assert event.description == "Candidate looking away for more than 5 seconds"
        assert session.integrity_score == 95

    def test_glance_back_cancels(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(keypoints=LOOKING_AWAY)] * 4)
        events += feed(engine, clock, [frame(keypoints=LOOKING_AT_SCREEN)])
        events += feed(engine, clock, [frame(keypoints=LOOKING_AWAY)] * 4)

        assert events == []

    def test_gaze_rearms_after_looking_back(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(keypoints=LOOKING_AWAY)] * 6)
        events += feed(engine, clock, [frame(keypoints=LOOKING_AT_SCREEN)])
        events += feed(engine, clock, [frame(keypoints=LOOKING_AWAY)] * 6)

        assert [e.kind for e in events] == [EventKind.FOCUS_LOSS, EventKind.FOCUS_LOSS]

    def test_gaze_ignored_without_keypoints(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(keypoints=None)] * 10)

        assert events == []
        assert engine.gaze_timer.pending is False

    def test_gaze_ignored_with_multiple_faces(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=2, keypoints=LOOKING_AWAY)] * 7)

        assert all(e.kind == EventKind.MULTIPLE_FACES for e in events)
        assert engine.gaze_timer.pending is False

    def test_unevaluated_frames_leave_gaze_timer_untouched(self, engine, clock):
        """Test frames without gaze data neither cancel nor advance the countdown"""
        engine.start("Alice")
        engine.analyze_frame(frame(keypoints=LOOKING_AWAY))
        clock.advance(3)
        engine.analyze_frame(frame(keypoints=None))
        clock.advance(2)

        events = engine.analyze_frame(frame(keypoints=LOOKING_AWAY))

        assert [e.kind for e in events] == [EventKind.FOCUS_LOSS]


class TestImmediateEvents:
    """Test multiple faces and objects are never debounced"""

    def test_multiple_faces_every_frame(self, engine, clock):
        session = engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=2)] * 3)

        assert len(events) == 3
        assert all(e.kind == EventKind.MULTIPLE_FACES for e in events)
        assert events[0].details.face_count == 2
        assert events[0].description == "2 faces detected in frame"
        assert session.integrity_score == 85

    def test_repeated_objects_floor_score(self, engine, clock):
        """Test 15 frames with a phone yield 15 events and a score of 0"""
        session = engine.start("Alice")

        events = feed(engine, clock, [frame(objects=[("cell phone", 0.92)])] * 15)

        assert len(events) == 15
        assert all(e.kind == EventKind.UNAUTHORIZED_OBJECT for e in events)
        assert all(e.severity == Severity.HIGH for e in events)
        assert session.integrity_score == 0
        assert session.score_history == tuple(max(0, 100 - 10 * i) for i in range(1, 16))

    def test_one_event_per_matching_detection(self, engine):
        engine.start("Alice")

        events = engine.analyze_frame(frame(objects=[
            ("cell phone", 0.9),
            ("cup", 0.99),
            ("Book", 0.7),
            ("cell phone", 0.6),
        ]))

        assert [e.details.label for e in events] == ["cell phone", "Book", "cell phone"]
        assert events[1].details.confidence == 0.7
        assert events[1].description == "Detected Book in frame"

    def test_allowed_objects_ignored(self, engine):
        engine.start("Alice")

        assert engine.analyze_frame(frame(objects=[("cup", 0.9), ("chair", 0.8)])) == []


class TestFrameOrdering:
    """Test ordering and score folding within one frame"""

    def test_order_face_then_multi_then_objects(self, engine, clock):
        session = engine.start("Alice")
        feed(engine, clock, [frame(face_count=0)] * 10)

        absent = engine.analyze_frame(frame(face_count=0, objects=[("laptop", 0.8)]))
        crowded = engine.analyze_frame(frame(face_count=3, objects=[("person", 0.95)]))

        assert [e.kind for e in absent] == [EventKind.FACE_MISSING, EventKind.UNAUTHORIZED_OBJECT]
        assert [e.kind for e in crowded] == [EventKind.MULTIPLE_FACES, EventKind.UNAUTHORIZED_OBJECT]
        assert list(session.events) == absent + crowded

    def test_score_folded_per_event(self, engine):
        session = engine.start("Alice")

        engine.analyze_frame(frame(face_count=2, objects=[("book", 0.5)]))

        assert session.score_history == (95, 85)
        assert session.integrity_score == 85

    def test_score_never_increases(self, engine, clock):
        session = engine.start("Alice")
        signals = [
            frame(face_count=2),
            frame(face_count=0),
            frame(keypoints=LOOKING_AWAY, objects=[("cell phone", 0.9)]),
            frame(face_count=1),
        ] * 10

        feed(engine, clock, signals)

        history = (100,) + session.score_history
        assert all(a >= b for a, b in zip(history, history[1:]))
        assert min(history) >= 0

    def test_event_ids_are_unique(self, engine, clock):
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=4, objects=[("book", 0.5)] * 3)] * 20)

        assert len({e.id for e in events}) == len(events)

    def test_event_counts_derived_from_ledger(self, engine):
        engine.start("Alice")
        engine.analyze_frame(frame(face_count=2, objects=[("book", 0.5), ("laptop", 0.6)]))

        assert engine.event_counts() == {"multiple_faces": 1, "unauthorized_object": 2}

    def test_analyze_frames_in_order(self, engine):
        session = engine.start("Alice")

        events = engine.analyze_frames([
            frame(face_count=2),
            None,
            frame(objects=[("book", 0.5)]),
        ])

        assert [e.kind for e in events] == [EventKind.MULTIPLE_FACES, EventKind.UNAUTHORIZED_OBJECT]
        assert list(session.events) == events

    def test_analyze_frames_while_idle(self, engine):
        assert engine.analyze_frames([frame(face_count=3)] * 2) == []


class TestFromSettings:
    """Test building the engine from configuration"""

    def test_thresholds_from_settings(self):
        from interview_proctor.config import Settings

        settings = Settings(
            FACE_ABSENCE_SECONDS=3,
            GAZE_AWAY_SECONDS=2,
            GAZE_OFFSET_THRESHOLD=10.0,
            DISALLOWED_OBJECTS=["watch"],
        )
        clock = FakeClock()
        engine = ProctoringEngine.from_settings(settings, clock=clock)
        engine.start("Alice")

        events = feed(engine, clock, [frame(face_count=0)] * 4)
        events += engine.analyze_frame(frame(objects=[("Smart Watch", 0.8), ("cell phone", 0.9)]))

        assert [e.kind for e in events] == [EventKind.FACE_MISSING, EventKind.UNAUTHORIZED_OBJECT]
        assert events[0].details.threshold_seconds == 3

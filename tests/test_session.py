"""Tests for the acquisition session state machine."""

from unittest.mock import Mock

import pytest

from photointake.acquisition import (
    AcquisitionChoice,
    AcquisitionSession,
    ActionLauncher,
    ActivityResult,
    CaptureRequest,
    PickRequest,
    RequestCode,
    ResultStatus,
    SessionState,
    SessionStateError,
    SourceKind,
)
from photointake.media.index import EXTERNAL_CONTENT_URI


@pytest.fixture
def launcher():
    return Mock(spec=ActionLauncher)


@pytest.fixture
def session(media_index, launcher):
    return AcquisitionSession(
        media_index,
        launcher,
        description="Taken for tests",
        clock=lambda: 1234.5,
    )


def captured(session):
    session.request_acquisition()
    return session.launch_capture()


def test_request_acquisition_presents_two_choices(session):
    choices = session.request_acquisition()

    assert choices == (AcquisitionChoice.CAPTURE, AcquisitionChoice.PICK)
    assert session.state is SessionState.CHOICE_PRESENTED


def test_launch_requires_presented_choice(session):
    with pytest.raises(SessionStateError):
        session.launch_capture()
    with pytest.raises(SessionStateError):
        session.launch_pick()


def test_capture_records_pending_locator_before_launch(session, launcher, media_index):
    locator = captured(session)

    assert locator.startswith(EXTERNAL_CONTENT_URI)
    assert session.pending_capture == locator
    assert session.state is SessionState.CAPTURE_LAUNCHED
    launcher.launch_capture.assert_called_once_with(
        CaptureRequest(
            title="ias-1234500.jpg",
            description="Taken for tests",
            destination=locator,
        ),
        RequestCode.CAPTURE,
    )
    assert media_index.list_entries()[0].title == "ias-1234500.jpg"


def test_choose_dispatches_to_branch(session, launcher):
    session.request_acquisition()
    session.choose(AcquisitionChoice.PICK)

    assert session.state is SessionState.PICK_LAUNCHED
    launcher.launch_pick.assert_called_once_with(PickRequest(), RequestCode.PICK)
    launcher.launch_capture.assert_not_called()


def test_capture_result_without_payload_uses_pending(session):
    pending = captured(session)

    reference = session.handle_result(ActivityResult(RequestCode.CAPTURE, ResultStatus.OK))

    assert reference.source_kind is SourceKind.CAMERA
    assert reference.locator == pending
    assert reference.reported_locator is None
    assert session.state is SessionState.COMPLETED


def test_capture_result_payload_is_ignored(session):
    pending = captured(session)
    other = f"{EXTERNAL_CONTENT_URI}/999"

    reference = session.handle_result(
        ActivityResult(RequestCode.CAPTURE, ResultStatus.OK, other)
    )

    assert reference.locator == pending
    assert reference.reported_locator == other


def test_pick_result_uses_payload(session):
    session.request_acquisition()
    session.launch_pick()

    reference = session.handle_result(
        ActivityResult(RequestCode.PICK, ResultStatus.OK, "content://picked/7")
    )

    assert reference.source_kind is SourceKind.GALLERY
    assert reference.locator == "content://picked/7"
    assert reference.request_code == RequestCode.PICK


@pytest.mark.parametrize("code, launch", [
    (RequestCode.CAPTURE, "launch_capture"),
    (RequestCode.PICK, "launch_pick"),
])
def test_cancelled_result_produces_no_reference(session, code, launch):
    session.request_acquisition()
    getattr(session, launch)()

    reference = session.handle_result(ActivityResult(code, ResultStatus.CANCELED))

    assert reference is None
    assert session.state is SessionState.CANCELLED


def test_capture_result_after_abandon_is_dropped(session):
    captured(session)
    session.abandon()

    reference = session.handle_result(ActivityResult(RequestCode.CAPTURE, ResultStatus.OK))

    assert reference is None
    assert session.state is SessionState.IDLE


def test_late_capture_result_does_not_finish_pick(session):
    captured(session)
    session.abandon()
    session.request_acquisition()
    session.launch_pick()

    stale = session.handle_result(
        ActivityResult(RequestCode.CAPTURE, ResultStatus.OK, "content://picked/7")
    )

    assert stale is None
    assert session.state is SessionState.PICK_LAUNCHED

    reference = session.handle_result(
        ActivityResult(RequestCode.PICK, ResultStatus.OK, "content://picked/7")
    )

    assert reference.source_kind is SourceKind.GALLERY
    assert reference.locator == "content://picked/7"
    assert session.state is SessionState.COMPLETED


def test_pick_result_during_capture_is_dropped(session):
    captured(session)

    assert session.handle_result(
        ActivityResult(RequestCode.PICK, ResultStatus.CANCELED)
    ) is None
    assert session.state is SessionState.CAPTURE_LAUNCHED


def test_second_result_after_completion_is_dropped(session):
    captured(session)
    session.handle_result(ActivityResult(RequestCode.CAPTURE, ResultStatus.OK))

    assert session.handle_result(ActivityResult(RequestCode.CAPTURE, ResultStatus.OK)) is None
    assert session.state is SessionState.COMPLETED


def test_unknown_request_code_is_ignored(session):
    session.request_acquisition()
    session.launch_pick()

    assert session.handle_result(ActivityResult(4242, ResultStatus.OK, "x")) is None
    assert session.state is SessionState.PICK_LAUNCHED


def test_pending_capture_survives_completion_until_next_capture(session):
    first = captured(session)
    session.handle_result(ActivityResult(RequestCode.CAPTURE, ResultStatus.OK))

    assert session.pending_capture == first

    second = captured(session)

    assert second != first
    assert session.pending_capture == second


def test_new_acquisition_blocked_while_action_in_flight(session):
    captured(session)

    with pytest.raises(SessionStateError):
        session.request_acquisition()


def test_abandon_returns_to_idle(session):
    captured(session)
    session.abandon()

    assert session.state is SessionState.IDLE
    session.request_acquisition()
    assert session.state is SessionState.CHOICE_PRESENTED


def test_sessions_keep_separate_pending_captures(media_index):
    first = AcquisitionSession(media_index, Mock(spec=ActionLauncher))
    second = AcquisitionSession(media_index, Mock(spec=ActionLauncher))

    first_locator = captured(first)
    second_locator = captured(second)

    assert first.pending_capture == first_locator
    assert second.pending_capture == second_locator

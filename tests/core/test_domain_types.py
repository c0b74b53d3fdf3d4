"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - TimerSelector wire values and durations
    - GalleryMode wire values match what browser clients send
    - Moderation constants
"""

from datetime import timedelta

from pixelcanvas.core.domain_types import (
    DEFAULT_COLOR, FLAG_THRESHOLD, MAX_RATING, MIN_RATING,
    Color, GalleryMode, ProjectId, ProjectStatus, TimerSelector, UserId,
)


def test_identity_types_wrap_int():
    assert ProjectId(7) == 7
    assert UserId(3) == 3
    assert Color("#FFF") == "#FFF"


def test_timer_selector_wire_values():
    assert {t.value for t in TimerSelector} == {
        "1min", "3min", "5min", "15min", "1hour", "1day", "unlimited",
    }


def test_every_timer_has_a_duration_entry():
    assert TimerSelector.UNLIMITED.duration is None
    assert TimerSelector.THREE_MINUTES.duration == timedelta(minutes=3)
    assert TimerSelector.ONE_HOUR.duration == timedelta(hours=1)
    for timer in TimerSelector:
        if timer is not TimerSelector.UNLIMITED:
            assert timer.duration > timedelta(0)


def test_gallery_mode_wire_values():
    assert GalleryMode("myGallery") is GalleryMode.MY_GALLERY
    assert {m.value for m in GalleryMode} == {"rating", "new", "myGallery", "flagged"}


def test_project_status_has_two_states():
    assert set(ProjectStatus) == {ProjectStatus.ACTIVE, ProjectStatus.FINISHED}


def test_constants():
    assert DEFAULT_COLOR == "#FFF"
    assert FLAG_THRESHOLD == 2
    assert (MIN_RATING, MAX_RATING) == (1, 10)


def test_str_enums_compare_to_wire_strings():
    assert TimerSelector.UNLIMITED == "unlimited"
    assert ProjectStatus.FINISHED == "finished"

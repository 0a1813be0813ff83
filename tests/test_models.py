"""Tests for the TimeInterval value object and selector settings."""

import copy
import datetime

import pytest
from PySide6.QtCore import QSettings

from timeselect.models import SelectorSettings, TimeInterval

UTC = datetime.timezone.utc


def test_construct_round_trips_endpoints(at):
    start, end = at(8, 30), at(10)
    iv = TimeInterval(start, end)
    assert iv.start == start
    assert iv.end == end


def test_construct_with_only_start_copies_it_to_end(at):
    iv = TimeInterval(at(8))
    assert iv.end == iv.start == at(8)


def test_construct_without_arguments_uses_now():
    before = datetime.datetime.now().astimezone()
    iv = TimeInterval()
    after = datetime.datetime.now().astimezone()
    assert before <= iv.start <= after
    assert iv.start == iv.end
    assert iv.start.tzinfo is not None


def test_construct_rejects_reversed_endpoints(at):
    with pytest.raises(ValueError):
        TimeInterval(at(10), at(8))


def test_naive_datetimes_become_aware():
    iv = TimeInterval(datetime.datetime(2025, 1, 6, 8, 0))
    assert iv.start.tzinfo is not None


def test_setting_end_before_start_fails_and_keeps_end(at):
    iv = TimeInterval(at(8), at(10))
    with pytest.raises(ValueError):
        iv.end = at(7)
    assert iv.end == at(10)


def test_setting_start_after_end_fails_and_keeps_start(at):
    iv = TimeInterval(at(8), at(10))
    with pytest.raises(ValueError):
        iv.start = at(11)
    assert iv.start == at(8)


def test_setting_none_is_a_type_error(at):
    iv = TimeInterval(at(8), at(10))
    with pytest.raises(TypeError):
        iv.start = None
    with pytest.raises(TypeError):
        iv.end = None
    assert iv == TimeInterval(at(8), at(10))


def test_set_date_components(at):
    iv = TimeInterval(at(8, day=6), at(10, day=6))
    iv.set_end_date(day=9)
    assert iv.end == at(10, day=9)
    iv.set_start_date(2025, 1, 8)
    assert iv.start == at(8, day=8)
    with pytest.raises(ValueError):
        iv.set_start_date(month=2)
    assert iv.start == at(8, day=8)


def test_set_time_components_keep_the_date(at):
    iv = TimeInterval(at(8), at(10))
    iv.set_start_time(9, 15)
    iv.set_end_time(11, 45)
    assert iv.start == at(9, 15)
    assert iv.end == at(11, 45)
    with pytest.raises(ValueError):
        iv.set_end_time(9, 0)
    assert iv.end == at(11, 45)


def test_shift_by_milliseconds(at):
    iv = TimeInterval(at(8), at(10))
    iv.shift_start(-15 * 60 * 1000)
    iv.shift_end(30 * 60 * 1000)
    assert iv.start == at(7, 45)
    assert iv.end == at(10, 30)


def test_shift_is_not_checked_against_the_order(at):
    iv = TimeInterval(at(8), at(10))
    iv.shift_start(3 * 60 * 60 * 1000)
    assert iv.start > iv.end


def test_every_successful_mutation_notifies(at):
    iv = TimeInterval(at(8), at(10))
    seen = []
    iv.add_change_listener(seen.append)

    iv.shift_start(0)
    iv.shift_end(0)
    iv.start = at(8)
    iv.set_end_time(10, 0)

    assert seen == [iv, iv, iv, iv]
    assert iv == TimeInterval(at(8), at(10))


def test_failed_mutation_does_not_notify(at):
    iv = TimeInterval(at(8), at(10))
    seen = []
    iv.add_change_listener(seen.append)
    with pytest.raises(ValueError):
        iv.end = at(7)
    assert seen == []


def test_listeners_have_set_semantics(at):
    iv = TimeInterval(at(8), at(10))
    calls = []

    def listener(interval):
        calls.append(interval)

    iv.add_change_listener(listener)
    iv.add_change_listener(listener)
    iv.add_change_listener(None)
    assert iv.listener_count() == 1

    iv.shift_end(0)
    assert len(calls) == 1

    iv.remove_change_listener(listener)
    iv.remove_change_listener(listener)
    iv.remove_change_listener(None)
    iv.shift_end(0)
    assert len(calls) == 1


def test_clone_is_equal_and_independent(at):
    iv = TimeInterval(at(8), at(10))
    iv.add_change_listener(lambda _: None)
    dup = iv.clone()

    assert dup == iv
    assert dup is not iv
    assert dup.listener_count() == 0

    dup.shift_end(60 * 60 * 1000)
    dup.start = at(9)
    assert iv.start == at(8)
    assert iv.end == at(10)
    assert copy.deepcopy(iv) == iv
    assert copy.copy(iv) == iv


def test_ordering_uses_start_only(at):
    early_short = TimeInterval(at(8), at(9))
    early_long = TimeInterval(at(8), at(12))
    late = TimeInterval(at(9), at(10))

    assert early_short < late
    assert late > early_long
    assert early_short <= early_long and early_long <= early_short
    assert early_short != early_long
    assert sorted([late, early_short]) == [early_short, late]


def test_intervals_are_unhashable(at):
    with pytest.raises(TypeError):
        hash(TimeInterval(at(8), at(10)))


def test_duration(at):
    iv = TimeInterval(at(8), at(10, 15))
    assert iv.duration == datetime.timedelta(hours=2, minutes=15)
    assert iv.duration_ms == 135 * 60 * 1000


def test_overlaps(at):
    iv = TimeInterval(at(8), at(10))
    assert iv.overlaps(at(9), at(11))
    assert not iv.overlaps(at(10), at(11))


def test_settings_round_trip_through_qsettings(tmp_path):
    qs = QSettings(str(tmp_path / "selector.ini"), QSettings.IniFormat)
    sm = SelectorSettings(
        display_minutes=480,
        grid_interval_ms=5 * 60 * 1000,
        time_format="%I:%M",
        show_daylight=True,
        location_lat=40.7128,
        location_lon=-74.006,
    )
    sm.to_qsettings(qs)
    qs.sync()

    loaded = SelectorSettings.from_qsettings(QSettings(str(tmp_path / "selector.ini"), QSettings.IniFormat))
    assert loaded == sm


def test_settings_clamp_stored_display_length(tmp_path):
    qs = QSettings(str(tmp_path / "selector.ini"), QSettings.IniFormat)
    qs.setValue("display_minutes", 5000)
    qs.setValue("grid_interval_ms", "garbage")
    loaded = SelectorSettings.from_qsettings(qs)
    assert loaded.display_minutes == 1440
    assert loaded.grid_interval_ms == 900000


def test_settings_clone_is_independent():
    sm = SelectorSettings()
    dup = sm.clone()
    dup.display_minutes = 200
    assert sm.display_minutes == 360

import datetime
from zoneinfo import ZoneInfo

from timeselect.daylight import daylight_spans, sunrise_sunset

UTC = datetime.timezone.utc
LONDON = (51.5074, -0.1278)


def test_london_midsummer_sun_times():
    rise, set_ = sunrise_sunset(datetime.date(2025, 6, 21), *LONDON, tzinfo=UTC)
    assert rise.hour in (3, 4)
    assert set_.hour in (20, 21)
    assert rise < set_


def test_spans_are_clipped_to_the_window():
    start = datetime.datetime(2025, 6, 21, 12, 0, tzinfo=UTC)
    end = datetime.datetime(2025, 6, 22, 0, 0, tzinfo=UTC)
    spans = daylight_spans(start, end, *LONDON, tzinfo=UTC)
    assert len(spans) == 1
    s, e = spans[0]
    assert s == start
    assert e.hour in (20, 21)


def test_no_spans_for_a_night_window():
    start = datetime.datetime(2025, 6, 21, 22, 0, tzinfo=UTC)
    end = datetime.datetime(2025, 6, 22, 2, 0, tzinfo=UTC)
    assert daylight_spans(start, end, *LONDON, tzinfo=UTC) == []


def test_window_across_midnight_collects_both_days():
    start = datetime.datetime(2025, 6, 21, 18, 0, tzinfo=UTC)
    end = datetime.datetime(2025, 6, 22, 8, 0, tzinfo=UTC)
    spans = daylight_spans(start, end, *LONDON, tzinfo=UTC)
    assert len(spans) == 2
    assert spans[0][0] == start
    assert spans[1][1] == end


def test_zone_rules_follow_the_day():
    london = ZoneInfo("Europe/London")
    summer, _ = sunrise_sunset(datetime.date(2026, 6, 21), *LONDON, tzinfo=london)
    winter, _ = sunrise_sunset(datetime.date(2026, 12, 21), *LONDON, tzinfo=london)
    assert summer.utcoffset() == datetime.timedelta(hours=1)
    assert winter.utcoffset() == datetime.timedelta(0)

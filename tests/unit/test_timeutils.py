import pytest
from datetime import datetime, timedelta, timezone

from app.core.timeutils import as_utc, combine_local, isoformat


@pytest.mark.unit
class TestTimeHelpers:
    def test_as_utc_treats_naive_as_utc(self):
        naive = datetime(2030, 1, 1, 12, 0)

        assert as_utc(naive) == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_as_utc_converts_offsets(self):
        sast = timezone(timedelta(hours=2))

        assert as_utc(datetime(2030, 1, 1, 14, 0, tzinfo=sast)) == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_combine_local_in_festival_timezone(self):
        result = combine_local("2030-12-31", "23:15", "Africa/Johannesburg")

        assert result == datetime(2030, 12, 31, 21, 15, tzinfo=timezone.utc)

    def test_combine_local_accepts_seconds(self):
        assert combine_local("2030-06-01", "08:00:30", "UTC").second == 30

    @pytest.mark.parametrize("date_str,time_str,tz", [
        ("2030-13-01", "10:00", "UTC"),
        ("tomorrow", "10:00", "UTC"),
        ("2030-01-01", "25:00", "UTC"),
        ("2030-01-01", "10:00", "Mars/Olympus"),
    ])
    def test_combine_local_rejects_bad_input(self, date_str, time_str, tz):
        with pytest.raises(ValueError):
            combine_local(date_str, time_str, tz)

    def test_isoformat(self):
        assert isoformat(None) is None
        assert isoformat(datetime(2030, 1, 1, 9, 30)) == "2030-01-01T09:30:00+00:00"

from datetime import date

import pytest

from app.extraction.dates import parse_raw_date

TODAY = date(2026, 5, 1)


class TestParseRawDate:
    @pytest.mark.parametrize(
        ("raw", "language", "expected"),
        [
            ("15.01.2026", "ru", date(2026, 1, 15)),
            ("15.01.26", "ru", date(2026, 1, 15)),
            ("2026-01-15", "en", date(2026, 1, 15)),
            ("01/02/2026", "en", date(2026, 1, 2)),
            ("01/02/2026", "ru", date(2026, 2, 1)),
            ("13/01/2026", "en", date(2026, 1, 13)),
            ("01/13/2026", "ru", date(2026, 1, 13)),
            ("15 Jan 2026", "en", date(2026, 1, 15)),
            ("January 15, 2026", "en", date(2026, 1, 15)),
            ("03/15", "en", date(2026, 3, 15)),
        ],
    )
    def test_parses(self, raw: str, language: str, expected: date) -> None:
        assert parse_raw_date(raw, language=language, today=TODAY) == expected

    @pytest.mark.parametrize("raw", ["31.02.2026", "garbage", "", "15 Foo 2026"])
    def test_invalid_returns_none(self, raw: str) -> None:
        assert parse_raw_date(raw, today=TODAY) is None

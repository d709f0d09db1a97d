"""
Tests for the missing-distance generator script.
"""

import pytest
from decimal import Decimal

from backend.src.models import CityDistance
from backend.src.scripts.generate_missing_distances import (
    AUTO_GENERATED_NOTE,
    generate_missing_distances,
    parse_args,
)


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])

        assert args.hours is None
        assert args.dry_run is False
        assert args.yes is False

    def test_hours_and_flags(self):
        args = parse_args(["--hours", "6.5", "--dry-run", "-y"])

        assert args.hours == Decimal("6.5")
        assert args.dry_run is True
        assert args.yes is True

    def test_negative_hours_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--hours", "-1"])


class TestGenerateMissingDistances:

    def test_creates_missing_pairs(self, test_db_session, riyadh_jeddah, sample_city, capsys):
        sample_city('Dammam')

        missing, created = generate_missing_distances(test_db_session, Decimal("5"))

        assert (missing, created) == (2, 2)
        generated = (
            test_db_session.query(CityDistance)
            .filter(CityDistance.notes == AUTO_GENERATED_NOTE)
            .all()
        )
        assert len(generated) == 2
        assert all(d.travel_time_hours == Decimal("5") for d in generated)
        assert "Created 2 distance(s)" in capsys.readouterr().out

    def test_dry_run_writes_nothing(self, test_db_session, riyadh_jeddah, sample_city, capsys):
        sample_city('Dammam')

        missing, created = generate_missing_distances(test_db_session, Decimal("5"), dry_run=True)

        assert (missing, created) == (2, 0)
        assert test_db_session.query(CityDistance).count() == 1
        assert "[DRY RUN]" in capsys.readouterr().out

    def test_declined_confirmation(self, test_db_session, riyadh_jeddah, sample_city):
        sample_city('Dammam')

        missing, created = generate_missing_distances(
            test_db_session, Decimal("5"), confirm=lambda prompt: False
        )

        assert created == 0
        assert test_db_session.query(CityDistance).count() == 1

    def test_nothing_missing(self, test_db_session, riyadh_jeddah):
        assert generate_missing_distances(test_db_session, Decimal("5")) == (0, 0)

"""Tests for the shared column types."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from commentable.core.database import UTCDateTime


class TestUTCDateTime:
    def test_naive_values_are_stored_as_utc(self) -> None:
        stored = UTCDateTime().process_bind_param(datetime(2024, 5, 1, 12, 0), None)
        assert stored == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def test_offsets_are_converted_to_utc(self) -> None:
        local = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        stored = UTCDateTime().process_bind_param(local, None)
        assert stored.utcoffset() == timedelta(0)
        assert stored.hour == 12

    def test_naive_results_are_tagged_utc(self) -> None:
        loaded = UTCDateTime().process_result_value(datetime(2024, 5, 1, 12, 0), None)
        assert loaded.tzinfo is UTC

    @pytest.mark.asyncio
    async def test_reloaded_rows_keep_timezone(self, session, make_user) -> None:
        user = await make_user("alice")

        await session.refresh(user)

        assert user.created_at.utcoffset() == timedelta(0)
        assert user.updated_at.utcoffset() == timedelta(0)

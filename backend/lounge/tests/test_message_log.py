"""Tests for the append-only message log."""

import asyncio
import re

import pytest
from sqlalchemy.exc import OperationalError

from lounge.core.errors import PersistenceFailure
from lounge.services.message_log import MessageLog, build_message, new_message_id


def _fill(log: MessageLog, n: int) -> list[str]:
    ids = []
    for i in range(1, n + 1):
        ids.append(log.append(build_message("alice", f"m{i}")).id)
    return ids


class TestReadPage:
    def test_empty_log(self, log):
        page = log.read_page(offset=0, limit=30)
        assert page.messages == []
        assert page.total == 0
        assert page.has_more is False

    def test_offset_counts_from_newest(self, log):
        _fill(log, 5)

        page = log.read_page(offset=0, limit=2)
        assert [m.text for m in page.messages] == ["m5", "m4"]
        assert (page.total, page.has_more) == (5, True)

        page = log.read_page(offset=2, limit=2)
        assert [m.text for m in page.messages] == ["m3", "m2"]
        assert (page.total, page.has_more) == (5, True)

        page = log.read_page(offset=4, limit=2)
        assert [m.text for m in page.messages] == ["m1"]
        assert (page.total, page.has_more) == (5, False)

    def test_offset_past_end_is_empty(self, log):
        _fill(log, 3)
        page = log.read_page(offset=10, limit=5)
        assert page.messages == []
        assert page.total == 3
        assert page.has_more is False

    def test_exact_fit_has_no_more(self, log):
        _fill(log, 4)
        page = log.read_page(offset=0, limit=4)
        assert len(page.messages) == 4
        assert page.has_more is False

    def test_append_shifts_window_by_one(self, log):
        _fill(log, 5)
        before = log.read_page(offset=0, limit=3)

        new = log.append(build_message("bob", "fresh"))
        after = log.read_page(offset=0, limit=3)

        assert after.messages[0].id == new.id
        assert [m.id for m in after.messages[1:]] == [m.id for m in before.messages[:2]]
        assert after.total == before.total + 1

    def test_negative_arguments_rejected(self, log):
        with pytest.raises(ValueError):
            log.read_page(offset=-1, limit=2)


class TestAppend:
    def test_round_trips_fields(self, log):
        msg = build_message("alice", "", image_url="/uploads/compressed-abc.jpg")
        log.append(msg)
        stored = log.read_page(0, 1).messages[0]
        assert stored == msg
        assert stored.model_dump(by_alias=True)["imageUrl"] == "/uploads/compressed-abc.jpg"

    def test_timestamp_is_iso_utc(self, log):
        msg = log.append(build_message("alice", "hi"))
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", msg.timestamp)

    def test_id_format(self):
        assert re.fullmatch(r"\d+-[0-9a-z]{9}", new_message_id())

    def test_commit_failure_raises_persistence_failure(self, log, monkeypatch):
        class BrokenSession:
            def add(self, record):
                pass

            def commit(self):
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))

            def rollback(self):
                pass

            def close(self):
                pass

        monkeypatch.setattr(log, "_session_factory", BrokenSession)
        with pytest.raises(PersistenceFailure):
            log.append(build_message("alice", "lost"))

    @pytest.mark.asyncio
    async def test_concurrent_appends_lose_nothing(self, log):
        messages = [build_message(f"user{i}", f"hello {i}") for i in range(25)]
        await asyncio.gather(*(asyncio.to_thread(log.append, m) for m in messages))

        page = log.read_page(offset=0, limit=100)
        assert page.total == 25
        ids = [m.id for m in page.messages]
        assert len(set(ids)) == 25
        assert set(ids) == {m.id for m in messages}

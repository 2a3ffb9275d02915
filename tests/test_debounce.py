"""Tests for the asyncio search debouncer."""

import asyncio

import pytest

from shopscope.view.debounce import Debouncer


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_burst_collapses_to_last_value(self):
        delivered: list[str] = []
        debouncer = Debouncer(delivered.append, delay=0.05)

        debouncer.push("a")
        await asyncio.sleep(0.01)
        debouncer.push("ap")
        await asyncio.sleep(0.01)
        debouncer.push("app")
        assert debouncer.pending
        assert delivered == []

        await asyncio.sleep(0.15)
        assert delivered == ["app"]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_separate_bursts_deliver_separately(self):
        delivered: list[str] = []
        debouncer = Debouncer(delivered.append, delay=0.02)
        debouncer.push("a")
        await asyncio.sleep(0.08)
        debouncer.push("b")
        await asyncio.sleep(0.08)
        assert delivered == ["a", "b"]

    @pytest.mark.asyncio
    async def test_flush_delivers_pending_immediately(self):
        delivered: list[str] = []
        debouncer = Debouncer(delivered.append, delay=10)
        debouncer.push("shoe")
        debouncer.flush()
        assert delivered == ["shoe"]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_flush_with_value_replaces_pending(self):
        delivered: list[str] = []
        debouncer = Debouncer(delivered.append, delay=10)
        debouncer.push("sh")
        debouncer.flush("")
        await asyncio.sleep(0)
        assert delivered == [""]

    def test_flush_without_pending_is_noop(self):
        delivered: list[str] = []
        Debouncer(delivered.append).flush()
        assert delivered == []

    @pytest.mark.asyncio
    async def test_cancel_drops_value(self):
        delivered: list[str] = []
        debouncer = Debouncer(delivered.append, delay=0.02)
        debouncer.push("x")
        debouncer.cancel()
        await asyncio.sleep(0.06)
        assert delivered == []

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            Debouncer(print, delay=-1)

import asyncio
import logging

from app.utils.debounce import Debouncer

def test_debouncer_coalesces_bursts():
    """Test that only the last call of a burst runs"""
    calls = []

    async def record(width, height):
        calls.append((width, height))

    async def scenario():
        debouncer = Debouncer(0.05, record)
        debouncer.trigger(100, 100)
        debouncer.trigger(200, 150)
        debouncer.trigger(300, 200)
        await debouncer.flush()

    asyncio.run(scenario())

    assert calls == [(300, 200)]

def test_debouncer_runs_separated_calls():
    calls = []

    async def record(width, height):
        calls.append((width, height))

    async def scenario():
        debouncer = Debouncer(0.01, record)
        debouncer.trigger(100, 100)
        await debouncer.flush()
        debouncer.trigger(200, 200)
        await debouncer.flush()

    asyncio.run(scenario())

    assert calls == [(100, 100), (200, 200)]

def test_debouncer_cancel_drops_pending_call():
    calls = []

    async def record(width, height):
        calls.append((width, height))

    async def scenario():
        debouncer = Debouncer(0.01, record)
        debouncer.trigger(100, 100)
        debouncer.cancel()
        await asyncio.sleep(0.05)
        assert not debouncer.pending

    asyncio.run(scenario())

    assert calls == []

def test_debouncer_logs_a_failed_call(caplog):
    """Test that flush returns and the failure is logged instead of lost"""
    async def explode(width, height):
        raise ValueError(f"bad size {width}x{height}")

    async def scenario():
        debouncer = Debouncer(0.01, explode)
        debouncer.trigger(-5, 300)
        await debouncer.flush()
        assert not debouncer.pending

    with caplog.at_level(logging.ERROR):
        asyncio.run(scenario())

    assert "bad size -5x300" in caplog.text

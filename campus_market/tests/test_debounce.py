import asyncio

import pytest

from campus_market.services.catalog.debounce import SearchDebouncer

DELAY = 0.01


def recording_callback(calls):
    async def callback(key, term):
        calls.append((key, term))

    return callback


@pytest.mark.asyncio
async def test_only_the_last_term_is_searched():
    calls = []
    debouncer = SearchDebouncer(DELAY, recording_callback(calls))

    debouncer.submit("sid-1", "lam")
    debouncer.submit("sid-1", "lamp")
    await asyncio.sleep(DELAY * 5)

    assert calls == [("sid-1", "lamp")]
    assert not debouncer.pending("sid-1")


@pytest.mark.asyncio
async def test_keys_are_debounced_independently():
    calls = []
    debouncer = SearchDebouncer(DELAY, recording_callback(calls))

    debouncer.submit("sid-1", "book")
    debouncer.submit("sid-2", "mouse")
    await asyncio.sleep(DELAY * 5)

    assert sorted(calls) == [("sid-1", "book"), ("sid-2", "mouse")]


@pytest.mark.asyncio
async def test_cancel_drops_pending_search():
    calls = []
    debouncer = SearchDebouncer(DELAY, recording_callback(calls))

    debouncer.submit("sid-1", "hoodie")
    assert debouncer.pending("sid-1")
    assert debouncer.cancel("sid-1") is True
    await asyncio.sleep(DELAY * 5)

    assert calls == []
    assert debouncer.cancel("sid-1") is False


@pytest.mark.asyncio
async def test_new_submit_cancels_running_search():
    started = asyncio.Event()
    finished = []

    async def slow_callback(key, term):
        started.set()
        await asyncio.sleep(1)
        finished.append(term)

    debouncer = SearchDebouncer(0, slow_callback)
    first = debouncer.submit("sid-1", "calc")
    await started.wait()

    debouncer.submit("sid-1", "calculator")
    await asyncio.gather(first, return_exceptions=True)

    assert first.cancelled()
    assert finished == []
    await debouncer.close()


@pytest.mark.asyncio
async def test_failing_search_does_not_break_the_debouncer():
    calls = []

    async def flaky_callback(key, term):
        calls.append(term)
        if term == "boom":
            raise RuntimeError("search backend down")

    debouncer = SearchDebouncer(DELAY, flaky_callback)

    task = debouncer.submit("sid-1", "boom")
    await task
    debouncer.submit("sid-1", "lamp")
    await asyncio.sleep(DELAY * 5)

    assert calls == ["boom", "lamp"]


@pytest.mark.asyncio
async def test_close_cancels_everything():
    calls = []
    debouncer = SearchDebouncer(1, recording_callback(calls))

    debouncer.submit("sid-1", "table")
    debouncer.submit("sid-2", "lamp")
    await debouncer.close()

    assert calls == []
    assert not debouncer.pending("sid-1")
    assert not debouncer.pending("sid-2")


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        SearchDebouncer(-1, recording_callback([]))

"""
Tests for the incremental main/peer log cache.
"""

import asyncio

import pytest

from conftest import FakeLogSource, log_entry, peer_entry
from qbit_client.exceptions import RequestError
from qbit_client.log_persister import LogPersister
from qbit_client.models import LogOptions


def ids(entries):
    return [entry.id for entry in entries]


class TestSync:
    @pytest.mark.asyncio
    async def test_second_call_observes_new_entries(self):
        source = FakeLogSource(main=[log_entry(1), log_entry(2), log_entry(3)])
        persister = LogPersister(source)

        assert ids(await persister.get_main_logs()) == [1, 2, 3]

        source.main.append(log_entry(4))
        assert ids(await persister.get_main_logs()) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_sync_asks_for_entries_after_last_known_id(self):
        seen_cursors = []
        source = FakeLogSource(main=[log_entry(1), log_entry(2)])
        fetch = source.get_log

        async def recording_get_log(options=None):
            seen_cursors.append(options.last_known_id)
            return await fetch(options)

        source.get_log = recording_get_log
        persister = LogPersister(source)
        await persister.sync_main()

        assert seen_cursors == [None, 2]

    @pytest.mark.asyncio
    async def test_out_of_order_pages_are_sorted(self):
        source = FakeLogSource(main=[log_entry(5), log_entry(3), log_entry(4)])
        persister = LogPersister(source)
        assert ids(await persister.sync_main()) == [3, 4, 5]

    @pytest.mark.asyncio
    async def test_page_cap_bounds_the_loop(self):
        class EndlessSource(FakeLogSource):
            async def get_log(self, options=None):
                self.main_calls += 1
                return [log_entry(self.main_calls)]

        source = EndlessSource()
        persister = LogPersister(source, max_pages=3)

        assert ids(await persister.get_main_logs()) == [1, 2, 3]
        assert source.main_calls == 3

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_sync(self):
        gate = asyncio.Event()

        class GatedSource(FakeLogSource):
            async def get_log(self, options=None):
                await gate.wait()
                return await super().get_log(options)

        source = GatedSource(main=[log_entry(1), log_entry(2)])
        persister = LogPersister(source)

        first = asyncio.ensure_future(persister.get_main_logs())
        second = asyncio.ensure_future(persister.get_main_logs())
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(first, second)

        assert [ids(r) for r in results] == [[1, 2], [1, 2]]
        # One loop: the page with entries plus the empty page that ends it
        assert source.main_calls == 2

    @pytest.mark.asyncio
    async def test_failed_sync_does_not_wedge(self):
        source = FakeLogSource(main=[log_entry(1)])
        real_get_log = source.get_log
        failures = {"left": 1}

        async def flaky_get_log(options=None):
            if failures["left"]:
                failures["left"] -= 1
                raise RequestError("Request failed: 500 Internal Server Error")
            return await real_get_log(options)

        source.get_log = flaky_get_log
        persister = LogPersister(source)

        with pytest.raises(RequestError):
            await persister.get_main_logs()
        assert ids(await persister.get_main_logs()) == [1]


class TestFilters:
    @pytest.mark.asyncio
    async def test_severity_flags(self):
        source = FakeLogSource(main=[log_entry(1, type=1), log_entry(2, type=2), log_entry(3, type=4), log_entry(4, type=8)])
        persister = LogPersister(source)

        entries = await persister.get_main_logs(LogOptions(normal=False, info=False, warning=True, critical=True))
        assert ids(entries) == [3, 4]

    @pytest.mark.asyncio
    async def test_unset_flags_include_everything(self):
        source = FakeLogSource(main=[log_entry(1, type=1), log_entry(2, type=8)])
        persister = LogPersister(source)
        assert ids(await persister.get_main_logs(LogOptions(info=False))) == [1, 2]

    @pytest.mark.asyncio
    async def test_cursor_excludes_known_ids(self):
        source = FakeLogSource(main=[log_entry(1), log_entry(2), log_entry(3)])
        persister = LogPersister(source)
        assert ids(await persister.get_main_logs(LogOptions(last_known_id=2))) == [3]

    @pytest.mark.asyncio
    async def test_filtering_does_not_shrink_cache(self):
        source = FakeLogSource(main=[log_entry(1), log_entry(2, type=8)])
        persister = LogPersister(source)

        await persister.get_main_logs(LogOptions(critical=False))
        assert ids(await persister.get_main_logs()) == [1, 2]


class TestPeerLogsAndClear:
    @pytest.mark.asyncio
    async def test_peer_logs(self):
        source = FakeLogSource(peer=[peer_entry(0), peer_entry(1, ip="10.0.0.2")])
        persister = LogPersister(source)

        entries = await persister.get_peer_logs()
        assert ids(entries) == [0, 1]
        assert entries[1].ip == "10.0.0.2"
        assert source.main_calls == 0

    @pytest.mark.asyncio
    async def test_clear_then_resync(self):
        source = FakeLogSource(main=[log_entry(1), log_entry(2)], peer=[peer_entry(1)])
        persister = LogPersister(source)
        await persister.get_main_logs()
        await persister.get_peer_logs()

        source.main = [log_entry(7)]
        persister.clear()

        assert ids(await persister.get_main_logs()) == [7]
        assert ids(await persister.get_peer_logs()) == [1]

import asyncio

import pytest

from yletv.exceptions import TransportError
from yletv.services.catalog_service import CatalogService
from tests.conftest import make_schedule_entry, make_service


class FakeSource:
    def __init__(self, services, schedule, fail_on=None):
        self.services = services
        self.schedule = schedule
        self.fail_on = fail_on
        self.calls = []

    async def fetch_services(self, service_type="TVChannel"):
        self.calls.append(("services", service_type))
        if self.fail_on == "services":
            raise TransportError("services down")
        return self.services

    async def fetch_schedule(self, service_ids):
        self.calls.append(("schedule", list(service_ids)))
        if self.fail_on == "schedule":
            raise TransportError("schedule down")
        return self.schedule


@pytest.fixture
def source():
    return FakeSource(
        services=[make_service("yle-tv1", fi="Yle TV1"), make_service("yle-tv2", fi="Yle TV2")],
        schedule=[make_schedule_entry("P1", "yle-tv1")],
    )


def test_initial_snapshot_is_empty(source):
    service = CatalogService(source)
    assert service.current().is_empty
    assert service.current().programs == ()
    assert service.last_refreshed_at is None


@pytest.mark.asyncio
async def test_refresh_fetches_schedule_for_returned_services(source):
    service = CatalogService(source, service_type="TVChannel")
    result = await service.refresh()

    assert source.calls == [("services", "TVChannel"), ("schedule", ["yle-tv1", "yle-tv2"])]
    assert [channel.id for channel in result.channels] == ["yle-tv1"]
    snapshot = service.current()
    assert snapshot.channels == result.channels
    assert snapshot.programs == result.programs
    assert service.last_refreshed_at is not None


@pytest.mark.asyncio
async def test_no_services_skips_schedule_fetch():
    source = FakeSource(services=[], schedule=[])
    service = CatalogService(source)
    await service.refresh()

    assert source.calls == [("services", "TVChannel")]
    assert service.current().is_empty


@pytest.mark.parametrize("fail_on", ["services", "schedule"])
@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_snapshot(source, fail_on):
    service = CatalogService(source)
    await service.refresh()
    before = service.current()

    source.fail_on = fail_on
    source.services = [make_service("yle-fem", fi="Yle Fem")]
    with pytest.raises(TransportError):
        await service.refresh()

    assert service.current() is before


@pytest.mark.asyncio
async def test_snapshot_is_replaced_not_mutated(source):
    service = CatalogService(source)
    await service.refresh()
    first = service.current()

    source.schedule = [make_schedule_entry("P2", "yle-tv2")]
    await service.refresh()

    assert [channel.id for channel in first.channels] == ["yle-tv1"]
    assert [channel.id for channel in service.current().channels] == ["yle-tv2"]


@pytest.mark.asyncio
async def test_readers_never_see_partial_catalog(source):
    gate = asyncio.Event()

    class SlowSource(FakeSource):
        async def fetch_schedule(self, service_ids):
            await gate.wait()
            return await super().fetch_schedule(service_ids)

    slow = SlowSource(source.services, source.schedule)
    service = CatalogService(slow)
    task = asyncio.create_task(service.refresh())
    await asyncio.sleep(0)

    assert service.is_refreshing()
    assert service.current().is_empty

    gate.set()
    await task
    assert not service.is_refreshing()
    assert len(service.current().programs) == 1


@pytest.mark.asyncio
async def test_locales_are_passed_to_builder():
    source = FakeSource(
        services=[make_service("yle-tv1", fi="Yle TV1", sv="Yle TV1 sv")],
        schedule=[make_schedule_entry("P1", "yle-tv1", title={"fi": "Uutiset", "sv": "Nyheter"})],
    )
    service = CatalogService(source, primary_locale="sv", secondary_locale="fi")
    result = await service.refresh()

    assert result.channels[0].title == "Yle TV1 sv"
    assert result.programs[0].title == "Nyheter"


@pytest.mark.asyncio
async def test_schedule_filter_skips_non_string_service_ids():
    source = FakeSource(
        services=[{"id": 7, "title": {"fi": "Broken"}}, make_service("yle-tv1", fi="Yle TV1")],
        schedule=[make_schedule_entry("P1", "yle-tv1")],
    )
    service = CatalogService(source)
    result = await service.refresh()

    assert source.calls[1] == ("schedule", ["yle-tv1"])
    assert [channel.id for channel in result.channels] == ["yle-tv1"]
    assert result.dropped_channels == 1

import pytest

from yletv.exceptions import TransportError
from yletv.services.scheduler_service import CatalogScheduler


@pytest.mark.asyncio
async def test_refresh_job_runs_refresh():
    calls = []

    async def refresh():
        calls.append("refresh")

    await CatalogScheduler(refresh)._refresh_job()
    assert calls == ["refresh"]


@pytest.mark.parametrize("error", [TransportError("down"), RuntimeError("boom")])
@pytest.mark.asyncio
async def test_refresh_job_never_raises(error):
    async def refresh():
        raise error

    await CatalogScheduler(refresh)._refresh_job()


def test_not_started():
    scheduler = CatalogScheduler(lambda: None)
    assert scheduler.get_next_run_time() is None
    scheduler.shutdown()
    assert scheduler.scheduler is None


@pytest.mark.asyncio
async def test_start_schedules_refresh_job():
    async def refresh():
        pass

    scheduler = CatalogScheduler(refresh)
    scheduler.start()
    try:
        assert scheduler.scheduler.running
        assert scheduler.get_next_run_time() is not None
    finally:
        scheduler.shutdown()
    assert scheduler.scheduler is None

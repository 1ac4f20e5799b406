from __future__ import annotations

from currency_exchange.services import init_scheduler, shutdown_scheduler
from currency_exchange.services.scheduler import REFRESH_JOB_ID, _run_refresh
from currency_exchange.loadable import Loadable
from tests.factories import FakeRateAPI, make_rate


class _SchedulerConfig:
    SCHEDULER_ENABLED = True
    RATES_REFRESH_INTERVAL_SECONDS = 60


class _DisabledConfig:
    SCHEDULER_ENABLED = False


def test_scheduler_disabled_by_config(make_service):
    service = make_service(FakeRateAPI())

    assert init_scheduler(service, _DisabledConfig) is None
    assert service.scheduler is None


def test_scheduler_registers_refresh_job(make_service):
    service = make_service(FakeRateAPI())

    scheduler = init_scheduler(service, _SchedulerConfig)
    try:
        assert scheduler is not None
        assert scheduler.running
        job = scheduler.get_job(REFRESH_JOB_ID)
        assert job is not None
        assert job.trigger.interval.total_seconds() == 60
        assert init_scheduler(service, _SchedulerConfig) is scheduler
    finally:
        shutdown_scheduler(service)

    assert service.scheduler is None
    assert not scheduler.running


def test_refresh_job_runs_update_cycle(make_service):
    rate = make_rate("MXN")
    service = make_service(FakeRateAPI(currencies=[["MXN"]], rates=[[rate]]))

    _run_refresh(service)

    assert service.current_selected_rate == Loadable.loaded(rate)

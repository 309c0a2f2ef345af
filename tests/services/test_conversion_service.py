import pytest
from kombu.exceptions import OperationalError

from conftest import FakeOptimizelyClient
from storefront.celery_worker import celery_app
from storefront.services.conversion_service import ConversionService
from storefront.services.experiment_service import ExperimentService
from storefront.tasks import conversion
from storefront.tasks.conversion import set_worker_experiments, track_conversion_task


@pytest.fixture()
def eager_celery():
    celery_app.conf.task_always_eager = True
    yield
    celery_app.conf.task_always_eager = False


@pytest.fixture()
def worker_client():
    client = FakeOptimizelyClient()
    set_worker_experiments(ExperimentService(client=client))
    yield client
    set_worker_experiments(None)


class TestConversionService:
    def test_dispatch_runs_task_with_worker_client(self, eager_celery, worker_client):
        assert ConversionService().track_order_conversion("kim@example.com", "KR") is True

        assert worker_client.tracked == [("kim@example.com", {"country": "KR"}, "order_placed")]

    def test_broker_error_is_swallowed(self):
        class UnreachableBroker:
            def apply_async(self, *args, **kwargs):
                raise OperationalError("Error 111 connecting to redis:6379")

        service = ConversionService(task=UnreachableBroker())

        assert service.track_order_conversion("kim@example.com", "KR") is False

    def test_task_passes_expiry(self):
        calls = []

        class RecordingTask:
            def apply_async(self, *args, **kwargs):
                calls.append(kwargs)

        ConversionService(task=RecordingTask(), expires=7).track_order_conversion("kim@example.com", "US")

        assert calls == [{"args": ["kim@example.com", "US"], "expires": 7, "retry": False}]


class TestConversionTask:
    def test_without_worker_experiments_returns_false(self):
        set_worker_experiments(None)

        assert track_conversion_task("kim@example.com", "KR") is False

    def test_tracking_failure_returns_false(self):
        set_worker_experiments(ExperimentService(client=FakeOptimizelyClient(fail_track=True)))
        try:
            assert track_conversion_task("kim@example.com", "KR") is False
        finally:
            set_worker_experiments(None)

    def test_worker_lifecycle_closes_client(self, monkeypatch):
        client = FakeOptimizelyClient()
        monkeypatch.setattr(
            ExperimentService, "from_settings", classmethod(lambda cls: cls(client=client))
        )

        conversion.init_worker_experiments()
        assert conversion._experiments is not None

        conversion.close_worker_experiments()
        assert client.closed
        assert conversion._experiments is None

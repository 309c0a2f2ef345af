"""Environment-driven defaults."""

import importlib

import pytest

from storefront.utils import settings


@pytest.fixture()
def reload_settings(monkeypatch):
    def _reload(**env):
        monkeypatch.delenv("OPTIMIZELY_EVENT_PROCESSOR", raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(settings)

    yield _reload

    monkeypatch.undo()
    importlib.reload(settings)


class TestEventProcessor:
    @pytest.mark.parametrize("app_env", ["development", "production", "test"])
    def test_batch_by_default_in_every_env(self, reload_settings, app_env):
        assert reload_settings(APP_ENV=app_env).OPTIMIZELY_EVENT_PROCESSOR == "batch"

    def test_forwarding_only_when_requested(self, reload_settings):
        reloaded = reload_settings(APP_ENV="development", OPTIMIZELY_EVENT_PROCESSOR="forwarding")

        assert reloaded.OPTIMIZELY_EVENT_PROCESSOR == "forwarding"

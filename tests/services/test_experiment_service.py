import json

import pytest

from conftest import FakeOptimizelyClient
from storefront.services.experiment_service import (
    DEFAULT_VARIANT,
    STATIC_DATAFILE,
    UI_CONFIGS,
    Decision,
    ExperimentService,
    build_optimizely_client,
    get_ui_config,
    mask_sdk_key,
    mask_url,
)


class RecordingDispatcher:
    def __init__(self):
        self.events = []

    def dispatch_event(self, log_event):
        self.events.append(log_event)


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture()
def static_service(dispatcher):
    client = build_optimizely_client(
        sdk_key=None,
        datafile_url=None,
        event_processor="forwarding",
        event_dispatcher=dispatcher,
    )
    service = ExperimentService(client=client)
    yield service
    service.close()


class TestStaticDatafile:
    def test_decide_is_deterministic(self, static_service):
        first = static_service.decide("kim@example.com", "KR")
        second = static_service.decide("kim@example.com", "KR")

        assert first.variant in UI_CONFIGS
        assert first.variant == second.variant
        assert first.enabled is True

    def test_track_conversion_dispatches_order_placed(self, static_service, dispatcher):
        assert static_service.track_conversion("kim@example.com", "KR") is True

        assert any("order_placed" in json.dumps(e.params) for e in dispatcher.events)

    def test_datafile_has_conversion_event(self):
        assert [e["key"] for e in STATIC_DATAFILE["events"]] == ["order_placed"]


class TestFallback:
    def test_no_client_gives_default_variant(self):
        decision = ExperimentService(client=None).decide("kim@example.com", "KR")

        assert decision == Decision(variant=DEFAULT_VARIANT, enabled=True)

    def test_invalid_client_gives_default_variant(self):
        client = FakeOptimizelyClient()
        client.is_valid = False

        assert ExperimentService(client=client).decide("kim@example.com", "KR").variant == "v1"

    def test_decide_error_gives_default_variant(self):
        service = ExperimentService(client=FakeOptimizelyClient(fail_decide=True))

        decision = service.decide("kim@example.com", "KR")

        assert decision.variant == "v1"
        assert decision.enabled is True

    def test_missing_variation_gives_default_variant(self):
        class NoVariationClient(FakeOptimizelyClient):
            def create_user_context(self, user_id, attributes=None):
                context = super().create_user_context(user_id, attributes)
                context.decide = lambda key: type(
                    "D", (), {"variation_key": None, "enabled": False, "reasons": ["not bucketed"]}
                )()
                return context

        decision = ExperimentService(client=NoVariationClient()).decide("kim@example.com", "KR")

        assert decision.variant == "v1"
        assert decision.enabled is True
        assert decision.reasons == ["not bucketed"]

    def test_track_without_client_returns_false(self):
        assert ExperimentService(client=None).track_conversion("kim@example.com", "KR") is False

    def test_track_error_returns_false(self):
        service = ExperimentService(client=FakeOptimizelyClient(fail_track=True))

        assert service.track_conversion("kim@example.com", "KR") is False


class TestFakeClient:
    def test_decide_passes_country_and_flag(self):
        client = FakeOptimizelyClient()
        service = ExperimentService(client=client, flag_key="header_color")

        decision = service.decide("kim@example.com", "JP")

        assert decision.flagKey == "header_color"
        assert decision.to_dict()["variant"] == decision.variant

    def test_track_sends_conversion_event_with_country(self):
        client = FakeOptimizelyClient()

        assert ExperimentService(client=client).track_conversion("kim@example.com", "US")
        assert client.tracked == [("kim@example.com", {"country": "US"}, "order_placed")]

    def test_close_closes_client_once(self):
        client = FakeOptimizelyClient()
        service = ExperimentService(client=client)

        service.close()
        service.close()

        assert client.closed
        assert service.client is None


class TestUiConfig:
    @pytest.mark.parametrize("variant", ["v1", "v2"])
    def test_known_variants(self, variant):
        assert get_ui_config(variant) is UI_CONFIGS[variant]

    @pytest.mark.parametrize("variant", [None, "", "v3"])
    def test_unknown_variant_falls_back_to_default(self, variant):
        assert get_ui_config(variant) == UI_CONFIGS["v1"]


class TestMasking:
    def test_long_sdk_key_is_masked(self):
        assert mask_sdk_key("ABCDEFGH12345678WXYZ") == "ABCDEFGH...WXYZ"

    def test_short_sdk_key_is_fully_hidden(self):
        assert mask_sdk_key("short") == "***...***"

    def test_url_shows_only_origin(self):
        assert mask_url("https://cdn.optimizely.com/datafiles/secret.json") == "https://cdn.optimizely.com/***"
        assert mask_url("not a url") == "***"

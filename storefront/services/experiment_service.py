# storefront/services/experiment_service.py
"""
Decyzje A/B (wariant UI) i sledzenie konwersji przez Optimizely.

ExperimentService jest tworzony jawnie raz na proces (lifespan FastAPI albo
worker Celery) i zamykany przy wylaczaniu (`close()` oproznia kolejke eventow).
Niedostepny backend eksperymentow nigdy nie psuje logowania ani zamowienia:
decide() zwraca domyslny wariant, track_conversion() zwraca False.
"""
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List
from urllib.parse import urlparse

from optimizely import optimizely
from optimizely.config_manager import PollingConfigManager, StaticConfigManager
from optimizely.event.event_processor import BatchEventProcessor, ForwardingEventProcessor
from optimizely.event_dispatcher import EventDispatcher

from storefront.domain.errors import ExperimentationUnavailable
from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_VARIANT = "v1"
CONVERSION_EVENT_KEY = "order_placed"

_EXPERIMENT = {
    "id": "store_ui_experiment",
    "key": "store_ui_experiment",
    "status": "Running",
    "layerId": "layer_1",
    "audienceIds": [],
    "forcedVariations": {},
    "trafficAllocation": [
        {"entityId": "variation_1", "endOfRange": 5000},
        {"entityId": "variation_2", "endOfRange": 10000},
    ],
    "variations": [
        {"id": "variation_1", "key": "v1", "featureEnabled": True, "variables": []},
        {"id": "variation_2", "key": "v2", "featureEnabled": True, "variables": []},
    ],
}

# Uzywany gdy nie ma SDK key ani datafile URL. Produkcja powinna brac
# datafile z dashboardu Optimizely.
STATIC_DATAFILE: Dict[str, Any] = {
    "version": "4",
    "revision": "1",
    "projectId": "python-simple-store",
    "accountId": "python-simple-store-account",
    "anonymizeIP": False,
    "rollouts": [],
    "typedAudiences": [],
    "audiences": [],
    "groups": [],
    "attributes": [{"id": "country", "key": "country"}],
    "events": [
        {"id": "order_placed", "key": CONVERSION_EVENT_KEY, "experimentIds": ["store_ui_experiment"]},
    ],
    "featureFlags": [
        {
            "id": "test1",
            "key": "test1",
            "experimentIds": ["store_ui_experiment"],
            "rolloutId": "",
            "variables": [],
        }
    ],
    "experiments": [_EXPERIMENT],
}

UI_CONFIGS: Dict[str, Dict[str, Any]] = {
    "v1": {
        "theme": "default",
        "primaryColor": "#007bff",
        "showDiscount": False,
        "featuredCategories": ["전자제품", "의류", "도서"],
        "headerMessage": "AI Store에 오신 것을 환영합니다!",
    },
    "v2": {
        "theme": "modern",
        "primaryColor": "#28a745",
        "showDiscount": True,
        "featuredCategories": ["캠핑", "스포츠", "생활용품"],
        "headerMessage": "🎉 특별 할인 이벤트 진행중!",
    },
}


@dataclass
class Decision:
    variant: str = DEFAULT_VARIANT
    enabled: bool = True
    flagKey: str | None = None
    ruleKey: str | None = None
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def get_ui_config(variant: str | None) -> Dict[str, Any]:
    """Statyczne mapowanie wariant -> konfiguracja UI; nieznany wariant dostaje v1."""
    return UI_CONFIGS.get(variant or DEFAULT_VARIANT, UI_CONFIGS[DEFAULT_VARIANT])


def mask_sdk_key(sdk_key: str) -> str:
    if len(sdk_key) > 12:
        return f"{sdk_key[:8]}...{sdk_key[-4:]}"
    return "***...***"


def mask_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}/***"
    return "***"


def build_optimizely_client(
    sdk_key: str | None = settings.OPTIMIZELY_SDK_KEY,
    datafile_url: str | None = settings.OPTIMIZELY_DATAFILE_URL,
    event_processor: str = settings.OPTIMIZELY_EVENT_PROCESSOR,
    batch_size: int = settings.OPTIMIZELY_EVENT_BATCH_SIZE,
    flush_interval_ms: int = settings.OPTIMIZELY_EVENT_FLUSH_INTERVAL,
    update_interval: int = settings.OPTIMIZELY_DATAFILE_UPDATE_INTERVAL,
    blocking_timeout: int = 2,
    event_dispatcher=None,
) -> optimizely.Optimizely | None:
    """
    Buduje klienta Optimizely:
    -SDK key albo datafile URL -> PollingConfigManager (odswiezanie co update_interval s)
    -brak obu -> StaticConfigManager z STATIC_DATAFILE
    -event processor "forwarding" (od razu) albo "batch" (batch_size, flush_interval_ms)
    Zwraca None gdy inicjalizacja sie nie uda.
    """
    try:
        if sdk_key or datafile_url:
            logger.info(f"Optimizely: PollingConfigManager (env: {settings.APP_ENV})")
            if sdk_key:
                logger.info(f"   - SDK Key: {mask_sdk_key(sdk_key)}")
                config_manager = PollingConfigManager(
                    sdk_key=sdk_key,
                    update_interval=update_interval,
                    blocking_timeout=blocking_timeout,
                )
            else:
                logger.info(f"   - Datafile URL: {mask_url(datafile_url)}")
                config_manager = PollingConfigManager(
                    url=datafile_url,
                    update_interval=update_interval,
                    blocking_timeout=blocking_timeout,
                )
        else:
            logger.info("Optimizely: StaticConfigManager (brak SDK key i datafile URL)")
            config_manager = StaticConfigManager(datafile=json.dumps(STATIC_DATAFILE))

        dispatcher = event_dispatcher or EventDispatcher()
        if event_processor == "forwarding":
            logger.info("Optimizely: ForwardingEventProcessor (eventy wysylane od razu)")
            processor = ForwardingEventProcessor(dispatcher)
        else:
            logger.info(
                f"Optimizely: BatchEventProcessor (batch_size={batch_size}, "
                f"flush_interval={flush_interval_ms}ms)"
            )
            processor = BatchEventProcessor(
                dispatcher,
                batch_size=batch_size,
                flush_interval=flush_interval_ms / 1000.0,
                start_on_init=True,
            )

        client = optimizely.Optimizely(
            config_manager=config_manager,
            event_processor=processor,
        )
    except Exception:
        logger.exception("Inicjalizacja Optimizely nieudana, decyzje beda domyslne")
        return None

    logger.info("Optimizely SDK zainicjalizowany")
    return client


class ExperimentService:
    """Fasada nad klientem Optimizely. Klient moze byc None (tryb awaryjny)."""

    def __init__(
        self,
        client=None,
        flag_key: str = settings.HEADER_COLOR_FLAG_KEY,
        conversion_event_key: str = CONVERSION_EVENT_KEY,
    ):
        self.client = client
        self.flag_key = flag_key
        self.conversion_event_key = conversion_event_key

    @classmethod
    def from_settings(cls) -> "ExperimentService":
        return cls(client=build_optimizely_client())

    def _user_context(self, user_id: str, country: str):
        if self.client is None or not getattr(self.client, "is_valid", True):
            raise ExperimentationUnavailable("Klient Optimizely nie jest zainicjalizowany")

        user = self.client.create_user_context(user_id, {"country": country})
        if user is None:
            raise ExperimentationUnavailable(f"Nie mozna utworzyc kontekstu dla {user_id}")
        return user

    def decide(self, user_id: str, country: str) -> Decision:
        try:
            user = self._user_context(user_id, country)
            decision = user.decide(self.flag_key)
        except ExperimentationUnavailable as e:
            logger.warning(f"Eksperymenty niedostepne ({e}), wariant domyslny {DEFAULT_VARIANT}")
            return Decision()
        except Exception as e:
            logger.error(f"Optimizely decide blad: {e}")
            return Decision()

        if not decision.variation_key:
            logger.warning(
                f"Brak wariantu dla {user_id} (flaga {self.flag_key}), "
                f"wariant domyslny {DEFAULT_VARIANT}"
            )
            return Decision(reasons=list(decision.reasons or []))

        logger.info(f"User {user_id} (country: {country}) => Variant: {decision.variation_key}")
        return Decision(
            variant=decision.variation_key,
            enabled=decision.enabled,
            flagKey=decision.flag_key,
            ruleKey=decision.rule_key,
            reasons=list(decision.reasons or []),
        )

    def track_conversion(self, user_id: str, country: str) -> bool:
        try:
            user = self._user_context(user_id, country)
            user.track_event(self.conversion_event_key)
        except ExperimentationUnavailable as e:
            logger.warning(f"Konwersja nie wyslana: {e}")
            return False
        except Exception as e:
            logger.error(f"Optimizely track blad: {e}")
            return False

        logger.info(f"Order conversion tracked for user {user_id}")
        return True

    def close(self) -> None:
        """Oproznia kolejke eventow i zatrzymuje polling datafile."""
        if self.client is None:
            return
        try:
            self.client.close()
            logger.info("Klient Optimizely zamkniety, eventy wyslane")
        except Exception as e:
            logger.error(f"Blad przy zamykaniu klienta Optimizely: {e}")
        finally:
            self.client = None

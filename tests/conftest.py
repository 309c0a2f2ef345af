import os

# przed importem storefront: bez redisa i bez prawdziwego Optimizely
os.environ["LOCK_BACKEND"] = "local"
os.environ["APP_ENV"] = "test"
os.environ["OPTIMIZELY_SDK_KEY"] = ""
os.environ["OPTIMIZELY_DATAFILE_URL"] = ""

import pytest
from fastapi.testclient import TestClient

from storefront.data.database import build_engine, build_session_factory
from storefront.data.migrations import run_migrations
from storefront.data.models import CartLineModel, ProductModel, UserModel
from storefront.main import create_app
from storefront.services.experiment_service import ExperimentService
from storefront.services.lock_service import LocalLockService


class RecordingConversions:
    """Zamiast Celery: zapamietuje wywolania sledzenia konwersji."""

    def __init__(self, result=True):
        self.calls = []
        self.result = result

    def track_order_conversion(self, user_email, country):
        self.calls.append((user_email, country))
        return self.result


class FakeDecision:
    def __init__(self, variation_key, enabled=True, flag_key="test1", rule_key="store_ui_experiment"):
        self.variation_key = variation_key
        self.enabled = enabled
        self.flag_key = flag_key
        self.rule_key = rule_key
        self.reasons = []


class FakeUserContext:
    def __init__(self, client, user_id, attributes):
        self.client = client
        self.user_id = user_id
        self.attributes = attributes

    def decide(self, key):
        if self.client.fail_decide:
            raise RuntimeError("datafile fetch timed out")
        # deterministycznie po user_id, jak bucketing
        variant = "v2" if sum(map(ord, self.user_id)) % 2 else "v1"
        return FakeDecision(variant, flag_key=key)

    def track_event(self, event_key):
        if self.client.fail_track:
            raise RuntimeError("event queue closed")
        self.client.tracked.append((self.user_id, self.attributes, event_key))


class FakeOptimizelyClient:
    def __init__(self, fail_decide=False, fail_track=False):
        self.is_valid = True
        self.fail_decide = fail_decide
        self.fail_track = fail_track
        self.tracked = []
        self.closed = False

    def create_user_context(self, user_id, attributes=None):
        return FakeUserContext(self, user_id, attributes or {})

    def close(self):
        self.closed = True


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    yield engine
    engine.dispose()


@pytest.fixture()
def migrated_engine(engine):
    report = run_migrations(engine)
    assert report.ok
    return engine


@pytest.fixture()
def session_factory(migrated_engine):
    return build_session_factory(migrated_engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def lock_service():
    return LocalLockService()


@pytest.fixture()
def conversions():
    return RecordingConversions()


@pytest.fixture()
def experiments():
    return ExperimentService(client=FakeOptimizelyClient())


@pytest.fixture()
def make_user(db):
    def _make(email="user@example.com", name="Kim", password="secret", country="KR"):
        user = UserModel(email=email, name=name, password=password, country=country)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_product(db):
    def _make(name="Widget", price=1000, category="도서", description=None):
        product = ProductModel(name=name, price=price, category=category, description=description)
        db.add(product)
        db.commit()
        return product.id

    return _make


@pytest.fixture()
def put_in_cart(db):
    def _put(user_email, product_id, quantity):
        db.add(CartLineModel(user_email=user_email, product_id=product_id, quantity=quantity))
        db.commit()

    return _put


@pytest.fixture()
def client(migrated_engine, experiments, lock_service, conversions):
    app = create_app(
        engine=migrated_engine,
        experiments=experiments,
        lock_service=lock_service,
        conversions=conversions,
    )
    with TestClient(app) as c:
        yield c

"""Pytest configuration and fixtures."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.db import create_db_engine, create_session_factory, create_tables
from app.services.ai.adjustment import AdjustmentProvider
from app.services.ai.base import AIProvider
from app.services.estimate_types import AdjustmentContext, AdjustmentResult, StoredEstimate
from app.services.notifications.fanout import NotificationFanout
from app.settings import Settings

# 테스트용 메모리 SQLite
TEST_DATABASE_URL = "sqlite:///:memory:"

FIXED_NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class FakeAIProvider(AIProvider):
    """generate_json 응답을 고정하거나, 예외/지연을 흉내내는 테스트용 제공자."""

    name = "fake"

    def __init__(self, response: Any = None, error: Optional[Exception] = None, delay: float = 0.0, configured: bool = True):
        self.response = response
        self.error = error
        self.delay = delay
        self.configured = configured
        self.prompts: List[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate_json(self, prompt: str, model: Optional[str] = None) -> Dict[str, Any] | List[Any]:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response


class StaticAdjuster(AdjustmentProvider):
    """항상 같은 보정률을 돌려주는 보정기."""

    def __init__(self, adj_rate: float = 0.0, comment: str = ""):
        super().__init__(provider=None)
        self.result = AdjustmentResult(adj_rate=adj_rate, comment=comment)
        self.calls: List[AdjustmentContext] = []

    async def get_adjustment(self, ctx: AdjustmentContext) -> AdjustmentResult:
        self.calls.append(ctx)
        return self.result


class ExplodingAdjuster(AdjustmentProvider):
    def __init__(self):
        super().__init__(provider=None)

    async def get_adjustment(self, ctx: AdjustmentContext) -> AdjustmentResult:
        raise RuntimeError("provider down")


class RecordingNotifier(NotificationFanout):
    def __init__(self):
        super().__init__()
        self.sent: List[StoredEstimate] = []

    async def notify(self, stored: StoredEstimate) -> None:
        self.sent.append(stored)


def make_settings(**overrides) -> Settings:
    values = {"database_url": TEST_DATABASE_URL}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture(scope="function")
def session_factory() -> sessionmaker[Session]:
    """
    테스트마다 새로운 메모리 DB + 테이블.
    """
    engine = create_db_engine(TEST_DATABASE_URL)
    create_tables(engine)
    try:
        yield create_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture
def payload() -> Dict[str, Any]:
    """인천항 기본 시나리오 (규칙 가산/최저요금 없음)"""
    return {
        "workQty": 1000,
        "cartonQty": 50,
        "weightPerCarton": 20,
        "workLocation": "인천항",
        "contactName": "A",
        "contactPhone": "010",
        "contactEmail": "a@x.com",
    }


# 테스트 마커 정의
def pytest_configure(config):
    """Pytest 마커 등록."""
    config.addinivalue_line("markers", "unit: 단위 테스트 (DB 불필요)")
    config.addinivalue_line("markers", "integration: 통합 테스트 (FastAPI 앱 + SQLite)")


@pytest.fixture
def fake_ai():
    """FakeAIProvider 생성 팩토리"""
    return FakeAIProvider


@pytest.fixture
def static_adjuster():
    return StaticAdjuster


@pytest.fixture
def exploding_adjuster() -> ExplodingAdjuster:
    return ExplodingAdjuster()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_app():
    """
    테스트용 FastAPI 앱 팩토리. 기본은 메모리 DB + 테이블 자동 생성 + 알림 기록만.
    """
    from app.main import create_app

    def _make(adjuster=None, notifier=None, kakao_transport=None, **setting_overrides):
        setting_overrides.setdefault("db_auto_create_tables", True)
        return create_app(
            settings=make_settings(**setting_overrides),
            adjuster=adjuster or StaticAdjuster(),
            notifier=notifier if notifier is not None else RecordingNotifier(),
            kakao_transport=kakao_transport,
        )

    return _make

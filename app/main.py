import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.endpoints import admin_kakao, estimate, health
from app.db import create_db_engine, create_session_factory, create_tables
from app.exceptions import StorageError, ValidationError
from app.services.ai.adjustment import AdjustmentProvider
from app.services.ai.providers.openai import OpenAIProvider
from app.services.estimate_engine import MISSING_FIELDS_MESSAGE, EstimateEngine
from app.services.estimate_store import AdminTokenStore, EstimateStore
from app.services.notifications.fanout import NotificationFanout
from app.services.notifications.kakao import KakaoClient, KakaoMemoNotifier
from app.services.notifications.mail import EmailNotifier
from app.settings import Settings

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "서버 오류가 발생했습니다."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info(f"[ESTIMATE] 입력값 오류: {exc.to_dict()}")
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return _error(400, MISSING_FIELDS_MESSAGE)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(f"[ESTIMATE] 저장 오류: {exc.to_dict()}")
        return _error(500, SERVER_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"estimate error: {exc}")
        return _error(500, SERVER_ERROR_MESSAGE)


def create_app(
    settings: Optional[Settings] = None,
    adjuster: Optional[AdjustmentProvider] = None,
    notifier: Optional[NotificationFanout] = None,
    kakao_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or Settings()

    db_engine = create_db_engine(settings.database_url)
    session_factory = create_session_factory(db_engine)

    estimate_store = EstimateStore(session_factory)
    admin_token_store = AdminTokenStore(session_factory)
    kakao_client = KakaoClient.from_settings(settings, transport=kakao_transport)

    if adjuster is None:
        provider = OpenAIProvider(
            api_keys=settings.get_openai_keys(),
            model_name=settings.openai_model,
            timeout=settings.ai_timeout_seconds,
        )
        adjuster = AdjustmentProvider(provider, timeout_seconds=settings.ai_timeout_seconds)

    if notifier is None:
        notifier = NotificationFanout(
            email=EmailNotifier(settings),
            kakao=KakaoMemoNotifier(kakao_client, admin_token_store, settings.kakao_link_url),
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.db_auto_create_tables:
            create_tables(db_engine)
        yield
        db_engine.dispose()

    app = FastAPI(title="Pleo Estimate API", lifespan=lifespan)

    allowed = settings.get_allowed_origins()
    if allowed:
        app.add_middleware(CORSMiddleware, allow_origins=allowed, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
    else:
        # 오리진 목록이 없으면 요청 오리진을 그대로 허용
        app.add_middleware(CORSMiddleware, allow_origin_regex=".*", allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

    app.state.settings = settings
    app.state.db_engine = db_engine
    app.state.estimate_engine = EstimateEngine(adjuster)
    app.state.estimate_store = estimate_store
    app.state.admin_token_store = admin_token_store
    app.state.kakao_client = kakao_client
    app.state.notifier = notifier

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(estimate.router, prefix="/api/estimate", tags=["Estimate"])
    app.include_router(admin_kakao.router, prefix="/admin/kakao", tags=["Admin"])

    return app


app = create_app()

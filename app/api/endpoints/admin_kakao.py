import logging
from html import escape

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from app.deps import get_admin_token_store, get_kakao_client
from app.exceptions import NotificationError, StorageError
from app.services.estimate_store import AdminTokenStore
from app.services.notifications.kakao import KakaoClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/auth")
def start_kakao_auth(
    role: str | None = Query(default=None),
    client: KakaoClient = Depends(get_kakao_client),
):
    """
    관리자 카카오 연동 시작. 예: /admin/kakao/auth?role=owner
    """
    if not role:
        return PlainTextResponse("role 값 필요 (owner/boss)", status_code=400)
    return RedirectResponse(client.authorize_redirect_url(role))


@router.get("/callback")
async def kakao_callback(
    code: str | None = Query(default=None),
    role: str | None = Query(default=None, alias="state"),
    client: KakaoClient = Depends(get_kakao_client),
    store: AdminTokenStore = Depends(get_admin_token_store),
):
    """
    카카오 callback → Refresh Token 발급 → role 단위로 저장
    """
    if not code:
        return PlainTextResponse("code 없음", status_code=400)
    if not role:
        return PlainTextResponse("role 없음", status_code=400)

    try:
        refresh_token = await client.exchange_code(code)
    except NotificationError as e:
        logger.error(f"[KAKAO] {e.message} (role={role})")
        return PlainTextResponse("Refresh Token 발급 실패", status_code=500)
    except httpx.HTTPError as e:
        detail = e.response.text if isinstance(e, httpx.HTTPStatusError) else str(e)
        logger.error(f"[KAKAO] 토큰 발급 오류 (role={role}): {detail}")
        return PlainTextResponse("토큰 발급 오류", status_code=500)

    try:
        await run_in_threadpool(store.upsert, role, refresh_token)
    except StorageError as e:
        logger.error(f"[KAKAO] {e.to_dict()}")
        return PlainTextResponse("토큰 저장 오류", status_code=500)

    return HTMLResponse(
        f"""
      <html>
      <body style="font-family:Arial; padding:40px;">
        <h2>카카오 연동 완료</h2>
        <p>역할(role): <b>{escape(role)}</b></p>
        <p>Refresh Token 저장 완료!</p>
        <p>이제 AI 견적이 들어오면 자동으로 카카오톡 알림이 전송됩니다.</p>
      </body>
      </html>
    """
    )

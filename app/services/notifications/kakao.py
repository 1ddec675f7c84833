"""
카카오톡 "나에게 보내기" 관리자 알림

REFRESH TOKEN으로 매번 ACCESS TOKEN을 재발급한 뒤 메모를 전송합니다.
관리자 토큰은 /admin/kakao 연동 흐름에서 AdminToken 테이블에 저장됩니다.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.exceptions import NotificationError
from app.services.estimate_store import AdminTokenStore
from app.services.estimate_types import StoredEstimate
from app.services.notifications.formatting import format_number
from app.settings import Settings

logger = logging.getLogger(__name__)


class KakaoClient:
    def __init__(
        self,
        rest_api_key: str,
        client_secret: str = "",
        redirect_uri: str = "",
        authorize_url: str = "https://kauth.kakao.com/oauth/authorize",
        token_url: str = "https://kauth.kakao.com/oauth/token",
        memo_send_url: str = "https://kapi.kakao.com/v2/api/talk/memo/default/send",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rest_api_key = rest_api_key
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._authorize_url = authorize_url
        self._token_url = token_url
        self._memo_send_url = memo_send_url
        self._timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "KakaoClient":
        return cls(
            rest_api_key=settings.kakao_rest_api_key,
            client_secret=settings.kakao_client_secret,
            redirect_uri=settings.kakao_redirect_uri,
            authorize_url=settings.kakao_authorize_url,
            token_url=settings.kakao_token_endpoint,
            memo_send_url=settings.kakao_memo_send_endpoint,
            timeout=settings.kakao_timeout_seconds,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._rest_api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def authorize_redirect_url(self, role: str) -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self._rest_api_key,
                "redirect_uri": self._redirect_uri,
                "scope": "talk_message",
                "state": role,
            }
        )
        return f"{self._authorize_url}?{query}"

    async def _post_token(self, params: dict[str, str]) -> dict[str, Any]:
        params["client_id"] = self._rest_api_key
        if self._client_secret:
            params["client_secret"] = self._client_secret

        async with self._client() as client:
            resp = await client.post(self._token_url, data=params)
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, dict) else {}

    async def exchange_code(self, code: str) -> str:
        """인가 코드 → REFRESH TOKEN"""
        data = await self._post_token(
            {
                "grant_type": "authorization_code",
                "redirect_uri": self._redirect_uri,
                "code": code,
            }
        )
        refresh_token = data.get("refresh_token")
        if not refresh_token:
            raise NotificationError("카카오 Refresh Token 발급 실패", channel="kakao")
        return str(refresh_token)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    async def refresh_access_token(self, refresh_token: str) -> str:
        """REFRESH TOKEN → ACCESS TOKEN 재발급"""
        data = await self._post_token({"grant_type": "refresh_token", "refresh_token": refresh_token})
        access_token = data.get("access_token")
        if not access_token:
            raise NotificationError("카카오 ACCESS TOKEN 발급 실패", channel="kakao")
        return str(access_token)

    async def send_memo(self, access_token: str, template: dict[str, Any]) -> dict[str, Any]:
        async with self._client() as client:
            resp = await client.post(
                self._memo_send_url,
                data={"template_object": json.dumps(template, ensure_ascii=False)},
                headers={"Authorization": f"Bearer {access_token}"},
            )
        resp.raise_for_status()
        if not resp.content:
            return {}
        return resp.json()


def build_memo_template(stored: StoredEstimate, link_url: str) -> dict[str, Any]:
    r = stored.record
    s = r.shipment
    return {
        "object_type": "text",
        "text": "\n".join(
            [
                "[플레오 AI 견적 도착]",
                "",
                f"고객명: {s.contact.name or '-'}",
                f"연락처: {s.contact.phone or '-'}",
                f"이메일: {s.contact.email or '-'}",
                "",
                f"작업 위치: {s.work_location or '-'}",
                f"작업 방식: {s.work_method or '-'}",
                f"제품 종류: {s.product_type or '-'}",
                "",
                f"작업 수량: {s.work_qty:,} EA",
                f"카톤 수량: {s.carton_qty:,} CTN",
                f"총 중량: {format_number(r.total_weight_kg)} kg",
                "",
                f"예상 견적: {r.total_fee:,}원 (부가세 별도)",
                f"예상 소요일: 약 {r.lead_time_days}일",
                "",
                "※ 실제 금액은 담당자 확인 후 최종 확정됩니다.",
            ]
        ),
        "link": {"web_url": link_url, "mobile_web_url": link_url},
        "button_title": "플레오 사이트 열기",
    }


class KakaoMemoNotifier:
    """
    등록된 관리자 모두에게 카카오톡 메모를 병렬 발송. 관리자별 실패는 서로 영향을 주지 않는다.
    """

    def __init__(self, client: KakaoClient, admin_store: AdminTokenStore, link_url: str):
        self.client = client
        self.admin_store = admin_store
        self.link_url = link_url

    async def _send_to_admin(self, role: str, refresh_token: str, template: dict[str, Any]) -> None:
        access_token = await self.client.refresh_access_token(refresh_token)
        await self.client.send_memo(access_token, template)
        logger.info(f"[KAKAO MEMO] 관리자 {role} 전송 완료")

    async def notify(self, stored: StoredEstimate) -> dict[str, bool]:
        """관리자 role별 전송 성공 여부를 반환"""
        if not self.client.is_configured:
            logger.warning("[KAKAO MEMO] KAKAO_REST_API_KEY가 설정되어 있지 않습니다.")
            return {}

        admins = await asyncio.to_thread(self.admin_store.list_recipients)
        if not admins:
            logger.warning("[KAKAO MEMO] 저장된 관리자 토큰이 없습니다.")
            return {}

        template = build_memo_template(stored, self.link_url)
        results = await asyncio.gather(
            *(self._send_to_admin(admin.role, admin.refresh_token, template) for admin in admins),
            return_exceptions=True,
        )

        outcome: dict[str, bool] = {}
        for admin, result in zip(admins, results):
            if isinstance(result, Exception):
                detail = result.response.text if isinstance(result, httpx.HTTPStatusError) else str(result)
                logger.error(f"[KAKAO MEMO] 관리자 {admin.role} 오류: {detail}")
                outcome[admin.role] = False
            else:
                outcome[admin.role] = True
        return outcome

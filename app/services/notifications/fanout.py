import asyncio
import logging
from collections import Counter
from typing import Optional

from app.exceptions import wrap_exception, NotificationError
from app.services.estimate_types import StoredEstimate
from app.services.notifications.kakao import KakaoMemoNotifier
from app.services.notifications.mail import EmailNotifier

logger = logging.getLogger(__name__)


class NotificationFanout:
    """
    견적 저장 후 메일/카카오 알림을 보낸다.

    응답과 무관한 best-effort 작업이라 어떤 채널의 실패도 밖으로 던지지 않고,
    로그와 채널별 실패 카운터(failures)에만 남긴다.
    """

    def __init__(self, email: Optional[EmailNotifier] = None, kakao: Optional[KakaoMemoNotifier] = None):
        self.email = email
        self.kakao = kakao
        self.failures: Counter[str] = Counter()

    async def _send_email(self, stored: StoredEstimate) -> None:
        if self.email is None:
            return
        try:
            await asyncio.to_thread(self.email.send_estimate, stored)
        except Exception as e:
            self.failures["email"] += 1
            err = wrap_exception(e, NotificationError, channel="email")
            logger.error(f"[EMAIL] 견적 메일 발송 실패 ({stored.id}): {err.to_dict()}")

    async def _send_kakao(self, stored: StoredEstimate) -> None:
        if self.kakao is None:
            return
        try:
            outcome = await self.kakao.notify(stored)
        except Exception as e:
            self.failures["kakao"] += 1
            err = wrap_exception(e, NotificationError, channel="kakao")
            logger.error(f"[KAKAO MEMO] 카카오 알림 전체 오류 ({stored.id}): {err.to_dict()}")
            return
        failed = sum(1 for ok in outcome.values() if not ok)
        if failed:
            self.failures["kakao"] += failed

    async def notify(self, stored: StoredEstimate) -> None:
        await asyncio.gather(self._send_email(stored), self._send_kakao(stored))

# -*- coding: utf-8 -*-
"""
견적 접수 메일 알림 (SMTP)
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import List

from app.exceptions import NotificationError
from app.services.estimate_types import StoredEstimate
from app.services.notifications.formatting import format_number
from app.settings import Settings

logger = logging.getLogger(__name__)

SENDER_NAME = "플레오 자동견적"


def _row(label: str, value) -> str:
    text = "-" if value is None or value == "" else str(value)
    return f"<tr><td><b>{escape(label)}</b></td><td>{escape(text)}</td></tr>"


def build_subject(stored: StoredEstimate) -> str:
    r = stored.record
    return f"[플레오 자동견적] {r.shipment.contact.name} / {r.total_fee:,}원"


def build_summary_html(stored: StoredEstimate) -> str:
    r = stored.record
    s = r.shipment
    rows = [
        _row("견적 ID", stored.id),
        _row("고객명", s.contact.name),
        _row("연락처", s.contact.phone),
        _row("이메일", s.contact.email),
        _row("작업 위치", s.work_location),
        _row("작업 방식", s.work_method),
        _row("제품 종류", s.product_type),
        _row("긴급도", s.urgency),
        _row("참고 정보", s.ref_info),
        _row("작업 수량", f"{s.work_qty:,} EA"),
        _row("카톤 수량", f"{s.carton_qty:,} CTN"),
        _row("카톤당 무게", f"{format_number(s.weight_per_carton)} kg"),
        _row("총 중량", f"{format_number(r.total_weight_kg)} kg"),
        _row("기본 작업비", f"{r.base_fee:,}원"),
        _row("카톤 수수료", f"{r.carton_fee:,}원"),
        _row("운송비", f"{r.transport_fee:,}원"),
        _row("규칙 가산율", f"{r.rule_adj_rate:.0%}"),
        _row("규칙 적용 금액", f"{r.rule_fee:,}원"),
        _row("AI 보정율", f"{r.ai_adj_rate:+.0%}"),
        _row("예상 견적", f"{r.total_fee:,}원 (부가세 별도)"),
        _row("예상 소요일", f"약 {r.lead_time_days}일"),
        _row("AI 코멘트", r.ai_comment),
        _row("메모", s.memo),
    ]
    notices = "".join(f"<li>{escape(n)}</li>" for n in r.notices)
    notice_block = f"<h3>안내 사항</h3><ul>{notices}</ul>" if notices else ""
    return f"""
    <html>
    <body>
    <h2>새 자동견적이 접수되었습니다</h2>
    <table border="1" cellpadding="8">
        {''.join(rows)}
    </table>
    {notice_block}
    <p>※ 실제 금액은 담당자 확인 후 최종 확정됩니다.</p>
    </body>
    </html>
    """


class EmailNotifier:
    """이메일 알림 (SMTP)"""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.secure = settings.smtp_secure
        self.user = settings.smtp_user
        self.password = settings.smtp_pass
        self.recipients: List[str] = settings.get_mail_recipients()

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password and self.recipients)

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=30)
        server = smtplib.SMTP(self.host, self.port, timeout=30)
        try:
            server.starttls()
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    def send_email(self, subject: str, body: str, html: bool = True) -> bool:
        """메일 발송. 설정이 없으면 경고만 남기고 False"""
        if not self.is_configured():
            logger.warning("[EMAIL] 메일 설정 미완료 (SMTP_HOST/SMTP_USER/SMTP_PASS/수신자)")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((SENDER_NAME, self.user))
        msg["To"] = ", ".join(self.recipients)
        msg.attach(MIMEText(body, "html" if html else "plain", "utf-8"))

        try:
            with self._connect() as server:
                server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"메일 발송 실패: {e}", channel="email", recipient=msg["To"]) from e

        logger.info(f"[EMAIL] 발송 완료: {subject}")
        return True

    def send_estimate(self, stored: StoredEstimate) -> bool:
        return self.send_email(build_subject(stored), build_summary_html(stored), html=True)

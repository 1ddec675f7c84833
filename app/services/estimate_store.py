import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import StorageError
from app.models import AdminToken, Estimate
from app.services.estimate_types import AdminRecipient, EstimateRecord, StoredEstimate

logger = logging.getLogger(__name__)


def _to_row(record: EstimateRecord) -> Estimate:
    s = record.shipment
    return Estimate(
        work_qty=s.work_qty,
        carton_qty=s.carton_qty,
        weight_per_carton=s.weight_per_carton,
        total_weight_kg=record.total_weight_kg,
        work_location=s.work_location,
        product_type=s.product_type,
        work_method=s.work_method,
        urgency=s.urgency,
        ref_info=s.ref_info,
        memo=s.memo,
        contact_name=s.contact.name,
        contact_phone=s.contact.phone,
        contact_email=s.contact.email,
        base_fee=record.base_fee,
        carton_fee=record.carton_fee,
        transport_fee=record.transport_fee,
        rule_adj_rate=record.rule_adj_rate,
        rule_fee=record.rule_fee,
        ai_adj_rate=record.ai_adj_rate,
        total_adj_rate=record.total_adj_rate,
        total_fee=record.total_fee,
        lead_time_days=record.lead_time_days,
        notices=list(record.notices),
        ai_comment=record.ai_comment,
        created_at=record.created_at,
    )


class EstimateStore:
    """
    견적 저장소. 한 건당 트랜잭션 하나로 insert만 수행한다.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def save(self, record: EstimateRecord) -> StoredEstimate:
        try:
            with self._session_factory() as session:
                with session.begin():
                    row = _to_row(record)
                    session.add(row)
                    session.flush()
                    estimate_id = row.id
        except SQLAlchemyError as e:
            logger.error(f"[ESTIMATE] 견적 저장 실패: {e}")
            raise StorageError("견적 저장에 실패했습니다", table_name="estimates", operation="insert") from e

        logger.info(f"[ESTIMATE] Estimate saved: {estimate_id}")
        return StoredEstimate(id=estimate_id, record=record)


class AdminTokenStore:
    """
    카카오 알림 수신 관리자 토큰 저장소 (role 단위 upsert).
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def list_recipients(self) -> list[AdminRecipient]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(AdminToken).order_by(AdminToken.id)).all()
                return [
                    AdminRecipient(role=row.role, refresh_token=row.refresh_token, updated_at=row.updated_at)
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise StorageError("관리자 토큰 조회에 실패했습니다", table_name="admin_tokens", operation="select") from e

    def upsert(self, role: str, refresh_token: str) -> AdminRecipient:
        now = datetime.now(timezone.utc)
        try:
            with self._session_factory() as session:
                with session.begin():
                    existing = session.scalars(select(AdminToken).where(AdminToken.role == role)).one_or_none()
                    if existing:
                        existing.refresh_token = refresh_token
                        existing.updated_at = now
                    else:
                        session.add(AdminToken(role=role, refresh_token=refresh_token, updated_at=now))
        except SQLAlchemyError as e:
            logger.error(f"[KAKAO] 관리자 토큰 저장 실패 (role={role}): {e}")
            raise StorageError("관리자 토큰 저장에 실패했습니다", table_name="admin_tokens", operation="upsert") from e

        return AdminRecipient(role=role, refresh_token=refresh_token, updated_at=now)

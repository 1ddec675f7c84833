from datetime import datetime
import uuid

from sqlalchemy import JSON, BigInteger, DateTime, Float, Integer, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class EstimateBase(DeclarativeBase):
    pass


class Estimate(EstimateBase):
    """
    접수된 자동견적 1건. 생성 후 수정하지 않는다.
    """
    __tablename__ = "estimates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # 작업 정보
    work_qty: Mapped[int] = mapped_column(BigInteger, nullable=False)
    carton_qty: Mapped[int] = mapped_column(BigInteger, nullable=False)
    weight_per_carton: Mapped[float] = mapped_column(Float, nullable=False)
    total_weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    work_location: Mapped[str] = mapped_column(Text, nullable=False, default="")
    product_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    work_method: Mapped[str | None] = mapped_column(Text, nullable=True)
    urgency: Mapped[str] = mapped_column(Text, nullable=False, default="normal")  # normal, urgent, night
    ref_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 고객 연락처
    contact_name: Mapped[str] = mapped_column(Text, nullable=False)
    contact_phone: Mapped[str] = mapped_column(Text, nullable=False)
    contact_email: Mapped[str] = mapped_column(Text, nullable=False)

    # 요금 (원)
    base_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    carton_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transport_fee: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    rule_adj_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rule_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ai_adj_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # -0.2 ~ +0.3
    total_adj_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)

    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notices: Mapped[list[str]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)
    ai_comment: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


class AdminToken(EstimateBase):
    """
    카카오톡 알림을 받을 관리자. OAuth 콜백에서 role 단위로 upsert 된다.
    """
    __tablename__ = "admin_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role: Mapped[str] = mapped_column(Text, nullable=False, unique=True)  # owner, boss
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

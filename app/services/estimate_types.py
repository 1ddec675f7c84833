from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Urgency = Literal["normal", "urgent", "night"]


@dataclass(frozen=True)
class Contact:
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class ShipmentRequest:
    work_qty: int
    carton_qty: int
    weight_per_carton: float
    work_location: str
    contact: Contact
    product_type: str | None = None
    work_method: str | None = None
    urgency: Urgency = "normal"
    memo: str | None = None
    ref_info: str | None = None

    @property
    def total_weight_kg(self) -> float:
        return self.carton_qty * self.weight_per_carton


@dataclass(frozen=True)
class RuleFee:
    """요율표 단계의 결과 (AI 보정 전)"""
    base_fee: int
    carton_fee: int
    transport_fee: int
    rule_adj_rate: float
    rule_fee: int
    notices: tuple[str, ...] = ()
    sewing_override: bool = False


@dataclass(frozen=True)
class AdjustmentContext:
    work_qty: int
    carton_qty: int
    weight_per_carton: float
    total_weight_kg: float
    base_fee: int
    carton_fee: int
    memo: str | None = None


@dataclass(frozen=True)
class AdjustmentResult:
    adj_rate: float
    comment: str


@dataclass(frozen=True)
class EstimateRecord:
    shipment: ShipmentRequest
    total_weight_kg: float
    base_fee: int
    carton_fee: int
    transport_fee: int
    rule_adj_rate: float
    rule_fee: int
    ai_adj_rate: float
    total_adj_rate: float
    total_fee: int
    lead_time_days: int
    notices: tuple[str, ...]
    ai_comment: str
    created_at: datetime


@dataclass(frozen=True)
class StoredEstimate:
    id: uuid.UUID
    record: EstimateRecord


@dataclass(frozen=True)
class AdminRecipient:
    role: str
    refresh_token: str
    updated_at: datetime | None = field(default=None, compare=False)

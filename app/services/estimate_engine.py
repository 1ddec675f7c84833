"""
Estimate Engine

폼 입력 검증 → 요율표 계산 → AI 보정 → 최종 견적(EstimateRecord) 조립.
저장/알림은 하지 않는다.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ValidationError
from app.schemas.estimate import EstimateIn
from app.services.ai.adjustment import AdjustmentProvider
from app.services.estimate_types import (
    AdjustmentContext,
    AdjustmentResult,
    Contact,
    EstimateRecord,
    ShipmentRequest,
)
from app.services.rate_table import SEWING_MIN_FEE, compute_rule_fee, round_won

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "필수 입력값이 누락되었습니다."
INVALID_FIELDS_MESSAGE = "입력값이 올바르지 않습니다"

LEAD_TIME_QTY_PER_DAY = 30000


def _is_missing(err: Mapping[str, Any]) -> bool:
    if err["type"] in ("missing", "string_too_short"):
        return True
    value = err.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


def validate_shipment(payload: Mapping[str, Any]) -> ShipmentRequest:
    """
    폼 입력을 ShipmentRequest로 변환. 같은 입력에는 항상 같은 결과를 낸다.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(INVALID_FIELDS_MESSAGE, actual_value=type(payload).__name__)

    try:
        data = EstimateIn.model_validate(dict(payload))
    except PydanticValidationError as e:
        errors = e.errors()
        fields = [".".join(str(p) for p in err["loc"]) for err in errors]
        field = fields[0] if fields else None
        if any(_is_missing(err) for err in errors):
            raise ValidationError(MISSING_FIELDS_MESSAGE, field=field) from e
        raise ValidationError(f"{INVALID_FIELDS_MESSAGE}: {', '.join(fields)}", field=field) from e

    return ShipmentRequest(
        work_qty=data.work_qty,
        carton_qty=data.carton_qty,
        weight_per_carton=data.weight_per_carton,
        work_location=data.work_location,
        product_type=data.product_type or None,
        work_method=data.work_method or None,
        urgency=data.urgency,
        memo=data.memo or None,
        ref_info=data.ref_info or None,
        contact=Contact(name=data.contact_name, phone=data.contact_phone, email=data.contact_email),
    )


def lead_time_days_for(work_qty: int) -> int:
    return max(1, math.ceil(work_qty / LEAD_TIME_QTY_PER_DAY))


class EstimateEngine:
    def __init__(
        self,
        adjuster: AdjustmentProvider,
        clock: Callable[[], datetime] | None = None,
    ):
        self.adjuster = adjuster
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def produce_estimate(self, payload: Mapping[str, Any] | ShipmentRequest) -> EstimateRecord:
        shipment = payload if isinstance(payload, ShipmentRequest) else validate_shipment(payload)
        total_weight_kg = shipment.total_weight_kg

        rule = compute_rule_fee(shipment, total_weight_kg)

        ctx = AdjustmentContext(
            work_qty=shipment.work_qty,
            carton_qty=shipment.carton_qty,
            weight_per_carton=shipment.weight_per_carton,
            total_weight_kg=total_weight_kg,
            base_fee=rule.base_fee,
            carton_fee=rule.carton_fee,
            memo=shipment.memo,
        )
        try:
            adjustment = await self.adjuster.get_adjustment(ctx)
        except Exception as e:
            logger.error(f"[ESTIMATE] AI 보정 호출 실패, 0%로 처리: {e}")
            adjustment = AdjustmentResult(adj_rate=0.0, comment="")

        ai_adj_rate = adjustment.adj_rate
        # 규칙 가산이 반영된 rule_fee 위에 AI 보정을 한 번 더 곱한다
        total_fee = round_won(rule.rule_fee * (1 + ai_adj_rate))
        if rule.sewing_override:
            total_fee = max(total_fee, SEWING_MIN_FEE)

        record = EstimateRecord(
            shipment=shipment,
            total_weight_kg=total_weight_kg,
            base_fee=rule.base_fee,
            carton_fee=rule.carton_fee,
            transport_fee=rule.transport_fee,
            rule_adj_rate=rule.rule_adj_rate,
            rule_fee=rule.rule_fee,
            ai_adj_rate=ai_adj_rate,
            total_adj_rate=round(rule.rule_adj_rate + ai_adj_rate, 4),
            total_fee=total_fee,
            lead_time_days=lead_time_days_for(shipment.work_qty),
            notices=rule.notices,
            ai_comment=adjustment.comment,
            created_at=self._clock(),
        )
        logger.info(
            f"[ESTIMATE] qty={shipment.work_qty} ctn={shipment.carton_qty} "
            f"rule_fee={rule.rule_fee} ai={ai_adj_rate:+.2f} total_fee={total_fee}"
        )
        return record

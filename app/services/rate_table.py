from __future__ import annotations

import math

from app.services import classification
from app.services.estimate_types import RuleFee, ShipmentRequest

# 수량 구간별 단가 (수량이 많을수록 저렴). 위에서부터 처음 맞는 구간 적용
UNIT_PRICE_TIERS: tuple[tuple[int, int], ...] = (
    (9000, 100),
    (5000, 110),
    (3000, 130),
    (1000, 150),
    (200, 400),
)
DEFAULT_UNIT_PRICE = 800
CARTON_UNIT_FEE = 200

# 총 중량 가산 (초과 기준, 첫 구간만 적용)
WEIGHT_SURCHARGE_TIERS: tuple[tuple[float, float], ...] = (
    (5000, 0.30),
    (2000, 0.20),
    (1000, 0.10),
)
BULKY_SURCHARGE = 0.20
ALCOHOL_SURCHARGE = 0.30
NEW_PORT_SURCHARGE = 0.05
URGENCY_SURCHARGE = {"normal": 0.0, "urgent": 0.20, "night": 0.40}
URGENT_MEMO_SURCHARGE = 0.10

SACK_WEIGHT_UNIT_KG = 2500
SACK_LABOR_MIN_PER_UNIT = 150000

FROZEN_HEAVY_THRESHOLD_KG = 1000
FROZEN_PREMIUM_HEAVY = 100000
FROZEN_PREMIUM_LIGHT = 50000

SEWING_UNIT_PRICE = 400
SEWING_MIN_FEE = 200000

AIRPORT_MIN_FEE = 90000
PORT_MIN_FEE = 80000

SEWING_NOTICE = "미싱 사용료는 별도입니다."
WITNESS_NOTICE = "입회 비용은 80,000원입니다."
TRANSPORT_NOTICE = "지역에 따라 추가 운송비가 발생할 수 있습니다."


def round_won(value: float) -> int:
    """원 단위 반올림 (0.5는 올림)"""
    return int(math.floor(value + 0.5))


def unit_price_for(work_qty: int) -> int:
    for threshold, unit in UNIT_PRICE_TIERS:
        if work_qty >= threshold:
            return unit
    return DEFAULT_UNIT_PRICE


def weight_surcharge_for(total_weight_kg: float) -> float:
    for threshold, rate in WEIGHT_SURCHARGE_TIERS:
        if total_weight_kg > threshold:
            return rate
    return 0.0


def location_min_fee(location: str | None) -> int:
    if classification.is_airport(location):
        return AIRPORT_MIN_FEE
    if classification.is_port(location):
        return PORT_MIN_FEE
    return 0


def compute_rule_fee(shipment: ShipmentRequest, total_weight_kg: float | None = None) -> RuleFee:
    """
    요율표 기반 작업비 산출 (AI 보정 전 단계). 입력만으로 결정되는 순수 함수.
    """
    if total_weight_kg is None:
        total_weight_kg = shipment.total_weight_kg

    location = shipment.work_location
    product = shipment.product_type
    memo = shipment.memo
    notices: list[str] = []

    base_fee = shipment.work_qty * unit_price_for(shipment.work_qty)
    carton_fee = shipment.carton_qty * CARTON_UNIT_FEE
    transport_fee = 0

    adj_rate = weight_surcharge_for(total_weight_kg)
    if classification.is_bulky(product):
        adj_rate += BULKY_SURCHARGE
    if classification.is_alcohol(product):
        adj_rate += ALCOHOL_SURCHARGE
    if classification.is_new_port(location):
        adj_rate += NEW_PORT_SURCHARGE
    adj_rate += URGENCY_SURCHARGE.get(shipment.urgency, 0.0)
    if classification.has_urgent_memo(memo):
        adj_rate += URGENT_MEMO_SURCHARGE

    rule_fee = round_won((base_fee + carton_fee) * (1 + adj_rate))

    # 포대/분말류는 중량 기준 최소 인건비 보장
    if classification.is_sack(product, memo):
        labor_min = round_won(max(1, total_weight_kg / SACK_WEIGHT_UNIT_KG) * SACK_LABOR_MIN_PER_UNIT)
        rule_fee = max(rule_fee, labor_min)

    if classification.is_frozen(product, location, memo):
        if total_weight_kg > FROZEN_HEAVY_THRESHOLD_KG:
            rule_fee += FROZEN_PREMIUM_HEAVY
        else:
            rule_fee += FROZEN_PREMIUM_LIGHT

    # 박음질 작업은 위 계산을 모두 대체
    sewing = classification.is_sewing_method(shipment.work_method)
    if sewing:
        base_fee = shipment.work_qty * SEWING_UNIT_PRICE
        carton_fee = 0
        adj_rate = 0.0
        rule_fee = max(base_fee, SEWING_MIN_FEE)
        notices.append(SEWING_NOTICE)

    if classification.is_witness_method(shipment.work_method):
        notices.append(WITNESS_NOTICE)

    # TODO: 인천 외 지역 운송비를 다시 청구할지 운영 정책 확정 후 transport_fee 반영
    if not classification.is_primary_area(location):
        notices.append(TRANSPORT_NOTICE)

    rule_fee = max(rule_fee, location_min_fee(location))

    return RuleFee(
        base_fee=base_fee,
        carton_fee=carton_fee,
        transport_fee=transport_fee,
        rule_adj_rate=round(adj_rate, 4),
        rule_fee=rule_fee,
        notices=tuple(notices),
        sewing_override=sewing,
    )

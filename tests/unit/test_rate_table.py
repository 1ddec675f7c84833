import pytest

from app.services.estimate_types import Contact, ShipmentRequest
from app.services.rate_table import (
    SEWING_NOTICE,
    TRANSPORT_NOTICE,
    UNIT_PRICE_TIERS,
    WITNESS_NOTICE,
    compute_rule_fee,
    location_min_fee,
    round_won,
    unit_price_for,
    weight_surcharge_for,
)

CONTACT = Contact(name="A", phone="010", email="a@x.com")


def shipment(**overrides) -> ShipmentRequest:
    values = dict(work_qty=1000, carton_qty=50, weight_per_carton=20, work_location="인천항", contact=CONTACT)
    values.update(overrides)
    return ShipmentRequest(**values)


@pytest.mark.unit
def test_round_won_half_up():
    assert round_won(0.5) == 1
    assert round_won(2.5) == 3
    assert round_won(187219.9999) == 187220
    assert round_won(168000.00000000003) == 168000


@pytest.mark.unit
def test_unit_price_is_non_increasing_in_quantity():
    quantities = [0, 1, 199, 200, 999, 1000, 2999, 3000, 4999, 5000, 8999, 9000, 50000]
    prices = [unit_price_for(q) for q in quantities]
    assert prices == sorted(prices, reverse=True)
    assert unit_price_for(199) == 800
    assert unit_price_for(200) == 400
    assert unit_price_for(9000) == 100
    assert [unit for _, unit in UNIT_PRICE_TIERS] == sorted(unit for _, unit in UNIT_PRICE_TIERS)


@pytest.mark.unit
def test_weight_surcharge_uses_strict_thresholds():
    assert weight_surcharge_for(1000) == 0.0
    assert weight_surcharge_for(1000.1) == 0.10
    assert weight_surcharge_for(2001) == 0.20
    assert weight_surcharge_for(5001) == 0.30


@pytest.mark.unit
def test_location_min_fee_checks_airport_before_port():
    assert location_min_fee("인천공항") == 90000
    assert location_min_fee("평택항") == 80000
    assert location_min_fee("경기권") == 0


@pytest.mark.unit
def test_basic_incheon_port_scenario():
    rule = compute_rule_fee(shipment())
    assert rule.base_fee == 150000
    assert rule.carton_fee == 10000
    assert rule.transport_fee == 0
    assert rule.rule_adj_rate == 0
    assert rule.rule_fee == 160000
    assert rule.notices == ()
    assert rule.sewing_override is False


@pytest.mark.unit
def test_airport_floor():
    rule = compute_rule_fee(shipment(work_qty=10, carton_qty=1, weight_per_carton=1, work_location="인천공항"))
    assert rule.base_fee + rule.carton_fee == 8200
    assert rule.rule_fee == 90000
    assert rule.notices == ()


@pytest.mark.unit
def test_port_floor_outside_primary_area_adds_transport_notice():
    rule = compute_rule_fee(shipment(work_qty=10, carton_qty=1, weight_per_carton=1, work_location="평택항"))
    assert rule.rule_fee == 80000
    assert rule.transport_fee == 0
    assert rule.notices == (TRANSPORT_NOTICE,)


@pytest.mark.unit
def test_unknown_region_has_no_floor():
    rule = compute_rule_fee(shipment(work_qty=10, carton_qty=1, weight_per_carton=1, work_location="경기권"))
    assert rule.rule_fee == 8200
    assert rule.notices == (TRANSPORT_NOTICE,)


@pytest.mark.unit
def test_sewing_replaces_rule_calculation():
    rule = compute_rule_fee(shipment(work_qty=100, work_method="박음질", urgency="night", product_type="와인"))
    assert rule.base_fee == 40000
    assert rule.carton_fee == 0
    assert rule.rule_adj_rate == 0
    assert rule.rule_fee == 200000
    assert rule.notices == (SEWING_NOTICE,)
    assert rule.sewing_override is True


@pytest.mark.unit
def test_sewing_large_quantity_exceeds_minimum():
    rule = compute_rule_fee(shipment(work_qty=1000, work_method="미싱"))
    assert rule.rule_fee == 400000


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides, expected_fee, expected_rate",
    [
        ({"carton_qty": 101, "weight_per_carton": 10}, 187220, 0.1),
        ({"product_type": "기저귀"}, 192000, 0.2),
        ({"product_type": "주류"}, 208000, 0.3),
        ({"urgency": "urgent"}, 192000, 0.2),
        ({"urgency": "night"}, 224000, 0.4),
        ({"memo": "긴급 작업 부탁드립니다"}, 176000, 0.1),
        ({"work_location": "인천신항"}, 168000, 0.05),
        ({"urgency": "night", "memo": "긴급"}, 240000, 0.5),
    ],
)
def test_surcharges_are_additive(overrides, expected_fee, expected_rate):
    rule = compute_rule_fee(shipment(**overrides))
    assert rule.rule_fee == expected_fee
    assert rule.rule_adj_rate == pytest.approx(expected_rate)


@pytest.mark.unit
def test_sack_labor_minimum_by_weight():
    # 300 CTN x 25kg = 7,500kg → 3단위 x 150,000
    rule = compute_rule_fee(shipment(carton_qty=300, weight_per_carton=25, product_type="분말"))
    assert rule.rule_fee == 450000


@pytest.mark.unit
def test_sack_labor_minimum_at_least_one_unit():
    rule = compute_rule_fee(shipment(work_qty=100, carton_qty=5, weight_per_carton=10, memo="마대 작업"))
    assert rule.rule_fee == 150000


@pytest.mark.unit
def test_sack_minimum_does_not_lower_fee():
    rule = compute_rule_fee(shipment(product_type="분말"))
    assert rule.rule_fee == 160000


@pytest.mark.unit
def test_frozen_premium_light_and_heavy():
    assert compute_rule_fee(shipment(product_type="냉동")).rule_fee == 210000
    # 60 CTN x 20kg = 1,200kg (> 1,000kg)
    heavy = compute_rule_fee(shipment(carton_qty=60, product_type="냉동"))
    assert heavy.rule_fee == 278200


@pytest.mark.unit
def test_witness_notice():
    rule = compute_rule_fee(shipment(work_method="입회"))
    assert rule.notices == (WITNESS_NOTICE,)
    assert rule.rule_fee == 160000


@pytest.mark.unit
def test_zero_quantities_fall_to_location_floor():
    rule = compute_rule_fee(shipment(work_qty=0, carton_qty=0, weight_per_carton=0))
    assert rule.base_fee == 0
    assert rule.rule_fee == 80000


@pytest.mark.unit
def test_explicit_total_weight_overrides_shipment():
    rule = compute_rule_fee(shipment(), total_weight_kg=2500)
    assert rule.rule_adj_rate == pytest.approx(0.2)
    assert rule.rule_fee == 192000

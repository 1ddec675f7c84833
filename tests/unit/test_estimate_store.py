import pytest
import pytest_asyncio

from app.db import create_db_engine, create_session_factory
from sqlalchemy import BigInteger

from app.exceptions import StorageError
from app.models import Estimate
from app.services.estimate_engine import EstimateEngine
from app.services.estimate_store import AdminTokenStore, EstimateStore


@pytest_asyncio.fixture
async def record(payload, static_adjuster, fixed_clock):
    payload.update({"memo": "야간 입고", "workMethod": "입회"})
    return await EstimateEngine(static_adjuster(0.05, "코멘트"), clock=fixed_clock).produce_estimate(payload)


@pytest.mark.asyncio
async def test_save_and_get_estimate(session_factory, record):
    store = EstimateStore(session_factory)
    stored = store.save(record)

    assert stored.record is record
    with session_factory() as session:
        row = session.get(Estimate, stored.id)
    assert row is not None
    assert row.contact_name == "A"
    assert row.memo == "야간 입고"
    assert row.rule_fee == record.rule_fee
    assert row.total_fee == record.total_fee
    assert row.ai_comment == "코멘트"
    assert row.notices == list(record.notices)
    assert row.urgency == "normal"


@pytest.mark.asyncio
async def test_each_save_gets_new_id(session_factory, record):
    store = EstimateStore(session_factory)
    assert store.save(record).id != store.save(record).id


@pytest.mark.asyncio
async def test_save_without_tables_raises_storage_error(record):
    # 테이블을 만들지 않은 DB
    engine = create_db_engine("sqlite:///:memory:")
    try:
        store = EstimateStore(create_session_factory(engine))
        with pytest.raises(StorageError) as excinfo:
            store.save(record)
        assert excinfo.value.table_name == "estimates"
        assert excinfo.value.error_code == "STORAGE_ERROR"
    finally:
        engine.dispose()


def test_admin_token_upsert_by_role(session_factory):
    store = AdminTokenStore(session_factory)
    assert store.list_recipients() == []

    store.upsert("owner", "rt-1")
    store.upsert("boss", "rt-2")
    store.upsert("owner", "rt-3")

    recipients = store.list_recipients()
    assert [(r.role, r.refresh_token) for r in recipients] == [("owner", "rt-3"), ("boss", "rt-2")]
    assert all(r.updated_at is not None for r in recipients)


def test_quantity_and_fee_columns_are_bigint():
    # PostgreSQL int4(2^31-1)를 넘는 요금도 저장 가능해야 한다
    columns = Estimate.__table__.c
    for name in ("work_qty", "carton_qty", "base_fee", "carton_fee", "transport_fee", "rule_fee", "total_fee"):
        assert isinstance(columns[name].type, BigInteger), name


@pytest.mark.asyncio
async def test_save_fee_above_int4_range(session_factory, payload, static_adjuster):
    payload["workQty"] = 30_000_000
    record = await EstimateEngine(static_adjuster()).produce_estimate(payload)
    assert record.base_fee > 2**31 - 1

    stored = EstimateStore(session_factory).save(record)
    with session_factory() as session:
        assert session.get(Estimate, stored.id).base_fee == 3_000_000_000

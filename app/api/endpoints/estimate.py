import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from fastapi.concurrency import run_in_threadpool

from app.deps import get_estimate_engine, get_estimate_store, get_notifier
from app.schemas.estimate import EstimateOut, EstimateResponse
from app.services.estimate_engine import EstimateEngine
from app.services.estimate_store import EstimateStore
from app.services.estimate_types import StoredEstimate
from app.services.notifications.fanout import NotificationFanout

router = APIRouter()
logger = logging.getLogger(__name__)


def to_estimate_out(stored: StoredEstimate) -> EstimateOut:
    r = stored.record
    return EstimateOut(
        id=str(stored.id),
        total_weight_kg=r.total_weight_kg,
        base_fee=r.base_fee,
        carton_fee=r.carton_fee,
        transport_fee=r.transport_fee,
        rule_adj_rate=r.rule_adj_rate,
        ai_adj_rate=r.ai_adj_rate,
        total_adj_rate=r.total_adj_rate,
        total_fee=r.total_fee,
        lead_time_days=r.lead_time_days,
        ai_comment=r.ai_comment,
        notices=list(r.notices),
    )


@router.post("", response_model=EstimateResponse, response_model_by_alias=True)
async def create_estimate(
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    engine: EstimateEngine = Depends(get_estimate_engine),
    store: EstimateStore = Depends(get_estimate_store),
    notifier: NotificationFanout = Depends(get_notifier),
) -> EstimateResponse:
    """
    견적 계산 → 저장 → (응답 후) 메일/카카오 알림.
    ValidationError(400), StorageError(500)는 app 예외 핸들러에서 응답으로 변환된다.
    """
    record = await engine.produce_estimate(payload)
    stored = await run_in_threadpool(store.save, record)

    # 알림은 응답 이후 실행되며, 실패해도 응답에는 영향이 없다
    background_tasks.add_task(notifier.notify, stored)

    return EstimateResponse(ok=True, estimate=to_estimate_out(stored))

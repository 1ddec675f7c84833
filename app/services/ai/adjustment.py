"""
AI 견적 보정

요율표로 계산된 기본 견적을 기준으로 AI에게 +/- 몇 %를 조정할지 묻고,
응답을 안전 범위(-20% ~ +30%)로 잘라서 돌려준다.
AI 쪽 문제(키 없음, 타임아웃, 응답 이상)는 모두 0% 보정으로 흡수한다.
"""
import asyncio
import logging
import math
from typing import Any, Optional

from app.exceptions import AppError, ProviderTimeoutError
from app.services.ai.base import AIProvider
from app.services.estimate_types import AdjustmentContext, AdjustmentResult

logger = logging.getLogger(__name__)

MIN_ADJ_RATE = -0.20
MAX_ADJ_RATE = 0.30

DISABLED_COMMENT = "AI 비활성화 상태(OPENAI_API_KEY 없음)"
TIMEOUT_COMMENT = "AI 응답 시간 초과, 기본 금액 사용"
PARSE_FAILED_COMMENT = "AI 응답 파싱 실패, 기본 금액 사용"

PROMPT_TEMPLATE = """
너는 인천항/인천공항 보세구역에서 실제 작업을 하는 보수작업 견적 어시스턴트야.
기본 견적이 이미 계산되어 있고, 너는 그것을 기준으로
+/- 몇 %를 조정할지와 간단한 이유만 제안해야 한다.

입력 데이터:
- 작업 수량: {work_qty}
- 카톤 수량: {carton_qty}
- 카톤당 무게(kg): {weight_per_carton}
- 총 중량(kg): {total_weight_kg}
- 기본 작업비(원): {base_fee}
- 카톤 수수료(원): {carton_fee}
- 메모: {memo}

다음 조건을 지켜서 응답해:
1) 무리한 가격 인상/인하는 하지 말 것 (보통 -10% ~ +20% 범위)
2) JSON 형식으로만 답변할 것.
3) JSON 키는 딱 두 개만: "adjRate", "comment"

예:
{{"adjRate":0.15,"comment":"야간 긴급 작업이라 15% 가산이 필요합니다."}}
"""


def clamp_adj_rate(value: Any) -> float:
    """숫자가 아니면 0, 숫자면 [-0.2, 0.3] 범위로 자른다"""
    if isinstance(value, bool):
        return 0.0
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(rate):
        return 0.0
    return max(MIN_ADJ_RATE, min(MAX_ADJ_RATE, rate))


def build_prompt(ctx: AdjustmentContext) -> str:
    return PROMPT_TEMPLATE.format(
        work_qty=ctx.work_qty,
        carton_qty=ctx.carton_qty,
        weight_per_carton=ctx.weight_per_carton,
        total_weight_kg=ctx.total_weight_kg,
        base_fee=ctx.base_fee,
        carton_fee=ctx.carton_fee,
        memo=ctx.memo or "없음",
    )


def parse_adjustment(payload: Any) -> AdjustmentResult:
    if not isinstance(payload, dict):
        return AdjustmentResult(adj_rate=0.0, comment=PARSE_FAILED_COMMENT)
    comment = payload.get("comment")
    return AdjustmentResult(
        adj_rate=clamp_adj_rate(payload.get("adjRate")),
        comment=comment if isinstance(comment, str) else "",
    )


class AdjustmentProvider:
    """
    AIProvider를 감싸 견적 보정률을 계산합니다. get_adjustment는 예외를 던지지 않습니다.
    """

    def __init__(self, provider: Optional[AIProvider], timeout_seconds: float = 15.0):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def get_adjustment(self, ctx: AdjustmentContext) -> AdjustmentResult:
        if self.provider is None or not self.provider.is_configured:
            return AdjustmentResult(adj_rate=0.0, comment=DISABLED_COMMENT)

        try:
            payload = await asyncio.wait_for(
                self.provider.generate_json(build_prompt(ctx)),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            err = ProviderTimeoutError(
                "AI 견적 보정 응답 시간 초과",
                operation="get_adjustment",
                timeout_seconds=self.timeout_seconds,
                provider=self.provider.name,
            )
            logger.warning(f"[AI] {err.to_dict()}")
            return AdjustmentResult(adj_rate=0.0, comment=TIMEOUT_COMMENT)
        except AppError as e:
            logger.error(f"[AI] 견적 보정 실패: {e.to_dict()}")
            return AdjustmentResult(adj_rate=0.0, comment=PARSE_FAILED_COMMENT)
        except Exception as e:
            logger.exception(f"[AI] 견적 보정 중 예기치 못한 오류: {e}")
            return AdjustmentResult(adj_rate=0.0, comment=PARSE_FAILED_COMMENT)

        result = parse_adjustment(payload)
        logger.info(f"[AI] 견적 보정 {result.adj_rate:+.2%} ({result.comment})")
        return result

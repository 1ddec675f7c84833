"""
견적 요청/응답 스키마.
"""

from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# 총 중량과 요금이 유한하고 BIGINT 범위 안에 있도록 입력 상한을 둔다
MAX_QTY = 1_000_000_000
MAX_WEIGHT_PER_CARTON_KG = 1_000_000


class EstimateIn(BaseModel):
    """
    자동견적 폼 제출 (POST /api/estimate).
    """
    work_qty: int = Field(alias="workQty", ge=0, le=MAX_QTY)
    carton_qty: int = Field(alias="cartonQty", ge=0, le=MAX_QTY)
    weight_per_carton: float = Field(alias="weightPerCarton", ge=0, le=MAX_WEIGHT_PER_CARTON_KG, allow_inf_nan=False)
    work_location: str = Field(default="", alias="workLocation")
    product_type: Optional[str] = Field(default=None, alias="productType")
    work_method: Optional[str] = Field(default=None, alias="workMethod")
    urgency: Literal["normal", "urgent", "night"] = "normal"
    ref_info: Optional[str] = Field(default=None, alias="refInfo")
    contact_name: RequiredText = Field(alias="contactName")
    contact_phone: RequiredText = Field(alias="contactPhone")
    contact_email: RequiredText = Field(alias="contactEmail")
    memo: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    @field_validator("urgency", mode="before")
    @classmethod
    def normalize_urgency(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "normal"
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("work_location", mode="before")
    @classmethod
    def none_location_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class EstimateOut(BaseModel):
    """
    고객에게 돌려주는 견적 공개 필드.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    total_weight_kg: float = Field(alias="totalWeightKg")
    base_fee: int = Field(alias="baseFee")
    carton_fee: int = Field(alias="cartonFee")
    transport_fee: int = Field(alias="transportFee")
    rule_adj_rate: float = Field(alias="ruleAdjRate")
    ai_adj_rate: float = Field(alias="aiAdjRate")
    total_adj_rate: float = Field(alias="totalAdjRate")
    total_fee: int = Field(alias="totalFee")
    lead_time_days: int = Field(alias="leadTimeDays")
    ai_comment: str = Field(alias="aiComment")
    notices: List[str] = []


class EstimateResponse(BaseModel):
    ok: bool = True
    estimate: EstimateOut


class ErrorResponse(BaseModel):
    """
    표준 에러 응답.
    """
    ok: bool = False
    message: str

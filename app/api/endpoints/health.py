import time

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """
    생존 확인용. DB 등 외부 의존성은 확인하지 않습니다.
    """
    return {"ok": True, "ts": int(time.time() * 1000)}

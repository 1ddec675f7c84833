"""
요청 핸들러에 주입되는 구성요소. create_app()이 app.state에 올려둔 인스턴스를 꺼내 쓴다.
"""
from fastapi import Request

from app.services.estimate_engine import EstimateEngine
from app.services.estimate_store import AdminTokenStore, EstimateStore
from app.services.notifications.fanout import NotificationFanout
from app.services.notifications.kakao import KakaoClient


def get_estimate_engine(request: Request) -> EstimateEngine:
    return request.app.state.estimate_engine


def get_estimate_store(request: Request) -> EstimateStore:
    return request.app.state.estimate_store


def get_admin_token_store(request: Request) -> AdminTokenStore:
    return request.app.state.admin_token_store


def get_notifier(request: Request) -> NotificationFanout:
    return request.app.state.notifier


def get_kakao_client(request: Request) -> KakaoClient:
    return request.app.state.kakao_client

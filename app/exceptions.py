"""
Estimate Exception Classes

견적 파이프라인의 구조화된 에러 처리를 위한 예외 클래스 정의.
클라이언트에 노출되는 것은 ValidationError(400)와 StorageError(500)뿐이며,
AI/알림 계열 에러는 내부에서 복구된다.
"""
from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """에러 심각도 레벨"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppError(Exception):
    """
    Base exception for all estimate pipeline errors

    Attributes:
        message: 에러 메시지
        error_code: 에러 코드
        severity: 에러 심각도
        context: 추가 컨텍스트 정보
        recoverable: 복구 가능 여부
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = False
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.context = context or {}
        self.recoverable = recoverable
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """에러 정보를 딕셔너리로 변환"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "recoverable": self.recoverable
        }


class ValidationError(AppError):
    """
    Input validation failures

    Attributes:
        field: 실패한 필드 이름
        actual_value: 실제 값
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        actual_value: Optional[Any] = None,
        severity: ErrorSeverity = ErrorSeverity.LOW,
        recoverable: bool = False,
        **kwargs
    ):
        context = {
            "field": field,
            "actual_value": str(actual_value) if actual_value is not None else None,
        }
        context.update(kwargs)
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            severity=severity,
            context=context,
            recoverable=recoverable
        )
        self.field = field
        self.actual_value = actual_value


class AIError(AppError):
    """
    AI adjustment provider failures

    Attributes:
        provider: AI 제공자 (openai)
        model: 사용된 모델
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        recoverable: bool = True,
        **kwargs
    ):
        context = {
            "provider": provider,
            "model": model,
        }
        context.update(kwargs)
        super().__init__(
            message=message,
            error_code="AI_ERROR",
            severity=severity,
            context=context,
            recoverable=recoverable
        )
        self.provider = provider
        self.model = model


class ProviderTimeoutError(AppError):
    """
    Operation timeout errors
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        recoverable: bool = True,
        **kwargs
    ):
        context = {
            "operation": operation,
            "timeout_seconds": timeout_seconds
        }
        context.update(kwargs)
        super().__init__(
            message=message,
            error_code="TIMEOUT_ERROR",
            severity=severity,
            context=context,
            recoverable=recoverable
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class StorageError(AppError):
    """
    Database operation failures. 요청 전체를 실패시키는 유일한 내부 에러.

    Attributes:
        table_name: 영향받은 테이블 이름
        operation: 수행하려던 작업 (insert, select, upsert)
    """

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        operation: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        recoverable: bool = False,
        **kwargs
    ):
        context = {
            "table_name": table_name,
            "operation": operation
        }
        context.update(kwargs)
        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            severity=severity,
            context=context,
            recoverable=recoverable
        )
        self.table_name = table_name
        self.operation = operation


class NotificationError(AppError):
    """
    Email / Kakao memo delivery failures

    Attributes:
        channel: 알림 채널 (email, kakao)
        recipient: 수신자 (메일 주소 또는 관리자 role)
    """

    def __init__(
        self,
        message: str,
        channel: Optional[str] = None,
        recipient: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.LOW,
        recoverable: bool = True,
        **kwargs
    ):
        context = {
            "channel": channel,
            "recipient": recipient
        }
        context.update(kwargs)
        super().__init__(
            message=message,
            error_code="NOTIFICATION_ERROR",
            severity=severity,
            context=context,
            recoverable=recoverable
        )
        self.channel = channel
        self.recipient = recipient


def wrap_exception(
    error: Exception,
    error_class: type = AppError,
    **kwargs
) -> AppError:
    """
    일반 예외를 구조화된 예외로 래핑

    Args:
        error: 원래 예외
        error_class: 래핑할 예외 클래스
        **kwargs: 예외 생성자에 전달할 추가 인자

    Returns:
        래핑된 AppError 인스턴스
    """
    if isinstance(error, AppError):
        return error

    return error_class(str(error) or error.__class__.__name__, **kwargs)

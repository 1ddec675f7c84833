from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./pleo_ops.db"
    db_auto_create_tables: bool = False

    # 예: "https://pleo.netlify.app,http://localhost:8888" (비어 있으면 모든 오리진 허용)
    allowed_origin: str = ""
    port: int = 10000

    # AI 견적 보정 (OpenAI)
    openai_api_key: str = ""  # 단일 키 (하위 호환)
    openai_api_keys: list[str] = []  # 키 로테이션용 목록
    openai_model: str = "gpt-4.1-mini"
    ai_timeout_seconds: float = 15.0

    # 메일 (SMTP)
    smtp_host: str = ""  # 예: smtp.naver.com
    smtp_port: int = 465
    smtp_secure: bool = True
    smtp_user: str = ""
    smtp_pass: str = ""
    estimate_mail_to: str = ""  # 쉼표로 구분된 수신자 (비어 있으면 smtp_user)

    # 카카오톡 나에게 보내기
    kakao_rest_api_key: str = ""
    kakao_client_secret: str = ""
    kakao_redirect_uri: str = ""
    kakao_authorize_url: str = "https://kauth.kakao.com/oauth/authorize"
    kakao_token_endpoint: str = "https://kauth.kakao.com/oauth/token"
    kakao_memo_send_endpoint: str = "https://kapi.kakao.com/v2/api/talk/memo/default/send"
    kakao_link_url: str = "https://xn--on3b27gxrdt6b.com"
    kakao_timeout_seconds: float = 10.0

    def get_openai_keys(self) -> list[str]:
        """단일 키와 키 목록을 합쳐 중복 없이 반환"""
        keys = [k for k in self.openai_api_keys if k]
        if self.openai_api_key and self.openai_api_key not in keys:
            keys.insert(0, self.openai_api_key)
        return keys

    def get_mail_recipients(self) -> list[str]:
        """쉼표로 구분된 수신자를 리스트로 파싱. 비어 있으면 smtp_user로 대체"""
        recipients = [addr.strip() for addr in self.estimate_mail_to.split(",") if addr.strip()]
        if not recipients and self.smtp_user:
            return [self.smtp_user]
        return recipients

    def get_allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origin.split(",") if origin.strip()]

    @field_validator("database_url")
    @classmethod
    def validate_db_url(cls, v: str) -> str:
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError("DB URL은 'postgresql' 또는 'sqlite'로 시작해야 합니다.")
        return v

    @field_validator(
        "kakao_authorize_url",
        "kakao_token_endpoint",
        "kakao_memo_send_endpoint",
        "kakao_link_url",
    )
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL은 'http://' 또는 'https://'로 시작해야 합니다.")
        return v

    @field_validator("ai_timeout_seconds", "kakao_timeout_seconds")
    @classmethod
    def validate_positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("타임아웃은 0보다 커야 합니다.")
        return v

    @field_validator("smtp_port", "port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("포트는 1에서 65535 사이여야 합니다.")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

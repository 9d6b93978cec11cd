"""스케줄/급여 서비스 설정.

ShiftPro settings. Scheduling defaults (time zone, preview horizon, window
limit, default break) and service wiring (CORS, Axiom) are read from the
environment or the project-root .env file.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

# .env 파일 절대 경로: CWD와 무관하게 항상 프로젝트 루트의 .env를 참조
# Absolute path to .env file: ensures correct loading regardless of CWD
_ENV_FILE: Path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """애플리케이션 전역 설정: 환경 변수 기반 구성.

    Service-wide settings. The scheduling values only fill in omitted
    arguments and schema fields; rulesets always travel explicitly.

    Attributes:
        APP_NAME: 서비스 이름 (OpenAPI title)
        DEBUG: 디버그 모드 플래그 (Debug mode flag)
        LOG_LEVEL: 루트 로거 레벨 (Root logger level name)
        DEFAULT_TIME_ZONE: 패턴/급여기간 기본 시간대 (Default IANA zone for patterns and pay periods)
        PREVIEW_MONTHS: 미리보기 기본 기간(개월) (Default preview horizon in months)
        MAX_WINDOW_DAYS: API가 허용하는 최대 생성 기간(일) (Largest window the API will expand)
        DEFAULT_UNPAID_BREAK_MINUTES: 기본 무급 휴게 시간(분) (Default unpaid break per shift)
        CORS_ORIGINS: 허용 출처 (Origins allowed by CORSMiddleware)
    """

    # 앱 메타데이터: Application metadata
    APP_NAME: str = "ShiftPro API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 스케줄 생성 설정: Schedule generation settings
    DEFAULT_TIME_ZONE: str = "UTC"
    PREVIEW_MONTHS: int = 2  # 패턴 확정 전 미리보기 (Preview shown before a pattern is committed)
    MAX_WINDOW_DAYS: int = 3660  # 약 10년 (Roughly ten years)

    # 급여 계산 설정: Pay calculation settings
    DEFAULT_UNPAID_BREAK_MINUTES: int = 30

    # CORS 설정: 프론트엔드 개발 서버 허용 (Frontend dev server origins)
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Axiom 로깅 설정: Axiom observability platform settings
    AXIOM_API_TOKEN: str = ""  # 비어 있으면 요청 로깅 비활성 (Empty disables request logging)
    AXIOM_DATASET: str = ""  # 요청 이벤트 데이터셋 (Dataset receiving request events)

    model_config = {"env_file": _ENV_FILE, "env_file_encoding": "utf-8"}


# 전역 설정 싱글턴 인스턴스: Global settings singleton instance
settings: Settings = Settings()

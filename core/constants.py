"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → nido/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    CURRENCY: str = "UYU"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    # 푸시 채널
    WS_SEND_TIMEOUT_SEC: float = 2.0  # 연결 1개당 전송 대기 한도
    WS_CLEANUP_INTERVAL_SEC: int = 60  # 닫힌 연결 정리 주기

    # 초대 코드 유효 기간 (7일)
    INVITATION_TTL_SEC: int = 7 * 24 * 60 * 60


class Currencies:
    """지원 통화"""

    UYU: str = "UYU"
    USD: str = "USD"

    ALL: tuple[str, ...] = (UYU, USD)


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    SCRIPT_LOGS_DIR: Path = LOGS_DIR / "scripts"

    # 설정 파일
    SECRETS_FILE: Path = CONFIG_DIR / "secrets.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "nido_prod.db"
    DEV_DB: Path = DATA_DIR / "nido_dev.db"

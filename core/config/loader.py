"""
설정 로더

secrets.yaml 로드 및 실행 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths
from core.types import AppMode


@dataclass(frozen=True)
class Secrets:
    """보안 설정 (secrets.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    web_secret_key: str
    slack_webhook_url: str = ""


@dataclass(frozen=True)
class RealtimeConfig:
    """푸시 채널 설정"""

    send_timeout_sec: float = Defaults.WS_SEND_TIMEOUT_SEC
    cleanup_interval_sec: int = Defaults.WS_CLEANUP_INTERVAL_SEC


class SecretsLoadError(Exception):
    """Secrets 로드 실패 예외"""

    pass


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise SecretsLoadError(f"secrets.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SecretsLoadError(f"secrets.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SecretsLoadError("secrets.yaml이 비어 있습니다")

    return data


def load_secrets(path: Path | None = None) -> Secrets:
    """secrets.yaml 파일 로드

    Args:
        path: secrets.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Secrets 인스턴스

    Raises:
        SecretsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SECRETS_FILE

    data = _read_yaml(path)

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SecretsLoadError("secrets.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    # Web secret key 로드 (JWT 서명 키)
    web_config = data.get("web") or {}
    web_secret_key = web_config.get("secret_key", "")

    if not web_secret_key:
        raise SecretsLoadError(
            "secrets.yaml의 web 섹션에 'secret_key'가 없습니다"
        )

    # Slack 알림은 선택 사항
    notifications_config = data.get("notifications") or {}
    slack_webhook_url = notifications_config.get("slack_webhook_url") or ""

    return Secrets(
        mode=mode,
        web_secret_key=web_secret_key,
        slack_webhook_url=slack_webhook_url,
    )


def load_realtime_config(path: Path | None = None) -> RealtimeConfig:
    """secrets.yaml의 realtime 섹션 로드 (없으면 기본값)"""
    if path is None:
        path = Paths.SECRETS_FILE

    data = _read_yaml(path)
    realtime = data.get("realtime") or {}

    try:
        return RealtimeConfig(
            send_timeout_sec=float(
                realtime.get("send_timeout_sec", Defaults.WS_SEND_TIMEOUT_SEC)
            ),
            cleanup_interval_sec=int(
                realtime.get("cleanup_interval_sec", Defaults.WS_CLEANUP_INTERVAL_SEC)
            ),
        )
    except (TypeError, ValueError) as e:
        raise SecretsLoadError(f"realtime 설정 형식 오류: {e}") from e


def get_db_path(secrets: Secrets) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        secrets: Secrets 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if secrets.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    secrets.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _secrets: Secrets | None = None
    _realtime: RealtimeConfig | None = None

    def __new__(cls, secrets_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, secrets_path: Path | None = None) -> None:
        if self._secrets is None:
            # 클래스 속성에 저장 (싱글턴)
            Settings._secrets = load_secrets(secrets_path)
            Settings._realtime = load_realtime_config(secrets_path)

    @property
    def mode(self) -> AppMode:
        """현재 실행 모드"""
        assert self._secrets is not None
        return self._secrets.mode

    @property
    def web_secret_key(self) -> str:
        """Web JWT Secret Key"""
        assert self._secrets is not None
        return self._secrets.web_secret_key

    @property
    def slack_webhook_url(self) -> str:
        """운영 알림용 Slack Webhook URL (빈 문자열이면 비활성화)"""
        assert self._secrets is not None
        return self._secrets.slack_webhook_url

    @property
    def realtime(self) -> RealtimeConfig:
        """푸시 채널 설정"""
        assert self._realtime is not None
        return self._realtime

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._secrets is not None
        return get_db_path(self._secrets)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._secrets = None
        cls._realtime = None


def get_settings(secrets_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        secrets_path: secrets.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(secrets_path)

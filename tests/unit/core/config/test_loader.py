"""
core/config/loader.py 테스트

secrets.yaml 로드, 검증, 푸시 채널 설정, Settings 싱글턴 테스트
"""

from pathlib import Path

import pytest

from core.config.loader import (
    RealtimeConfig,
    Secrets,
    SecretsLoadError,
    Settings,
    get_db_path,
    get_settings,
    load_realtime_config,
    load_secrets,
)
from core.constants import Defaults, Paths
from core.types import AppMode


class TestSecrets:
    """Secrets 데이터클래스 테스트"""

    def test_creation(self) -> None:
        """기본 생성"""
        secrets = Secrets(mode=AppMode.DEVELOPMENT, web_secret_key="jwt_secret")

        assert secrets.mode == AppMode.DEVELOPMENT
        assert secrets.web_secret_key == "jwt_secret"
        assert secrets.slack_webhook_url == ""

    def test_frozen(self) -> None:
        """불변성 확인"""
        secrets = Secrets(mode=AppMode.DEVELOPMENT, web_secret_key="jwt")

        with pytest.raises(AttributeError):
            secrets.web_secret_key = "other"  # type: ignore


class TestLoadSecrets:
    """load_secrets 함수 테스트"""

    def test_load_development(self, temp_secrets_file: Path) -> None:
        """development 모드 로드"""
        secrets = load_secrets(temp_secrets_file)

        assert secrets.mode == AppMode.DEVELOPMENT
        assert secrets.web_secret_key == "test_jwt_secret_key_xyz_0123456789abcdef"
        assert secrets.slack_webhook_url == ""

    def test_load_production_with_slack(self, temp_secrets_file_production: Path) -> None:
        """production 모드 + Slack Webhook"""
        secrets = load_secrets(temp_secrets_file_production)

        assert secrets.mode == AppMode.PRODUCTION
        assert secrets.slack_webhook_url.startswith("https://hooks.slack.com/")

    def test_invalid_mode(self, temp_secrets_file_invalid_mode: Path) -> None:
        """잘못된 mode는 ValueError"""
        with pytest.raises(ValueError, match="유효하지 않은 mode"):
            load_secrets(temp_secrets_file_invalid_mode)

    def test_file_not_found(self, temp_dir: Path) -> None:
        """파일 없음"""
        with pytest.raises(SecretsLoadError, match="찾을 수 없습니다"):
            load_secrets(temp_dir / "missing.yaml")

    def test_empty_file(self, temp_dir: Path) -> None:
        """빈 파일"""
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(SecretsLoadError, match="비어 있습니다"):
            load_secrets(path)

    def test_missing_mode(self, temp_dir: Path) -> None:
        """mode 누락"""
        path = temp_dir / "no_mode.yaml"
        path.write_text('web:\n  secret_key: "x"\n', encoding="utf-8")

        with pytest.raises(SecretsLoadError, match="'mode'"):
            load_secrets(path)

    def test_missing_secret_key(self, temp_dir: Path) -> None:
        """web.secret_key 누락"""
        path = temp_dir / "no_key.yaml"
        path.write_text("mode: development\n", encoding="utf-8")

        with pytest.raises(SecretsLoadError, match="secret_key"):
            load_secrets(path)

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """YAML 파싱 실패"""
        path = temp_dir / "broken.yaml"
        path.write_text("mode: [unclosed\n", encoding="utf-8")

        with pytest.raises(SecretsLoadError, match="파싱 실패"):
            load_secrets(path)


class TestLoadRealtimeConfig:
    """load_realtime_config 함수 테스트"""

    def test_load_values(self, temp_secrets_file: Path) -> None:
        config = load_realtime_config(temp_secrets_file)

        assert config.send_timeout_sec == 0.5
        assert config.cleanup_interval_sec == 30

    def test_defaults_when_section_missing(self, temp_secrets_file_production: Path) -> None:
        config = load_realtime_config(temp_secrets_file_production)

        assert config == RealtimeConfig()
        assert config.send_timeout_sec == Defaults.WS_SEND_TIMEOUT_SEC

    def test_invalid_value(self, temp_dir: Path) -> None:
        path = temp_dir / "bad_realtime.yaml"
        path.write_text(
            'mode: development\nweb:\n  secret_key: "x"\nrealtime:\n  send_timeout_sec: fast\n',
            encoding="utf-8",
        )

        with pytest.raises(SecretsLoadError, match="realtime"):
            load_realtime_config(path)


class TestGetDbPath:
    """get_db_path 함수 테스트"""

    def test_production(self) -> None:
        secrets = Secrets(mode=AppMode.PRODUCTION, web_secret_key="x")
        assert get_db_path(secrets) == Paths.PROD_DB

    def test_development(self) -> None:
        secrets = Secrets(mode=AppMode.DEVELOPMENT, web_secret_key="x")
        assert get_db_path(secrets) == Paths.DEV_DB


class TestSettings:
    """Settings 싱글턴 테스트"""

    @pytest.fixture(autouse=True)
    def reset_settings(self):
        Settings.reset()
        yield
        Settings.reset()

    def test_singleton(self, temp_secrets_file: Path) -> None:
        """같은 인스턴스 반환"""
        first = get_settings(temp_secrets_file)
        second = get_settings()

        assert first is second

    def test_properties(self, temp_secrets_file: Path) -> None:
        settings = get_settings(temp_secrets_file)

        assert settings.mode == AppMode.DEVELOPMENT
        assert settings.web_secret_key == "test_jwt_secret_key_xyz_0123456789abcdef"
        assert settings.slack_webhook_url == ""
        assert settings.realtime.send_timeout_sec == 0.5
        assert settings.db_path == Paths.DEV_DB

    def test_reset(self, temp_secrets_file: Path, temp_secrets_file_production: Path) -> None:
        """reset 후 다른 파일로 다시 로드"""
        get_settings(temp_secrets_file)
        Settings.reset()

        settings = get_settings(temp_secrets_file_production)
        assert settings.mode == AppMode.PRODUCTION

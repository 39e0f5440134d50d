"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path

import pytest

from tests.helpers import make_transaction


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_secrets_file(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (development 모드)"""
    secrets_content = """# 테스트용 secrets.yaml
mode: development

web:
  secret_key: "test_jwt_secret_key_xyz_0123456789abcdef"

realtime:
  send_timeout_sec: 0.5
  cleanup_interval_sec: 30
"""
    secrets_path = temp_dir / "secrets.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_production(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (production 모드 + Slack)"""
    secrets_content = """mode: production

web:
  secret_key: "prod_jwt_secret_key_xyz_0123456789abcdef"

notifications:
  slack_webhook_url: "https://hooks.slack.com/services/T000/B000/XXXX"
"""
    secrets_path = temp_dir / "secrets_prod.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 secrets.yaml 파일 생성"""
    secrets_content = """mode: testnet

web:
  secret_key: "jwt_secret"
"""
    secrets_path = temp_dir / "secrets_invalid.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def tx_factory():
    """거래 상태 팩토리"""
    return make_transaction

"""
타임존 유틸리티

내부 저장은 항상 UTC ISO 문자열.
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시각"""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 변환 (naive면 UTC로 간주)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_utc(value: str | None) -> datetime | None:
    """저장된 ISO 문자열 → UTC datetime

    SQLite datetime('now') 형식("2026-02-21 10:00:00")도 허용.
    """
    if not value:
        return None
    return to_utc(datetime.fromisoformat(value))

from __future__ import annotations

from billo.infrastructure.cache import cache_store
from billo.infrastructure.db.repositories import menu_repo, order_repo, staff_repo, tab_repo
from billo.infrastructure.messaging import redis_publisher


class FakeRedis:
    """The slice of redis.Redis the publisher and cache store call."""

    def __init__(self) -> None:
        self.published: list[tuple[str, str]] = []
        self.values: dict[str, str] = {}

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 0

    def get(self, key: str) -> bytes | None:
        value = self.values.get(key)
        return value.encode("utf-8") if value is not None else None

    def set(self, name: str, value: str, ex: int | None = None) -> bool:
        self.values[name] = value
        return True

    def delete(self, key: str) -> int:
        return 1 if self.values.pop(key, None) is not None else 0


def wire_app(monkeypatch, engine, fake_redis: FakeRedis) -> None:
    """Point every route factory at the given engine and fake redis."""
    for module in (menu_repo, order_repo, staff_repo, tab_repo):
        monkeypatch.setattr(module, "get_engine", lambda timeout_seconds=1.0: engine)
    for module in (cache_store, redis_publisher):
        monkeypatch.setattr(module, "get_redis_client", lambda timeout_seconds=1.0: fake_redis)
    monkeypatch.delenv("REDIS_URL", raising=False)

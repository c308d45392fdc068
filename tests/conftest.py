"""Pytest configuration and shared fixtures."""

import pytest
from typing import Any, Dict, List, Optional, Sequence

from loothound.cache.query_cache import QueryCache
from loothound.data.parsers import parse_container
from loothound.errors import PersistenceError, TransportError
from loothound.persistence.sqlite_gateway import SqliteGateway
from loothound.remote.client import ContainerFetcher


class FakeFetcher(ContainerFetcher):
    """Serves stash payloads from memory and records every call."""

    def __init__(self, payloads: Dict[str, Dict[str, Any]], error: Optional[Exception] = None):
        self.payloads = payloads
        self.error = error
        self.calls: List[tuple] = []

    async def fetch_containers(self, container_ids: Sequence[str], league: Optional[str] = None):
        self.calls.append((list(container_ids), league))
        if self.error is not None:
            raise self.error
        return [parse_container(self.payloads[stash_id]) for stash_id in container_ids]


class FlakyGateway(SqliteGateway):
    """SQLite gateway whose attaches fail for selected stash ids."""

    def __init__(self, *args, failing_stashes=(), fail_create: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_stashes = set(failing_stashes)
        self.fail_create = fail_create
        self.attach_calls: List[tuple] = []

    async def create_snapshot(self, profile_id: int) -> int:
        if self.fail_create:
            raise PersistenceError("disk full", operation="create_snapshot", target=str(profile_id))
        return await super().create_snapshot(profile_id)

    async def attach_items(self, snapshot_id, items, stash_id):
        self.attach_calls.append((snapshot_id, stash_id, len(items)))
        if stash_id in self.failing_stashes:
            raise PersistenceError("attach rejected", operation="attach_items", target=stash_id)
        await super().attach_items(snapshot_id, items, stash_id)


def make_item_record(name: str, type_line: str, **overrides: Any) -> Dict[str, Any]:
    record = {
        "id": f"item-{name or type_line}".replace(" ", "-").lower(),
        "verified": False,
        "w": 2,
        "h": 3,
        "icon": f"https://web.poecdn.com/image/{type_line.replace(' ', '')}.png",
        "name": name,
        "typeLine": type_line,
        "baseType": type_line,
        "identified": True,
        "frameType": 2,
    }
    record.update(overrides)
    return record


def make_map_child(map_name: Optional[str], image: str = "https://web.poecdn.com/image/map.png") -> Dict[str, Any]:
    if map_name is None:
        return {"id": "child-empty", "metadata": {}}
    return {"id": f"child-{map_name}", "metadata": {"map": {"name": map_name, "image": image, "tier": 16}}}


@pytest.fixture
def generic_stash() -> Dict[str, Any]:
    """Regular stash tab payload with three items."""
    return {
        "id": "a1b2c3",
        "name": "Dump",
        "type": "PremiumStash",
        "metadata": {"colour": "ff0000"},
        "items": [
            make_item_record("Kaom's Heart", "Glorious Plate", frameType=3),
            make_item_record("", "Chaos Orb", w=1, h=1, frameType=5, stackSize=20),
            make_item_record("Doom Ward", "Titan Greaves", identified=False),
        ],
    }


@pytest.fixture
def map_stash() -> Dict[str, Any]:
    """Map stash tab payload with one malformed child in the middle."""
    return {
        "id": "m4p5t6",
        "name": "Maps",
        "type": "MapStash",
        "metadata": {"map": {"series": 5}},
        "children": [
            make_map_child("Strand Map"),
            make_map_child(None),
            make_map_child("Burial Chambers Map"),
        ],
    }


@pytest.fixture
def currency_stash() -> Dict[str, Any]:
    return {
        "id": "c7u8r9",
        "name": "Currency",
        "type": "CurrencyStash",
        "items": [make_item_record("", "Divine Orb", w=1, h=1, frameType=5, stackSize=3)],
    }


@pytest.fixture
def stash_payloads(generic_stash, map_stash, currency_stash) -> Dict[str, Dict[str, Any]]:
    return {stash["id"]: stash for stash in (generic_stash, map_stash, currency_stash)}


@pytest.fixture
def fake_fetcher(stash_payloads) -> FakeFetcher:
    return FakeFetcher(stash_payloads)


@pytest.fixture
def failing_fetcher() -> FakeFetcher:
    return FakeFetcher({}, error=TransportError("HTTP 503: Service Unavailable", status_code=503))


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "loothound-test.db")


@pytest.fixture
def gateway(db_path) -> SqliteGateway:
    return SqliteGateway(db_path, pricing_revision=7)


@pytest.fixture
def flaky_gateway_factory(db_path):
    def factory(**kwargs) -> FlakyGateway:
        return FlakyGateway(db_path, pricing_revision=7, **kwargs)
    return factory


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def make_record():
    """Factory for provider item records."""
    return make_item_record


@pytest.fixture
def make_child():
    """Factory for map stash children; ``None`` builds one without map metadata."""
    return make_map_child


@pytest.fixture
def fetcher_factory():
    """Build a FakeFetcher over arbitrary payloads."""
    return FakeFetcher

"""Unit tests for the application shell and profile session."""

import pytest

from loothound.app import LootHoundApp, ProfileSession
from loothound.cache.query_cache import get_query_cache
from loothound.config.defaults import get_default_config
from loothound.engine import SnapshotOrchestrator
from loothound.errors import ValidationError
from loothound.stats.calculator import Trend


@pytest.fixture
def session(cache, gateway, fake_fetcher) -> ProfileSession:
    return ProfileSession(cache, gateway, SnapshotOrchestrator(gateway, fake_fetcher, cache))


class TestProfileSession:

    @pytest.mark.asyncio
    async def test_no_selection(self, session):
        assert session.can_take_snapshot is False

        await session.refresh()

        assert session.items == []

    @pytest.mark.asyncio
    async def test_take_snapshot_without_selection(self, session):
        with pytest.raises(ValidationError):
            await session.take_snapshot()

    @pytest.mark.asyncio
    async def test_take_snapshot_replaces_items(self, session, gateway):
        profile_id = await gateway.create_profile({"name": "Main", "stashes": ["c7u8r9"]})
        await session.select_profile(profile_id)
        assert session.can_take_snapshot is True
        assert session.items == []

        result = await session.take_snapshot()

        assert [item.type_line for item in session.items] == ["Divine Orb"]
        assert session.items == result.items

    @pytest.mark.asyncio
    async def test_select_profile_loads_latest_items(self, session, gateway, fake_fetcher, cache):
        profile_id = await gateway.create_profile({"name": "Main", "stashes": ["a1b2c3"]})
        other_id = await gateway.create_profile({"name": "Other"})
        await SnapshotOrchestrator(gateway, fake_fetcher, cache).take_snapshot(profile_id)

        await session.select_profile(profile_id)
        assert len(session.items) == 3

        await session.select_profile(other_id)
        assert session.items == []

        # Cached items are reused on reselect
        await session.select_profile(profile_id)
        assert len(session.items) == 3

    @pytest.mark.asyncio
    async def test_profiles(self, session, gateway):
        await gateway.create_profile({"name": "Main"})

        profiles = await session.profiles()

        assert [profile.name for profile in profiles] == ["Main"]

    @pytest.mark.asyncio
    async def test_stats(self, session, gateway):
        profile_id = await gateway.create_profile({"name": "Main", "stashes": ["c7u8r9"]})
        await session.select_profile(profile_id)
        await session.take_snapshot()
        await session.take_snapshot()

        net_worth, _income, count = await session.stats(12.0)

        assert net_worth.value == "12.00 div"
        assert net_worth.diff == 14
        assert net_worth.trend is Trend.UP
        assert count.value == "2"


class TestLootHoundApp:

    def test_start_and_stop(self, gateway, fake_fetcher):
        app = LootHoundApp(get_default_config(), gateway=gateway, fetcher=fake_fetcher)

        app.start(configure_logs=False)
        try:
            assert app.cache is get_query_cache()
            assert app.session.orchestrator.gateway is gateway
        finally:
            app.stop()

        with pytest.raises(RuntimeError):
            get_query_cache()

    @pytest.mark.asyncio
    async def test_async_context_manager(self, gateway, fake_fetcher):
        async with LootHoundApp(get_default_config(), gateway=gateway, fetcher=fake_fetcher) as app:
            profile_id = await gateway.create_profile({"name": "Main", "stashes": ["a1b2c3"]})
            await app.session.select_profile(profile_id)
            result = await app.session.take_snapshot()

        assert len(result.items) == 3
        assert app.session is None

    def test_from_config_dir_builds_own_collaborators(self, tmp_path):
        db_file = tmp_path / "app.db"

        app = LootHoundApp.from_config_dir(tmp_path, {"storage": {"db_path": str(db_file)}})
        app.start(configure_logs=False)
        try:
            assert app.gateway is not None
            assert app.fetcher is not None
            assert db_file.exists()
        finally:
            app.stop()

    def test_from_config_dir_rejects_invalid_settings(self, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            LootHoundApp.from_config_dir(tmp_path, {"pricing": {"revision": -3}})

        assert exc_info.value.field == "pricing.revision"

"""Tests for the HTTP stash fetcher."""

import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from loothound.config.defaults import RemoteParams
from loothound.data.models import ContainerKind
from loothound.errors import TransportError
from loothound.remote.client import HttpContainerFetcher


def _response(payload, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.getcode.return_value = status
    response.read.return_value = (payload if isinstance(payload, str) else json.dumps(payload)).encode("utf-8")
    response.__enter__.return_value = response
    return response


@pytest.fixture
def fetcher() -> HttpContainerFetcher:
    return HttpContainerFetcher(RemoteParams(
        base_url="https://api.example.com/",
        league="Settlers",
        headers={"Authorization": "Bearer token"},
    ))


class TestHttpContainerFetcher:

    def test_invalid_base_url(self):
        with pytest.raises(TransportError):
            HttpContainerFetcher(RemoteParams(base_url="not a url"))

    def test_stash_url(self, fetcher):
        assert fetcher.stash_url("a1b2c3") == "https://api.example.com/stash/Settlers/a1b2c3"
        assert fetcher.stash_url("x/y", "Hardcore Settlers") == "https://api.example.com/stash/Hardcore%20Settlers/x%2Fy"

    @pytest.mark.asyncio
    async def test_fetch_parses_containers_in_order(self, fetcher, generic_stash, map_stash):
        responses = [_response({"stash": generic_stash}), _response({"stash": map_stash})]

        with patch("loothound.remote.client.urlopen", side_effect=responses) as mock_urlopen:
            containers = await fetcher.fetch_containers(["a1b2c3", "m4p5t6"])

        assert [container.id for container in containers] == ["a1b2c3", "m4p5t6"]
        assert containers[0].kind is ContainerKind.GENERIC
        assert containers[1].kind is ContainerKind.MAP

        request = mock_urlopen.call_args_list[0][0][0]
        assert request.full_url == "https://api.example.com/stash/Settlers/a1b2c3"
        assert request.get_header("Authorization") == "Bearer token"
        assert request.get_method() == "GET"

    @pytest.mark.asyncio
    async def test_http_error(self, fetcher):
        error = HTTPError("https://api.example.com/stash/Settlers/a1", 429, "Too Many Requests", {}, None)

        with patch("loothound.remote.client.urlopen", side_effect=error):
            with pytest.raises(TransportError) as exc_info:
                await fetcher.fetch_containers(["a1"])

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_network_error(self, fetcher):
        with patch("loothound.remote.client.urlopen", side_effect=URLError("connection refused")):
            with pytest.raises(TransportError) as exc_info:
                await fetcher.fetch_containers(["a1"])

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_invalid_json(self, fetcher):
        with patch("loothound.remote.client.urlopen", return_value=_response("<html>")):
            with pytest.raises(TransportError):
                await fetcher.fetch_containers(["a1"])

    @pytest.mark.asyncio
    async def test_missing_stash_body(self, fetcher):
        with patch("loothound.remote.client.urlopen", return_value=_response({"error": "gone"})):
            with pytest.raises(TransportError) as exc_info:
                await fetcher.fetch_containers(["a1"])

        assert exc_info.value.context == {"stash_id": "a1"}

    @pytest.mark.asyncio
    async def test_stash_body_without_id_skipped(self, fetcher, currency_stash):
        responses = [_response({"stash": {"name": "no id", "items": []}}), _response({"stash": currency_stash})]

        with patch("loothound.remote.client.urlopen", side_effect=responses):
            containers = await fetcher.fetch_containers(["gone", "c7u8r9"])

        assert [container.id for container in containers] == ["c7u8r9"]

    @pytest.mark.asyncio
    async def test_no_ids_no_requests(self, fetcher):
        with patch("loothound.remote.client.urlopen") as mock_urlopen:
            assert await fetcher.fetch_containers([]) == []

        mock_urlopen.assert_not_called()

"""Tests for the Muso.AI client."""

import json

import pytest
from pytest_httpx import HTTPXMock

from tunescope.config.settings import MusoSettings
from tunescope.domain.exceptions import (
    ProviderNotConfiguredError,
    ProviderNotFoundError,
    ProviderRateLimitedError,
    UpstreamError,
    ValidationError,
)
from tunescope.infrastructure.cache import MusoCache
from tunescope.infrastructure.integrations.muso_client import (
    MusoClient,
    artist_from_muso,
    track_from_muso,
)

PROFILE = {
    "id": "b1c2d3",
    "name": "Drake",
    "avatarUrl": "https://img.muso.test/drake.jpg",
    "popularity": 97,
    "spotifyId": "3TVXtAsR1Inumwj472S9r4",
}

TRACK = {
    "id": "t-1",
    "title": "Hotline Bling",
    "isrcs": ["usc4r1502467", "GBUM71500001"],
    "artists": [{"name": "Drake"}],
    "album": {"title": "Views", "albumArt": "https://img.muso.test/views.jpg"},
    "releaseDate": "2015-07-31",
    "duration": 267000,
    "spotifyIds": ["0wwPcA6wtMf6HUMpIRdeP7"],
    "credits": [
        {"parent": "Production", "child": "Producer", "collaborators": [{"name": "Nineteen85"}]},
        {"role": "Writer", "name": "Aubrey Graham"},
    ],
}


@pytest.fixture
async def muso(muso_settings: MusoSettings):
    client = MusoClient(muso_settings, timeout=5.0, cache=MusoCache())
    yield client
    await client.close()


def _search_url(settings: MusoSettings) -> str:
    return f"{settings.api_base_url}/search"


class TestMappers:
    def test_artist_from_muso(self) -> None:
        artist = artist_from_muso(PROFILE)

        assert artist is not None
        assert artist.image_url == "https://img.muso.test/drake.jpg"
        assert artist.popularity_score == 97
        assert artist.provider_ids == {
            "muso": "b1c2d3",
            "spotify": "3TVXtAsR1Inumwj472S9r4",
        }

    def test_track_from_muso_reads_both_credit_formats(self) -> None:
        track = track_from_muso(TRACK)

        assert track is not None
        assert track.isrc == "USC4R1502467"
        assert track.album_name == "Views"
        assert [(c.name, c.role) for c in track.credits] == [
            ("Nineteen85", "Producer"),
            ("Aubrey Graham", "Writer"),
        ]
        assert track.provider_ids == {"muso": "t-1", "spotify": "0wwPcA6wtMf6HUMpIRdeP7"}


class TestMusoSearch:
    """Test POST /search and its cache."""

    async def test_search_sends_api_key_and_body(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"result": "success", "data": {"profiles": {"items": [PROFILE], "total": 1}}},
        )

        data = await muso.search("Drake", types=("profile",), limit=500)

        assert data["profiles"]["total"] == 1
        request = httpx_mock.get_requests()[0]
        assert request.headers["x-api-key"] == "muso-test-key"
        assert json.loads(request.content) == {
            "keyword": "Drake",
            "type": ["profile"],
            "limit": 50,
            "offset": 0,
        }

    async def test_repeated_search_is_served_from_cache(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"data": {"tracks": {"items": [TRACK], "total": 1}}},
        )

        first = await muso.search_tracks("hotline bling")
        second = await muso.search_tracks("hotline bling")

        assert [t.title for t in first] == [t.title for t in second] == ["Hotline Bling"]
        assert len(httpx_mock.get_requests()) == 1
        assert muso.cache is not None
        assert muso.cache.hits == 1

    async def test_search_artists_maps_profiles(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"data": {"profiles": {"items": [PROFILE, {"name": ""}]}}},
        )

        artists = await muso.search_artists("Drake", limit=5)

        assert [a.name for a in artists] == ["Drake"]

    async def test_null_profile_items_are_skipped(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"data": {"profiles": {"items": [None, PROFILE, ["junk"]]}}},
        )

        artists = await muso.search_artists("Drake")

        assert [a.name for a in artists] == ["Drake"]

    async def test_track_with_junk_nested_fields(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        junk = {**TRACK, "album": None, "isrcs": "USC4R1502467", "spotifyIds": None}
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"data": {"tracks": {"items": [None, junk]}}},
        )

        tracks = await muso.search_tracks("hotline bling")

        assert len(tracks) == 1
        assert tracks[0].isrc is None
        assert tracks[0].album_name is None
        assert "spotify" not in tracks[0].provider_ids

    async def test_list_search_body_is_upstream_error(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST", url=_search_url(muso_settings), json={"data": []}
        )

        with pytest.raises(UpstreamError):
            await muso.search_artists("Drake")

    async def test_upstream_429_is_not_cached(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            status_code=429,
            headers={"Retry-After": "30"},
        )
        httpx_mock.add_response(
            method="POST",
            url=_search_url(muso_settings),
            json={"data": {"profiles": {"items": []}}},
        )

        with pytest.raises(ProviderRateLimitedError) as exc_info:
            await muso.search_artists("Drake")
        assert exc_info.value.retry_after == 30

        assert await muso.search_artists("Drake") == []

    async def test_blank_keyword_rejected(self, muso: MusoClient) -> None:
        with pytest.raises(ValidationError):
            await muso.search("   ")

    async def test_not_configured(self, httpx_mock: HTTPXMock) -> None:
        client = MusoClient(MusoSettings(api_key="your_muso_api_key_here"))

        with pytest.raises(ProviderNotConfiguredError):
            await client.search_artists("Drake")
        assert httpx_mock.get_requests() == []


class TestMusoProfiles:
    async def test_get_profile(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=f"{muso_settings.api_base_url}/profile/b1c2d3?source=muso",
            json={"data": PROFILE},
        )

        assert (await muso.get_profile("b1c2d3"))["name"] == "Drake"

    async def test_empty_profile_is_not_found(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=f"{muso_settings.api_base_url}/profile/zzz?source=spotify",
            json={"data": {}},
        )

        with pytest.raises(ProviderNotFoundError):
            await muso.get_profile("zzz", source="spotify")

    async def test_profile_credits_query(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=(
                f"{muso_settings.api_base_url}/profile/b1c2d3/credits"
                "?credit=Producer&offset=0&limit=20&sortKey=popularity"
            ),
            json={"data": {"items": [], "totalCount": 0}},
        )

        page = await muso.get_profile_credits(
            "b1c2d3", credits=["Producer"], sort_key="popularity"
        )

        assert page == {"items": [], "totalCount": 0}

    async def test_profile_collaborators_query(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=(
                f"{muso_settings.api_base_url}/profile/b1c2d3/collaborators"
                "?sortKey=lastCollaborationDate&sortDirection=DESC"
                "&offset=0&limit=10&type=artist"
            ),
            json={"data": {"items": [{"name": "Future"}], "totalCount": 1}},
        )

        page = await muso.get_profile_collaborators("b1c2d3", limit=10)

        assert page["totalCount"] == 1


class TestMusoTracks:
    async def test_get_track_by_isrc(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=f"{muso_settings.api_base_url}/track/isrc/USC4R1502467",
            json={"data": TRACK},
        )

        track = await muso.get_track("USC4R1502467", id_type="isrc")

        assert track.title == "Hotline Bling"
        assert track.credits

    async def test_unknown_track(
        self, muso: MusoClient, muso_settings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=f"{muso_settings.api_base_url}/track/id/nope", json={"data": None}
        )

        with pytest.raises(ProviderNotFoundError):
            await muso.get_track("nope")

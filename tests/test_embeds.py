import asyncio
import threading
from datetime import timezone

import pytest
import requests

from config.settings import EmbedSettings
from embed.application.usecase.click_insights_usecase import ClickInsightsUseCase
from embed.application.usecase.embed_order_usecase import EmbedOrderUseCase
from embed.application.usecase.link_preview_usecase import LinkPreviewUseCase
from embed.domain.click_event import ClickEvent
from embed.domain.click_insights import click_series, count_by_embed, max_bucket_clicks, rank_by_clicks
from embed.domain.embed import Embed, derive_fallback_preview
from embed.infrastructure.client.link_preview_client import LinkPreviewClient
from monitoring.domain.range_window import RangeWindow, parse_range
from tests.fakes import FakeClickEventRepository, FakeEmbedRepository, StaticPreviewClient


def embed(embed_id, sort_order=0, url=None, active=True):
    return Embed(
        id=embed_id,
        title=embed_id,
        url=url or f"https://example.com/{embed_id}",
        sort_order=sort_order,
        is_active=active,
    )


class TestEmbedHelpers:
    def test_fallback_preview(self):
        assert derive_fallback_preview("https://www.example.com/a/b/") == "example.com/a/b"
        assert derive_fallback_preview("https://example.com") == "example.com"
        assert derive_fallback_preview("not a url") == "Open link for preview details."


class TestClickInsights:
    def test_counts_start_at_zero_for_every_embed(self, at):
        events = [ClickEvent("a", at()), ClickEvent("a", at(minutes=1))]
        assert count_by_embed([embed("a"), embed("b")], events) == {"a": 2, "b": 0}

    def test_hourly_series_is_zero_filled(self, at):
        window = RangeWindow(since=at(), until=at(hours=3))
        events = [ClickEvent("a", at(minutes=10)), ClickEvent("a", at(minutes=20)), ClickEvent("b", at(hours=2))]
        series = click_series(events, window, tz=timezone.utc)

        assert [bucket.clicks for bucket in series] == [2, 0, 1, 0]
        assert series[0].label == "12:00 PM"
        assert max_bucket_clicks(series) == 2

    def test_daily_series_for_long_ranges(self, at):
        window = RangeWindow(since=at(days=-6), until=at())
        series = click_series([ClickEvent("a", at(days=-1))], window)
        assert len(series) == 7
        assert series[-2].clicks == 1
        assert series[-1].label == "Mar 1"

    def test_max_is_at_least_one(self, at):
        assert max_bucket_clicks([]) == 1

    def test_ranking_breaks_ties_by_display_order(self):
        embeds = [embed("a", 0), embed("b", 1), embed("c", 2)]
        ranked = rank_by_clicks(embeds, {"a": 1, "b": 3, "c": 1})
        assert [(row.embed.id, row.rank) for row in ranked] == [("b", 1), ("a", 2), ("c", 3)]


class TestClickInsightsUseCase:
    def test_insights_for_selected_range(self, at):
        clicks = FakeClickEventRepository(
            [ClickEvent("a", at(hours=-2)), ClickEvent("b", at(hours=-30)), ClickEvent("a", at(minutes=-5))]
        )
        usecase = ClickInsightsUseCase(FakeEmbedRepository([embed("a"), embed("b", 1)]), clicks)
        result = usecase.insights(parse_range("24h"), now=at())

        assert result["total_clicks"] == 2
        assert result["per_embed"] == {"a": 2, "b": 0}
        assert result["ranking"][0].embed.id == "a"
        assert len(result["series"]) == 25

    def test_record_click(self, at):
        clicks = FakeClickEventRepository()
        usecase = ClickInsightsUseCase(FakeEmbedRepository([embed("a")]), clicks)
        usecase.record_click("a", clicked_at=at())
        assert clicks.events == [ClickEvent("a", at())]

        with pytest.raises(ValueError):
            usecase.record_click("missing")


class TestEmbedOrder:
    def test_reorder(self):
        repo = FakeEmbedRepository([embed(f"e{i}", i) for i in range(4)])
        result = asyncio.run(EmbedOrderUseCase(repo).reorder("e3", "e1"))
        assert [row.id for row in result.items] == ["e0", "e3", "e1", "e2"]
        assert [row.id for row in repo.list_embeds()] == ["e0", "e3", "e1", "e2"]


class GatedPreviewClient(StaticPreviewClient):
    def __init__(self, texts):
        super().__init__(texts)
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_preview(self, url: str) -> str:
        if url.endswith("/slow"):
            self.started.set()
            self.release.wait(timeout=5)
        return super().fetch_preview(url)


class TestLinkPreviewUseCase:
    def test_loads_active_embeds(self):
        client = StaticPreviewClient({"https://example.com/a": "About A"})
        usecase = LinkPreviewUseCase(client)
        result = asyncio.run(usecase.load([embed("a"), embed("b", active=False)]))
        assert result == {"a": "About A"}

    def test_superseded_batch_is_discarded(self):
        client = GatedPreviewClient({"https://example.com/slow": "old", "https://example.com/new": "new"})
        usecase = LinkPreviewUseCase(client)

        async def scenario():
            first = asyncio.create_task(usecase.load([embed("s", url="https://example.com/slow")]))
            await asyncio.to_thread(client.started.wait, 5)
            second = await usecase.load([embed("n", url="https://example.com/new")])
            client.release.set()
            return await first, second

        first, second = asyncio.run(scenario())
        assert first is None
        assert second == {"n": "new"}
        assert usecase.previews == {"n": "new"}

    def test_closed_loader_discards_results(self):
        usecase = LinkPreviewUseCase(StaticPreviewClient({}))
        usecase.close()
        assert asyncio.run(usecase.load([embed("a")])) is None


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, endpoint, params=None, timeout=None):
        self.calls.append((endpoint, params, timeout))
        response = self.responses.get(endpoint)
        if isinstance(response, Exception):
            raise response
        return response


class TestLinkPreviewClient:
    settings = EmbedSettings(preview_timeout=2.0, microlink_url="https://micro", noembed_url="https://noembed")

    def test_microlink_description_first(self):
        session = FakeSession({"https://micro": FakeResponse({"data": {"description": " Desc ", "title": "T"}})})
        client = LinkPreviewClient(self.settings, session=session)
        assert client.fetch_preview("https://example.com/x") == "Desc"
        assert session.calls == [("https://micro", {"url": "https://example.com/x"}, 2.0)]

    def test_noembed_pieces_when_microlink_fails(self):
        session = FakeSession(
            {
                "https://micro": requests.exceptions.ConnectionError("down"),
                "https://noembed": FakeResponse({"title": "Song", "author_name": "Band", "provider_name": ""}),
            }
        )
        client = LinkPreviewClient(self.settings, session=session)
        assert client.fetch_preview("https://example.com/x") == "Song • Band"

    def test_url_fallback_when_all_providers_fail(self):
        session = FakeSession(
            {
                "https://micro": FakeResponse({}, status=500),
                "https://noembed": FakeResponse(ValueError("not json")),
            }
        )
        client = LinkPreviewClient(self.settings, session=session)
        assert client.fetch_preview("https://www.example.com/post/") == "example.com/post"

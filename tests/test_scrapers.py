"""Source scraper extraction against a scripted page driver"""

import json

import pytest

from video_ingest.models import CandidateRef, NO_DOWNLOAD
from video_ingest.scrapers import (
    AuthenticationError,
    EUCommissionScraper,
    EUParliamentScraper,
    CouncilOfEuropeScraper,
    YouTubeChannelScraper,
    NatoMultimediaScraper,
    SOURCES,
    build_scraper,
)
from video_ingest.scrapers import eu_commission, eu_parliament, council_of_europe, youtube_channel, nato_multimedia
from video_ingest.scrapers.eu_parliament import format_person_name
from video_ingest.scrapers.youtube_channel import video_id_from_url
from video_ingest.utils import load_config

from .conftest import FakePageDriver


class TestEUCommission:
    SEL = eu_commission.SELECTORS

    def test_list_recent_takes_newest_and_processes_oldest_first(self):
        driver = FakePageDriver(pages={
            eu_commission.SEARCH_URL: {
                f"{self.SEL['search_results']}@href": [
                    "/en/video/I-100",
                    "https://audiovisual.ec.europa.eu/en/video/I-300",
                    "/en/video/I-200",
                    "/en/video/I-50",
                ],
            },
        })

        candidates = EUCommissionScraper(driver).list_recent(limit=3)

        assert [c.source_id for c in candidates] == ["I-100", "I-200", "I-300"]
        assert candidates[0].detail_url == "https://audiovisual.ec.europa.eu/en/video/I-100"

    def test_fetch_detail(self):
        url = "https://audiovisual.ec.europa.eu/en/video/I-300"
        driver = FakePageDriver(pages={
            url: {
                self.SEL["detail_title"]: "Press conference",
                self.SEL["detail_fields"]: ["Reference: I-300", "Date: 07/03/2025", "Duration: 12:07"],
                self.SEL["detail_description"]: "Statement on trade",
                self.SEL["detail_personalities"]: ["Ursula von der Leyen", "Maroš Šefčovič"],
                f"{self.SEL['detail_download_link']}@href": "https://ec.europa.eu/avservices/I-300.mp4",
            },
        })

        detail = EUCommissionScraper(driver).fetch_detail(CandidateRef("I-300", url))

        assert detail.title == "Press conference"
        assert detail.published_date == "07/03/2025"
        assert detail.duration == "12:07"
        assert detail.personalities_text() == "Ursula von der Leyen, Maroš Šefčovič"
        assert detail.download_url == "https://ec.europa.eu/avservices/I-300.mp4"

    def test_missing_download_link_skips(self):
        url = "https://audiovisual.ec.europa.eu/en/video/I-1"
        driver = FakePageDriver(pages={url: {self.SEL["detail_title"]: "No file"}})
        assert EUCommissionScraper(driver).fetch_detail(CandidateRef("I-1", url)) is None


class TestEUParliament:
    SEL = eu_parliament.SELECTORS

    @pytest.mark.parametrize("raw,expected", [
        ("METSOLA, Roberta (EPP)", "Roberta Metsola"),
        ("VON DER LEYEN, Ursula", "Ursula Von der leyen"),
        ("Plenary session", "Plenary session"),
    ])
    def test_format_person_name(self, raw, expected):
        assert format_person_name(raw) == expected

    def test_list_recent_sorted_by_id(self):
        driver = FakePageDriver(pages={
            eu_parliament.SEARCH_URL: {
                self.SEL["video_item"]: [
                    {"href": "/en/video/plenary-session_N01-PUB-250308-A", "duration": "05:30"},
                    {"href": "/en/video/press-point_N01-PUB-250309-B", "duration": "01:02:03"},
                    {"href": None, "duration": "00:10"},
                ],
            },
        })

        candidates = EUParliamentScraper(driver).list_recent(limit=5)

        assert [c.source_id for c in candidates] == ["N01-PUB-250309-B", "N01-PUB-250308-A"]
        assert candidates[0].detail_url == "https://multimedia.europarl.europa.eu/en/video/press-point_N01-PUB-250309-B"
        assert candidates[0].fields == {"duration": "01:02:03"}

    def test_fetch_detail(self):
        url = "https://multimedia.europarl.europa.eu/en/video/x_N01-PUB-250309-B"
        driver = FakePageDriver(pages={
            url: {
                self.SEL["title"]: "Press point",
                self.SEL["published_date"]: "Event date: 09-03-2025",
                self.SEL["description"]: "Statement",
                self.SEL["personalities"]: [
                    {"name": "METSOLA, Roberta (EPP)", "href": "/en/person/metsola"},
                    {"name": "Budget", "href": "/en/topic/budget"},
                ],
                f"{self.SEL['download_link']}@href": "//download.europarl.europa.eu/B.mp4",
                self.SEL["reference"]: "Reference: I-999",
            },
        })

        detail = EUParliamentScraper(driver).fetch_detail(CandidateRef("N01-PUB-250309-B", url))

        assert detail.source_id == "I-999"
        assert detail.published_date == "09-03-2025"
        assert detail.personalities == ["Roberta Metsola"]
        assert detail.download_url == "//download.europarl.europa.eu/B.mp4"
        assert self.SEL["download_tab"] in driver.clicked

    def test_missing_download_tab_and_reference(self):
        url = "https://multimedia.europarl.europa.eu/en/video/x_B"
        driver = FakePageDriver(
            pages={url: {self.SEL["title"]: "Press point"}},
            failing_clicks=[self.SEL["download_tab"]],
        )

        detail = EUParliamentScraper(driver).fetch_detail(CandidateRef("B", url))

        assert detail.download_url == NO_DOWNLOAD
        assert detail.source_id == "B"


class TestCouncilOfEurope:
    SEL = council_of_europe.SELECTORS

    def test_list_recent_uses_page_url_as_id(self):
        driver = FakePageDriver(pages={
            council_of_europe.BASE_URL: {
                self.SEL["video_item"]: [
                    {"title": "Human rights day", "url": "https://www.coe.int/en/web/portal/-/human-rights-day"},
                    {"title": "Summit", "url": "https://www.coe.int/en/web/portal/-/summit"},
                ],
            },
        })

        candidates = CouncilOfEuropeScraper(driver).list_recent(limit=1)

        assert len(candidates) == 1
        assert candidates[0].source_id == "https://www.coe.int/en/web/portal/-/human-rights-day"
        assert candidates[0].fields == {"title": "Human rights day"}

    def test_fetch_detail_reads_player_config(self):
        url = "https://www.coe.int/en/web/portal/-/summit"
        config = {
            "video": {"upload_date": "2025-03-07 10:15:00", "duration": 754},
            "request": {"files": {"progressive": [
                {"height": 360, "url": "https://vod.example.com/360.mp4"},
                {"height": 1080, "url": "https://vod.example.com/1080.mp4"},
                {"height": 720, "url": "https://vod.example.com/720.mp4"},
            ]}},
        }
        driver = FakePageDriver(
            pages={url: {f"{self.SEL['vimeo_iframe']}@src": "https://player.vimeo.com/video/123456?h=abc"}},
            responses={council_of_europe.VIMEO_CONFIG_PATTERN.format(vimeo_id="123456"): json.dumps(config)},
        )

        detail = CouncilOfEuropeScraper(driver).fetch_detail(CandidateRef(url, url))

        assert detail.source_id == "123456"
        assert detail.published_date == "2025-03-07 10:15:00"
        assert detail.duration == "00:12:34"
        assert detail.download_url == "https://vod.example.com/1080.mp4"
        assert "https://player.vimeo.com/video/123456" in driver.visited

    def test_missing_player_skips(self):
        url = "https://www.coe.int/en/web/portal/-/article"
        driver = FakePageDriver(pages={url: {}})
        assert CouncilOfEuropeScraper(driver).fetch_detail(CandidateRef(url, url)) is None

    def test_malformed_config_keeps_id(self):
        url = "https://www.coe.int/en/web/portal/-/summit"
        driver = FakePageDriver(
            pages={url: {f"{self.SEL['vimeo_iframe']}@src": "https://player.vimeo.com/video/42"}},
            responses={council_of_europe.VIMEO_CONFIG_PATTERN.format(vimeo_id="42"): "<html>"},
        )

        detail = CouncilOfEuropeScraper(driver).fetch_detail(CandidateRef(url, url))

        assert detail.source_id == "42"
        assert detail.download_url is None


class TestYouTubeChannel:
    SEL = youtube_channel.SELECTORS
    CHANNEL = "https://www.youtube.com/@ecbeuro/videos"

    def make_scraper(self, driver):
        return YouTubeChannelScraper(driver, self.CHANNEL, "european_central_bank", "European Central Bank")

    def test_video_id_from_url(self):
        assert video_id_from_url("https://www.youtube.com/watch?v=abc123&t=5") == "abc123"
        assert video_id_from_url("https://www.youtube.com/shorts/abc") == ""

    def test_list_recent(self):
        driver = FakePageDriver(pages={
            self.CHANNEL: {
                self.SEL["grid_item"]: [
                    {"title": "Monetary policy", "url": "https://www.youtube.com/watch?v=aaa",
                     "duration": "45:10", "published_date": "2 days ago"},
                    {"title": "Short", "url": "https://www.youtube.com/shorts/zzz"},
                    {"title": "Press", "url": "https://www.youtube.com/watch?v=bbb",
                     "duration": "1:02:03", "published_date": "1 week ago"},
                ],
            },
        })

        candidates = self.make_scraper(driver).list_recent(limit=5)

        assert [c.source_id for c in candidates] == ["aaa", "bbb"]
        assert candidates[0].fields == {
            "title": "Monetary policy",
            "duration": "45:10",
            "published_date": "2 days ago",
        }

    def test_cookie_prompt_is_optional(self):
        driver = FakePageDriver(
            pages={self.CHANNEL: {}},
            failing_clicks=[self.SEL["cookie_accept"]],
        )
        assert self.make_scraper(driver).list_recent() == []

    def test_fetch_detail(self):
        url = "https://www.youtube.com/watch?v=aaa"
        driver = FakePageDriver(pages={
            url: {
                f"{self.SEL['date_published']}@content": "2025-03-08",
                self.SEL["description"]: "Press conference",
                self.SEL["player_duration"]: "45:10",
            },
        })

        detail = self.make_scraper(driver).fetch_detail(CandidateRef("aaa", url))

        assert detail.published_date == "2025-03-08"
        assert detail.download_url == url
        assert detail.title is None


class TestNatoMultimedia:
    SEL = nato_multimedia.SELECTORS

    @pytest.fixture(autouse=True)
    def no_pause(self, monkeypatch):
        monkeypatch.setattr(NatoMultimediaScraper, "_pause", staticmethod(lambda *args: None))

    def test_missing_credentials(self):
        scraper = NatoMultimediaScraper(FakePageDriver(), username=None, password="x")
        with pytest.raises(AuthenticationError):
            scraper.authenticate()

    def test_authenticate_fills_login_form(self):
        driver = FakePageDriver(pages={nato_multimedia.SEARCH_URL: {}})
        scraper = NatoMultimediaScraper(driver, username="user@example.com", password="hunter2")

        scraper.authenticate()

        assert scraper.authenticated
        assert driver.filled == {
            self.SEL["email_field"]: "user@example.com",
            self.SEL["password_field"]: "hunter2",
        }
        assert driver.clicked == [self.SEL["login_button"], self.SEL["submit_button"]]

    def test_list_recent(self):
        driver = FakePageDriver(pages={
            nato_multimedia.SEARCH_URL: {
                self.SEL["video_result"]: [
                    {"url": "https://www.natomultimedia.tv/app/asset/712345"},
                    {"url": "https://www.natomultimedia.tv/app/asset/712344/"},
                ],
            },
        })

        candidates = NatoMultimediaScraper(driver).list_recent(limit=5)

        assert [c.source_id for c in candidates] == ["712345", "712344"]

    def test_fetch_detail(self):
        url = "https://www.natomultimedia.tv/app/asset/712345"
        driver = FakePageDriver(pages={
            url: {
                self.SEL["title"]: "Secretary General press conference",
                self.SEL["description"]: "Doorstep",
                self.SEL["published_date"]: "07 Mar. 2025",
                self.SEL["duration"]: "14:02",
                f"{self.SEL['download_link_full_hd']}@href": "https://www.natomultimedia.tv/dl/712345.mp4",
            },
        })

        detail = NatoMultimediaScraper(driver).fetch_detail(CandidateRef("712345", url))

        assert detail.title == "Secretary General press conference"
        assert detail.download_url == "https://www.natomultimedia.tv/dl/712345.mp4"

    def test_download_dropdown_missing(self):
        url = "https://www.natomultimedia.tv/app/asset/1"
        driver = FakePageDriver(
            pages={url: {self.SEL["title"]: "Clip"}},
            failing_clicks=[self.SEL["download_dropdown"]],
        )

        detail = NatoMultimediaScraper(driver).fetch_detail(CandidateRef("1", url))

        assert detail.download_url == NO_DOWNLOAD


class TestRegistry:
    def test_every_source_builds(self):
        for name in SOURCES:
            scraper = build_scraper(name, FakePageDriver())
            assert scraper.name == name
            assert scraper.content_provider

    def test_youtube_sources_share_adapter(self):
        ecb = build_scraper("european_central_bank", FakePageDriver())
        greenpeace = build_scraper("greenpeace", FakePageDriver())
        assert isinstance(ecb, YouTubeChannelScraper)
        assert greenpeace.channel_url == "https://www.youtube.com/@greenpeace/videos"

    def test_nato_credentials_from_config(self, project_root, monkeypatch):
        monkeypatch.setenv("NATO_USERNAME", "user@example.com")
        monkeypatch.setenv("NATO_PASSWORD", "secret")
        config = load_config(project_root / "config" / "config.yaml")

        scraper = build_scraper("nato_multimedia", FakePageDriver(), config)

        assert scraper.username == "user@example.com"
        assert scraper.password == "secret"
        assert scraper.requires_authentication

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            build_scraper("bbc", FakePageDriver())

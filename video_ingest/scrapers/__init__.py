"""Source scrapers and the page drivers they run on"""

from typing import Optional

from .page_driver import (
    PageDriver,
    ExtractionError,
    ExtractionTimeout,
    InvalidSelectorError,
    UnsupportedOperation,
)
from .base_scraper import BaseScraper, AuthenticationError
from .eu_commission import EUCommissionScraper
from .eu_parliament import EUParliamentScraper
from .council_of_europe import CouncilOfEuropeScraper
from .youtube_channel import YouTubeChannelScraper
from .nato_multimedia import NatoMultimediaScraper

# Channels scraped with the shared YouTube adapter
YOUTUBE_CHANNELS = {
    "european_central_bank": ("European Central Bank", "https://www.youtube.com/@ecbeuro/videos"),
    "greenpeace": ("Greenpeace", "https://www.youtube.com/@greenpeace/videos"),
}

SOURCES = [
    EUCommissionScraper.name,
    EUParliamentScraper.name,
    CouncilOfEuropeScraper.name,
    *YOUTUBE_CHANNELS,
    NatoMultimediaScraper.name,
]

_SCRAPER_CLASSES = {
    cls.name: cls
    for cls in (EUCommissionScraper, EUParliamentScraper, CouncilOfEuropeScraper)
}


def build_scraper(name: str, driver: PageDriver, config=None, timeout_ms: Optional[int] = None) -> BaseScraper:
    """
    Create the scraper registered under `name`.

    Args:
        name: Source name (see SOURCES)
        driver: Page driver the scraper navigates with
        config: Optional Config, used for gated-source credentials
        timeout_ms: Override of the scraper's wait budget

    Raises:
        ValueError: If the name is not a registered source
    """
    kwargs = {"timeout_ms": timeout_ms} if timeout_ms else {}

    if name in _SCRAPER_CLASSES:
        return _SCRAPER_CLASSES[name](driver, **kwargs)

    if name in YOUTUBE_CHANNELS:
        content_provider, channel_url = YOUTUBE_CHANNELS[name]
        return YouTubeChannelScraper(
            driver,
            channel_url=channel_url,
            name=name,
            content_provider=content_provider,
            **kwargs,
        )

    if name == NatoMultimediaScraper.name:
        credentials = config.credentials_for(name) if config is not None else {}
        return NatoMultimediaScraper(
            driver,
            username=credentials.get("username"),
            password=credentials.get("password"),
            **kwargs,
        )

    raise ValueError(f"Unknown source: {name}. Known sources: {', '.join(SOURCES)}")


__all__ = [
    "PageDriver",
    "ExtractionError",
    "ExtractionTimeout",
    "InvalidSelectorError",
    "UnsupportedOperation",
    "BaseScraper",
    "AuthenticationError",
    "EUCommissionScraper",
    "EUParliamentScraper",
    "CouncilOfEuropeScraper",
    "YouTubeChannelScraper",
    "NatoMultimediaScraper",
    "SOURCES",
    "build_scraper",
]

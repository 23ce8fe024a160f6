"""Read-only site support queries for management surfaces."""

from ..scrapers.base import SiteRegistry


class SiteSupportService:
    """Introspection over the site registry; never fetches anything."""

    def __init__(self, registry: SiteRegistry) -> None:
        self.registry = registry

    def list_supported_sites(self) -> list[str]:
        return self.registry.list_sites()

    def is_url_supported(self, url: str | None) -> bool:
        return self.registry.is_supported(url)

    def site_name_for(self, url: str | None) -> str:
        return self.registry.site_name_for(url)

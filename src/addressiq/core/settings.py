"""Process settings for the AddressIQ backend.

One ``Settings`` object describes every upstream provider: its endpoint URL
and, where the provider needs one, its credential. An empty URL disables the
source; a missing credential disables sources that authenticate.

Free public providers ship with working defaults so a bare checkout answers
useful questions. Commercial providers have no default.

Features:
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures
    - **Validated log level:** ``debug|info|warn|error``

Examples:
    >>> from addressiq.core.settings import Settings
    >>> settings = Settings(altum_woz_api_url="https://woz.example", altum_woz_api_key="k")
    >>> settings.cache_ttl_seconds
    86400

Tags:
    settings, configuration, pydantic, environment, addressiq

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from addressiq.core.errors import ConfigError
from addressiq.core.logging import LEVELS

PDOK_LOCATIESERVER_URL = "https://api.pdok.nl/bzk/locatieserver/search/v3_1/free"
PDOK_CBS_BUURTEN_URL = "https://api.pdok.nl/cbs/wijken-en-buurten-2024/ogc/v1"
PDOK_FLOOD_URL = "https://api.pdok.nl/rws/overstromingen-risicogebied/ogc/v1"
PDOK_MONUMENTS_URL = "https://api.pdok.nl/rce/beschermde-gebieden-cultuurhistorie/ogc/v1"
PDOK_BGT_URL = "https://api.pdok.nl/lv/bgt/ogc/v1"
PDOK_NATURA2000_URL = "https://api.pdok.nl/rvo/natura2000/ogc/v1"
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
LUCHTMEETNET_URL = "https://api.luchtmeetnet.nl/open_api"
OPEN_ELEVATION_URL = "https://api.open-elevation.com/api/v1/lookup"
OVERPASS_URL = "https://overpass-api.de/api/interpreter"
OVERPASS_FALLBACK_URLS = [
    "https://overpass.kumi.systems/api/interpreter",
    "https://maps.mail.ru/osm/tools/overpass/api/interpreter",
]


class Settings(BaseSettings):
    """AddressIQ settings.

    Order of precedence (highest → lowest):
        1. Keyword arguments (tests, ``create_app(settings=...)``)
        2. Environment variables (``BAG_API_URL``, ``REDIS_URL``, ...)
        3. ``.env`` file
        4. Defaults below
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    log_json: bool | None = None
    debug: bool = False
    frontend_origin: str = ""
    admin_secret: str = ""

    # ── Build metadata ───────────────────────────────────────────────────
    build_commit: str = "unknown"
    build_date: str = "unknown"
    frontend_build_commit: str = "unknown"
    frontend_build_date: str = "unknown"

    # ── Pipeline ─────────────────────────────────────────────────────────
    request_deadline_seconds: float = Field(default=30.0, gt=0)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    retry_initial_delay_seconds: float = Field(default=10.0, ge=0)
    cache_enabled: bool = True
    redis_url: str = ""
    cache_ttl_seconds: int = Field(default=86400, gt=0)
    cache_max_entries: int = Field(default=10_000, gt=0)

    # ── Address & region ─────────────────────────────────────────────────
    bag_api_url: str = PDOK_LOCATIESERVER_URL
    region_api_url: str = PDOK_CBS_BUURTEN_URL

    # ── Property & land data ─────────────────────────────────────────────
    kadaster_objectinfo_api_url: str = ""
    kadaster_objectinfo_api_key: str = ""
    altum_woz_api_url: str = ""
    altum_woz_api_key: str = ""
    matrixian_api_url: str = ""
    matrixian_api_key: str = ""
    altum_transaction_api_url: str = ""
    altum_transaction_api_key: str = ""
    monumenten_api_url: str = PDOK_MONUMENTS_URL

    # ── Weather & climate ────────────────────────────────────────────────
    knmi_weather_api_url: str = OPEN_METEO_FORECAST_URL
    weerlive_api_url: str = ""
    weerlive_api_key: str = ""
    knmi_solar_api_url: str = OPEN_METEO_FORECAST_URL

    # ── Environmental & soil ─────────────────────────────────────────────
    wur_soil_api_url: str = ""
    skygeo_subsidence_api_url: str = ""
    soil_quality_api_url: str = ""
    bro_soil_map_api_url: str = ""
    luchtmeetnet_api_url: str = LUCHTMEETNET_URL
    noise_pollution_api_url: str = ""

    # ── Energy & sustainability ──────────────────────────────────────────
    altum_energy_api_url: str = ""
    altum_energy_api_key: str = ""
    altum_sustainability_api_url: str = ""
    altum_sustainability_api_key: str = ""

    # ── Water & safety ───────────────────────────────────────────────────
    flood_risk_api_url: str = PDOK_FLOOD_URL
    digital_delta_api_url: str = ""
    safety_experience_api_url: str = ""
    schiphol_api_url: str = ""
    schiphol_app_id: str = ""
    schiphol_api_key: str = ""

    # ── Mobility ─────────────────────────────────────────────────────────
    ndw_traffic_api_url: str = ""
    openov_api_url: str = OVERPASS_URL
    parking_api_url: str = ""

    # ── Demographics ─────────────────────────────────────────────────────
    cbs_population_api_url: str = PDOK_CBS_BUURTEN_URL
    cbs_statline_api_url: str = ""
    cbs_square_stats_api_url: str = PDOK_CBS_BUURTEN_URL
    cbs_api_url: str = ""

    # ── Infrastructure & facilities ──────────────────────────────────────
    green_spaces_api_url: str = PDOK_BGT_URL
    natura2000_api_url: str = PDOK_NATURA2000_URL
    education_api_url: str = OVERPASS_URL
    building_permits_api_url: str = ""
    facilities_api_url: str = OVERPASS_URL
    overpass_fallback_urls: list[str] = Field(default_factory=lambda: list(OVERPASS_FALLBACK_URLS))
    ahn_height_model_api_url: str = OPEN_ELEVATION_URL

    # ── Comprehensive platforms ──────────────────────────────────────────
    pdok_api_url: str = ""
    stratopo_api_url: str = ""
    stratopo_api_key: str = ""
    land_use_api_url: str = ""

    # ── AI summary ───────────────────────────────────────────────────────
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash-lite:generateContent"
    gemini_api_key: str = ""

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalised = value.strip().lower()
        if normalised not in LEVELS:
            raise ValueError("log_level must be one of debug, info, warn, error")
        return normalised

    @property
    def cors_origins(self) -> list[str]:
        return [self.frontend_origin] if self.frontend_origin else ["*"]

    @property
    def uses_weerlive(self) -> bool:
        return bool(self.weerlive_api_url and self.weerlive_api_key)

    def require_address_service(self) -> str:
        """Return the address service URL or raise :class:`ConfigError`."""
        if not self.bag_api_url:
            raise ConfigError("required setting BAG_API_URL is not set")
        return self.bag_api_url


__all__ = ["Settings"]

"""
Configuration Settings

Centralized configuration management using Pydantic and environment variables.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Flags such as TEST_LIMIT, COOKIES, ALLOW_INSECURE, SEARCH_ID, COUNTY_CODE
    and DUMP_JSON map onto the lower-case fields below.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # LGBS tax sale listing API
    lgbs_api_base_url: str = "https://taxsales.lgbs.com/api"
    lgbs_sale_counties_path: str = "/sale_counties/?limit=60&sale_date_only=2019-03-05"
    lgbs_state: str = "TX"
    listing_page_size: int = 600
    address_map_page_size: int = 1000
    county_scan_page_size: int = 1000

    # Metro counties excluded from non-metro runs
    metro_counties: List[str] = [
        "TRAVIS COUNTY",
        "DALLAS COUNTY",
        "HARRIS COUNTY",
        "BEXAR COUNTY",
    ]

    # Pacing (seconds)
    listing_page_delay: float = 0.3
    address_map_page_delay: float = 0.25
    county_scan_page_delay: float = 0.5
    detail_fetch_delay: float = 0.2
    item_delay: float = 0.15
    lien_request_delay: float = 2.0
    lien_landing_delay: float = 0.5
    lien_suggest_delay: float = 0.3

    # Price filter policy
    max_minimum_bid: float = 5000.0
    min_bid_cutoff_inclusive: bool = False
    max_adjudged_value: Optional[float] = None

    # TexasFile lien search
    texasfile_base_url: str = "https://www.texasfile.com"
    texasfile_name_type: str = "GRGE"
    texasfile_start_date: str = "1846-07-01"
    lien_max_retries: int = 2
    lien_retry_base_delay: float = 1.0

    # Session and TLS flags
    cookies: Optional[str] = None
    ca_bundle_path: Optional[str] = "DigiCertGlobalG2TLSRSASHA2562020CA1.crt.pem"
    allow_insecure: bool = False
    node_tls_reject_unauthorized: bool = True
    search_id: Optional[str] = None
    county_code: Optional[str] = None
    http_timeout: int = 30

    # Run controls
    test_limit: int = 0
    dump_json: bool = False
    debug_dir: str = "debug_responses"

    # Data file paths
    property_export_csv: str = "texas-future-sales.csv"
    lien_enrichment_csv: str = "future_sales_with_liens.csv"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "console"

    # Application settings
    environment: str = "development"


# Singleton instance
settings = Settings()

"""Configuration settings for the mortgage rates service."""

from dataclasses import dataclass, field
from pathlib import Path
import os

from dotenv import load_dotenv


load_dotenv()


# FRED weekly mortgage rate series (Freddie Mac PMMS)
MORTGAGE_SERIES: dict[str, str] = {
    "MORTGAGE30US": "30-Year Fixed Rate Mortgage Average",
    "MORTGAGE15US": "15-Year Fixed Rate Mortgage Average",
}

# Response slot -> series id
RATE_SLOTS: dict[str, str] = {
    "rate30": "MORTGAGE30US",
    "rate15": "MORTGAGE15US",
}

DEFAULT_CSV_URL = "https://fred.stlouisfed.org/graph/fredgraph.csv"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; mortgage-rates/1.0)"


@dataclass
class Settings:
    """Application settings."""

    fred_csv_url: str = field(
        default_factory=lambda: os.getenv("FRED_CSV_URL", DEFAULT_CSV_URL)
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("FRED_TIMEOUT", "12.0"))
    )
    cache_ttl: int = field(
        default_factory=lambda: int(os.getenv("MORTGAGE_RATES_CACHE_TTL", "86400"))
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("FRED_USER_AGENT", DEFAULT_USER_AGENT)
    )
    cache_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv(
                "MORTGAGE_RATES_CACHE_DIR",
                str(Path(__file__).parent.parent.parent / "cache"),
            )
        )
    )
    db_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.cache_dir = Path(self.cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = self.cache_dir / "mortgage_rates.db"

    def validate(self) -> None:
        """Validate required settings."""
        if not self.fred_csv_url:
            raise ValueError("FRED_CSV_URL is empty")
        if self.request_timeout <= 0:
            raise ValueError(
                f"FRED_TIMEOUT must be positive, got {self.request_timeout}"
            )
        if self.cache_ttl < 0:
            raise ValueError(
                f"MORTGAGE_RATES_CACHE_TTL must not be negative, got {self.cache_ttl}"
            )

    def cache_control(self) -> str:
        """Cache-Control header value for rate responses."""
        return (
            f"public, max-age={self.cache_ttl}, s-maxage={self.cache_ttl}, "
            "stale-while-revalidate=3600"
        )

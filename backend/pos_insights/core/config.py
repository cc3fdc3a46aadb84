"""
Centralized application settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from the environment / .env"""

    # API Settings
    API_TITLE: str = "POS Insights API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Revenue forecasting, financial health and reorder alerts for the store"
    API_DEBUG: bool = False

    # Database (only required once data is actually fetched)
    DATABASE_URL: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Analytics
    ANALYTICS_CACHE_TTL_SECONDS: int = 60  # 0 disables result caching
    CASH_OPENING_BALANCE: float = 0.0
    DEFAULT_SUPPLIER_LEAD_TIME_DAYS: int = 7

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

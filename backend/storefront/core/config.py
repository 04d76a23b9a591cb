"""
Configuración centralizada de la aplicación
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "Storefront API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Order and inventory transaction engine with sales reporting"
    LOG_LEVEL: str = "INFO"

    # Database
    # Local development falls back to SQLite; production points this at PostgreSQL
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Auth (HS256 shared secret with the identity provider)
    AUTH_SECRET: Optional[str] = None

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    # Inventory policy
    DEFAULT_MIN_STOCK: int = 5
    CRITICAL_STOCK_RATIO: float = 0.5

    # Order lifecycle policy
    STRICT_STATUS_TRANSITIONS: bool = False
    RESTOCK_ON_CANCEL: bool = False
    DEFAULT_SALES_CHANNEL: str = "storefront"

    # Reports
    TOP_CUSTOMERS_LIMIT: int = 10

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

    def get_database_url(self) -> str:
        """Normalize Heroku/Supabase style postgres:// URLs for SQLAlchemy"""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            return "postgresql+psycopg2://" + url[len("postgres://"):]
        return url

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

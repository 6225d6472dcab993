from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Bank Statement Import"
    DEBUG: bool = False
    ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    
    # File uploads
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    
    # CORS
    # Can be overridden via CORS_ORIGINS env var
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list of origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
    
    # Import
    # Lines scanned for a recognizable header when banks write account
    # metadata above it
    HEADER_SCAN_LINES: int = 20
    MAX_WARNINGS_IN_RESPONSE: int = 100
    MAX_LOGGED_ROW_WARNINGS: int = 25
    
    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

"""Application configuration."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""
    
    # Site
    site_url: str = "https://www.esjzone.cc"
    default_cover: str = "https://placehold.co/300x420?text=No+Cover"
    
    # Transport
    request_timeout: float = 20.0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    
    # Storage backend for the tag vocabulary: sql, redis or memory
    storage_backend: str = "sql"
    
    # Database
    database_url: str = "sqlite:///./esjzone.db"
    database_echo: bool = False
    
    # Redis
    redis_url: Optional[str] = "redis://localhost:6379/0"
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    
    # Environment
    environment: str = "development"
    log_level: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

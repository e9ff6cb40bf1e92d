from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Finance Report Compiler"

    # Database (audit history of generated reports)
    database_url: str = "sqlite+aiosqlite:///./reports.db"
    database_echo: bool = False

    # Security
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    log_level: str = "INFO"

    # Report defaults
    default_currency: str = "USD"
    merchant_analysis_default_limit: int = 50
    merchant_analysis_max_limit: int = 500
    history_page_size: int = 50

    # Rendering
    xlsx_max_column_width: int = 50
    pdf_header_color: str = "#3b82f6"  # blue-500
    pdf_footer_color: str = "#e5e7eb"  # gray-200

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        """Currency codes are always matched upper-case"""
        return v.strip().upper() if v else "USD"

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper() if v else "INFO"

    def get_cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

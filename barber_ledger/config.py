"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./barber_ledger.db"

    # Service
    service_name: str = "barber-ledger"
    log_level: str = "INFO"

    # Business rules
    business_timezone: str = "America/Sao_Paulo"
    max_installments: int = 24
    upcoming_window_days: int = 7  # "Due soon" horizon for the receivables summary

    # Write a tagged transaction row for every installment payment so the sales report lists it
    record_installment_payment_transactions: bool = True


settings = Settings()

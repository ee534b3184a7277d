from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/storefront"
    database_pool_size: int = 20
    database_pool_timeout: float = 30.0
    database_connect_timeout: float = 2.0
    log_level: str = "INFO"
    seed_menu: bool = True

    # Pricing
    tax_rate: Decimal = Decimal("0.08")
    free_delivery_threshold: Decimal = Decimal("50.00")
    delivery_fee: Decimal = Decimal("5.99")
    delivery_estimate_minutes: int = 45
    order_status_strict_transitions: bool = False

    # Reservations
    reservation_slot_capacity: int = 5
    reservation_admission_max_attempts: int = 50
    reservation_time_slots: list[str] = [
        "17:00", "17:30", "18:00", "18:30", "19:00", "19:30",
        "20:00", "20:30", "21:00", "21:30", "22:00",
    ]

    # Cache (empty URL disables it)
    redis_url: str = ""
    redis_socket_timeout: float = 1.0
    menu_cache_ttl_seconds: int = 300
    categories_cache_ttl_seconds: int = 3600

    # Auth
    jwt_secret: str = "change-me"
    jwt_refresh_secret: str = "change-me-too"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Kafka (empty disables event publishing)
    kafka_bootstrap_servers: str = ""

    # Observability (empty disables trace export)
    otlp_endpoint: str = ""

    model_config = {"env_file": ".env"}


settings = Settings()

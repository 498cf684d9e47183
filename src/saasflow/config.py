from pydantic_settings import BaseSettings, SettingsConfigDict

from saasflow.models.schemas import Environment


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Deployment mode (gates error detail returned to callers)
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # Creem payments (optional at startup, checked per checkout request)
    creem_api_url: str = ""
    creem_api_key: str = ""
    creem_success_url: str = ""
    checkout_timeout: float = 10.0  # seconds before the checkout request is aborted

    # Supabase (required, app will fail to start if missing)
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: str

    # Public site origin, used when the request carries no Origin header
    site_url: str = "http://localhost:3000"

    # CORS (comma-separated origins, e.g. "http://localhost:3000,https://myapp.com")
    cors_origins: str = "http://localhost:3000"


settings = Settings()  # type: ignore[call-arg]

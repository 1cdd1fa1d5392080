"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    All settings can be overridden via environment variables prefixed with LINKBOX_.
    For example, LINKBOX_OGP_TIMEOUT_SECONDS=3 shortens the fetch deadline.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LINKBOX_",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Server Settings ─────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (comma-separated origins or "*")
    cors_origins: str = "*"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as a list (parsed from comma-separated string)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    # ─── OGP Fetch Settings ──────────────────────────────────────────
    ogp_timeout_seconds: float = 5.0
    ogp_user_agent: str = "linkbox-ogp-fetcher/1.0"
    ogp_max_content_bytes: int = 5 * 1024 * 1024

    # ─── HTTP Client Settings ────────────────────────────────────────
    max_connections: int = 100
    max_keepalive_connections: int = 20

    # ─── SSL/TLS Settings ───────────────────────────────────────────
    # Path to corporate CA certificate bundle (PEM format)
    ssl_cert_dir: str | None = None
    # Path to a specific CA certificate file (alternative to ssl_cert_dir)
    ssl_ca_bundle: str | None = None
    # Disable SSL verification (NOT recommended for production)
    ssl_verify: bool = True

    # ─── Cache Settings ──────────────────────────────────────────────
    cache_enabled: bool = True
    cache_ttl_seconds: int = 600
    cache_max_size: int = 1000

    # ─── Auth Settings ───────────────────────────────────────────────
    # Comma-separated "subject:token" pairs accepted by the fetch_ogp tool
    auth_tokens: str | None = None

    def is_auth_configured(self) -> bool:
        """Check if at least one caller token is configured."""
        return bool(self.get_auth_tokens())

    def get_auth_tokens(self) -> dict[str, str]:
        """
        Parse auth_tokens into a token -> subject mapping.

        Malformed pairs (missing subject or token) are skipped.
        """
        if not self.auth_tokens:
            return {}
        tokens: dict[str, str] = {}
        for pair in self.auth_tokens.split(","):
            subject, sep, token = pair.strip().partition(":")
            if sep and subject.strip() and token.strip():
                tokens[token.strip()] = subject.strip()
        return tokens

    def get_ssl_context(self) -> bool | str:
        """
        Get SSL verification configuration for httpx.

        Returns:
            - False if ssl_verify is disabled
            - Path to CA bundle/cert dir if configured
            - True for default SSL verification

        Priority: ssl_verify=False > ssl_ca_bundle > ssl_cert_dir > True
        """
        if not self.ssl_verify:
            return False
        if self.ssl_ca_bundle:
            return self.ssl_ca_bundle
        if self.ssl_cert_dir:
            return self.ssl_cert_dir
        return True


# Global settings instance
settings = Settings()

"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolmesh_ai.agent_core.schemas.config import OrchestratorConfig

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS requests")
    allow_methods: list[str] = Field(default=["*"], description="Allowed HTTP methods (use * for all)")
    allow_headers: list[str] = Field(default=["*"], description="Allowed HTTP headers (use * for all)")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="toolmesh-ai server host address to bind to",
        alias="TOOLMESH_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=3000,
        description="toolmesh-ai server port number",
        alias="TOOLMESH_AI_SERVER_PORT",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="TOOLMESH_AI_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="TOOLMESH_AI_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="TOOLMESH_AI_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write DEBUG logs to a file in addition to the console",
        alias="TOOLMESH_AI_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins as a JSON list (use * for all)",
        alias="TOOLMESH_AI_CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="TOOLMESH_AI_CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="TOOLMESH_AI_CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="TOOLMESH_AI_CORS_ALLOW_HEADERS")

    # =====================================================================
    # Orchestrator Configuration
    # =====================================================================
    max_retries: int = Field(default=3, ge=1, alias="TOOLMESH_AI_MAX_RETRIES")
    retry_delay_seconds: float = Field(default=1.0, ge=0, alias="TOOLMESH_AI_RETRY_DELAY_SECONDS")
    history_limit: int = Field(default=20, ge=1, alias="TOOLMESH_AI_HISTORY_LIMIT")
    max_plan_steps: int = Field(default=20, ge=1, alias="TOOLMESH_AI_MAX_PLAN_STEPS")
    max_sessions: int = Field(
        default=1000,
        ge=1,
        description="Conversation sessions kept in memory; the least recently used one is evicted past this",
        alias="TOOLMESH_AI_MAX_SESSIONS",
    )

    # =====================================================================
    # Completion (LLM) Configuration
    # =====================================================================
    completion_model: Optional[str] = Field(
        default=None,
        description="pydantic-ai model identifier, e.g. 'anthropic:claude-3-5-sonnet-latest'. "
        "When unset the orchestrator uses its deterministic fallbacks only.",
        alias="TOOLMESH_AI_COMPLETION_MODEL",
    )
    completion_max_tokens: int = Field(default=1024, ge=1, alias="TOOLMESH_AI_COMPLETION_MAX_TOKENS")

    # =====================================================================
    # Tool Configuration
    # =====================================================================
    tool_timeout_seconds: Optional[float] = Field(
        default=30.0,
        description="Per-invocation timeout applied by the dispatcher (None disables it)",
        alias="TOOLMESH_AI_TOOL_TIMEOUT_SECONDS",
    )
    enable_code_execution: bool = Field(
        default=False,
        description="Register the executeCode tool (runs Python in a subprocess)",
        alias="TOOLMESH_AI_ENABLE_CODE_EXECUTION",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL for the repository and code search tools",
        alias="TOOLMESH_AI_GITHUB_API_URL",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for outbound HTTP calls made by tools and clients",
        alias="TOOLMESH_AI_HTTP_TIMEOUT_SECONDS",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def orchestrator(self) -> OrchestratorConfig:
        """Get control-loop configuration."""
        return OrchestratorConfig(
            max_retries=self.max_retries,
            retry_delay_seconds=self.retry_delay_seconds,
            history_limit=self.history_limit,
            max_plan_steps=self.max_plan_steps,
            completion_max_tokens=self.completion_max_tokens,
        )

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration."""
        return CORSConfig(
            origins=self.cors_origins,
            allow_credentials=self.cors_allow_credentials,
            allow_methods=self.cors_allow_methods,
            allow_headers=self.cors_allow_headers,
        )


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings

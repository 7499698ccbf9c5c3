from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Teamspace"
    debug: bool = False

    # Microsoft Graph
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_access_token: str = ""  # Optional; the authorize route overrides it
    graph_timeout: int = 30  # Seconds

    # Workspace provisioning
    system_team_name: str = "Fixed Team Name 1"
    team_template: str = "standard"
    default_channel_name: str = "General"  # Reserved by the platform

    # Membership / directory
    user_lookup_batch_size: int = 2  # Max terms per `mail in (...)` filter
    dedupe_channel_members: bool = False  # Diff channel members like team members

    # Message feed
    default_page_size: int = 10

    # Local state (last-used team id)
    team_store_path: str = ".teamspace/state.json"

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

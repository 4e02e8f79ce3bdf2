"""
Configuration settings for the Event Gateway.
"""
from typing import Literal
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Event Gateway configuration loaded from environment variables.
    """
    model_config = ConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
    )
    
    # Service settings
    service_name: str = "event-gateway"
    debug: bool = False
    events_port: int = 4000
    config_port: int = 4001
    
    # Adapter configuration
    event_adapter: Literal["nats", "memory"] = "memory"
    
    # NATS settings
    nats_url: str = "nats://localhost:4222"
    nats_reconnect_time_wait: int = 2  # seconds
    nats_max_reconnect_attempts: int = -1  # -1 = infinite
    
    # Router settings
    router_workers: int = 20
    router_backlog: int = 40  # workers * 2
    function_timeout: float = 5.0  # seconds
    
    # Spaces
    default_space: str = "default"
    hosted_domain_pattern: str = r"(eventgateway([a-z-]*)?.io|slsgateway.com)"


# Global settings instance
settings = Settings()

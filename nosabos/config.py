# nosabos/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
import os


class Settings(BaseSettings):
    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    cors_origins: List[str] = ["*"]

    # Local notes database
    database_url: str = "sqlite+aiosqlite:///./data/notes.db"

    # Redis Configuration with smart defaults
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_ssl: bool = False
    redis_connection_timeout: int = 5
    redis_socket_timeout: int = 5
    exercise_ttl_seconds: int = 3600

    # Firebase
    firebase_credentials_path: str = "firebase-credentials.json"

    # Gemini (streaming generation)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    # Responses proxy (judging, explanations, notes)
    responses_url: str = "http://localhost:8000"
    responses_model: str = "gpt-4o-mini"
    responses_timeout: int = 60
    allowed_response_models: List[str] = ["gpt-4o-mini", "gpt-4o", "o4-mini"]
    openai_api_key: Optional[str] = None
    openai_responses_endpoint: str = "https://api.openai.com/v1/responses"

    # Nostr
    nostr_relays: List[str] = ["wss://relay.damus.io", "wss://relay.primal.net"]
    nostr_timeout: int = 8

    # Logging
    log_level: str = "INFO"
    log_file: str = "server.log"

    # Development mode
    development_mode: bool = True
    mock_redis: bool = False  # Fallback to in-memory cache

    class Config:
        env_file = ".env"

    def get_redis_url(self) -> str:
        """Generate Redis URL with proper formatting"""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        protocol = "rediss" if self.redis_ssl else "redis"
        return f"{protocol}://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    def get_redis_hosts_to_try(self) -> List[str]:
        """Get list of Redis hosts to try in order of preference"""
        hosts = [self.redis_host]
        if self.redis_host in ["localhost", "127.0.0.1"]:
            if "127.0.0.1" not in hosts:
                hosts.append("127.0.0.1")
            if "localhost" not in hosts:
                hosts.append("localhost")
        return list(dict.fromkeys(hosts))

    def validate_config(self) -> List[str]:
        """Return configuration problems prefixed with ERROR or WARNING"""
        issues = []

        if not os.path.exists(self.firebase_credentials_path):
            issues.append(
                f"WARNING: Firebase credentials not found at {self.firebase_credentials_path}; "
                "Firestore features are disabled"
            )
        if not self.gemini_api_key:
            issues.append("WARNING: GEMINI_API_KEY not set; streaming generation falls back to the Responses proxy")
        if not self.openai_api_key:
            issues.append("WARNING: OPENAI_API_KEY not set; /proxyResponses will reject requests")
        if self.responses_model not in self.allowed_response_models:
            issues.append(f"ERROR: RESPONSES_MODEL {self.responses_model} is not in ALLOWED_RESPONSE_MODELS")
        if self.log_level.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            issues.append(f"ERROR: Invalid LOG_LEVEL {self.log_level}")
        if not self.nostr_relays:
            issues.append("WARNING: No Nostr relays configured")

        return issues


settings = Settings()

"""
Authorization Service Configuration Schema

Defines the configuration structure for the service.
All configuration can be specified via authz.yaml or environment variables.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ServerConfig:
    """Configuration for the HTTP server"""
    host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class StorageConfig:
    """Configuration for the grant/principal store"""
    type: str = "memory"  # "memory" or "supabase"
    url: Optional[str] = None
    key: Optional[str] = None

    @property
    def is_memory(self) -> bool:
        return self.type == "memory"


@dataclass
class AuthConfig:
    """
    Configuration for the authentication seam.

    trust_headers mounts PrincipalHeaderMiddleware, which takes the principal
    id and role from request headers. Development and testing only.
    """
    trust_headers: bool = False
    principal_header: str = "X-Principal-Id"
    role_header: str = "X-Principal-Role"


@dataclass
class LoggingConfig:
    """Configuration for logging"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    audit_level: str = "INFO"


@dataclass
class AppConfig:
    """
    Central configuration for the authorization service.

    This configuration can be loaded from:
    - authz.yaml (primary)
    - Environment variables (interpolated into the YAML)
    - Programmatic defaults

    Example authz.yaml:
    ```yaml
    service:
      name: "jobboard-authz"
      version: "0.1.0"

    server:
      host: 0.0.0.0
      port: 8000
      api_prefix: /api/v1

    storage:
      type: supabase
      url: "${SUPABASE_URL}"
      key: "${SUPABASE_KEY}"

    auth:
      trust_headers: false

    logging:
      level: INFO
    ```
    """
    # Service identity
    name: str = "jobboard-authz"
    version: str = "0.1.0"
    description: str = "Delegated administration for the job board"

    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create AppConfig from dictionary (e.g., parsed YAML)"""
        service_data = data.get("service", {}) or {}

        server_data = data.get("server", {}) or {}
        server_config = ServerConfig(
            host=server_data.get("host", "0.0.0.0"),
            port=int(server_data.get("port", 8000)),
            api_prefix=server_data.get("api_prefix", "/api/v1"),
            cors_origins=list(server_data.get("cors_origins", ["*"])),
        )

        storage_data = data.get("storage", {}) or {}
        storage_config = StorageConfig(
            type=storage_data.get("type", "memory"),
            url=storage_data.get("url") or None,
            key=storage_data.get("key") or None,
        )

        auth_data = data.get("auth", {}) or {}
        auth_config = AuthConfig(
            trust_headers=_as_bool(auth_data.get("trust_headers", False)),
            principal_header=auth_data.get("principal_header", "X-Principal-Id"),
            role_header=auth_data.get("role_header", "X-Principal-Role"),
        )

        logging_data = data.get("logging", {}) or {}
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", "INFO")).upper(),
            format=logging_data.get("format", LoggingConfig.format),
            audit_level=str(logging_data.get("audit_level", "INFO")).upper(),
        )

        return cls(
            name=service_data.get("name", "jobboard-authz"),
            version=str(service_data.get("version", "0.1.0")),
            description=service_data.get("description", "Delegated administration for the job board"),
            server=server_config,
            storage=storage_config,
            auth=auth_config,
            logging=logging_config,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (for serialization). Secrets are masked."""
        return {
            "service": {
                "name": self.name,
                "version": self.version,
                "description": self.description,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "api_prefix": self.server.api_prefix,
                "cors_origins": list(self.server.cors_origins),
            },
            "storage": {
                "type": self.storage.type,
                "url": self.storage.url,
                "key": "***" if self.storage.key else None,
            },
            "auth": {
                "trust_headers": self.auth.trust_headers,
                "principal_header": self.auth.principal_header,
                "role_header": self.auth.role_header,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "audit_level": self.logging.audit_level,
            },
        }


def _as_bool(value: Any) -> bool:
    # Interpolated env vars arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)

"""
Application configuration settings loaded from config.yaml
"""
import os
import yaml
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, field_validator

CONFIG_ENV_VAR = "HOMEQUOTE_CONFIG"


class DatabasePoolConfig(BaseModel):
    """Database connection pool configuration"""
    size: int = 10  # Number of connections to maintain
    max_overflow: int = 20  # Maximum overflow connections
    timeout: int = 30  # Seconds to wait for a connection
    recycle: int = 3600  # Seconds before recycling a connection
    echo: bool = False  # Log SQL queries


class DatabaseConfig(BaseModel):
    """Database configuration"""
    server: str = "localhost"
    user: str = "postgres"
    password: str = ""
    db: str = "homequote"
    port: str = "5432"
    schema: str = "public"  # PostgreSQL schema name
    dsn: Optional[str] = None  # Full SQLAlchemy URL, overrides the fields above
    pool: DatabasePoolConfig = DatabasePoolConfig()

    @property
    def url(self) -> str:
        """Construct database URL"""
        if self.dsn:
            return self.dsn
        return f"postgresql://{self.user}:{self.password}@{self.server}:{self.port}/{self.db}"

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class SecurityConfig(BaseModel):
    """Session token verification (tokens are issued by the hosted auth service)"""
    secret_key: str
    algorithm: str = "HS256"
    audience: Optional[str] = "authenticated"
    session_cookie: str = "access_token"
    session_max_age: int = 3600


class AuthConfig(BaseModel):
    """Hosted auth service used for the code-for-session exchange"""
    base_url: str
    api_key: Optional[str] = None
    timeout: int = 30


class CRMConfig(BaseModel):
    """LeadConnector (GoHighLevel) OAuth and REST configuration"""
    base_url: str = "https://services.leadconnectorhq.com"
    auth_url: str = "https://marketplace.gohighlevel.com/oauth/chooselocation"
    token_url: str = "https://services.leadconnectorhq.com/oauth/token"
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_version: str = "2021-07-28"
    scopes: List[str] = [
        "contacts.write",
        "contacts.readonly",
        "opportunities.readonly",
        "opportunities.write",
        "locations/customFields.readonly",
    ]
    timeout: int = 30


class StripeConfig(BaseModel):
    """Stripe SDK configuration (secret keys are supplied per partner)"""
    api_base: str = "https://api.stripe.com"
    default_currency: str = "gbp"
    metadata_source: str = "homequote-checkout"
    max_network_retries: int = 2


class PostcodeConfig(BaseModel):
    """Postcode lookup API configuration"""
    base_url: str = "https://webuildapi.com/post-code-lookup/api/postcodes"
    api_key: Optional[str] = None
    timeout: int = 15


class DomainsConfig(BaseModel):
    """Hosting provider API used to attach and verify partner custom domains"""
    base_url: str = "https://api.vercel.com"
    auth_token: Optional[str] = None
    project_id: Optional[str] = None
    timeout: int = 30


class EncryptionConfig(BaseModel):
    """AES-256 key for partner SMTP/SMS settings, as 64 hex characters"""
    key: Optional[str] = None

    @field_validator("key")
    @classmethod
    def validate_key(cls, v):
        if v is None:
            return v
        if len(v) != 64:
            raise ValueError(f"encryption key must be exactly 64 hex characters (32 bytes), got {len(v)}")
        try:
            bytes.fromhex(v)
        except ValueError:
            raise ValueError("encryption key must be a valid 64-character hex string")
        return v


class TenancyConfig(BaseModel):
    """Host-based partner resolution settings"""
    reserved_subdomains: List[str] = []  # Labels that never identify a partner
    require_verified_domain: bool = False  # Only match custom domains with domain_verified = true


class Settings(BaseModel):
    """Application settings loaded from config.yaml"""

    # Project settings
    project_name: str = "HomeQuote API"
    version: str = "1.0.0"
    description: str = "Multi-tenant quoting and lead capture API for home-services partners"
    api_prefix: str = "/api"

    # Public URL of the application, used for OAuth redirect URIs
    app_url: Optional[str] = None

    # Database settings
    database: DatabaseConfig

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL"""
        return self.database.url

    security: SecurityConfig
    auth: AuthConfig

    # Third-party APIs
    crm: CRMConfig = CRMConfig()
    stripe: StripeConfig = StripeConfig()
    postcode: PostcodeConfig = PostcodeConfig()
    domains: DomainsConfig = DomainsConfig()

    encryption: EncryptionConfig = EncryptionConfig()
    tenancy: TenancyConfig = TenancyConfig()

    # CORS settings
    backend_cors_origins: List[str] = []

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        return []

    # Logging
    log_level: str = "INFO"

    class Config:
        case_sensitive = False


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml file. If None, looks for:
                    1. The file named by the HOMEQUOTE_CONFIG environment variable
                    2. config.yaml in the current directory
                    3. config.yaml in the project root (src/../config.yaml)

    Returns:
        Settings: Loaded and validated settings
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    if config_path is None:
        # Try current directory first
        current_dir = Path.cwd() / "config.yaml"
        if current_dir.exists():
            config_path = str(current_dir)
        else:
            # Try project root (assuming we're in src/homequote/core/)
            project_root = Path(__file__).parent.parent.parent.parent / "config.yaml"
            if project_root.exists():
                config_path = str(project_root)
            else:
                raise FileNotFoundError(
                    "config.yaml not found. Copy config.example.yaml to config.yaml "
                    f"in the project root or set {CONFIG_ENV_VAR}."
                )

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, "r") as f:
        config_data = yaml.safe_load(f)

    if config_data is None:
        raise ValueError("Configuration file is empty or invalid")

    return Settings(**config_data)


# Load settings on module import
settings = load_config()

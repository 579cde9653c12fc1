"""Application settings and validation."""

import os

from sqlalchemy.engine import URL

DEFAULT_AUTH_KEY_URL = "http://trip-pin-points.sa-east-1.elasticbeanstalk.com/key"
SELECTOR_MODES = ("coordinates", "id")

_DB_VARS = (
    ("RDS_HOSTNAME", "host"),
    ("RDS_PORT", "port"),
    ("RDS_USERNAME", "user"),
    ("RDS_PASSWORD", "password"),
    ("RDS_DB_NAME", "dbname"),
)


class ConfigError(RuntimeError):
    """Raised when the environment does not describe a runnable service."""


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL: str
    HOST: str
    PORT: int
    AUTH_KEY_URL: str
    AUTH_PUBLIC_KEY: str
    JWT_ALGORITHM: str
    IDENTITY_CLAIM: str
    REQUIRE_IDENTITY_CLAIM: bool
    MARKER_SELECTOR: str
    LOG_LEVEL: str

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ
        self.HOST = env.get("HOST", "0.0.0.0")
        self.AUTH_KEY_URL = env.get("AUTH_KEY_URL", DEFAULT_AUTH_KEY_URL)
        self.AUTH_PUBLIC_KEY = env.get("AUTH_PUBLIC_KEY", "")
        self.JWT_ALGORITHM = env.get("JWT_ALGORITHM", "RS256")
        self.IDENTITY_CLAIM = env.get("IDENTITY_CLAIM", "zid")
        self.REQUIRE_IDENTITY_CLAIM = _flag(env.get("REQUIRE_IDENTITY_CLAIM", "true"))
        self.MARKER_SELECTOR = env.get("MARKER_SELECTOR", "coordinates").strip().lower()
        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO").upper()
        try:
            self.PORT = int(env.get("PORT", "3000"))
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {env.get('PORT')!r}")
        self.DATABASE_URL = env.get("DATABASE_URL") or self._database_url_from(env)
        self._validate()

    @staticmethod
    def _database_url_from(env) -> str:
        parts = {}
        for var, name in _DB_VARS:
            if var not in env:
                raise ConfigError(f"Failed to find {name} environment variable ({var})")
            parts[name] = env[var]
        try:
            port = int(parts["port"])
        except ValueError:
            raise ConfigError(f"RDS_PORT must be an integer, got {parts['port']!r}")
        url = URL.create(
            drivername="postgresql+psycopg2",
            username=parts["user"],
            password=parts["password"],
            host=parts["host"],
            port=port,
            database=parts["dbname"],
        )
        return url.render_as_string(hide_password=False)

    def _validate(self):
        if self.MARKER_SELECTOR not in SELECTOR_MODES:
            raise ConfigError(
                f"MARKER_SELECTOR must be one of {', '.join(SELECTOR_MODES)}, got {self.MARKER_SELECTOR!r}"
            )
        if not self.IDENTITY_CLAIM:
            raise ConfigError("IDENTITY_CLAIM must not be empty")

import base64
from dataclasses import dataclass, field

from environs import Env

# 5x5 red square PNG
DEFAULT_PHOTO_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAUAAAAFCAYAAACNbyblAAAAHElEQVQI12P4//8/w38GIAXDIBKE0DHxgljNBAAO9TXL0Y4OHwAAAABJRU5ErkJggg=="
)

@dataclass(frozen=True)
class DBConfig:
    """ PostgreSQL """
    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: str | None = None

    """ SQLite """
    path: str | None = "data/photochat.db"

    echo: bool = False

    @property
    def is_postgres(self) -> bool:
        return self.host is not None

@dataclass(frozen=True)
class LimitsConfig:
    search: int = 700
    conversations: int = 1000
    comments: int = 100
    comment_authors_preview: int = 3

@dataclass(frozen=True)
class AppConfig:
    default_photo: bytes = field(default_factory=lambda: base64.b64decode(DEFAULT_PHOTO_BASE64))
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

@dataclass(frozen=True)
class Config:
    """ Config """
    db: DBConfig = field(default_factory=DBConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    app: AppConfig = field(default_factory=AppConfig)

def load_config(path: str | None) -> Config:
    env = Env()
    env.read_env(path)

    default_photo = env('DEFAULT_PHOTO', DEFAULT_PHOTO_BASE64)

    return Config(
        db=DBConfig(
            host=env('DB_HOST', None),
            port=env.int('DB_PORT', None),
            name=env('DB_NAME', None),
            user=env('DB_USER', None),
            password=env('DB_PASSWORD', None),
            path=env('DB_PATH', 'data/photochat.db'),
            echo=env.bool('DB_ECHO', False)
        ),
        limits=LimitsConfig(
            search=env.int('SEARCH_LIMIT', 700),
            conversations=env.int('CONVERSATIONS_LIMIT', 1000),
            comments=env.int('COMMENTS_LIMIT', 100),
            comment_authors_preview=env.int('COMMENT_AUTHORS_PREVIEW', 3)
        ),
        app=AppConfig(
            # decoded once here, then handed to the user gateway as an immutable value
            default_photo=base64.b64decode(default_photo, validate=True),
            log_level=env('LOG_LEVEL', 'INFO').upper(),
            host=env('HOST', '0.0.0.0'),
            port=env.int('PORT', 8000)
        )
    )

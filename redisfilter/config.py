import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 6379
DEFAULT_DB = 0
DEFAULT_TIMEOUT = 5
DEFAULT_DESTINATION = 'redis'


class ConfigError(ValueError):
    """Raised when a filter is constructed with invalid settings"""


class Action(Enum):
    GET = 'GET'
    SET = 'SET'

    @classmethod
    def parse(cls, value: Any) -> 'Action':
        if isinstance(value, Action):
            return value
        if not isinstance(value, str):
            raise ConfigError(f"Invalid action {value!r}, must be one of GET, SET")
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ConfigError(f"Invalid action {value!r}, must be one of GET, SET")


class Password:
    """Secret value that does not leak into logs or reprs"""

    def __init__(self, value: str):
        self.value = value

    def __repr__(self):
        return '<password>'

    def __str__(self):
        return '<password>'

    def __eq__(self, other):
        return isinstance(other, Password) and other.value == self.value

    def __hash__(self):
        return hash(self.value)


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Option '{name}' must be a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"Option '{name}' must be a whole number, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Option '{name}' must be a number, got {value!r}")


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ConfigError(f"Option '{name}' must be a boolean, got {value!r}")


def _to_string(name: str, value: Any) -> str:
    # a single element list is accepted wherever a string is expected
    if isinstance(value, list) and len(value) == 1:
        value = value[0]
    if not isinstance(value, str):
        raise ConfigError(f"Option '{name}' must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class RedisFilterConfig:
    field: str
    action: Action
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    password: Optional[Password] = None
    db: int = DEFAULT_DB
    value: Optional[str] = None
    ttl: Optional[int] = None
    destination: str = DEFAULT_DESTINATION
    override: bool = False
    fallback: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    OPTIONS = ('host', 'port', 'password', 'db', 'field', 'action', 'value',
               'ttl', 'destination', 'override', 'fallback', 'timeout')

    @classmethod
    def env_defaults(cls) -> Dict[str, Any]:
        """Connection defaults, overridable via environment"""
        defaults = {
            'host': os.getenv('REDIS_HOST', DEFAULT_HOST),
            'port': os.getenv('REDIS_PORT', DEFAULT_PORT),
            'db': os.getenv('REDIS_DB', DEFAULT_DB),
            'timeout': os.getenv('REDIS_TIMEOUT', DEFAULT_TIMEOUT),
        }
        password = os.getenv('REDIS_PASSWORD')
        if password:
            defaults['password'] = password
        return defaults

    @classmethod
    def from_dict(cls, settings: Optional[Dict[str, Any]]) -> 'RedisFilterConfig':
        """Validate plugin settings and build an immutable config"""
        settings = dict(settings or {})
        unknown = [k for k in settings if k not in cls.OPTIONS]
        if unknown:
            raise ConfigError(f"Unknown setting(s) for redis filter: {', '.join(sorted(unknown))}")

        merged = cls.env_defaults()
        merged.update({k: v for k, v in settings.items() if v is not None})

        # required options
        if 'field' not in merged:
            raise ConfigError("Missing required setting 'field'")
        field = _to_string('field', merged['field'])
        if not field:
            raise ConfigError("Setting 'field' must not be empty")
        if 'action' not in merged:
            raise ConfigError("Missing required setting 'action'")
        action = Action.parse(merged['action'])

        host = _to_string('host', merged['host'])
        if not host:
            raise ConfigError("Setting 'host' must not be empty")
        port = _to_int('port', merged['port'])
        if not 0 < port < 65536:
            raise ConfigError(f"Setting 'port' out of range: {port}")
        db = _to_int('db', merged['db'])
        if db < 0:
            raise ConfigError(f"Setting 'db' must not be negative: {db}")

        password = merged.get('password', None)
        if password is not None and not isinstance(password, Password):
            password = Password(_to_string('password', password))

        ttl = merged.get('ttl', None)
        if ttl is not None:
            ttl = _to_int('ttl', ttl)
            if ttl <= 0:
                raise ConfigError(f"Setting 'ttl' must be a positive number of seconds: {ttl}")

        if isinstance(merged['timeout'], bool):
            raise ConfigError(f"Option 'timeout' must be a number, got {merged['timeout']!r}")
        try:
            timeout = float(merged['timeout'])
        except (TypeError, ValueError):
            raise ConfigError(f"Option 'timeout' must be a number, got {merged['timeout']!r}")
        if timeout <= 0:
            raise ConfigError(f"Setting 'timeout' must be positive: {timeout}")

        destination = _to_string('destination', merged.get('destination', DEFAULT_DESTINATION))
        if not destination:
            raise ConfigError("Setting 'destination' must not be empty")

        value = merged.get('value', None)
        if value is not None:
            value = _to_string('value', value)
        fallback = merged.get('fallback', None)
        if fallback is not None:
            fallback = _to_string('fallback', fallback)

        return cls(
            field=field,
            action=action,
            host=host,
            port=port,
            password=password,
            db=db,
            value=value,
            ttl=ttl,
            destination=destination,
            override=_to_bool('override', merged.get('override', False)),
            fallback=fallback,
            timeout=timeout,
        )

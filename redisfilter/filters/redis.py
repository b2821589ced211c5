import logging
import orjson
from typing import Any, Dict
from redisfilter.config import Action, RedisFilterConfig
from redisfilter.connectors.redis import RedisConnector
from redisfilter.event import Event
from redisfilter.filters.base import BaseFilter

logger = logging.getLogger(__name__)

class RedisFilter(BaseFilter):
    """
    Looks up (GET) or stores (SET) a value in Redis keyed by an event field.

    GET: if the event field named by "field" matches a Redis key, the key's
    value is written to "destination", parsed as JSON when possible. On a miss
    "fallback" is written instead if configured. An existing destination is
    left alone unless "override" is set.

    SET: the "value" template is rendered against the event and stored under
    the key taken from "field", optionally expiring after "ttl" seconds.

    If "field" holds a list only the first element is used as the key.
    """

    def __init__(self, settings: Dict[str, Any]):
        super().__init__(settings)
        self.logger = logger
        # connection is opened lazily on the first store call
        self.datastore = RedisConnector(self.config)

    def configure(self, settings: Dict[str, Any]) -> RedisFilterConfig:
        return RedisFilterConfig.from_dict(settings)

    def filter(self, event: Event) -> bool:
        config = self.config
        if not event.include(config.field):
            return False
        if config.action is Action.GET:
            if event.include(config.destination) and not config.override:
                return False
            return self.lookup(event)
        if config.value is None:
            return False
        return self.store(event)

    def lookup(self, event: Event) -> bool:
        config = self.config
        key = event.first_value(config.field)
        if key is None:
            return False

        val = self.datastore.get_client().get(key)
        if val is not None:
            self.logger.debug(f"Redis lookup successful: {key} -> {val}")
            try:
                event.set(config.destination, orjson.loads(val))
            except orjson.JSONDecodeError:
                event.set(config.destination, val)
            return True

        if config.fallback is not None:
            self.logger.debug(f"Redis lookup found no value for key: {key}, using fallback")
            event.set(config.destination, config.fallback)
            return True

        self.logger.debug(f"Redis lookup found no value for key: {key}")
        return False

    def store(self, event: Event) -> bool:
        config = self.config
        key = event.first_value(config.field)
        if key is None:
            return False

        value = event.sprintf(config.value)
        client = self.datastore.get_client()
        client.set(key, value)
        # expire errors propagate like set errors
        if config.ttl:
            client.expire(key, config.ttl)
        self.logger.debug(f"Stored {key} -> {value} in Redis (ttl: {config.ttl})")
        return True

    def describe(self) -> str:
        config = self.config
        target = config.destination if config.action is Action.GET else f"ttl={config.ttl}"
        return f"{self.id}: {config.action.value} %{{{config.field}}} -> {target} on {config.host}:{config.port}/{config.db}"

    def shutdown(self):
        self.datastore.close()

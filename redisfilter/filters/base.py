import logging
from typing import Any, Dict, List, Optional
from redisfilter.config import ConfigError
from redisfilter.event import Event

logger = logging.getLogger(__name__)

COMMON_OPTIONS = ('id', 'add_tag', 'remove_tag', 'add_field', 'remove_field')


def _as_list(name: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"Option '{name}' must be a string or list of strings, got {value!r}")


class BaseFilter:
    """
    Pipeline stage that inspects and mutates events in place.

    Subclasses implement configure() and filter(). The common options
    (add_tag, remove_tag, add_field, remove_field) are applied by
    filter_matched() only when filter() reports a match.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        # setup logger
        self.logger = logger

        settings = dict(settings or {})
        common = {k: settings.pop(k) for k in COMMON_OPTIONS if k in settings}
        self.id = common.get('id', None) or type(self).__name__
        self.add_tag = _as_list('add_tag', common.get('add_tag', None))
        self.remove_tag = _as_list('remove_tag', common.get('remove_tag', None))
        self.remove_field = _as_list('remove_field', common.get('remove_field', None))
        self.add_field = common.get('add_field', None) or {}
        if not isinstance(self.add_field, dict):
            raise ConfigError(f"Option 'add_field' must be a mapping, got {self.add_field!r}")

        # plugin specific settings
        self.config = self.configure(settings)

    def configure(self, settings: Dict[str, Any]):
        """Validate plugin settings and return the plugin config"""
        raise NotImplementedError("Subclasses should implement this method")

    def filter(self, event: Event) -> bool:
        """Mutate the event, returning True if the filter matched"""
        raise NotImplementedError("Subclasses should implement this method")

    def process(self, event: Event) -> bool:
        matched = self.filter(event)
        if matched:
            self.filter_matched(event)
        return bool(matched)

    def filter_matched(self, event: Event):
        """Apply the common decorations to a matched event"""
        for field, value in self.add_field.items():
            field = event.sprintf(field)
            if isinstance(value, list):
                value = [event.sprintf(str(v)) for v in value]
            else:
                value = event.sprintf(str(value))
            if event.include(field):
                existing = event.get(field)
                if not isinstance(existing, list):
                    existing = [existing]
                existing.extend(value if isinstance(value, list) else [value])
                event.set(field, existing)
            else:
                event.set(field, value)
            self.logger.debug(f"{self.id}: added field {field}={value}")

        for field in self.remove_field:
            event.remove(event.sprintf(field))

        for tag in self.add_tag:
            event.tag(event.sprintf(tag))

        if self.remove_tag and event.include('tags'):
            remove = [event.sprintf(tag) for tag in self.remove_tag]
            event.set('tags', [t for t in event.tags if t not in remove])

    def describe(self) -> str:
        """One line summary for startup logs"""
        return self.id

    def shutdown(self):
        """Release resources held by the filter"""
        return

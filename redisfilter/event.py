import logging
import re
import orjson
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# matches %{name} and %{[nested][name]} references in templates
TEMPLATE_REF = re.compile(r'%\{([^}]+)\}')
BRACKET_PATH = re.compile(r'\[([^\[\]]+)\]')


class Event:
    """
    A single structured log record flowing through the pipeline.

    Fields are addressed either by their plain name (e.g. "redis-key") or by a
    bracketed path (e.g. "[geo][city]") into nested dicts. Tags are kept in the
    "tags" field like any other list value.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self.data = dict(data) if data else {}

    def _path(self, ref: str) -> List[str]:
        """Split a field reference into a list of keys"""
        if ref.startswith('['):
            keys = BRACKET_PATH.findall(ref)
            if keys:
                return keys
        return [ref]

    def get(self, ref: str) -> Any:
        current = self.data
        for key in self._path(ref):
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    def include(self, ref: str) -> bool:
        current = self.data
        for key in self._path(ref):
            if not isinstance(current, dict) or key not in current:
                return False
            current = current[key]
        return True

    def __contains__(self, ref: str) -> bool:
        return self.include(ref)

    def set(self, ref: str, value: Any):
        keys = self._path(ref)
        current = self.data
        for key in keys[:-1]:
            # replace non-dict intermediate values so the path can be built
            if not isinstance(current.get(key, None), dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

    def remove(self, ref: str) -> Any:
        keys = self._path(ref)
        current = self.data
        for key in keys[:-1]:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        if not isinstance(current, dict):
            return None
        return current.pop(keys[-1], None)

    def first_value(self, ref: str) -> Optional[str]:
        """Return field value as a string, using the first element if it is a list"""
        value = self.get(ref)
        if isinstance(value, list):
            if not value:
                return None
            value = value[0]
        if value is None:
            return None
        return self._stringify(value)

    @property
    def tags(self) -> List[str]:
        tags = self.data.get('tags', None)
        if tags is None:
            return []
        if not isinstance(tags, list):
            return [tags]
        return tags

    def tag(self, name: str):
        tags = self.tags
        if name not in tags:
            tags.append(name)
        self.data['tags'] = tags

    def _stringify(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, list):
            return ','.join(self._stringify(v) for v in value)
        if isinstance(value, dict):
            return orjson.dumps(value).decode('utf-8')
        return str(value)

    def sprintf(self, template: str) -> str:
        """Render %{field} references with the current field values"""
        if template is None:
            return None
        if '%{' not in template:
            return template

        def replace(match):
            value = self.get(match.group(1))
            if value is None:
                # leave unresolved references in place
                return match.group(0)
            return self._stringify(value)

        return TEMPLATE_REF.sub(replace, template)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.data)

    def __repr__(self):
        return f"Event({self.data!r})"

"""Runtime properties stores.

Runtime properties are flat string key/value pairs: configuration read by
the traversal engine (project code, exceptional-condition policies,
confirmation bypasses) and state it persists (root module-versions, the
global matcher, the abort flag).
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import PropertiesError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}


class PropertiesStore(ABC):
    """Abstract flat key/value store of string properties."""

    @abstractmethod
    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, name: str) -> bool:
        """Remove a property.

        Returns:
            True if the property existed
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    def remove_by_prefix(self, prefix: str) -> int:
        """Remove every property whose name starts with prefix.

        Returns:
            Number of properties removed
        """
        removed = 0
        for name in self.keys():
            if name.startswith(prefix):
                self.remove(name)
                removed += 1
        return removed

    @abstractmethod
    def replace_prefix(self, prefix: str, values: Dict[str, str]) -> None:
        """Replace every property starting with prefix by values, in one write.

        Either all of the change is stored or, when the write fails, none
        of it.

        Raises:
            PropertiesError: The write failed
        """
        pass

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Interpret a property as a boolean.

        Unset or unrecognized values yield default.
        """
        value = self.get(name)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        logger.warning("Property %s has non-boolean value %r, using %s", name, value, default)
        return default

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


class InMemoryPropertiesStore(PropertiesStore):
    """Properties held in a dict, lost at the end of the process.

    Every mutation builds a new dict and hands it to _store, which replaces
    the current values only once the new ones are written.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def _store(self, values: Dict[str, str]) -> None:
        self._values = values

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def set(self, name: str, value: str) -> None:
        values = dict(self._values)
        values[name] = str(value)
        self._store(values)

    def remove(self, name: str) -> bool:
        if name not in self._values:
            return False
        values = dict(self._values)
        del values[name]
        self._store(values)
        return True

    def remove_by_prefix(self, prefix: str) -> int:
        removed = [name for name in self._values if name.startswith(prefix)]
        if removed:
            self._store({name: value for name, value in self._values.items() if not name.startswith(prefix)})
        return len(removed)

    def replace_prefix(self, prefix: str, values: Dict[str, str]) -> None:
        updated = {name: value for name, value in self._values.items() if not name.startswith(prefix)}
        updated.update((name, str(value)) for name, value in values.items())
        self._store(updated)

    def keys(self) -> List[str]:
        return sorted(self._values)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)


class JsonPropertiesStore(InMemoryPropertiesStore):
    """Properties persisted as a JSON object in a file.

    The file is read once at construction and rewritten after every
    mutation with an atomic write (temp file + rename), so a crash never
    leaves it half written. When the write fails the in-memory values are
    left as they were.

    Usage:
        store = JsonPropertiesStore(workspace / "properties.json")
        store.set("PROJECT_CODE", "alpha")
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PropertiesError(f"Cannot read properties from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PropertiesError(f"Properties file {self.path} does not hold a JSON object")
        return {str(name): str(value) for name, value in data.items()}

    def _flush(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2, sort_keys=True, ensure_ascii=False)

            # Atomic rename (POSIX guarantees atomicity)
            os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise PropertiesError(f"Cannot write properties to {self.path}: {e}") from e

    def _store(self, values: Dict[str, str]) -> None:
        self._flush(values)
        self._values = values

    def reload(self) -> None:
        """Discard in-memory values and re-read the file."""
        self._values = self._load()

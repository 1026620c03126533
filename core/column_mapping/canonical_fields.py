"""
Canonical Fields Definition

Defines the agent configuration fields that imported CSV columns are mapped to.
The registry is loaded once from a versioned YAML artifact and is read-only
afterwards; adding an importable field means adding an entry to the YAML.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import yaml

from core.column_mapping.exceptions import InvalidRegistryError
from core.column_mapping.model import ValueShape
from core.column_mapping.normalizer import NormalizedToken, normalize

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "canonical_fields.yaml"


@dataclass(frozen=True)
class CanonicalField:
    """Definition of a canonical field"""

    key: str
    aliases: Tuple[str, ...]  # key first
    synonyms: Tuple[str, ...] = ()
    required: bool = False
    shape: ValueShape = ValueShape.TEXT
    normalized_aliases: Tuple[NormalizedToken, ...] = field(init=False, repr=False, compare=False)
    normalized_synonyms: Tuple[NormalizedToken, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        aliases = _dedupe_normalized((self.key,) + tuple(self.aliases))
        synonyms = tuple(
            token for token in _dedupe_normalized(self.synonyms)
            if token.compact not in {a.compact for a in aliases}
        )
        object.__setattr__(self, "normalized_aliases", aliases)
        object.__setattr__(self, "normalized_synonyms", synonyms)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            "key": self.key,
            "required": self.required,
            "shape": self.shape.value,
            "aliases": list(self.aliases),
            "synonyms": list(self.synonyms),
        }


def _dedupe_normalized(values) -> Tuple[NormalizedToken, ...]:
    seen = set()
    result = []
    for value in values:
        token = normalize(value)
        if token.is_empty or token.compact in seen:
            continue
        seen.add(token.compact)
        result.append(token)
    return tuple(result)


class FieldRegistry:
    """Immutable, ordered collection of canonical fields."""

    def __init__(self, fields: List[CanonicalField], version: str = "unversioned"):
        """
        Initialize the registry.

        Args:
            fields: Canonical fields in display order
            version: Version string of the registry artifact

        Raises:
            InvalidRegistryError: If keys are duplicated or alias lists are empty
        """
        if not fields:
            raise InvalidRegistryError("Field registry must define at least one field")

        by_key: Dict[str, CanonicalField] = {}
        for canonical in fields:
            if not canonical.key or not canonical.key.strip():
                raise InvalidRegistryError("Canonical field key must be a non-empty string")
            if canonical.key in by_key:
                raise InvalidRegistryError(f"Duplicate canonical field key: {canonical.key}")
            if not canonical.aliases:
                raise InvalidRegistryError(f"Canonical field '{canonical.key}' has an empty alias list")
            by_key[canonical.key] = canonical

        self._fields: Tuple[CanonicalField, ...] = tuple(fields)
        self._by_key = by_key
        self.version = str(version)

    def __iter__(self) -> Iterator[CanonicalField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[CanonicalField]:
        return self._by_key.get(key)

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self._fields]

    @property
    def required_keys(self) -> List[str]:
        return [f.key for f in self._fields if f.required]

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "fields": [f.to_dict() for f in self._fields],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FieldRegistry":
        """
        Build a registry from its YAML/dict form.

        Args:
            data: Mapping with "version" and a "fields" list

        Returns:
            FieldRegistry

        Raises:
            InvalidRegistryError: If the structure or any entry is invalid
        """
        if not isinstance(data, dict) or not isinstance(data.get("fields"), list):
            raise InvalidRegistryError("Registry must be a mapping with a 'fields' list")

        fields = []
        for position, entry in enumerate(data["fields"]):
            if not isinstance(entry, dict):
                raise InvalidRegistryError(f"Registry entry #{position} is not a mapping")
            key = entry.get("key")
            if not isinstance(key, str) or not key.strip():
                raise InvalidRegistryError(f"Registry entry #{position} has no key")

            aliases = entry.get("aliases") or []
            synonyms = entry.get("synonyms") or []
            if not isinstance(aliases, list) or not aliases:
                raise InvalidRegistryError(f"Canonical field '{key}' has an empty alias list")
            if not isinstance(synonyms, list):
                raise InvalidRegistryError(f"Canonical field '{key}' synonyms must be a list")
            if not all(isinstance(a, str) for a in aliases + synonyms):
                raise InvalidRegistryError(f"Canonical field '{key}' aliases must be strings")

            try:
                shape = ValueShape(entry.get("shape", ValueShape.TEXT.value))
            except ValueError as e:
                raise InvalidRegistryError(
                    f"Canonical field '{key}' has unknown shape: {entry.get('shape')}"
                ) from e

            fields.append(
                CanonicalField(
                    key=key,
                    aliases=tuple(aliases),
                    synonyms=tuple(synonyms),
                    required=bool(entry.get("required", False)),
                    shape=shape,
                )
            )

        return cls(fields, version=data.get("version", "unversioned"))


def load_registry(path: Union[str, Path]) -> FieldRegistry:
    """
    Load and validate a canonical field registry from YAML.

    Args:
        path: Path to the registry YAML file

    Returns:
        Validated FieldRegistry
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InvalidRegistryError(f"Failed to read field registry {path}: {e}") from e

    registry = FieldRegistry.from_dict(data)
    logger.info(f"Loaded field registry {registry.version} with {len(registry)} fields from {path.name}")
    return registry


@lru_cache(maxsize=None)
def get_registry(path: Optional[Path] = None) -> FieldRegistry:
    """
    Get the process-wide registry (loaded once per path).

    Args:
        path: Registry YAML path; the bundled registry when None

    Returns:
        Cached FieldRegistry
    """
    return load_registry(path or DEFAULT_REGISTRY_PATH)

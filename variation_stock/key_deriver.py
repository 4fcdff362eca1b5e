"""
Cache key derivation for variation stock data.

A variation with attributes {"attribute_pa_color": "Red", "attribute_pa_size": "M"}
is cached under one key per non-empty subset of its attributes:

    _variation_stock_pa_color:red
    _variation_stock_pa_size:m
    _variation_stock_pa_color:red_pa_size:m

so a storefront filter on any combination of attributes resolves to a single
lookup on the parent product.
"""
import hashlib
from itertools import combinations
from typing import Callable, Iterable, List, Optional

from variation_stock.errors import ConfigError
from variation_stock.models.product import AttributeSet

DEFAULT_KEY_PREFIX = "_variation_stock"

# Platform namespace on variation attribute names ("attribute_pa_size").
ATTRIBUTE_NAME_PREFIX = "attribute_"

# Stores index the key column as VARCHAR(255).
MAX_KEY_LENGTH = 255

KEY_SEPARATOR = "_"

AttributeFilter = Callable[[AttributeSet], AttributeSet]


def untracked_attributes(names: Iterable[str]) -> AttributeFilter:
    """Build a tracked-attributes hook that drops the given attribute names."""
    excluded = frozenset(names)

    def _filter(attributes: AttributeSet) -> AttributeSet:
        return {name: value for name, value in attributes.items() if name not in excluded}

    return _filter


class KeyDeriver:
    """
    Turns variation attribute sets into stock cache keys.

    Instances are immutable; build one at startup and hand it to whatever
    needs to read or write cache keys.
    """

    def __init__(self, key_prefix: str = DEFAULT_KEY_PREFIX,
                 tracked_attributes: Optional[AttributeFilter] = None):
        # The hashed fallback must fit too: prefix + "_" + 32 hex chars.
        hashed_length = len(key_prefix.encode("utf-8")) + len(KEY_SEPARATOR) + 32
        if hashed_length > MAX_KEY_LENGTH:
            raise ConfigError(f"Stock key prefix is too long ({len(key_prefix)} chars)")

        self._key_prefix = key_prefix
        self._tracked_attributes = tracked_attributes

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def derive_keys(self, attributes: AttributeSet) -> List[str]:
        """
        Generate every cache key a variation with these attributes is stored under.

        Empty values mean "any value" for that attribute and are dropped
        before expansion. Returns an empty list when nothing is left to track.
        """
        attributes = self.tracked(attributes)
        if not attributes:
            return []

        return [self.derive_key(subset) for subset in self._power_set(attributes)]

    def tracked(self, attributes: AttributeSet) -> AttributeSet:
        """The attributes that take part in cache keys."""
        attributes = {name: value for name, value in attributes.items() if value}

        if self._tracked_attributes is not None:
            attributes = self._tracked_attributes(attributes)

        if not isinstance(attributes, dict):
            return {}

        return attributes

    def derive_key(self, attributes: AttributeSet) -> str:
        """Build the canonical cache key for one exact set of attribute constraints."""
        key = self._key_prefix

        # Attribute order is editable by admins, so always sort by name.
        for name, value in sorted(attributes.items()):
            if name.startswith(ATTRIBUTE_NAME_PREFIX):
                name = name[len(ATTRIBUTE_NAME_PREFIX):]

            if not key.endswith(KEY_SEPARATOR):
                key += KEY_SEPARATOR

            key += f"{name}:{str(value).lower()}"

        if len(key.encode("utf-8")) > MAX_KEY_LENGTH:
            digest = hashlib.md5(key.encode("utf-8")).hexdigest()
            key = f"{self._key_prefix}{KEY_SEPARATOR}{digest}"

        return key

    @staticmethod
    def _power_set(attributes: AttributeSet) -> List[AttributeSet]:
        """All non-empty subsets, smallest first, in a stable order."""
        items = sorted(attributes.items())
        subsets = []

        for size in range(1, len(items) + 1):
            for combination in combinations(items, size):
                subsets.append(dict(combination))

        return subsets

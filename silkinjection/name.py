"""
Name

Case-insensitive discriminator used when several instances of the same type
are bound. Two sentinels exist:

- ``Name.DEFAULT`` (empty): the most precise name, only matches no name
- ``Name.ANY`` (``*``): the least precise name, matches everything

A trailing ``*`` makes a prefix pattern: ``Name.prefixed("db")`` matches
``"db-primary"`` and ``"db-replica"``.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

_WILDCARD = '*'


@dataclass(frozen=True)
class Name:
    """Immutable name value (always lower case)."""
    value: str

    DEFAULT: ClassVar['Name']
    ANY: ClassVar['Name']

    @staticmethod
    def named(name: Optional[str]) -> 'Name':
        if isinstance(name, Name):
            return name
        if name is None or not name.strip():
            return Name.DEFAULT
        return Name(name.lower())

    @staticmethod
    def prefixed(prefix: Optional[str]) -> 'Name':
        if prefix is None or not prefix.strip():
            return Name.ANY
        return Name(prefix.lower() + _WILDCARD)

    @property
    def is_default(self) -> bool:
        return self.value == ''

    @property
    def is_any(self) -> bool:
        return self.value == _WILDCARD

    @property
    def is_pattern(self) -> bool:
        return self.value.endswith(_WILDCARD)

    def is_applicable_for(self, other: 'Name') -> bool:
        """Whether this (requested) name and ``other`` (declared) match.

        ANY on either side matches everything, equal values match, and a
        prefix pattern matches every value starting with its prefix.
        """
        if self.is_any or other.is_any or self.value == other.value:
            return True
        return self._matched_by(other) or other._matched_by(self)

    def _matched_by(self, pattern: 'Name') -> bool:
        return pattern.is_pattern and self.value.startswith(pattern.value[:-1])

    def more_precise_than(self, other: 'Name') -> bool:
        """Strict partial order of name precision.

        DEFAULT > concrete names > longer prefixes > shorter prefixes > ANY.
        Distinct concrete names, and prefixes that do not extend each other,
        are incomparable.
        """
        if self == other or other.is_default:
            return False
        if self.is_default:
            return True
        if self.is_any:
            return False
        if other.is_any:
            return True
        if not self.is_pattern:
            return other.is_pattern
        if not other.is_pattern:
            return False
        return len(self.value) > len(other.value) \
            and self.value.startswith(other.value[:-1])

    def precision_rank(self) -> Tuple[int, int]:
        """Sort key monotone with ``more_precise_than``."""
        if self.is_default:
            return 3, 0
        if self.is_any:
            return 0, 0
        if self.is_pattern:
            return 1, len(self.value)
        return 2, len(self.value)

    def __str__(self) -> str:
        return self.value


Name.DEFAULT = Name('')
Name.ANY = Name(_WILDCARD)

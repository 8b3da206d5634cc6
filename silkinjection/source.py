"""
Source

Provenance of a declaration: which module declared it, how (its
``DeclarationType``) and in which order. The declaration type decides
precedence when two declarations describe the same resource.
"""

from dataclasses import dataclass, replace
from enum import Enum


class DeclarationType(Enum):
    """How a binding came to be, highest precedence first."""
    EXPLICIT = "EXPLICIT"
    IMPLICIT = "IMPLICIT"
    CONTRACT = "CONTRACT"
    MULTI = "MULTI"
    PROVIDED = "PROVIDED"
    AUTO = "AUTO"
    REQUIRED = "REQUIRED"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]

    def more_precise_than(self, other: 'DeclarationType') -> bool:
        return self.precedence > other.precedence


_PRECEDENCE = {
    DeclarationType.EXPLICIT: 6,
    DeclarationType.IMPLICIT: 5,
    DeclarationType.CONTRACT: 4,
    DeclarationType.MULTI: 3,
    DeclarationType.PROVIDED: 2,
    DeclarationType.AUTO: 1,
    DeclarationType.REQUIRED: 0,
}


@dataclass(frozen=True)
class Source:
    """Where and how a declaration was made.

    Attributes:
        ident: Name of the declaring module
        declaration_type: Precedence class of the declaration
        declaration_no: Position of the declaration within its module
    """
    ident: str
    declaration_type: DeclarationType = DeclarationType.EXPLICIT
    declaration_no: int = 0

    @property
    def is_explicit(self) -> bool:
        return self.declaration_type is DeclarationType.EXPLICIT

    @property
    def is_multi(self) -> bool:
        return self.declaration_type is DeclarationType.MULTI

    def typed(self, declaration_type: DeclarationType) -> 'Source':
        return replace(self, declaration_type=declaration_type)

    def more_precise_than(self, other: 'Source') -> bool:
        return self.declaration_type.more_precise_than(other.declaration_type)

    def __str__(self) -> str:
        return f"{self.ident}#{self.declaration_no} {self.declaration_type.value}"

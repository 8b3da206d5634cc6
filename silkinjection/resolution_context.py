"""
ResolutionContext

This module provides the context management for dependency resolution.
The ResolutionContext tracks:

- The injector performing the resolution
- The dependency being supplied, including its construction chain

The context is stored in a ContextVar for thread-safety and is set by the
generator around every supplier call. User code that calls
``injector.resolve()`` from inside a factory therefore continues the
current chain: cycles are detected and target-specific bindings apply.
"""

from contextvars import ContextVar
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .injector import Injector
    from .instance import Dependency


class ResolutionContext:
    """Context of one supplier call.

    Attributes:
        injector: The injector performing the resolution
        dependency: The dependency being supplied, with this binding's
            injection already pushed onto its chain

    Note:
        This class is used internally by the injector.
        Users should not need to interact with it directly.
    """

    __slots__ = ('injector', 'dependency')

    def __init__(self, injector: 'Injector', dependency: 'Dependency'):
        self.injector = injector
        self.dependency = dependency

    def __repr__(self) -> str:
        return f"ResolutionContext({self.dependency})"


# Context of the supplier currently running on this thread/task
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_SILK_INJECTION_RESOLUTION_CONTEXT',
    default=None
)

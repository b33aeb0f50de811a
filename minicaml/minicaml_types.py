"""Types of MiniCAML.

The type language is small and monomorphic: integers, booleans, functions
and tuples. Types compare structurally; there is no subtyping and no type
variables.
"""

import dataclasses
from typing import Iterable


@dataclasses.dataclass(frozen=True)
class MonoType:
    """Base class for monomorphic types."""

    def __str__(self):
        return self.__repr__()


@dataclasses.dataclass(frozen=True)
class TyCon(MonoType):
    """A base type with no arguments, e.g. int or bool."""
    name: str

    def __repr__(self):
        return self.name


@dataclasses.dataclass(frozen=True)
class Arrow(MonoType):
    """The function type S -> T."""
    domain: MonoType
    codomain: MonoType

    def __repr__(self):
        # -> associates to the right, and * binds tighter than ->
        left = f"({self.domain})" if isinstance(self.domain, Arrow) else str(self.domain)
        return f"{left} -> {self.codomain}"


@dataclasses.dataclass(frozen=True)
class Product(MonoType):
    """The tuple type T1 * T2 * ... * Tn."""
    components: tuple

    def __init__(self, components: Iterable[MonoType]):
        object.__setattr__(self, 'components', tuple(components))

    def __repr__(self):
        if not self.components:
            return "unit"
        parts = []
        for component in self.components:
            if isinstance(component, (Arrow, Product)) and not _is_unit(component):
                parts.append(f"({component})")
            else:
                parts.append(str(component))
        return " * ".join(parts)


def _is_unit(ty: MonoType) -> bool:
    return isinstance(ty, Product) and not ty.components


# Primitive Types
IntType = TyCon("int")    # The integer type
BoolType = TyCon("bool")  # The boolean type

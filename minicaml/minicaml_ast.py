"""
This module defines the Abstract Syntax Tree (AST) nodes of MiniCAML.

Nodes are immutable: every operation over a tree (substitution, renaming,
evaluation, type inference) builds new nodes and may share untouched
subtrees with its input.
"""
import dataclasses
import enum
from typing import Any, Sequence

from minicaml_types import MonoType, IntType, BoolType


class PrimOp(enum.Enum):
    """The primitive operations available in MiniCAML."""
    EQUALS = "="
    LESS_THAN = "<"
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    NEGATE = "~"

    def __repr__(self):
        return f"PrimOp.{self.name}"


# Fixed (domain, range) signature of each primitive operation. Both the
# evaluator and the type checker read arities from here.
PRIMOP_SIGNATURES = {
    PrimOp.EQUALS: ((IntType, IntType), BoolType),
    PrimOp.LESS_THAN: ((IntType, IntType), BoolType),
    PrimOp.PLUS: ((IntType, IntType), IntType),
    PrimOp.MINUS: ((IntType, IntType), IntType),
    PrimOp.TIMES: ((IntType, IntType), IntType),
    PrimOp.NEGATE: ((IntType,), IntType),
}


def primop_type(op: PrimOp):
    """Return the (domain, range) signature of a primitive operation."""
    return PRIMOP_SIGNATURES[op]


# AST Node Classes
class ASTNode:
    """Base class for all AST nodes with raw structure printing capability"""

    def raw_structure(self):
        """Return the raw AST structure as a string"""
        if isinstance(self, Var):
            return f'Var("{self.name}")'
        elif isinstance(self, Int):
            return f'Int({self.value})'
        elif isinstance(self, Bool):
            return f'Bool({self.value})'
        elif isinstance(self, If):
            return (f'If({self.cond.raw_structure()}, {self.then_expr.raw_structure()}, '
                    f'{self.else_expr.raw_structure()})')
        elif isinstance(self, Primop):
            args = ", ".join(arg.raw_structure() for arg in self.args)
            return f'Primop({self.op.name}, [{args}])'
        elif isinstance(self, Tuple):
            items = ", ".join(item.raw_structure() for item in self.items)
            return f'Tuple([{items}])'
        elif isinstance(self, Function):
            return f'Function("{self.arg}", {self.arg_type}, {self.body.raw_structure()})'
        elif isinstance(self, Rec):
            return f'Rec("{self.name}", {self.rec_type}, {self.body.raw_structure()})'
        elif isinstance(self, Let):
            decls = ", ".join(decl.raw_structure() for decl in self.decls)
            return f'Let([{decls}], {self.body.raw_structure()})'
        elif isinstance(self, Apply):
            return f'Apply({self.func.raw_structure()}, {self.arg.raw_structure()})'
        elif isinstance(self, Val):
            return f'Val({self.expr.raw_structure()}, "{self.name}")'
        elif isinstance(self, ValTuple):
            names = ", ".join(f'"{name}"' for name in self.names)
            return f'ValTuple({self.expr.raw_structure()}, [{names}])'
        return str(self)


@dataclasses.dataclass(frozen=True)
class Var(ASTNode):
    """
    Represents a variable reference in the program.
    Example: x
    """
    name: str

    def __repr__(self):
        return self.name


@dataclasses.dataclass(frozen=True)
class Int(ASTNode):
    """
    Represents an integer literal.
    Example: 42
    """
    value: int

    def __repr__(self):
        return str(self.value)


@dataclasses.dataclass(frozen=True)
class Bool(ASTNode):
    """
    Represents a boolean literal.
    Example: true, false
    """
    value: bool

    def __repr__(self):
        return "true" if self.value else "false"


@dataclasses.dataclass(frozen=True)
class If(ASTNode):
    """
    Represents a conditional expression.
    Example: if x < 0 then 0 else x
    """
    cond: Any       # Condition expression
    then_expr: Any  # Expression for the 'then' branch
    else_expr: Any  # Expression for the 'else' branch

    def __repr__(self):
        return f"if {self.cond} then {self.then_expr} else {self.else_expr}"


@dataclasses.dataclass(frozen=True)
class Primop(ASTNode):
    """
    Represents a primitive operation applied to its operands.
    Example: x + y, ~x
    """
    op: PrimOp
    args: tuple

    def __post_init__(self):
        object.__setattr__(self, 'args', tuple(self.args))

    def __repr__(self):
        if len(self.args) == 1:
            return f"{self.op.value}{self.args[0]}"
        return "(" + f" {self.op.value} ".join(str(arg) for arg in self.args) + ")"


@dataclasses.dataclass(frozen=True)
class Tuple(ASTNode):
    """
    Represents tuple construction.
    Example: (1, true, x)
    """
    items: tuple

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))

    def __repr__(self):
        return "(" + ", ".join(str(item) for item in self.items) + ")"


@dataclasses.dataclass(frozen=True)
class Function(ASTNode):
    """
    Represents a function abstraction with an annotated parameter.
    Example: fn (x:int) => x + 1
    """
    arg: str
    arg_type: MonoType
    body: Any

    def __repr__(self):
        return f"fn ({self.arg}:{self.arg_type}) => {self.body}"


@dataclasses.dataclass(frozen=True)
class Rec(ASTNode):
    """
    Represents a recursive value; `name` refers to the value itself
    inside `body`.
    Example: rec (f:int -> int) => fn (n:int) => f n
    """
    name: str
    rec_type: MonoType
    body: Any

    def __repr__(self):
        return f"rec ({self.name}:{self.rec_type}) => {self.body}"


@dataclasses.dataclass(frozen=True)
class Let(ASTNode):
    """
    Represents a sequence of declarations scoping over a body.
    Example: let val x = 1 val (a, b) = (x, 2) in a + b end
    """
    decls: tuple
    body: Any

    def __post_init__(self):
        object.__setattr__(self, 'decls', tuple(self.decls))

    def __repr__(self):
        decls = " ".join(str(decl) for decl in self.decls)
        return f"let {decls} in {self.body} end"


@dataclasses.dataclass(frozen=True)
class Apply(ASTNode):
    """
    Represents function application.
    Example: (f x) applies function f to argument x
    """
    func: Any  # The function being applied
    arg: Any   # The argument being passed

    def __repr__(self):
        return f"({self.func} {self.arg})"


# Declarations
@dataclasses.dataclass(frozen=True)
class Val(ASTNode):
    """
    Binds a single name.
    Example: val x = e
    """
    expr: Any
    name: str

    def bound_names(self) -> tuple:
        return (self.name,)

    def rebuild(self, expr, names: Sequence[str]) -> 'Val':
        return Val(expr, names[0])

    def __repr__(self):
        return f"val {self.name} = {self.expr}"


@dataclasses.dataclass(frozen=True)
class ValTuple(ASTNode):
    """
    Destructures a tuple into its components.
    Example: val (x, y) = e
    """
    expr: Any
    names: tuple

    def __post_init__(self):
        object.__setattr__(self, 'names', tuple(self.names))

    def bound_names(self) -> tuple:
        return self.names

    def rebuild(self, expr, names: Sequence[str]) -> 'ValTuple':
        return ValTuple(expr, names)

    def __repr__(self):
        return f"val ({', '.join(self.names)}) = {self.expr}"

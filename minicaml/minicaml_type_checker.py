#!/usr/bin/env python3
"""Type checker for MiniCAML.

Every binder in MiniCAML carries its type (function parameters and
recursive values are annotated, let-bound names take the type of their
expression), so types are computed bottom-up under a typing context and
compared for structural equality. There is no unification.
"""

from typing import Iterable, Optional, Union

from minicaml_ast import (
    ASTNode, Var, Int, Bool, If, Primop, Tuple, Function, Rec, Let, Apply,
    Val, ValTuple, primop_type
)
from minicaml_errors import NotFound, TypeCheckError, type_mismatch
from minicaml_types import MonoType, Arrow, Product, IntType, BoolType


class Context:
    """
    A typing context: an ordered stack of (name, type) bindings.

    Contexts are persistent. extend() returns a new context that shares
    every existing binding with this one; the newest binding of a name
    shadows older ones.
    """

    def __init__(self, bindings: Iterable = ()):
        self._head: Optional[tuple] = None
        for name, tp in bindings:
            self._head = (name, tp, self._head)

    @classmethod
    def _from_head(cls, head: Optional[tuple]) -> 'Context':
        ctx = cls()
        ctx._head = head
        return ctx

    def extend(self, name: str, tp: MonoType) -> 'Context':
        """Adds a new type ascription to the context."""
        return Context._from_head((name, tp, self._head))

    def extend_list(self, pairs: Iterable) -> 'Context':
        """Adds several type ascriptions, later pairs shadowing earlier ones."""
        ctx = self
        for name, tp in pairs:
            ctx = ctx.extend(name, tp)
        return ctx

    def lookup(self, name: str) -> MonoType:
        """Returns the type of the topmost binding of `name`."""
        node = self._head
        while node is not None:
            bound, tp, node = node
            if bound == name:
                return tp
        raise NotFound(name)

    def __iter__(self):
        """Yields the bindings, newest first."""
        node = self._head
        while node is not None:
            name, tp, node = node
            yield name, tp

    def __len__(self):
        return sum(1 for _ in self)

    def __repr__(self):
        bindings = ", ".join(f"{name}: {tp}" for name, tp in reversed(list(self)))
        return f"Context([{bindings}])"


def infer(ctx: Context, expr: ASTNode) -> MonoType:
    """Infer the type of an expression in a given typing context."""
    if isinstance(expr, Var):
        try:
            return ctx.lookup(expr.name)
        except NotFound:
            raise TypeCheckError(f"Found free variable {expr.name}") from None

    elif isinstance(expr, Int):
        return IntType

    elif isinstance(expr, Bool):
        return BoolType

    elif isinstance(expr, Primop):
        domain, range_type = primop_type(expr.op)
        if len(expr.args) != len(domain):
            raise TypeCheckError(
                f"Primitive operation {expr.op.name} expects {len(domain)} "
                f"arguments, got {len(expr.args)}")
        for arg, expected in zip(expr.args, domain):
            found = infer(ctx, arg)
            if found != expected:
                raise type_mismatch(expected, found)
        return range_type

    elif isinstance(expr, If):
        cond_type = infer(ctx, expr.cond)
        if cond_type != BoolType:
            raise type_mismatch(BoolType, cond_type)
        then_type = infer(ctx, expr.then_expr)
        else_type = infer(ctx, expr.else_expr)
        if then_type != else_type:
            raise type_mismatch(then_type, else_type)
        return then_type

    elif isinstance(expr, Function):
        body_type = infer(ctx.extend(expr.arg, expr.arg_type), expr.body)
        return Arrow(expr.arg_type, body_type)

    elif isinstance(expr, Rec):
        # The body must have exactly the declared type of the recursive value
        body_type = infer(ctx.extend(expr.name, expr.rec_type), expr.body)
        if body_type != expr.rec_type:
            raise type_mismatch(expr.rec_type, body_type)
        return expr.rec_type

    elif isinstance(expr, Apply):
        func_type = infer(ctx, expr.func)
        if not isinstance(func_type, Arrow):
            raise TypeCheckError(f"Expected a function type\nFound type {func_type}",
                                 found=func_type)
        arg_type = infer(ctx, expr.arg)
        if arg_type != func_type.domain:
            raise type_mismatch(func_type.domain, arg_type)
        return func_type.codomain

    elif isinstance(expr, Tuple):
        return Product(infer(ctx, item) for item in expr.items)

    elif isinstance(expr, Let):
        for decl in expr.decls:
            ctx = infer_dec(ctx, decl)
        return infer(ctx, expr.body)

    raise ValueError(f"Unknown expression type: {type(expr).__name__}")


def infer_dec(ctx: Context, decl: ASTNode) -> Context:
    """Extends the context with the names declared by a Val or ValTuple."""
    if isinstance(decl, Val):
        return ctx.extend(decl.name, infer(ctx, decl.expr))

    elif isinstance(decl, ValTuple):
        tp = infer(ctx, decl.expr)
        if not isinstance(tp, Product) or len(tp.components) != len(decl.names):
            raise TypeCheckError(
                f"Expected a tuple of {len(decl.names)} components "
                f"to bind ({', '.join(decl.names)})\nFound type {tp}",
                found=tp)
        return ctx.extend_list(zip(decl.names, tp.components))

    raise ValueError(f"Unknown declaration type: {type(decl).__name__}")


def typecheck(context: Union[Context, Iterable], expr: ASTNode) -> MonoType:
    """
    Type checks `expr` under `context`, a Context or an iterable of
    (name, type) pairs added in order.

    Raises TypeCheckError if the expression is ill-typed.
    """
    if not isinstance(context, Context):
        context = Context(context)
    return infer(context, expr)

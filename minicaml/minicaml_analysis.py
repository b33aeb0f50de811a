"""
Variable analyses over MiniCAML expressions.

free_variables() computes the names occurring unbound in an expression;
the substitution engine uses it to decide when a binder must be renamed.
unused_variables() reports binders whose name is never referenced in
their scope.

Both work from the leaves upwards. A variable is free when it is first
met; a binding construct deletes its bound names from the free variables
of its scope; every other construct takes the union over its children.
"""
from typing import Set

from minicaml_ast import (
    ASTNode, Var, Int, Bool, If, Primop, Tuple, Function, Rec, Let, Apply
)


def free_variables(expr: ASTNode) -> Set[str]:
    """Return the set of names occurring free in `expr`."""
    if isinstance(expr, Var):
        return {expr.name}

    elif isinstance(expr, (Int, Bool)):
        return set()

    elif isinstance(expr, If):
        return (free_variables(expr.cond)
                | free_variables(expr.then_expr)
                | free_variables(expr.else_expr))

    elif isinstance(expr, Primop):
        return _union(expr.args)

    elif isinstance(expr, Tuple):
        return _union(expr.items)

    elif isinstance(expr, Function):
        return free_variables(expr.body) - {expr.arg}

    elif isinstance(expr, Rec):
        return free_variables(expr.body) - {expr.name}

    elif isinstance(expr, Let):
        # let d :: rest in body  =  fv(d.expr) U (fv(let rest in body) - bound(d)),
        # folded from the last declaration outwards
        result = free_variables(expr.body)
        for decl in reversed(expr.decls):
            result = free_variables(decl.expr) | (result - set(decl.bound_names()))
        return result

    elif isinstance(expr, Apply):
        return free_variables(expr.func) | free_variables(expr.arg)

    raise ValueError(f"Unknown expression type: {type(expr).__name__}")


def _union(exprs) -> Set[str]:
    result = set()
    for e in exprs:
        result |= free_variables(e)
    return result


def unused_variables(expr: ASTNode) -> Set[str]:
    """
    Return the names bound somewhere in `expr` that are never used in
    the scope of their binder.

    Example: fn (x:int) => let val y = 1 in 2 end  has unused {x, y}
    """
    if isinstance(expr, (Var, Int, Bool)):
        return set()

    elif isinstance(expr, If):
        return (unused_variables(expr.cond)
                | unused_variables(expr.then_expr)
                | unused_variables(expr.else_expr))

    elif isinstance(expr, Primop):
        return _unused_union(expr.args)

    elif isinstance(expr, Tuple):
        return _unused_union(expr.items)

    elif isinstance(expr, Apply):
        return unused_variables(expr.func) | unused_variables(expr.arg)

    elif isinstance(expr, (Function, Rec)):
        name = expr.arg if isinstance(expr, Function) else expr.name
        result = unused_variables(expr.body)
        if name not in free_variables(expr.body):
            result.add(name)
        return result

    elif isinstance(expr, Let):
        result = unused_variables(expr.body)
        for i, decl in enumerate(expr.decls):
            result |= unused_variables(decl.expr)
            scope = free_variables(Let(expr.decls[i + 1:], expr.body))
            result |= {name for name in decl.bound_names() if name not in scope}
        return result

    raise ValueError(f"Unknown expression type: {type(expr).__name__}")


def _unused_union(exprs) -> Set[str]:
    result = set()
    for e in exprs:
        result |= unused_variables(e)
    return result

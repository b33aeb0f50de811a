"""
Capture-avoiding substitution for MiniCAML.

A substitution [e/x] replaces the free occurrences of the name x by the
expression e. Done naively it changes meaning: computing [y/x](fn y => x)
by plain replacement gives (fn y => y), and the y we plugged in has been
captured by the binder. So whenever a binder's name occurs free in the
replacement, the binder is first renamed to a fresh name:

    [y/x](fn y => x)  =  [y/x](fn 1y => x)  =  fn 1y => y

A scope in which x does not occur free is left as it is, binder included,
so substituting for a name that is not free gives back an equal tree.

Fresh names come from a NameGenerator, which every function here takes as
an argument so that the caller owns the counter. Without one, the shared
`default_names` generator is used. A fresh name is never one that is free
in the replacement or in the renamed scope, even when another generator
minted it.
"""
from typing import AbstractSet, List, Optional, Sequence

from minicaml_ast import (
    ASTNode, Var, Int, Bool, If, Primop, Tuple, Function, Rec, Let, Apply
)
from minicaml_analysis import free_variables
from minicaml_names import NameGenerator, default_names


class Substitution:
    """
    The substitution (replacement/target), read "replacement for target".
    """

    def __init__(self, replacement: ASTNode, target: str, names: NameGenerator):
        self.replacement = replacement
        self.target = target
        self.names = names
        self.replacement_free = free_variables(replacement)

    def apply(self, expr: ASTNode) -> ASTNode:
        """Apply the substitution to `expr`, renaming binders as needed."""
        if isinstance(expr, Var):
            return self.replacement if expr.name == self.target else expr

        elif isinstance(expr, (Int, Bool)):
            return expr

        elif isinstance(expr, If):
            return If(self.apply(expr.cond),
                      self.apply(expr.then_expr),
                      self.apply(expr.else_expr))

        elif isinstance(expr, Primop):
            return Primop(expr.op, [self.apply(arg) for arg in expr.args])

        elif isinstance(expr, Tuple):
            return Tuple([self.apply(item) for item in expr.items])

        elif isinstance(expr, Apply):
            return Apply(self.apply(expr.func), self.apply(expr.arg))

        elif isinstance(expr, Function):
            if expr.arg == self.target:
                return expr
            arg, body = self._under_binder(expr.arg, expr.body)
            return Function(arg, expr.arg_type, body)

        elif isinstance(expr, Rec):
            if expr.name == self.target:
                return expr
            name, body = self._under_binder(expr.name, expr.body)
            return Rec(name, expr.rec_type, body)

        elif isinstance(expr, Let):
            decls, body = self._apply_let(expr.decls, expr.body)
            return Let(decls, body)

        raise ValueError(f"Unknown expression type: {type(expr).__name__}")

    def _under_binder(self, name: str, body: ASTNode):
        """Substitute into the scope of a binder for `name` (not the target)."""
        if name in self.replacement_free:
            # Nothing to substitute in this scope, so the binder keeps its name
            if self.target not in free_variables(body):
                return name, body
            name, body = rename(name, body, self.names, self.replacement_free)
        return name, self.apply(body)

    def _apply_let(self, decls: Sequence, body: ASTNode):
        """
        Substitute into `let decls in body` one declaration at a time.

        The remainder of the let (the tail declarations and the body) is
        the scope of the first declaration's names.
        """
        if not decls:
            return [], self.apply(body)

        first, rest = decls[0], decls[1:]
        # The bound expression lives in the enclosing scope
        expr = self.apply(first.expr)
        bound = first.bound_names()

        if self.target in bound:
            return [first.rebuild(expr, bound)] + list(rest), body

        clashing = [name for name in bound if name in self.replacement_free]
        if clashing:
            scope = Let(rest, body)
            # As in _under_binder: no target in the scope, no renaming
            if self.target not in free_variables(scope):
                return [first.rebuild(expr, bound)] + list(rest), body
            fresh, renamed = rename_all(clashing, scope, self.names,
                                        self.replacement_free)
            mapping = dict(zip(_distinct(clashing), fresh))
            bound = [mapping.get(name, name) for name in bound]
            rest, body = renamed.decls, renamed.body

        rest, body = self._apply_let(rest, body)
        return [first.rebuild(expr, bound)] + rest, body


def substitute(replacement: ASTNode, target: str, expr: ASTNode,
               names: Optional[NameGenerator] = None) -> ASTNode:
    """
    Replace the free occurrences of `target` in `expr` by `replacement`.

    Pass the same `names` to every call of a run; without one, the shared
    `default_names` generator is used.
    """
    if names is None:
        names = default_names
    return Substitution(replacement, target, names).apply(expr)


def substitute_all(pairs: Sequence, expr: ASTNode,
                   names: Optional[NameGenerator] = None) -> ASTNode:
    """
    Apply a list of (replacement, target) substitutions to `expr`.

    The last pair is applied innermost:
        substitute_all([(e1, x1), (e2, x2)], e) = [e1/x1]([e2/x2] e)
    """
    if names is None:
        names = default_names
    for replacement, target in reversed(pairs):
        expr = Substitution(replacement, target, names).apply(expr)
    return expr


def rename(name: str, expr: ASTNode, names: NameGenerator,
           avoid: AbstractSet[str] = frozenset()):
    """
    Replace the free occurrences of `name` in `expr` by a fresh name.

    The fresh name is neither free in `expr` nor one of `avoid`.
    Returns the fresh name and the renamed expression.
    """
    fresh = names.next(name, avoid | free_variables(expr))
    return fresh, Substitution(Var(fresh), name, names).apply(expr)


def rename_all(old_names: Sequence[str], expr: ASTNode, names: NameGenerator,
               avoid: AbstractSet[str] = frozenset()):
    """
    Rename several names in `expr`, one fresh name per distinct old name.

    Returns the list of fresh names, in order of first occurrence, and the
    renamed expression.
    """
    fresh_names: List[str] = []
    for name in _distinct(old_names):
        fresh, expr = rename(name, expr, names, avoid)
        fresh_names.append(fresh)
    return fresh_names, expr


def _distinct(names: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(names))

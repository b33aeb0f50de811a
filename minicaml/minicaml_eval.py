"""
Substitution-based evaluator for MiniCAML.

The evaluator carries no environment. Binding constructs are eliminated
by substituting into their scope before evaluation continues, so a
variable should never be reached during evaluation; meeting one means the
input was not closed.

Two evaluation orders coexist on purpose:
  - let-bound expressions are evaluated before they are substituted,
  - the argument of an application is substituted unevaluated.

Recursion is unfolded by substituting the whole `rec` node for its own
name each time it is evaluated. A program that never reaches a base case
recurses until Python raises RecursionError.
"""
from typing import Optional

from minicaml_ast import (
    ASTNode, Var, Int, Bool, If, Primop, Tuple, Function, Rec, Let, Apply,
    Val, ValTuple, PrimOp, primop_type
)
from minicaml_errors import Stuck
from minicaml_names import NameGenerator, default_names
from minicaml_subst import substitute, substitute_all


# What each primitive operation computes once its operands are integers
_PRIMOP_FUNCTIONS = {
    PrimOp.EQUALS: lambda a, b: Bool(a == b),
    PrimOp.LESS_THAN: lambda a, b: Bool(a < b),
    PrimOp.PLUS: lambda a, b: Int(a + b),
    PrimOp.MINUS: lambda a, b: Int(a - b),
    PrimOp.TIMES: lambda a, b: Int(a * b),
    PrimOp.NEGATE: lambda a: Int(-a),
}


def is_value(expr: ASTNode) -> bool:
    """True for integers, booleans, functions and tuples of values."""
    if isinstance(expr, (Int, Bool, Function)):
        return True
    if isinstance(expr, Tuple):
        return all(is_value(item) for item in expr.items)
    return False


def eval_op(op: PrimOp, values) -> ASTNode:
    """Apply a primitive operation to already evaluated operands."""
    domain, _ = primop_type(op)
    if len(values) != len(domain) or not all(isinstance(v, Int) for v in values):
        raise Stuck("Bad arguments to primitive operation")
    return _PRIMOP_FUNCTIONS[op](*(v.value for v in values))


class Evaluator:
    """
    A big-step evaluator for closed MiniCAML expressions.

    All binders renamed while evaluating draw their names from `names`,
    or from the shared `default_names` when none is given.
    """

    def __init__(self, names: Optional[NameGenerator] = None, verbose: bool = False):
        self.names = names if names is not None else default_names
        self.verbose = verbose

    def eval(self, node: ASTNode) -> ASTNode:
        """
        Evaluates the given expression to a value.
        """
        if self.verbose:
            print(f"Evaluating {type(node).__name__}: {node}")

        # Values evaluate to themselves
        if isinstance(node, (Int, Bool, Function)):
            return node

        elif isinstance(node, Var):
            raise Stuck(f"Free variable ({node.name}) during evaluation")

        elif isinstance(node, Primop):
            values = [self.eval(arg) for arg in node.args]
            result = eval_op(node.op, values)
            if self.verbose:
                print(f"Primitive operation result: {result}")
            return result

        elif isinstance(node, If):
            cond = self.eval(node.cond)
            if not isinstance(cond, Bool):
                raise Stuck("Scrutinee of if is not true or false")
            if cond.value:
                if self.verbose:
                    print(f"Condition is true, evaluating then branch: {node.then_expr}")
                return self.eval(node.then_expr)
            if self.verbose:
                print(f"Condition is false, evaluating else branch: {node.else_expr}")
            return self.eval(node.else_expr)

        elif isinstance(node, Rec):
            if self.verbose:
                print(f"Unfolding recursive value {node.name}")
            return self.eval(substitute(node, node.name, node.body, self.names))

        elif isinstance(node, Apply):
            func = self.eval(node.func)
            if not isinstance(func, Function):
                raise Stuck("Left term of application is not a function")
            if self.verbose:
                print(f"Substituting {node.arg} for {func.arg} in {func.body}")
            return self.eval(substitute(node.arg, func.arg, func.body, self.names))

        elif isinstance(node, Tuple):
            return Tuple([self.eval(item) for item in node.items])

        elif isinstance(node, Let):
            return self._eval_let(node)

        raise ValueError(f"Unknown expression type: {type(node).__name__}")

    def _eval_let(self, node: Let) -> ASTNode:
        if not node.decls:
            return self.eval(node.body)

        decl = node.decls[0]
        rest = Let(node.decls[1:], node.body)

        if isinstance(decl, Val):
            value = self.eval(decl.expr)
            if self.verbose:
                print(f"Binding {decl.name} to {value}")
            return self.eval(substitute(value, decl.name, rest, self.names))

        elif isinstance(decl, ValTuple):
            value = self.eval(decl.expr)
            if not isinstance(value, Tuple) or len(value.items) != len(decl.names):
                raise Stuck(f"Cannot destructure {value} into "
                            f"({', '.join(decl.names)})")
            if self.verbose:
                print(f"Binding ({', '.join(decl.names)}) to {value}")
            pairs = list(zip(value.items, decl.names))
            return self.eval(substitute_all(pairs, rest, self.names))

        raise ValueError(f"Unknown declaration type: {type(decl).__name__}")


def evaluate(expr: ASTNode, names: Optional[NameGenerator] = None,
             verbose: bool = False) -> ASTNode:
    """
    Evaluates a closed expression to a value.
    """
    machine = Evaluator(names, verbose)
    if verbose:
        print(f"Executing: {expr}")
    result = machine.eval(expr)
    if verbose:
        print(f"Final result: {result}")
    return result

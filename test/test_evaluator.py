import unittest
import contextlib
import io
import sys
import os

# Get the directory of the current file
current_dir = os.path.dirname(os.path.abspath(__file__))

# add ../minicaml to the Python path
sys.path.insert(0, os.path.join(current_dir, '../minicaml'))

from minicaml_ast import (
    Var, Int, Bool, If, Primop, Tuple, Function, Rec, Let, Apply, Val, ValTuple, PrimOp
)
from minicaml_errors import Stuck
from minicaml_eval import Evaluator, evaluate, eval_op, is_value
from minicaml_names import NameGenerator, default_names
from minicaml_subst import substitute
from minicaml_type_checker import typecheck
from minicaml_types import IntType, Arrow

EQUALS, LESS_THAN, PLUS, MINUS, TIMES, NEGATE = (
    PrimOp.EQUALS, PrimOp.LESS_THAN, PrimOp.PLUS, PrimOp.MINUS, PrimOp.TIMES, PrimOp.NEGATE
)


def factorial():
    """rec (f:int -> int) => fn (n:int) => if n = 0 then 1 else n * f (n - 1)"""
    return Rec("f", Arrow(IntType, IntType),
               Function("n", IntType,
                        If(Primop(EQUALS, [Var("n"), Int(0)]),
                           Int(1),
                           Primop(TIMES, [Var("n"),
                                          Apply(Var("f"), Primop(MINUS, [Var("n"), Int(1)]))]))))


def fibonacci():
    """rec (fib:int -> int) => fn (n:int) => if n < 2 then n else fib (n - 1) + fib (n - 2)"""
    return Rec("fib", Arrow(IntType, IntType),
               Function("n", IntType,
                        If(Primop(LESS_THAN, [Var("n"), Int(2)]),
                           Var("n"),
                           Primop(PLUS, [Apply(Var("fib"), Primop(MINUS, [Var("n"), Int(1)])),
                                         Apply(Var("fib"), Primop(MINUS, [Var("n"), Int(2)]))]))))


class TestEvaluator(unittest.TestCase):

    def test_values_evaluate_to_themselves(self):
        for value in (Int(3), Bool(True), Function("x", IntType, Var("x"))):
            self.assertIs(evaluate(value), value)

    def test_primitive_operations(self):
        self.assertEqual(evaluate(Primop(PLUS, [Int(2), Int(3)])), Int(5))
        self.assertEqual(evaluate(Primop(MINUS, [Int(2), Int(3)])), Int(-1))
        self.assertEqual(evaluate(Primop(TIMES, [Int(4), Int(3)])), Int(12))
        self.assertEqual(evaluate(Primop(NEGATE, [Int(4)])), Int(-4))
        self.assertEqual(evaluate(Primop(EQUALS, [Int(4), Int(4)])), Bool(True))
        self.assertEqual(evaluate(Primop(LESS_THAN, [Int(4), Int(3)])), Bool(False))

    def test_nested_primitive_operations(self):
        # (2 + 3) * (10 - 5)
        expr = Primop(TIMES, [Primop(PLUS, [Int(2), Int(3)]),
                              Primop(MINUS, [Int(10), Int(5)])])
        self.assertEqual(evaluate(expr), Int(25))

    def test_bad_primitive_arguments(self):
        with self.assertRaises(Stuck):
            evaluate(Primop(PLUS, [Bool(True), Int(1)]))
        with self.assertRaises(Stuck):
            evaluate(Primop(NEGATE, [Int(1), Int(2)]))
        with self.assertRaises(Stuck):
            eval_op(EQUALS, [Int(1)])

    def test_if_expression(self):
        self.assertEqual(evaluate(If(Bool(True), Int(1), Int(0))), Int(1))
        self.assertEqual(evaluate(If(Bool(False), Int(1), Int(0))), Int(0))
        expr = If(Primop(LESS_THAN, [Int(3), Int(5)]), Int(1), Int(0))
        self.assertEqual(evaluate(expr), Int(1))

    def test_if_evaluates_only_the_chosen_branch(self):
        self.assertEqual(evaluate(If(Bool(True), Int(1), Var("boom"))), Int(1))
        self.assertEqual(evaluate(If(Bool(False), Var("boom"), Int(0))), Int(0))

    def test_if_scrutinee_must_be_boolean(self):
        with self.assertRaises(Stuck):
            evaluate(If(Int(1), Int(2), Int(3)))

    def test_free_variable_is_stuck(self):
        with self.assertRaises(Stuck) as cm:
            evaluate(Var("x"))
        self.assertIn("x", str(cm.exception))

    def test_application(self):
        # (fn (x:int) => x + 1) 5
        expr = Apply(Function("x", IntType, Primop(PLUS, [Var("x"), Int(1)])), Int(5))
        self.assertEqual(evaluate(expr), Int(6))

    def test_curried_application(self):
        # ((fn x => fn y => if x < y then y else x) 5) 3
        max_func = Function("x", IntType, Function("y", IntType,
                            If(Primop(LESS_THAN, [Var("x"), Var("y")]), Var("y"), Var("x"))))
        self.assertEqual(evaluate(Apply(Apply(max_func, Int(5)), Int(3))), Int(5))

    def test_application_substitutes_unevaluated_argument(self):
        # The argument is never evaluated because the body ignores it
        expr = Apply(Function("x", IntType, Int(1)), Apply(Int(2), Int(3)))
        self.assertEqual(evaluate(expr), Int(1))

    def test_application_of_non_function(self):
        with self.assertRaises(Stuck):
            evaluate(Apply(Int(3), Int(4)))

    def test_tuple(self):
        expr = Tuple([Primop(PLUS, [Int(1), Int(2)]), Bool(True), Tuple([])])
        self.assertEqual(evaluate(expr), Tuple([Int(3), Bool(True), Tuple([])]))

    def test_let(self):
        expr = Let([Val(Int(3), "y")], Primop(PLUS, [Var("y"), Int(1)]))
        self.assertEqual(evaluate(expr), Int(4))

    def test_let_sequential_declarations(self):
        expr = Let([Val(Int(1), "y"),
                    Val(Function("x", IntType, Primop(PLUS, [Var("x"), Var("y")])), "f"),
                    Val(Int(10), "y")],
                   Apply(Var("f"), Var("y")))
        self.assertEqual(evaluate(expr), Int(11))

    def test_let_evaluates_bound_expression_first(self):
        # Unlike application, the bound expression is evaluated even if unused
        with self.assertRaises(Stuck):
            evaluate(Let([Val(Apply(Int(2), Int(3)), "x")], Int(1)))

    def test_empty_let(self):
        self.assertEqual(evaluate(Let([], Int(1))), Int(1))

    def test_let_tuple(self):
        expr = Let([ValTuple(Tuple([Int(3), Int(4)]), ["a", "b"])],
                   Primop(PLUS, [Var("a"), Var("b")]))
        self.assertEqual(evaluate(expr), Int(7))

    def test_let_tuple_binds_components_in_order(self):
        expr = Let([ValTuple(Tuple([Int(3), Int(4)]), ["a", "b"])],
                   Primop(MINUS, [Var("a"), Var("b")]))
        self.assertEqual(evaluate(expr), Int(-1))

    def test_let_tuple_arity_mismatch(self):
        expr = Let([ValTuple(Tuple([Int(3), Int(4)]), ["a", "b", "c"])], Var("a"))
        with self.assertRaises(Stuck):
            evaluate(expr)

    def test_let_tuple_of_non_tuple(self):
        with self.assertRaises(Stuck):
            evaluate(Let([ValTuple(Int(3), ["a"])], Var("a")))

    def test_factorial(self):
        self.assertEqual(evaluate(Apply(factorial(), Int(5))), Int(120))

    def test_fibonacci(self):
        self.assertEqual(evaluate(Apply(fibonacci(), Int(10))), Int(55))

    def test_recursion_through_let(self):
        expr = Let([Val(factorial(), "fact")], Apply(Var("fact"), Int(4)))
        self.assertEqual(evaluate(expr), Int(24))

    def test_non_terminating_recursion(self):
        # rec (f:int -> int) => fn (n:int) => f n
        loop = Rec("f", Arrow(IntType, IntType),
                   Function("n", IntType, Apply(Var("f"), Var("n"))))
        with self.assertRaises(RecursionError):
            evaluate(Apply(loop, Int(0)))

    def test_substitution_lemma(self):
        body = Primop(TIMES, [Var("x"), Primop(PLUS, [Var("x"), Int(1)])])
        arg = Primop(MINUS, [Int(7), Int(2)])
        self.assertEqual(evaluate(Apply(Function("x", IntType, body), arg)),
                         evaluate(substitute(arg, "x", body)))

    def test_well_typed_programs_do_not_get_stuck(self):
        programs = [
            Apply(factorial(), Int(6)),
            Let([ValTuple(Tuple([Int(3), Bool(False)]), ["a", "b"])],
                If(Var("b"), Tuple([Var("a"), Int(0)]), Tuple([Var("a"), Var("a")]))),
            Let([Val(Function("x", IntType, Function("y", IntType,
                                                     Primop(EQUALS, [Var("x"), Var("y")]))), "eq")],
                Apply(Var("eq"), Int(2))),
        ]
        for program in programs:
            tp = typecheck([], program)
            value = evaluate(program)
            self.assertTrue(is_value(value))
            self.assertEqual(typecheck([], value), tp)

    def test_evaluator_uses_given_generator(self):
        names = NameGenerator()
        machine = Evaluator(names)
        self.assertIs(machine.names, names)
        self.assertEqual(machine.eval(Apply(factorial(), Int(3))), Int(6))

    def test_evaluator_defaults_to_shared_generator(self):
        self.assertIs(Evaluator().names, default_names)
        before = default_names.counter
        # Substituting y for x under fn y => x renames the binder
        expr = Apply(Function("x", IntType, Function("y", IntType, Var("x"))), Var("y"))
        self.assertNotEqual(evaluate(expr).arg, "y")
        self.assertGreater(default_names.counter, before)

    def test_verbose(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            evaluate(Primop(PLUS, [Int(2), Int(3)]), verbose=True)
        self.assertIn("Final result: 5", output.getvalue())

    def test_quiet_by_default(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            evaluate(Apply(factorial(), Int(3)))
        self.assertEqual(output.getvalue(), "")

    def test_unknown_node(self):
        with self.assertRaises(ValueError):
            evaluate("x")


class TestIsValue(unittest.TestCase):

    def test_values(self):
        self.assertTrue(is_value(Int(1)))
        self.assertTrue(is_value(Bool(False)))
        self.assertTrue(is_value(Function("x", IntType, Var("y"))))
        self.assertTrue(is_value(Tuple([Int(1), Tuple([])])))

    def test_non_values(self):
        self.assertFalse(is_value(Var("x")))
        self.assertFalse(is_value(Primop(PLUS, [Int(1), Int(2)])))
        self.assertFalse(is_value(Tuple([Int(1), Var("x")])))
        self.assertFalse(is_value(factorial()))


if __name__ == "__main__":
    unittest.main()

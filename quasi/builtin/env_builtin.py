"""Built-in functions for the quasi runtime environment.

Every builtin takes the runtime env and the list of evaluated arguments, and
is registered by bare name so that call heads resolve to it.
"""
from __future__ import annotations

import operator
from functools import reduce
from typing import Callable

from quasi import LispValue
from quasi.errors import QuasiArityError, QuasiTypeError
from quasi.evaluation.special_forms.if_form import is_true
from quasi.types.environment import Environment


def _numbers(name: str, args: list[LispValue]) -> list[LispValue]:
    for a in args:
        if isinstance(a, bool) or not isinstance(a, (int, float)):
            raise QuasiTypeError(f"{name} expects numbers, got {a!r}")
    return args


def add(env: Environment, args: list[LispValue]) -> LispValue:
    return sum(_numbers("+", args))


def subtract(env: Environment, args: list[LispValue]) -> LispValue:
    """(- x) negates, (- x y ...) subtracts left to right."""
    if not args:
        raise QuasiArityError("- requires at least 1 argument")
    nums = _numbers("-", args)
    if len(nums) == 1:
        return -nums[0]
    return reduce(operator.sub, nums)


def multiply(env: Environment, args: list[LispValue]) -> LispValue:
    return reduce(operator.mul, _numbers("*", args), 1)


def divide(env: Environment, args: list[LispValue]) -> LispValue:
    if not args:
        raise QuasiArityError("/ requires at least 1 argument")
    nums = _numbers("/", args)
    if len(nums) == 1:
        return 1 / nums[0]
    return reduce(operator.truediv, nums)


def _comparison(name: str, op: Callable[[LispValue, LispValue], bool]):
    def compare(env: Environment, args: list[LispValue]) -> bool:
        """Return #t if every adjacent pair satisfies the comparison."""
        if name != "=":
            _numbers(name, args)
        return all(op(a, b) for a, b in zip(args, args[1:]))

    compare.__name__ = f"compare_{name}"
    return compare


def logical_not(env: Environment, args: list[LispValue]) -> bool:
    if len(args) != 1:
        raise QuasiArityError("not expects exactly 1 argument")
    return not is_true(args[0])


def make_list(env: Environment, args: list[LispValue]) -> list[LispValue]:
    return list(args)


def print_values(env: Environment, args: list[LispValue]) -> LispValue:
    from quasi.printer import format_value

    print(" ".join(format_value(a) for a in args))
    return args[-1] if args else None


BUILTINS: dict[str, Callable[[Environment, list[LispValue]], LispValue]] = {
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "=": _comparison("=", operator.eq),
    "<": _comparison("<", operator.lt),
    ">": _comparison(">", operator.gt),
    "<=": _comparison("<=", operator.le),
    ">=": _comparison(">=", operator.ge),
    "not": logical_not,
    "list": make_list,
    "print": print_values,
}


def register(env: Environment) -> None:
    """Install the builtins into `env` as named functions."""
    for name, fn in BUILTINS.items():
        env.define_function(name, fn)

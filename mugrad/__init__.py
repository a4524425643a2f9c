"""mugrad: A scalar-value reverse-mode autograd engine."""

import logging

from .engine import (
    Value,
    Op,
    add,
    add_const,
    sub,
    sub_const,
    mul,
    mul_const,
    div,
    div_const,
    power,
    exp,
    tanh,
    topological_sort,
    zero_grad_graph,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Value",
    "Op",
    "add",
    "add_const",
    "sub",
    "sub_const",
    "mul",
    "mul_const",
    "div",
    "div_const",
    "power",
    "exp",
    "tanh",
    "topological_sort",
    "zero_grad_graph",
]

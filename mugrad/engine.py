"""
mugrad: A Scalar-Value Autograd Engine
======================================

Reverse-mode automatic differentiation over single floating-point values.

Every construction function takes existing nodes, evaluates the operation
once, and returns a new node that remembers its operands and which
operation produced it. Calling backward() on any node walks that graph in
reverse topological order and pushes gradients down to every operand via
the chain rule.

Arithmetic follows IEEE-754 semantics: dividing by zero or overflowing an
exponential yields inf or nan rather than raising. The engine evaluates
through numpy scalars with floating-point warnings silenced for that reason.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

import numpy as np


logger = logging.getLogger(__name__)

# Type alias for numeric inputs
Numeric = Union[int, float, np.floating, np.integer]


class Op(str, Enum):
    """Tag identifying which differentiation rule a node uses."""

    ADD = '+'
    SUB = '-'
    MUL = '*'
    POW = '**'
    EXP = 'exp'
    TANH = 'tanh'


def _evaluate(fn: Callable[..., np.floating], *args: float) -> float:
    """Apply a numpy ufunc to float64 scalars, returning inf/nan instead of warning."""
    with np.errstate(all='ignore'):
        return float(fn(*(np.float64(a) for a in args)))


def _tanh(x: np.floating) -> np.floating:
    # (e^2x - 1) / (e^2x + 1), rearranged on |x| so e^2x cannot overflow
    t = np.exp(-2.0 * np.abs(x))
    return np.copysign((1.0 - t) / (1.0 + t), x)


class Value:
    """
    A scalar node in the computation graph.

    Every Value knows:
    1. Its data (fixed when the node is built)
    2. Its gradient (derivative of the backward root with respect to it)
    3. Its children (the operands consumed to produce it, in call order)
    4. Its op tag (which backward rule applies; None for leaves)

    Nodes compare and hash by identity, so a node reused as an operand in
    several places (e.g. ``x * x``) is still a single node of the graph.

    Attributes:
        grad: Accumulated gradient, 0.0 until a backward pass reaches it.
        label: Optional name for debugging and display.

    Example:
        >>> a = Value(2.0, label='a')
        >>> b = Value(3.0, label='b')
        >>> c = a * b + a
        >>> c.backward()
        >>> a.grad  # dc/da = b + 1
        4.0
        >>> b.grad  # dc/db = a
        2.0
    """

    __slots__ = ('_data', 'grad', '_prev', '_op', '_exponent', 'label')

    def __init__(
        self,
        data: Numeric,
        _children: Tuple[Value, ...] = (),
        _op: Optional[Op] = None,
        label: str = '',
        _exponent: Optional[float] = None,
    ) -> None:
        """
        Initialize a Value node.

        Args:
            data: The scalar value to store.
            _children: Operand nodes, in call order (internal use).
            _op: The operation that produced this node (internal use).
            label: Optional name for debugging.
            _exponent: Constant exponent of a power node (internal use).

        Raises:
            TypeError: If data is not a numeric type.
        """
        if not isinstance(data, (int, float, np.floating, np.integer)):
            raise TypeError(
                f"Value data must be numeric, got {type(data).__name__}"
            )

        self._data: float = float(data)
        self.grad: float = 0.0
        self._prev: Tuple[Value, ...] = tuple(_children)
        self._op: Optional[Op] = _op
        self._exponent: Optional[float] = _exponent
        self.label: str = label

    @property
    def data(self) -> float:
        """The value computed at construction. Read-only."""
        return self._data

    @property
    def children(self) -> Tuple[Value, ...]:
        """Operands consumed to produce this node, in call order."""
        return self._prev

    @property
    def op(self) -> Optional[Op]:
        """Operation tag, or None for a leaf."""
        return self._op

    @property
    def exponent(self) -> Optional[float]:
        """Constant exponent for Op.POW nodes, otherwise None."""
        return self._exponent

    def __repr__(self) -> str:
        """Label, data and grad, followed by children and op tag when present."""
        if self.label:
            parts = [f"{self.label}={self._data:.4f}"]
        else:
            parts = [f"data={self._data:.4f}"]
        parts.append(f"grad={self.grad:.4f}")
        if self._prev:
            names = ', '.join(c.label or f"{c._data:.4f}" for c in self._prev)
            parts.append(f"children=[{names}]")
        if self._op is not None:
            tag = self._op.value
            if self._op is Op.POW:
                tag += f"{self._exponent:g}"
            parts.append(f"op='{tag}'")
        return f"Value({', '.join(parts)})"

    # =========================================================================
    # Operator Overloads
    # =========================================================================

    def __add__(self, other: Union[Value, Numeric]) -> Value:
        if isinstance(other, Value):
            return add(self, other)
        return add_const(self, other)

    def __radd__(self, other: Numeric) -> Value:
        """Handle numeric + Value."""
        return add(_const(other), self)

    def __sub__(self, other: Union[Value, Numeric]) -> Value:
        if isinstance(other, Value):
            return sub(self, other)
        return sub_const(self, other)

    def __rsub__(self, other: Numeric) -> Value:
        """Handle numeric - Value."""
        return sub(_const(other), self)

    def __neg__(self) -> Value:
        return mul_const(self, -1)

    def __mul__(self, other: Union[Value, Numeric]) -> Value:
        if isinstance(other, Value):
            return mul(self, other)
        return mul_const(self, other)

    def __rmul__(self, other: Numeric) -> Value:
        """Handle numeric * Value."""
        return mul(_const(other), self)

    def __truediv__(self, other: Union[Value, Numeric]) -> Value:
        if isinstance(other, Value):
            return div(self, other)
        return div_const(self, other)

    def __rtruediv__(self, other: Numeric) -> Value:
        """Handle numeric / Value."""
        return div(_const(other), self)

    def __pow__(self, k: Union[int, float]) -> Value:
        return power(self, k)

    def exp(self, label: str = '') -> Value:
        """Exponential of this node."""
        return exp(self, label)

    def tanh(self, label: str = '') -> Value:
        """Hyperbolic tangent of this node."""
        return tanh(self, label)

    # =========================================================================
    # Backpropagation
    # =========================================================================

    def backward(self) -> None:
        """
        Compute gradients for all nodes reachable from this one.

        The algorithm:
        1. Build a topological ordering of the computation graph
        2. Set this node's gradient to 1.0 (d(self)/d(self) = 1)
        3. Walk the ordering backward, applying each node's rule

        Because every consumer of a node comes later in the ordering, a
        node's gradient is complete by the time it is propagated further.

        Note: only the root is seeded. Every other gradient is added to,
        so running backward() twice without zeroing doubles the result.
        Use zero_grad_graph() first if you want fresh gradients.

        Example:
            >>> x = Value(2.0)
            >>> y = x ** 2 + 3 * x
            >>> y.backward()
            >>> x.grad  # dy/dx = 2x + 3
            7.0
        """
        topo = topological_sort(self)
        logger.debug("backward from %r over %d nodes", self, len(topo))

        self.grad = 1.0
        for node in reversed(topo):
            _propagate(node)

    def zero_grad(self) -> None:
        """Reset this node's gradient to zero."""
        self.grad = 0.0

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def item(self) -> float:
        """Return the scalar value (PyTorch compatibility)."""
        return self._data

    @staticmethod
    def zero_grad_all(values: Iterable[Value]) -> None:
        """
        Zero gradients for a collection of Values.

        Args:
            values: Value objects to zero.
        """
        for v in values:
            v.grad = 0.0


# =============================================================================
# Construction Functions
# =============================================================================

def _const(k: Numeric) -> Value:
    return Value(k, label='const')


def add(a: Value, b: Value, label: str = '') -> Value:
    """
    Addition: out = a + b

    Local derivatives:
        d(out)/d(a) = 1
        d(out)/d(b) = 1
    """
    return Value(_evaluate(np.add, a._data, b._data), (a, b), Op.ADD, label)


def add_const(a: Value, k: Numeric, label: str = '') -> Value:
    """Add a plain number, wrapped as a 'const' leaf."""
    return add(a, _const(k), label)


def sub(a: Value, b: Value, label: str = '') -> Value:
    """
    Subtraction: out = a - b

    Local derivatives:
        d(out)/d(a) = 1
        d(out)/d(b) = -1
    """
    return Value(_evaluate(np.subtract, a._data, b._data), (a, b), Op.SUB, label)


def sub_const(a: Value, k: Numeric, label: str = '') -> Value:
    """Subtract a plain number, wrapped as a 'const' leaf."""
    return sub(a, _const(k), label)


def mul(a: Value, b: Value, label: str = '') -> Value:
    """
    Multiplication: out = a * b

    Local derivatives:
        d(out)/d(a) = b
        d(out)/d(b) = a
    """
    return Value(_evaluate(np.multiply, a._data, b._data), (a, b), Op.MUL, label)


def mul_const(a: Value, k: Numeric, label: str = '') -> Value:
    """Multiply by a plain number, wrapped as a 'const' leaf."""
    return mul(a, _const(k), label)


def div(a: Value, b: Value, label: str = '') -> Value:
    """Division: a / b = a * b^(-1). Gradients come from mul and power."""
    return mul(a, power(b, -1), label)


def div_const(a: Value, k: Numeric, label: str = '') -> Value:
    """Divide by a plain number, wrapped as a 'const' leaf."""
    return div(a, _const(k), label)


def power(x: Value, k: Union[int, float], label: str = '') -> Value:
    """
    Power: out = x^k (where k is a constant, not a Value)

    Local derivative:
        d(out)/d(x) = k * x^(k-1)

    Args:
        x: The base.
        k: The exponent (must be numeric, not Value).
        label: Optional name for the result.

    Returns:
        New Value representing x raised to power k.

    Raises:
        TypeError: If k is a Value (not supported).
    """
    if isinstance(k, Value):
        raise TypeError(
            "Power with Value exponent not supported; "
            "the exponent must be a plain number."
        )
    k = float(k)
    return Value(_evaluate(np.power, x._data, k), (x,), Op.POW, label, k)


def exp(x: Value, label: str = '') -> Value:
    """
    Exponential: out = e^x

    Local derivative:
        d(e^x)/dx = e^x
    """
    return Value(_evaluate(np.exp, x._data), (x,), Op.EXP, label)


def tanh(x: Value, label: str = '') -> Value:
    """
    Hyperbolic tangent: out = (e^(2x) - 1) / (e^(2x) + 1)

    Local derivative:
        d(tanh(x))/dx = 1 - tanh(x)^2
    """
    return Value(_evaluate(_tanh, x._data), (x,), Op.TANH, label)


# =============================================================================
# Backward Rules
# =============================================================================

def _add_backward(out: Value) -> None:
    a, b = out._prev
    a.grad += out.grad
    b.grad += out.grad


def _sub_backward(out: Value) -> None:
    a, b = out._prev
    a.grad += out.grad
    b.grad -= out.grad


def _mul_backward(out: Value) -> None:
    a, b = out._prev
    # Product rule derivatives
    a.grad += b._data * out.grad
    b.grad += a._data * out.grad


def _pow_backward(out: Value) -> None:
    (x,) = out._prev
    k = out._exponent
    with np.errstate(all='ignore'):
        derivative = float(k * np.power(np.float64(x._data), k - 1))
    x.grad += derivative * out.grad


def _exp_backward(out: Value) -> None:
    (x,) = out._prev
    x.grad += out._data * out.grad


def _tanh_backward(out: Value) -> None:
    (x,) = out._prev
    x.grad += (1.0 - out._data * out._data) * out.grad


# op -> (arity, rule)
_RULES: Dict[Op, Tuple[int, Callable[[Value], None]]] = {
    Op.ADD: (2, _add_backward),
    Op.SUB: (2, _sub_backward),
    Op.MUL: (2, _mul_backward),
    Op.POW: (1, _pow_backward),
    Op.EXP: (1, _exp_backward),
    Op.TANH: (1, _tanh_backward),
}


def _propagate(node: Value) -> None:
    """Push node.grad into its children according to its op. Leaves are a no-op."""
    if node._op is None:
        return
    arity, rule = _RULES[node._op]
    assert len(node._prev) == arity, (
        f"{node._op.value} node expects {arity} children, has {len(node._prev)}"
    )
    rule(node)


# =============================================================================
# Graph Utilities
# =============================================================================

def topological_sort(root: Value) -> List[Value]:
    """
    Compute topological ordering of computation graph rooted at `root`.

    Every node appears after all of its children and exactly once, however
    many paths reach it. Uses an explicit stack, so arbitrarily long chains
    do not hit the interpreter's recursion limit.

    Args:
        root: The root node of the computation graph.

    Returns:
        List of Values in topological order (root is last).

    Example:
        >>> a = Value(1.0)
        >>> b = Value(2.0)
        >>> c = a + b
        >>> d = c * a
        >>> topo = topological_sort(d)
        >>> # topo is [a, b, c, d]
    """
    topo: List[Value] = []
    visited: Set[Value] = set()
    stack: List[Tuple[Value, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            topo.append(node)
            continue
        if node in visited:
            continue
        visited.add(node)
        stack.append((node, True))
        for child in reversed(node._prev):
            if child not in visited:
                stack.append((child, False))

    return topo


def zero_grad_graph(root: Value) -> None:
    """Zero the gradient of every node reachable from `root`, root included."""
    Value.zero_grad_all(topological_sort(root))

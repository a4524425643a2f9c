#!/usr/bin/env python3
"""
mugrad Demo: Backpropagating Through a Hand-Built tanh Neuron
==============================================================

This demo shows the complete workflow:
1. Build o = tanh(x1*w1 + x2*w2 + b), with tanh spelled out as
   (e^2n - 1) / (e^2n + 1) from primitive operations
2. Run the backward pass and compare against the closed-form derivative
3. Sweep n over an interval and plot tanh(n) with the gradient the engine
   computes at each point

Run: python examples/demo.py
"""

import logging
import math
import numpy as np
import matplotlib.pyplot as plt
from typing import List, Tuple

from mugrad import (
    Value,
    add,
    add_const,
    div,
    exp,
    mul,
    mul_const,
    sub_const,
    topological_sort,
)


logger = logging.getLogger("mugrad.demo")


def tanh_neuron(
    x1: float,
    x2: float,
    w1: float,
    w2: float,
    b: float,
) -> Tuple[Value, dict]:
    """
    Build the neuron graph from primitive operations.

    Returns:
        The output node and a dict of the named input nodes.
    """
    inputs = {
        'x1': Value(x1, label='x1'),
        'x2': Value(x2, label='x2'),
        'w1': Value(w1, label='w1'),
        'w2': Value(w2, label='w2'),
        'b': Value(b, label='b'),
    }
    x1w1 = mul(inputs['x1'], inputs['w1'], 'x1*w1')
    x2w2 = mul(inputs['x2'], inputs['w2'], 'x2*w2')
    x1w1x2w2 = add(x1w1, x2w2, 'x1*w1 + x2*w2')
    n = add(x1w1x2w2, inputs['b'], 'n')
    inputs['n'] = n

    e = exp(mul_const(n, 2, '2n'), 'e^2n')
    o = div(sub_const(e, 1, 'e^2n-1'), add_const(e, 1, 'e^2n+1'), 'o')
    return o, inputs


def demo_worked_example() -> None:
    """Backpropagate through the neuron and check the gradients."""
    print("=" * 60)
    print("DEMO 1: Gradients of a tanh Neuron")
    print("=" * 60)
    print()

    o, nodes = tanh_neuron(2.0, 0.0, -3.0, 1.0, 6.8813735870195432)
    o.backward()

    for node in reversed(topological_sort(o)):
        logger.info("%r", node)
    print()

    local = 1 - math.tanh(nodes['n'].data) ** 2
    print(f"o = tanh(n) = {o.data:.6f}")
    print(f"1 - tanh(n)^2 = {local:.6f}")
    print()
    print(f"{'node':>4} | {'engine':>10} | {'closed form':>11}")
    for name, partner in (('w1', 'x1'), ('w2', 'x2'), ('x1', 'w1'), ('x2', 'w2')):
        expected = local * nodes[partner].data
        print(f"{name:>4} | {nodes[name].grad:>10.6f} | {expected:>11.6f}")
    print()


def sweep(ns: np.ndarray) -> Tuple[List[float], List[float]]:
    """
    Evaluate the spelled-out tanh and its engine gradient at each point.

    Args:
        ns: Points to evaluate at.

    Returns:
        Forward values and d(out)/dn at each point.
    """
    values = []
    grads = []
    for point in ns:
        n = Value(float(point), label='n')
        e = exp(mul_const(n, 2))
        out = div(sub_const(e, 1), add_const(e, 1))
        out.backward()
        values.append(out.data)
        grads.append(n.grad)
    return values, grads


def plot_sweep(ns: np.ndarray, values: List[float], grads: List[float]) -> None:
    """
    Plot tanh and its engine gradient against the closed form.

    Args:
        ns: Sample points.
        values: Forward values from the engine.
        grads: Gradients from the engine.
    """
    plt.figure(figsize=(10, 6))
    plt.plot(ns, values, 'b-', linewidth=2, label='tanh(n) (engine)')
    plt.plot(ns, grads, 'r-', linewidth=2, label='d/dn (engine)')
    plt.plot(ns, 1 - np.tanh(ns) ** 2, 'k--', linewidth=1, label='1 - tanh(n)^2')
    plt.xlabel('n')
    plt.legend()
    plt.title('Spelled-out tanh and its backpropagated gradient')
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig('./tanh_sweep.png', dpi=150)
    plt.close()
    print("Saved tanh sweep to: tanh_sweep.png")


def demo_sweep() -> None:
    """Sweep the tanh construction over [-4, 4]."""
    print("=" * 60)
    print("DEMO 2: Gradient Sweep")
    print("=" * 60)
    print()

    ns = np.linspace(-4.0, 4.0, 161)
    values, grads = sweep(ns)
    max_err = max(abs(g - (1 - math.tanh(n) ** 2)) for n, g in zip(ns, grads))
    print(f"Max |engine - closed form| over {len(ns)} points: {max_err:.2e}")
    plot_sweep(ns, values, grads)
    print()


def main() -> None:
    """Run all demos."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    demo_worked_example()
    demo_sweep()

    print("=" * 60)
    print("ALL DEMOS COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()

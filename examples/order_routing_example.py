"""
Example: Routing orders with Kondition

This example shows how a Conditional replaces nested if / elif / else blocks
with one fluent expression per decision: side-effecting chains, value-returning
branches, raising on unexpected input, named predicates, tracing, and
asserting on the errors a chain raises.
"""

import logging
from dataclasses import dataclass, field

from kondition import (
    Conditional,
    LoggingHook,
    assert_thrown,
    explain,
    rule,
    rule_args,
    starts_with,
    use_tracing,
)

# =============================================================================
# Domain model
# =============================================================================


@dataclass
class Order:
    items: list[str]
    country: str = "US"
    subtotal: float = 0.0
    notes: list[str] = field(default_factory=list)


# =============================================================================
# 1. Named predicates
# =============================================================================


@rule
def is_empty(order: Order) -> bool:
    """Orders without items cannot ship."""
    return not order.items


@rule
def is_domestic(order: Order) -> bool:
    return order.country == "US"


@rule_args
def subtotal_over(order: Order, threshold: float) -> bool:
    return order.subtotal > threshold


# =============================================================================
# 2. Side-effecting chain: exactly one branch runs
# =============================================================================


def route(order: Order) -> None:
    (
        Conditional.of(order)
        .on(is_empty)
        .then(lambda o: o.notes.append("rejected: empty"))
        .or_else_if(is_domestic & subtotal_over(50))
        .then(lambda o: o.notes.append("free domestic shipping"))
        .or_else_if(is_domestic)
        .then(lambda o: o.notes.append("standard domestic shipping"))
        .or_else(lambda o: o.notes.append("international shipping"))
    )


# =============================================================================
# 3. Value-returning branch
# =============================================================================


def shipping_label(order: Order) -> str:
    return (
        Conditional.of(order)
        .on(is_domestic)
        .then_return(lambda o: f"US-{len(o.items)}")
        .or_else_return(lambda o: f"{o.country}-INTL-{len(o.items)}")
    )


# =============================================================================
# 4. Raising on unexpected input
# =============================================================================


def require_items(order: Order) -> None:
    (
        Conditional.of(order)
        .on(~is_empty)
        .then(lambda o: o.notes.append("validated"))
        .or_else_throw_with(lambda o: ValueError(f"Order for {o.country} has no items"))
    )


# =============================================================================
# 5. Named actions read well in explain() output
# =============================================================================


def hold(order: Order) -> None:
    order.notes.append("held")


def ship(order: Order) -> None:
    order.notes.append("shipped")


# =============================================================================
# Run examples
# =============================================================================

if __name__ == "__main__":
    print("=== 1. Routing ===\n")
    orders = [
        Order(items=[]),
        Order(items=["a", "b"], subtotal=80.0),
        Order(items=["a"], subtotal=10.0),
        Order(items=["a"], country="DE", subtotal=99.0),
    ]
    for order in orders:
        route(order)
        print(f"  {order.country} {order.items!r:12s} -> {order.notes[-1]}")

    print("\n=== 2. Labels ===\n")
    for order in orders[1:]:
        print(f"  {order.country} -> {shipping_label(order)}")

    print("\n=== 3. Explain ===\n")
    chain = (
        Conditional.of(orders[2])
        .on(is_empty)
        .then(hold)
        .or_else_if(is_domestic)
        .then(ship)
    )
    print(explain(chain, verbose=True))

    print("\n=== 4. Tracing ===\n")
    logging.basicConfig(level=logging.DEBUG, format="  %(name)s %(message)s")
    with use_tracing(LoggingHook()):
        route(Order(items=["x"], subtotal=5.0))

    print("\n=== 5. Asserting on errors ===\n")
    (
        assert_thrown(lambda: require_items(Order(items=[], country="FR")))
        .expect(ValueError)
        .expect_message(starts_with("Order for FR"))
        .expect_no_cause()
    )
    print("  require_items raised ValueError as expected")

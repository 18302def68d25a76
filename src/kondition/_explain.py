"""Plain-English rendering of conditionals."""

from __future__ import annotations

from typing import Any

from kondition._conditional import Conditional, ConditionalReturn
from kondition._tracing import describe


def explain(target: Conditional[Any] | ConditionalReturn[Any, Any], verbose: bool = False) -> str:
    """
    Render a conditional chain as if / else-if lines.

    Args:
        target: The last node of a chain, or a ConditionalReturn
        verbose: Include the held value and any cached predicate results

    Example:
        chain = (
            Conditional.of(0)
            .on(is_large).then(shout)
            .or_else_if(is_small).then(whisper)
        )
        print(explain(chain))

        # Output:
        # IF is_large THEN shout
        # ELSE IF is_small THEN whisper
    """
    if isinstance(target, ConditionalReturn):
        lines = [f"IF {describe(target.predicate)} RETURN {describe(target.converter)}"]
        if verbose:
            lines.insert(0, f"VALUE {target.value!r}")
        return "\n".join(lines)

    lines = []
    if verbose:
        lines.append(f"VALUE {target.value!r}")

    for index, node in enumerate(target.chain()):
        keyword = "IF" if index == 0 else "ELSE IF"
        line = f"{keyword} {describe(node.predicate)}"
        if verbose and node.is_evaluated:
            line += f" [{'matched' if node.get() else 'no match'}]"
        if node.action is not None:
            line += f" THEN {describe(node.action)}"
        lines.append(line)

    return "\n".join(lines)

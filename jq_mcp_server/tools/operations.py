"""Typed array, object, string and math operations."""
from typing import List, Literal, Optional

from jq_mcp_server.core import operations
from jq_mcp_server.tools.base import with_error_handling, with_tool_metrics

ArrayOperation = Literal[
    "length", "reverse", "sort", "unique", "flatten", "sum", "min", "max", "group_by", "first", "last"
]
ObjectOperation = Literal["keys", "values", "to_entries", "from_entries", "has", "delete", "merge", "pick"]
StringOperation = Literal[
    "length", "split", "join", "contains", "startswith", "endswith", "trim", "upper", "lower", "replace"
]
MathOperation = Literal["add", "multiply", "subtract", "divide", "modulo", "floor", "ceil", "round", "abs", "sqrt"]


@with_tool_metrics
@with_error_handling
async def array_operations(
    input: str,
    operation: ArrayOperation,
    key: Optional[str] = None,
    depth: Optional[int] = None,
) -> str:
    """Perform an operation on a JSON array.

    Args:
        input: JSON array input.
        operation: Array operation to perform.
        key: Key for sort, unique, min, max and group_by (paths like ``user.age`` or ``t[0]`` work).
        depth: Depth for flatten.
    """
    return await operations.array_operation(input, operation, key=key, depth=depth)


@with_tool_metrics
@with_error_handling
async def object_operations(
    input: str,
    operation: ObjectOperation,
    key: Optional[str] = None,
    keys: Optional[List[str]] = None,
    merge_with: Optional[str] = None,
) -> str:
    """Perform an operation on a JSON object.

    Args:
        input: JSON object input.
        operation: Object operation to perform.
        key: Key for has and delete.
        keys: Keys for pick.
        merge_with: JSON object to merge with.
    """
    return await operations.object_operation(input, operation, key=key, keys=keys, merge_with=merge_with)


@with_tool_metrics
@with_error_handling
async def string_operations(
    input: str,
    operation: StringOperation,
    separator: Optional[str] = None,
    search_value: Optional[str] = None,
    replace_value: Optional[str] = None,
) -> str:
    """Perform an operation on a JSON string.

    Args:
        input: JSON string input (quoted, e.g. ``"Hello World"``).
        operation: String operation to perform.
        separator: Separator for split and join.
        search_value: Value to search for (contains, startswith, endswith, replace).
            For replace it is a regular expression.
        replace_value: Replacement for replace.
    """
    return await operations.string_operation(
        input, operation, separator=separator, search_value=search_value, replace_value=replace_value
    )


@with_tool_metrics
@with_error_handling
async def math_operations(input: str, operation: MathOperation, operand: Optional[float] = None) -> str:
    """Perform a mathematical operation on JSON numbers.

    Without an operand, ``add`` and ``multiply`` sum an array of numbers.
    ``subtract``, ``divide`` and ``modulo`` require an operand.

    Args:
        input: JSON number or array of numbers.
        operation: Math operation to perform.
        operand: Operand for binary operations.
    """
    return await operations.math_operation(input, operation, operand=operand)

"""Tools that run caller-written jq expressions against JSON input."""
from typing import Dict, Optional

from jq_mcp_server.core import operations
from jq_mcp_server.tools.base import with_error_handling, with_tool_metrics


@with_tool_metrics
@with_error_handling
async def apply_filter(
    filter: str,
    input: str,
    compact: Optional[bool] = None,
    raw: Optional[bool] = None,
    sort: Optional[bool] = None,
    tab: Optional[bool] = None,
    args: Optional[Dict[str, str]] = None,
) -> str:
    """Apply a jq filter expression to JSON input.

    Args:
        filter: The jq filter expression to apply, e.g. ``.users[] | .name``. An empty
            filter is the identity.
        input: JSON input data.
        compact: Use compact output format.
        raw: Output raw strings, not JSON texts.
        sort: Sort object keys.
        tab: Use tabs for indentation.
        args: Variables to pass to the filter. Each entry is bound with
            ``--arg`` and can be referenced as ``$name``.

    Returns:
        jq's output, or ``No output`` when the filter produced nothing.
    """
    return await operations.apply_filter(
        filter,
        input,
        compact=bool(compact),
        raw=bool(raw),
        sort=bool(sort),
        tab=bool(tab),
        variables=args,
    )


@with_tool_metrics
@with_error_handling
async def validate_json(
    input: str,
    format: Optional[bool] = True,
    compact: Optional[bool] = None,
    sort: Optional[bool] = None,
) -> str:
    """Validate JSON and return it formatted.

    Args:
        input: JSON input to validate.
        format: Pretty-format the JSON output (default). ``false`` prints it on one line.
        compact: Use compact output format.
        sort: Sort object keys.

    Returns:
        ``Valid JSON:`` followed by the re-emitted document.
    """
    result = await operations.validate_json(
        input,
        format=format is None or bool(format),
        compact=bool(compact),
        sort=bool(sort),
    )
    return f"Valid JSON:\n{result}"


@with_tool_metrics
@with_error_handling
async def extract_path(input: str, path: str, raw: Optional[bool] = None) -> str:
    """Extract a value by path.

    Args:
        input: JSON input data.
        path: JSON path to extract, e.g. ``.user.name``, ``.items[0]`` or ``.[]``.
            An empty path returns the whole document.
        raw: Output raw values instead of JSON.

    Returns:
        The extracted value, or ``null`` when nothing matched.
    """
    return await operations.extract_path(input, path, raw=bool(raw))


@with_tool_metrics
@with_error_handling
async def transform_data(input: str, transformation: str, description: Optional[str] = None) -> str:
    """Transform JSON with a jq expression.

    Args:
        input: JSON input data.
        transformation: jq transformation expression; empty leaves the input unchanged.
        description: Optional description of the transformation, echoed as a heading.
    """
    result = await operations.transform_data(input, transformation)
    if description:
        return f"{description}:\n{result}"
    return result


@with_tool_metrics
@with_error_handling
async def filter_data(input: str, condition: str, selector: Optional[str] = None) -> str:
    """Filter an array by a condition.

    Args:
        input: JSON array to filter.
        condition: jq condition evaluated per element, e.g. ``.age > 25`` or ``.status == "active"``.
        selector: What to output for each match (default ``.``).

    Returns:
        One result per matching element, or ``No matches found``.
    """
    return await operations.filter_data(input, condition, selector=selector)

"""High-level jq operations.

Each operation builds its argument vector, runs jq once and classifies the
result: a non-zero exit status accompanied by stderr output raises
:class:`JqExecutionError` prefixed with the operation's category message,
anything else returns stdout (or the category's placeholder when jq printed
nothing).
"""
import asyncio
from typing import Dict, List, Optional, Sequence

from jq_mcp_server.config import get_config
from jq_mcp_server.constants import (
    MSG_APPLY_FILTER,
    MSG_ARRAY,
    MSG_EXTRACT_PATH,
    MSG_FILTER_DATA,
    MSG_MATH,
    MSG_OBJECT,
    MSG_STRING,
    MSG_TRANSFORM,
    MSG_VALIDATE,
    NO_MATCHES,
    NO_OUTPUT,
    NULL_OUTPUT,
)
from jq_mcp_server.core import executor
from jq_mcp_server.core.executor import JqResult
from jq_mcp_server.core.expressions import (
    JqExpression,
    build_apply_filter_args,
    build_array_expression,
    build_extract_path_args,
    build_filter_data_expression,
    build_math_expression,
    build_object_expression,
    build_string_expression,
    build_validate_args,
)
from jq_mcp_server.exceptions import JqExecutionError, ToolInputError
from jq_mcp_server.utils import get_logger

logger = get_logger("jq_mcp_server.core.operations")


def classify_result(result: JqResult, message: str, placeholder: Optional[str] = None) -> str:
    """Turn a raw jq result into output text or a :class:`JqExecutionError`.

    Args:
        result: Output of :func:`executor.execute_jq`.
        message: Category message used as the error prefix.
        placeholder: Returned instead of empty stdout. ``None`` returns stdout as is.
    """
    if result.failed:
        logger.warning(f"{message}: {result.stderr}", emoji_key="jq", exit_code=result.exit_code)
        raise JqExecutionError(f"{message}: {result.stderr}", exit_code=result.exit_code, stderr=result.stderr)
    if placeholder is not None and not result.stdout:
        return placeholder
    return result.stdout


async def _run(args: List[str], input_text: Optional[str]) -> JqResult:
    # Looked up on the module so tests can substitute execute_jq
    return await executor.execute_jq(args, input_text, timeout=get_config().jq.timeout)


async def _run_expression(expression: JqExpression, input_text: str, message: str, placeholder: str) -> str:
    result = await _run(expression.to_args(), input_text)
    return classify_result(result, message, placeholder)


async def apply_filter(
    filter: str,
    input_text: str,
    compact: bool = False,
    raw: bool = False,
    sort: bool = False,
    tab: bool = False,
    variables: Optional[Dict[str, str]] = None,
) -> str:
    """Run a caller-supplied filter; empty output becomes ``No output``."""
    args = build_apply_filter_args(filter, compact=compact, raw=raw, sort=sort, tab=tab, variables=variables)
    result = await _run(args, input_text)
    return classify_result(result, MSG_APPLY_FILTER, NO_OUTPUT)


async def validate_json(input_text: str, format: bool = True, compact: bool = False, sort: bool = False) -> str:
    """Parse and re-emit ``input_text``; invalid JSON raises with jq's diagnostic."""
    result = await _run(build_validate_args(format=format, compact=compact, sort=sort), input_text)
    return classify_result(result, MSG_VALIDATE)


async def extract_path(input_text: str, path: str, raw: bool = False) -> str:
    result = await _run(build_extract_path_args(path, raw=raw), input_text)
    return classify_result(result, MSG_EXTRACT_PATH, NULL_OUTPUT)


async def transform_data(input_text: str, transformation: str) -> str:
    if transformation is None:
        raise ToolInputError(
            "Transformation expression is required", param_name="transformation", provided_value=transformation
        )
    return await _run_expression(JqExpression(filter=transformation), input_text, MSG_TRANSFORM, NULL_OUTPUT)


async def filter_data(input_text: str, condition: str, selector: Optional[str] = None) -> str:
    """Emit ``selector`` for each array element where ``condition`` holds."""
    expression = build_filter_data_expression(condition, selector)
    return await _run_expression(expression, input_text, MSG_FILTER_DATA, NO_MATCHES)


async def array_operation(
    input_text: str, operation: str, key: Optional[str] = None, depth: Optional[int] = None
) -> str:
    expression = build_array_expression(operation, key=key, depth=depth)
    return await _run_expression(expression, input_text, MSG_ARRAY, NULL_OUTPUT)


async def object_operation(
    input_text: str,
    operation: str,
    key: Optional[str] = None,
    keys: Optional[Sequence[str]] = None,
    merge_with: Optional[str] = None,
) -> str:
    expression = build_object_expression(operation, key=key, keys=keys, merge_with=merge_with)
    return await _run_expression(expression, input_text, MSG_OBJECT, NULL_OUTPUT)


async def string_operation(
    input_text: str,
    operation: str,
    separator: Optional[str] = None,
    search_value: Optional[str] = None,
    replace_value: Optional[str] = None,
) -> str:
    expression = build_string_expression(
        operation, separator=separator, search_value=search_value, replace_value=replace_value
    )
    return await _run_expression(expression, input_text, MSG_STRING, NULL_OUTPUT)


async def math_operation(input_text: str, operation: str, operand: Optional[float] = None) -> str:
    expression = build_math_expression(operation, operand=operand)
    return await _run_expression(expression, input_text, MSG_MATH, NULL_OUTPUT)


async def jq_info() -> str:
    """Version string plus the beginning of ``jq --help``.

    Both probes run concurrently.
    """
    cfg = get_config().jq
    version_result, help_result = await asyncio.gather(
        executor.execute_jq(["--version"], timeout=cfg.probe_timeout),
        executor.execute_jq(["--help"], timeout=cfg.probe_timeout),
    )
    version = classify_result(version_result, "Error getting jq version")
    help_excerpt = help_result.stdout[: cfg.help_excerpt_length]
    return f"jq Version:\n{version}\n\nBasic Help:\n{help_excerpt}..."

"""Builds jq programs and argument lists from typed tool parameters.

Everything here is pure: no process is spawned and no I/O happens. Missing
or invalid parameters raise :class:`ToolInputError` so that a bad request
never reaches jq.

Literal values supplied by callers (keys, separators, search strings,
documents to merge, numeric operands) are never spliced into the program
text. They are bound as jq variables with ``--arg`` (strings) or
``--argjson`` (JSON values) and referenced as ``$name`` from fixed
templates. Only parameters that are jq expressions by contract (a filter,
a path, a condition, a selector) end up inside the program.
"""
import json
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from jq_mcp_server.constants import (
    ARRAY_OPERATIONS,
    MATH_OPERATIONS,
    OBJECT_OPERATIONS,
    OUTPUT_FLAGS,
    STRING_OPERATIONS,
)
from jq_mcp_server.exceptions import ToolInputError

# Key path ("user.name", "tags[0]") bound as a JSON path array
_KEY_PATH = "getpath($path)"

# One dotted segment: an optional field name followed by any number of [N] indexes
_SEGMENT = re.compile(r"^([^\[\]]*)((?:\[-?\d+\])*)$")
_INDEX = re.compile(r"\[(-?\d+)\]")


@dataclass(frozen=True)
class JqExpression:
    """A jq program plus the variables it references."""
    filter: str
    string_args: Tuple[Tuple[str, str], ...] = ()
    json_args: Tuple[Tuple[str, str], ...] = ()

    def to_args(self, flags: Sequence[str] = ()) -> List[str]:
        """Render the jq argument vector: flags, bound variables, then the program."""
        args = list(flags)
        for name, value in self.string_args:
            args.extend(["--arg", name, value])
        for name, value in self.json_args:
            args.extend(["--argjson", name, value])
        args.append(self.filter)
        return args


def _unknown_operation(operation: str, supported: Sequence[str]) -> ToolInputError:
    return ToolInputError(
        f"Unknown operation: {operation}",
        param_name="operation",
        provided_value=operation,
        details={"supported_operations": list(supported)},
    )


def parse_key_path(key: str) -> List[object]:
    """Turn ``user.name`` or ``.tags[0]`` into a jq path array.

    Field names become strings and ``[N]`` indexes become integers. A leading
    ``.`` is optional. Anything else (empty segments, stray brackets) raises
    :class:`ToolInputError` rather than silently addressing ``null``.
    """
    text = key[1:] if key.startswith(".") else key
    path: List[object] = []
    for segment in text.split("."):
        match = _SEGMENT.match(segment)
        if not match or not (match.group(1) or match.group(2)):
            raise ToolInputError(f"Invalid key path: {key}", param_name="key", provided_value=key)
        if match.group(1):
            path.append(match.group(1))
        path.extend(int(index) for index in _INDEX.findall(match.group(2)))
    return path


def _json_number(value: float) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ToolInputError("Operand must be a number", param_name="operand", provided_value=value)
    if not math.isfinite(value):
        raise ToolInputError("Operand must be a finite number", param_name="operand", provided_value=value)
    if isinstance(value, float) and value.is_integer():
        return json.dumps(int(value))
    return json.dumps(value)


def output_flags(
    compact: bool = False,
    raw: bool = False,
    sort: bool = False,
    tab: bool = False,
) -> List[str]:
    """Map the boolean output switches onto jq flags, in a stable order."""
    selected = {"compact": compact, "raw": raw, "sort": sort, "tab": tab}
    return [OUTPUT_FLAGS[name] for name, enabled in selected.items() if enabled]


def build_apply_filter_args(
    filter: str,
    compact: bool = False,
    raw: bool = False,
    sort: bool = False,
    tab: bool = False,
    variables: Optional[Dict[str, str]] = None,
) -> List[str]:
    """Arguments for running a caller-written filter.

    ``variables`` are bound with ``--arg`` and visible to the filter as ``$name``.
    An empty filter is passed through; jq runs it as the identity.
    """
    if filter is None:
        raise ToolInputError("Filter expression is required", param_name="filter", provided_value=filter)
    string_args = tuple((str(name), str(value)) for name, value in (variables or {}).items())
    expression = JqExpression(filter=filter, string_args=string_args)
    return expression.to_args(output_flags(compact=compact, raw=raw, sort=sort, tab=tab))


def build_validate_args(format: bool = True, compact: bool = False, sort: bool = False) -> List[str]:
    """Arguments for re-emitting a document with the identity filter.

    Pretty printing is jq's default; ``compact`` (or ``format=False``) selects
    single-line output.
    """
    flags = output_flags(compact=compact or not format, sort=sort)
    return JqExpression(filter=".").to_args(flags)


def build_extract_path_args(path: str, raw: bool = False) -> List[str]:
    """Arguments for evaluating a path expression such as ``.user.name``.

    An empty path reaches jq unchanged and returns the whole document.
    """
    if path is None:
        raise ToolInputError("Path is required", param_name="path", provided_value=path)
    return JqExpression(filter=path).to_args(output_flags(raw=raw))


def build_filter_data_expression(condition: str, selector: Optional[str] = None) -> JqExpression:
    """Select the array elements matching ``condition`` and project them with ``selector``."""
    if not condition:
        raise ToolInputError("Condition is required", param_name="condition", provided_value=condition)
    selector = selector or "."
    return JqExpression(filter=f"map(select({condition})) | .[] | {selector}")


def build_array_expression(operation: str, key: Optional[str] = None, depth: Optional[int] = None) -> JqExpression:
    """Array operations. ``key`` switches to the ``*_by`` variants, ``depth`` limits flatten."""
    simple = {
        "length": "length",
        "reverse": "reverse",
        "sum": "add",
        "first": "first",
        "last": "last",
    }
    keyed = {
        "sort": ("sort", f"sort_by({_KEY_PATH})"),
        "unique": ("unique", f"unique_by({_KEY_PATH})"),
        "min": ("min", f"min_by({_KEY_PATH})"),
        "max": ("max", f"max_by({_KEY_PATH})"),
        "group_by": ("group_by(.)", f"group_by({_KEY_PATH})"),
    }

    if operation in simple:
        return JqExpression(filter=simple[operation])
    if operation in keyed:
        plain, by_key = keyed[operation]
        if key:
            return JqExpression(filter=by_key, json_args=(("path", json.dumps(parse_key_path(key))),))
        return JqExpression(filter=plain)
    if operation == "flatten":
        if depth is None:
            return JqExpression(filter="flatten")
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ToolInputError("Depth must be a non-negative integer", param_name="depth", provided_value=depth)
        return JqExpression(filter="flatten($depth)", json_args=(("depth", json.dumps(depth)),))
    raise _unknown_operation(operation, ARRAY_OPERATIONS)


def build_object_expression(
    operation: str,
    key: Optional[str] = None,
    keys: Optional[Sequence[str]] = None,
    merge_with: Optional[str] = None,
) -> JqExpression:
    """Object operations; ``has``/``delete`` need ``key``, ``merge`` a JSON document, ``pick`` keys."""
    simple = {
        "keys": "keys",
        "values": ".[]",
        "to_entries": "to_entries",
        "from_entries": "from_entries",
    }
    if operation in simple:
        return JqExpression(filter=simple[operation])

    if operation == "has":
        if not key:
            raise ToolInputError("Key required for has operation", param_name="key", provided_value=key)
        return JqExpression(filter="has($key)", string_args=(("key", key),))

    if operation == "delete":
        if not key:
            raise ToolInputError("Key required for delete operation", param_name="key", provided_value=key)
        return JqExpression(filter="delpaths([$path])", json_args=(("path", json.dumps(parse_key_path(key))),))

    if operation == "merge":
        if not merge_with:
            raise ToolInputError(
                "merge_with object required for merge operation", param_name="merge_with", provided_value=merge_with
            )
        try:
            json.loads(merge_with)
        except ValueError as e:
            raise ToolInputError(
                f"merge_with must be a valid JSON document: {e}", param_name="merge_with", provided_value=merge_with
            ) from e
        return JqExpression(filter=". + $merge", json_args=(("merge", merge_with),))

    if operation == "pick":
        if not keys:
            raise ToolInputError("Keys required for pick operation", param_name="keys", provided_value=keys)
        return JqExpression(
            filter=". as $obj | reduce $keys[] as $k ({}; . + {($k): $obj[$k]})",
            json_args=(("keys", json.dumps([str(k) for k in keys])),),
        )

    raise _unknown_operation(operation, OBJECT_OPERATIONS)


def build_string_expression(
    operation: str,
    separator: Optional[str] = None,
    search_value: Optional[str] = None,
    replace_value: Optional[str] = None,
) -> JqExpression:
    """String operations. Empty strings count as missing for required values."""
    simple = {
        "length": "length",
        "trim": r'. | gsub("^\\s+|\\s+$"; "")',
        "upper": "ascii_upcase",
        "lower": "ascii_downcase",
    }
    if operation in simple:
        return JqExpression(filter=simple[operation])

    if operation in ("split", "join"):
        if not separator:
            raise ToolInputError(
                f"Separator required for {operation} operation", param_name="separator", provided_value=separator
            )
        return JqExpression(filter=f"{operation}($separator)", string_args=(("separator", separator),))

    if operation in ("contains", "startswith", "endswith"):
        if not search_value:
            raise ToolInputError(
                f"Search value required for {operation} operation",
                param_name="search_value",
                provided_value=search_value,
            )
        return JqExpression(filter=f"{operation}($search)", string_args=(("search", search_value),))

    if operation == "replace":
        if not search_value or not replace_value:
            missing = "search_value" if not search_value else "replace_value"
            raise ToolInputError(
                "Both search and replace values required for replace operation",
                param_name=missing,
                provided_value=search_value if not search_value else replace_value,
            )
        # search_value is a regular expression, as with jq's gsub
        return JqExpression(
            filter="gsub($search; $replacement)",
            string_args=(("search", search_value), ("replacement", replace_value)),
        )

    raise _unknown_operation(operation, STRING_OPERATIONS)


def build_math_expression(operation: str, operand: Optional[float] = None) -> JqExpression:
    """Math operations.

    ``add`` and ``multiply`` without an operand fold over an array of numbers.
    Note that the operand-less ``multiply`` folds with addition
    (``map(.) | add``), which clients already rely on.
    """
    unary = {
        "floor": "floor",
        "ceil": "ceil",
        "round": "round",
        "abs": "if . < 0 then 0 - . else . end",
        "sqrt": "sqrt",
    }
    binary = {
        "add": ". + $operand",
        "multiply": ". * $operand",
        "subtract": ". - $operand",
        "divide": ". / $operand",
        "modulo": ". % $operand",
    }
    folds = {
        "add": "add",
        "multiply": "map(.) | add",
    }

    if operation in unary:
        return JqExpression(filter=unary[operation])
    if operation in binary:
        if operand is None:
            if operation in folds:
                return JqExpression(filter=folds[operation])
            raise ToolInputError(
                f"Operand required for {operation} operation", param_name="operand", provided_value=operand
            )
        return JqExpression(filter=binary[operation], json_args=(("operand", _json_number(operand)),))
    raise _unknown_operation(operation, MATH_OPERATIONS)

"""Unit tests for the jq expression builders."""
import json

import pytest

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
    output_flags,
    parse_key_path,
)
from jq_mcp_server.exceptions import ToolInputError
from jq_mcp_server.utils import get_logger

logger = get_logger("test.unit.expressions")


class TestJqExpression:
    """Tests for rendering argument vectors."""

    def test_to_args_order(self):
        """Flags come first, then --arg, then --argjson, then the program."""
        logger.info("Testing argument order", emoji_key="test")
        expression = JqExpression(
            filter="$a + ($b | tostring)",
            string_args=(("a", "x"),),
            json_args=(("b", "1"),),
        )
        assert expression.to_args(["--compact-output"]) == [
            "--compact-output", "--arg", "a", "x", "--argjson", "b", "1", "$a + ($b | tostring)",
        ]

    def test_output_flags(self):
        assert output_flags() == []
        assert output_flags(compact=True, raw=True, sort=True, tab=True) == [
            "--compact-output", "--raw-output", "--sort-keys", "--tab",
        ]

    def test_apply_filter_variables(self):
        args = build_apply_filter_args(".[] | select(.name == $who)", raw=True, variables={"who": "Alice"})
        assert args == ["--raw-output", "--arg", "who", "Alice", ".[] | select(.name == $who)"]

    def test_empty_programs_pass_through(self):
        """jq runs an empty program as the identity."""
        assert build_apply_filter_args("") == [""]
        assert build_extract_path_args("") == [""]

    def test_apply_filter_requires_filter(self):
        with pytest.raises(ToolInputError) as exc_info:
            build_apply_filter_args(None)
        assert exc_info.value.param_name == "filter"

    def test_validate_args(self):
        assert build_validate_args() == ["."]
        assert build_validate_args(compact=True, sort=True) == ["--compact-output", "--sort-keys", "."]
        assert build_validate_args(format=False) == ["--compact-output", "."]

    def test_extract_path_args(self):
        assert build_extract_path_args(".user.name", raw=True) == ["--raw-output", ".user.name"]

    def test_filter_data_expression(self):
        assert build_filter_data_expression(".age > 25").filter == "map(select(.age > 25)) | .[] | ."
        assert build_filter_data_expression(".active", ".name").filter == "map(select(.active)) | .[] | .name"


class TestArrayExpressions:
    """Tests for array operation templates."""

    @pytest.mark.parametrize("operation,expected", [
        ("length", "length"),
        ("reverse", "reverse"),
        ("sort", "sort"),
        ("unique", "unique"),
        ("flatten", "flatten"),
        ("sum", "add"),
        ("min", "min"),
        ("max", "max"),
        ("group_by", "group_by(.)"),
        ("first", "first"),
        ("last", "last"),
    ])
    def test_plain_templates(self, operation, expected):
        assert build_array_expression(operation).filter == expected

    def test_key_is_bound_not_spliced(self):
        """A hostile key ends up in a variable, never in the program."""
        logger.info("Testing keyed array templates", emoji_key="test")
        key = 'name) | error("boom"'
        expression = build_array_expression("sort", key=key)
        assert key not in expression.filter
        assert expression.filter == "sort_by(getpath($path))"
        assert json.loads(dict(expression.json_args)["path"]) == [key]

    def test_leading_dot_is_accepted(self):
        expression = build_array_expression("group_by", key=".department")
        assert json.loads(dict(expression.json_args)["path"]) == ["department"]

    @pytest.mark.parametrize("key,path", [
        ("user.age", ["user", "age"]),
        ("t[0]", ["t", 0]),
        (".items[1][-1].id", ["items", 1, -1, "id"]),
        ("[2]", [2]),
        ("t.0", ["t", "0"]),
    ])
    def test_key_paths(self, key, path):
        assert parse_key_path(key) == path

    @pytest.mark.parametrize("key", ["a..b", "t[x]", "t[0", "a]", ".", "a."])
    def test_malformed_key_rejected(self, key):
        with pytest.raises(ToolInputError, match="Invalid key path") as exc_info:
            build_array_expression("sort", key=key)
        assert exc_info.value.param_name == "key"

    def test_empty_key_means_plain(self):
        assert build_array_expression("max", key="").filter == "max"

    def test_flatten_depth(self):
        expression = build_array_expression("flatten", depth=0)
        assert expression.filter == "flatten($depth)"
        assert expression.json_args == (("depth", "0"),)

    def test_negative_depth_rejected(self):
        with pytest.raises(ToolInputError) as exc_info:
            build_array_expression("flatten", depth=-1)
        assert exc_info.value.param_name == "depth"

    def test_unknown_operation(self):
        with pytest.raises(ToolInputError, match="Unknown operation: shuffle"):
            build_array_expression("shuffle")


class TestObjectExpressions:
    """Tests for object operation templates."""

    def test_simple_templates(self):
        assert build_object_expression("keys").filter == "keys"
        assert build_object_expression("values").filter == ".[]"
        assert build_object_expression("to_entries").filter == "to_entries"
        assert build_object_expression("from_entries").filter == "from_entries"

    @pytest.mark.parametrize("operation", ["has", "delete"])
    def test_key_required(self, operation):
        with pytest.raises(ToolInputError, match=f"Key required for {operation} operation") as exc_info:
            build_object_expression(operation)
        assert exc_info.value.param_name == "key"

    def test_has_binds_key(self):
        expression = build_object_expression("has", key='a"b')
        assert expression.filter == "has($key)"
        assert expression.string_args == (("key", 'a"b'),)

    def test_delete_binds_path(self):
        expression = build_object_expression("delete", key="address.lines[0]")
        assert expression.filter == "delpaths([$path])"
        assert json.loads(dict(expression.json_args)["path"]) == ["address", "lines", 0]

    def test_merge(self):
        expression = build_object_expression("merge", merge_with='{"b": 2}')
        assert expression.filter == ". + $merge"
        assert expression.json_args == (("merge", '{"b": 2}'),)

    def test_merge_requires_document(self):
        with pytest.raises(ToolInputError, match="merge_with object required"):
            build_object_expression("merge")

    def test_merge_rejects_invalid_json(self):
        with pytest.raises(ToolInputError) as exc_info:
            build_object_expression("merge", merge_with="{b: 2}")
        assert exc_info.value.param_name == "merge_with"

    def test_pick(self):
        expression = build_object_expression("pick", keys=["name", "age"])
        assert json.loads(dict(expression.json_args)["keys"]) == ["name", "age"]

    @pytest.mark.parametrize("keys", [None, []])
    def test_pick_requires_keys(self, keys):
        with pytest.raises(ToolInputError, match="Keys required for pick operation"):
            build_object_expression("pick", keys=keys)

    def test_unknown_operation(self):
        with pytest.raises(ToolInputError, match="Unknown operation: rename"):
            build_object_expression("rename")


class TestStringExpressions:
    """Tests for string operation templates."""

    def test_simple_templates(self):
        assert build_string_expression("upper").filter == "ascii_upcase"
        assert build_string_expression("lower").filter == "ascii_downcase"
        assert build_string_expression("length").filter == "length"
        assert build_string_expression("trim").filter == '. | gsub("^\\\\s+|\\\\s+$"; "")'

    @pytest.mark.parametrize("operation", ["split", "join"])
    def test_separator_required(self, operation):
        with pytest.raises(ToolInputError, match=f"Separator required for {operation} operation"):
            build_string_expression(operation)
        # Empty strings count as missing
        with pytest.raises(ToolInputError):
            build_string_expression(operation, separator="")

    @pytest.mark.parametrize("operation", ["contains", "startswith", "endswith"])
    def test_search_value_required(self, operation):
        with pytest.raises(ToolInputError, match=f"Search value required for {operation} operation") as exc_info:
            build_string_expression(operation)
        assert exc_info.value.param_name == "search_value"

    def test_replace_requires_both(self):
        with pytest.raises(ToolInputError, match="Both search and replace values required") as exc_info:
            build_string_expression("replace", search_value="a")
        assert exc_info.value.param_name == "replace_value"
        with pytest.raises(ToolInputError) as exc_info:
            build_string_expression("replace", replace_value="b")
        assert exc_info.value.param_name == "search_value"

    def test_replace_binds_values(self):
        expression = build_string_expression("replace", search_value="World", replace_value='"; halt')
        assert expression.filter == "gsub($search; $replacement)"
        assert dict(expression.string_args) == {"search": "World", "replacement": '"; halt'}

    def test_split_binds_separator(self):
        expression = build_string_expression("split", separator=",")
        assert expression.to_args() == ["--arg", "separator", ",", "split($separator)"]


class TestMathExpressions:
    """Tests for math operation templates."""

    def test_fold_without_operand(self):
        """add sums; multiply without operand also sums (map(.) | add)."""
        assert build_math_expression("add").filter == "add"
        assert build_math_expression("multiply").filter == "map(.) | add"

    def test_binary_with_operand(self):
        expression = build_math_expression("multiply", operand=7)
        assert expression.filter == ". * $operand"
        assert expression.json_args == (("operand", "7"),)

    def test_zero_operand_is_present(self):
        assert build_math_expression("add", operand=0).filter == ". + $operand"

    def test_integral_float_operand(self):
        assert build_math_expression("divide", operand=3.0).json_args == (("operand", "3"),)
        assert build_math_expression("divide", operand=2.5).json_args == (("operand", "2.5"),)

    @pytest.mark.parametrize("operation", ["subtract", "divide", "modulo"])
    def test_operand_required(self, operation):
        with pytest.raises(ToolInputError, match=f"Operand required for {operation} operation"):
            build_math_expression(operation)

    @pytest.mark.parametrize("operation", ["floor", "ceil", "round", "abs", "sqrt"])
    def test_unary_ignores_operand(self, operation):
        assert build_math_expression(operation, operand=4) == build_math_expression(operation)

    def test_non_finite_operand_rejected(self):
        with pytest.raises(ToolInputError, match="finite"):
            build_math_expression("add", operand=float("inf"))

    def test_unknown_operation(self):
        with pytest.raises(ToolInputError, match="Unknown operation: pow"):
            build_math_expression("pow")

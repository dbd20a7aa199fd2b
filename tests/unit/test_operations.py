"""Unit tests for result classification, with execute_jq replaced by a stub."""
import pytest

from jq_mcp_server.core import executor, operations
from jq_mcp_server.core.executor import JqResult
from jq_mcp_server.exceptions import JqExecutionError, ToolInputError
from jq_mcp_server.utils import get_logger

logger = get_logger("test.unit.operations")


@pytest.fixture
def stub_jq(monkeypatch):
    """Replace execute_jq; tests set ``state["result"]`` and inspect ``state["calls"]``."""
    state = {"result": JqResult("", "", 0), "calls": []}

    async def fake_execute_jq(args, input_text=None, *, timeout=None, jq_binary=None):
        state["calls"].append({"args": list(args), "input": input_text, "timeout": timeout})
        result = state["result"]
        return result(args) if callable(result) else result

    monkeypatch.setattr(executor, "execute_jq", fake_execute_jq)
    return state


class TestClassification:
    """Tests for classify_result."""

    def test_failure_message_and_details(self):
        logger.info("Testing failure classification", emoji_key="test")
        result = JqResult("", "jq: error: x is not defined", 3)
        with pytest.raises(JqExecutionError) as exc_info:
            operations.classify_result(result, "Error executing jq", "No output")
        error = exc_info.value
        assert error.message == "Error executing jq: jq: error: x is not defined"
        assert error.exit_code == 3
        assert error.stderr == "jq: error: x is not defined"
        assert error.to_dict()["error_code"] == "JQ_ERROR"

    def test_non_zero_exit_without_stderr_is_success(self):
        assert operations.classify_result(JqResult("", "", 1), "Error executing jq", "No output") == "No output"

    def test_placeholder_only_when_empty(self):
        assert operations.classify_result(JqResult("42", "", 0), "x", "null") == "42"
        assert operations.classify_result(JqResult("", "", 0), "x", "null") == "null"

    def test_no_placeholder_returns_stdout(self):
        assert operations.classify_result(JqResult("", "", 0), "Invalid JSON") == ""


class TestOperationsWithStub:
    """Tests for argument construction and placeholders per operation."""

    async def test_apply_filter(self, stub_jq):
        output = await operations.apply_filter(".x", '{"y": 1}', compact=True, variables={"a": "b"})
        assert output == "No output"
        assert stub_jq["calls"][0]["args"] == ["--compact-output", "--arg", "a", "b", ".x"]
        assert stub_jq["calls"][0]["input"] == '{"y": 1}'

    async def test_configured_timeout_is_passed(self, stub_jq, isolated_config):
        isolated_config.jq.timeout = 2.5
        await operations.extract_path("{}", ".a")
        assert stub_jq["calls"][0]["timeout"] == 2.5

    @pytest.mark.parametrize("call,expected", [
        (lambda: operations.extract_path("{}", ".missing"), "null"),
        (lambda: operations.transform_data("{}", "empty"), "null"),
        (lambda: operations.filter_data("[]", ".a > 1"), "No matches found"),
        (lambda: operations.array_operation("[]", "first"), "null"),
        (lambda: operations.object_operation("{}", "keys"), "null"),
        (lambda: operations.string_operation('""', "upper"), "null"),
        (lambda: operations.math_operation("[]", "add"), "null"),
    ])
    async def test_placeholders(self, stub_jq, call, expected):
        assert await call() == expected

    @pytest.mark.parametrize("call,prefix", [
        (lambda: operations.apply_filter(".", "x"), "Error executing jq"),
        (lambda: operations.validate_json("x"), "Invalid JSON"),
        (lambda: operations.extract_path("x", "."), "Error extracting path"),
        (lambda: operations.transform_data("x", "."), "Error in transformation"),
        (lambda: operations.filter_data("x", "true"), "Error filtering data"),
        (lambda: operations.array_operation("x", "length"), "Error in array operation"),
        (lambda: operations.object_operation("x", "keys"), "Error in object operation"),
        (lambda: operations.string_operation("x", "length"), "Error in string operation"),
        (lambda: operations.math_operation("x", "floor"), "Error in math operation"),
    ])
    async def test_failure_prefixes(self, stub_jq, call, prefix):
        stub_jq["result"] = JqResult("", "jq: error (at <stdin>:1): boom", 5)
        with pytest.raises(JqExecutionError, match=f"^{prefix}: jq: error"):
            await call()

    async def test_empty_transformation_reaches_jq(self, stub_jq):
        stub_jq["result"] = JqResult('{"a":1}', "", 0)
        assert await operations.transform_data('{"a":1}', "") == '{"a":1}'
        assert stub_jq["calls"][0]["args"] == [""]

    async def test_validate_json_returns_stdout_as_is(self, stub_jq):
        stub_jq["result"] = JqResult('{"a":1}', "", 0)
        assert await operations.validate_json('{"a": 1}', compact=True) == '{"a":1}'
        assert stub_jq["calls"][0]["args"] == ["--compact-output", "."]

    async def test_jq_info(self, stub_jq, isolated_config):
        isolated_config.jq.help_excerpt_length = 5
        stub_jq["result"] = lambda args: JqResult("jq-1.7.1" if args == ["--version"] else "Usage: jq", "", 0)

        info = await operations.jq_info()

        assert info == "jq Version:\njq-1.7.1\n\nBasic Help:\nUsage..."
        assert sorted(call["args"][0] for call in stub_jq["calls"]) == ["--help", "--version"]


class TestValidationBeforeSpawn:
    """Missing required parameters never reach jq."""

    @pytest.mark.parametrize("call,param", [
        (lambda: operations.object_operation("{}", "has"), "key"),
        (lambda: operations.object_operation("{}", "delete"), "key"),
        (lambda: operations.object_operation("{}", "merge"), "merge_with"),
        (lambda: operations.object_operation("{}", "pick", keys=[]), "keys"),
        (lambda: operations.string_operation('"a"', "split"), "separator"),
        (lambda: operations.string_operation('"a"', "join"), "separator"),
        (lambda: operations.string_operation('"a"', "contains"), "search_value"),
        (lambda: operations.string_operation('"a"', "replace", search_value="a"), "replace_value"),
        (lambda: operations.math_operation("1", "subtract"), "operand"),
        (lambda: operations.math_operation("1", "divide"), "operand"),
        (lambda: operations.math_operation("1", "modulo"), "operand"),
        (lambda: operations.array_operation("[]", "shuffle"), "operation"),
        (lambda: operations.filter_data("[]", ""), "condition"),
    ])
    async def test_no_spawn(self, stub_jq, call, param):
        with pytest.raises(ToolInputError) as exc_info:
            await call()
        assert exc_info.value.param_name == param
        assert stub_jq["calls"] == []

"""Tests for ContextAnalyzer: tool calls and free text into TriggerContexts."""

from __future__ import annotations

import pytest

from tether.matching.context import ContextAnalyzer
from tether.models.config import ContextRule
from tether.models.trigger import UNKNOWN_CONTEXT


@pytest.fixture
def analyzer() -> ContextAnalyzer:
    return ContextAnalyzer()


class TestAnalyzeToolCall:
    """ContextAnalyzer.analyze_tool_call."""

    def test_mines_method_name_and_string_parameters(self, analyzer):
        context = analyzer.analyze_tool_call(
            "tools/write_file",
            {"file_path": "tests/test_user.py", "content": "def test_login(): pass"},
            session_id="s1",
        )
        assert context.keywords[:2] == ("write", "file")
        assert "user" in context.keywords
        assert "login" in context.keywords
        assert context.file_path == "tests/test_user.py"
        assert context.context_type == "testing"
        assert context.session_id == "s1"
        assert context.metadata == {"method": "tools/write_file"}

    def test_keywords_are_unique(self, analyzer):
        context = analyzer.analyze_tool_call("edit", {"a": "parser parser", "b": "parser"})
        assert context.keywords.count("parser") == 1

    def test_short_fragments_are_dropped(self, analyzer):
        context = analyzer.analyze_tool_call("read", {"path": "src/io/db.py"})
        assert "py" not in context.keywords
        assert "io" not in context.keywords
        assert "src" in context.keywords

    def test_session_values_are_ignored(self, analyzer):
        context = analyzer.analyze_tool_call(
            "search",
            {"session_id": "abc123", "note": "session bookkeeping", "query": "refactor module"},
        )
        assert "abc123" not in context.keywords
        assert "bookkeeping" not in context.keywords
        assert "refactor" in context.keywords
        assert context.context_type == "refactoring"

    def test_first_path_like_value_becomes_file_path(self, analyzer):
        context = analyzer.analyze_tool_call("open", {"target": "src/domain/order.py"})
        assert context.file_path == "src/domain/order.py"
        assert context.context_type == "architecture"

    def test_nested_path_parameter(self, analyzer):
        context = analyzer.analyze_tool_call("apply", {"edit": {"path": "lib/cache.py"}})
        assert context.file_path == "lib/cache.py"

    def test_text_with_spaces_is_not_a_path(self, analyzer):
        context = analyzer.analyze_tool_call("note", {"text": "see the docs/ folder later"})
        assert context.file_path is None

    def test_list_parameters_are_mined(self, analyzer):
        context = analyzer.analyze_tool_call("batch", ["cleanup imports", {"x": "rename symbol"}])
        assert "cleanup" in context.keywords
        assert "rename" in context.keywords

    def test_empty_call(self, analyzer):
        context = analyzer.analyze_tool_call("", None)
        assert context.keywords == ()
        assert context.file_path is None
        assert context.context_type == UNKNOWN_CONTEXT


class TestAnalyzeUserInput:
    """ContextAnalyzer.analyze_user_input."""

    def test_free_text(self, analyzer):
        context = analyzer.analyze_user_input("Please refactor the payment service", "s2")
        assert "refactor" in context.keywords
        assert "payment" in context.keywords
        assert context.context_type == "refactoring"
        assert context.session_id == "s2"
        assert context.file_path is None

    def test_blank_text(self, analyzer):
        context = analyzer.analyze_user_input("   ")
        assert context.keywords == ()
        assert context.context_type == UNKNOWN_CONTEXT


class TestDetectContextType:
    """Ordered rule table: first match wins."""

    @pytest.mark.parametrize(
        "keywords,expected",
        [
            (["unit", "tests", "writing"], "testing"),
            (["pytest"], "testing"),
            (["restructuring", "module"], "refactoring"),
            (["hexagonal", "ports"], "architecture"),
            (["dependencies"], "architecture"),
            (["deploy", "kubernetes"], UNKNOWN_CONTEXT),
            ([], UNKNOWN_CONTEXT),
        ],
    )
    def test_keyword_rules(self, analyzer, keywords, expected):
        assert analyzer.detect_context_type(keywords) == expected

    def test_earlier_rule_wins(self, analyzer):
        # testing is checked before refactoring
        assert analyzer.detect_context_type(["refactor", "test"]) == "testing"

    @pytest.mark.parametrize(
        "path",
        ["src/tests/helpers.py", "tests/conftest.py", "pkg/test_api.py", "web/button.test.tsx", "C:\\repo\\tests\\x.py"],
    )
    def test_path_rules(self, analyzer, path):
        assert analyzer.detect_context_type(["hello"], path) == "testing"

    def test_custom_rules_replace_defaults(self):
        analyzer = ContextAnalyzer(rules=[ContextRule(context_type="debugging", keywords=["debug", "trace"])])
        assert analyzer.detect_context_type(["debugger"]) == "debugging"
        assert analyzer.detect_context_type(["test"]) == UNKNOWN_CONTEXT
        assert analyzer.rules[0].context_type == "debugging"

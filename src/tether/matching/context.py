"""ContextAnalyzer -- turn a raw interaction into a TriggerContext.

Two entry points:

- ``analyze_tool_call``: a tool invocation (method name + parameters).
  String parameters are mined for keywords and the first path-like
  value becomes the context's file path. Values mentioning "session"
  are bookkeeping and ignored.
- ``analyze_user_input``: free text.

The context type is detected with an ordered rule table (first match
wins). The default table recognizes testing, refactoring and
architecture work; anything else is "unknown". Extra categories are
added through configuration, not code.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from tether.matching.keywords import KeywordMatcher
from tether.models.config import DEFAULT_CONTEXT_RULES, ContextRule
from tether.models.trigger import UNKNOWN_CONTEXT, TriggerContext

logger = logging.getLogger(__name__)

# Parameter text is split on path/identifier separators; short fragments
# (file extensions, single letters) carry no signal.
_SEPARATORS = re.compile(r"[_./\\-]+")
_MIN_PARAMETER_WORD = 3
_PATH_KEYS = ("file_path", "filepath", "path", "filename", "file")
_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,8}$")


def _looks_like_path(value: str) -> bool:
    if not value or any(ch.isspace() for ch in value.strip()):
        return False
    return "/" in value or "\\" in value or bool(_EXTENSION.search(value))


class ContextAnalyzer:
    """Builds TriggerContexts from tool calls and free text."""

    def __init__(
        self,
        matcher: KeywordMatcher | None = None,
        rules: Sequence[ContextRule] | None = None,
    ) -> None:
        self._matcher = matcher or KeywordMatcher()
        self._rules: tuple[ContextRule, ...] = tuple(
            DEFAULT_CONTEXT_RULES if rules is None else rules
        )

    @property
    def rules(self) -> tuple[ContextRule, ...]:
        return self._rules

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def analyze_tool_call(
        self,
        method_name: str,
        parameters: Any = None,
        session_id: str | None = None,
    ) -> TriggerContext:
        """Normalize a tool invocation."""
        keywords: list[str] = []
        method_word = (method_name or "").rsplit("/", 1)[-1]
        self._extend_unique(keywords, self._parameter_keywords(method_word))

        file_path = self._find_file_path(parameters)
        for value in self._iter_strings(parameters):
            self._extend_unique(keywords, self._parameter_keywords(value))

        context_type = self.detect_context_type(keywords, file_path)
        logger.debug(
            "Analyzed tool call %s: %d keywords, type=%s, file=%s",
            method_name,
            len(keywords),
            context_type,
            file_path,
        )
        return TriggerContext(
            keywords=tuple(keywords),
            file_path=file_path,
            context_type=context_type,
            session_id=session_id,
            metadata={"method": method_name},
        )

    def analyze_user_input(self, text: str | None, session_id: str | None = None) -> TriggerContext:
        """Normalize free text typed by the user."""
        keywords = self._matcher.extract_keywords(text)
        context_type = self.detect_context_type(keywords)
        return TriggerContext(
            keywords=tuple(keywords),
            context_type=context_type,
            session_id=session_id,
            metadata={"source": "user_input"},
        )

    # ------------------------------------------------------------------
    # Context type detection
    # ------------------------------------------------------------------

    def detect_context_type(self, keywords: Iterable[str], file_path: str | None = None) -> str:
        """First rule whose keywords or path patterns match wins."""
        lowered = [k.lower() for k in keywords or () if k]
        path = file_path.replace("\\", "/").lower() if file_path else None

        for rule in self._rules:
            if any(k.startswith(prefix) for k in lowered for prefix in rule.keywords):
                return rule.context_type
            if path and any(fnmatch.fnmatchcase(path, p) for p in rule.path_patterns):
                return rule.context_type
        return UNKNOWN_CONTEXT

    # ------------------------------------------------------------------
    # Parameter mining
    # ------------------------------------------------------------------

    def _parameter_keywords(self, value: str) -> list[str]:
        text = _SEPARATORS.sub(" ", value)
        return [
            k for k in self._matcher.extract_keywords(text)
            if len(k) >= _MIN_PARAMETER_WORD
        ]

    @staticmethod
    def _extend_unique(target: list[str], values: Iterable[str]) -> None:
        for value in values:
            if value not in target:
                target.append(value)

    def _iter_strings(self, value: Any) -> Iterator[str]:
        """Yield every string inside *value*, skipping session bookkeeping."""
        if isinstance(value, str):
            if "session" not in value.lower():
                yield value
        elif isinstance(value, Mapping):
            for key, item in value.items():
                if isinstance(key, str) and "session" in key.lower():
                    continue
                yield from self._iter_strings(item)
        elif isinstance(value, (list, tuple)):
            for item in value:
                yield from self._iter_strings(item)

    def _find_file_path(self, parameters: Any) -> str | None:
        if isinstance(parameters, Mapping):
            for key in _PATH_KEYS:
                candidate = parameters.get(key)
                if isinstance(candidate, str) and candidate.strip():
                    return candidate.strip()
            for item in parameters.values():
                if isinstance(item, Mapping):
                    nested = self._find_file_path(item)
                    if nested:
                        return nested
        for value in self._iter_strings(parameters):
            if _looks_like_path(value):
                return value.strip()
        return None

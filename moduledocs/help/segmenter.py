"""
Example segmenter - split an example body into code and remarks.

Help examples mix the command being demonstrated with prose explaining
it. Classification runs an ordered list of strategies; each either
returns a definite split or None ("no opinion"), the first definite
result wins:

1. PromptPriorityStrategy: a ``PS>`` / ``PS `` / ``C:\\`` prompt is present,
   statement lines and their continuations are code, everything else is
   remarks
2. TrailingNarrativeStrategy: opt-in, splits prose trailing after the
   last complete statement
3. ConservativeFallbackStrategy: the whole block is code
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


# ============================================================
# Constants
# ============================================================

MODE_EMPTY = "empty"
MODE_PROMPT = "prompt"
MODE_TRAILING_NARRATIVE = "trailing-narrative"
MODE_ALL_CODE = "all-code"

DRIVE_PATH_PATTERN = re.compile(r'^[A-Za-z]:\\')

VERB_NOUN_PATTERN = re.compile(r'^[A-Za-z]+-[A-Za-z0-9]+(\s|$)')

# Line prefixes that mark code once a prompt is known to be present
CODE_PREFIXES: tuple[str, ...] = (
    "#", "$", "@{", "@(", "@'", '@"', "'@", '"@',
    "param(", "{", "}", ")", "|", "[",
)

# Block keywords, matched case-insensitively at line start
CODE_KEYWORDS = re.compile(
    r'^(function|filter)\s|^(if|elseif|foreach|for|while|switch|catch)\s*\(|^(try|finally|else|do)\s*(\{|$)',
    re.IGNORECASE,
)

ASSIGNMENT_PATTERN = re.compile(r'^\$?[\w:.\[\]]+\s*[-+*/]?=\s*\S|\s=\s')

FLAG_PATTERN = re.compile(r'(^|\s)-[A-Za-z]')

CLOSING_PREFIXES: tuple[str, ...] = ("}", ")", "'@", '"@')

CONTINUATION_SUFFIXES: tuple[str, ...] = ("`", "|")


# ============================================================
# Line predicates
# ============================================================

def is_prompt_line(line: str) -> bool:
    """Whether a line starts with an interactive prompt or a drive path."""
    text = line.lstrip()
    return text.startswith("PS>") or text.startswith("PS ") or bool(DRIVE_PATH_PATTERN.match(text))


def looks_like_code(line: str) -> bool:
    """
    Whether a line carries a prompt, path, comment or code-construct marker.

    Blank lines never look like code.
    """
    text = line.lstrip()
    if not text:
        return False
    if is_prompt_line(text):
        return True
    if text.startswith(CODE_PREFIXES):
        return True
    if CODE_KEYWORDS.match(text):
        return True
    return bool(VERB_NOUN_PATTERN.match(text))


def looks_like_statement(line: str) -> bool:
    """Broader test used to find the end of code: also assignments and flag tokens."""
    text = line.strip()
    if not text:
        return False
    if looks_like_code(text):
        return True
    if text.endswith("`"):
        return True
    return bool(ASSIGNMENT_PATTERN.search(text) or FLAG_PATTERN.search(text))


def is_closing_line(line: str) -> bool:
    return line.lstrip().startswith(CLOSING_PREFIXES)


# ============================================================
# Depth tracking
# ============================================================

@dataclass
class _Depth:
    curly: int = 0
    paren: int = 0
    quote: Optional[str] = None
    here_string: Optional[str] = None

    @property
    def balanced(self) -> bool:
        return not (self.curly or self.paren or self.quote or self.here_string)

    def feed(self, line: str) -> None:
        """Advance the counters past one line."""
        if self.here_string:
            if line.lstrip().startswith(self.here_string + "@"):
                self.here_string = None
            return

        i = 0
        while i < len(line):
            ch = line[i]
            if self.quote:
                if ch == "`" and self.quote == '"':
                    i += 1
                elif ch == self.quote:
                    self.quote = None
            elif ch == "#":
                break
            elif ch == "@" and line[i + 1:i + 2] in ('"', "'") and not line[i + 2:].strip():
                self.here_string = line[i + 1]
                break
            elif ch in ('"', "'"):
                self.quote = ch
            elif ch == "{":
                self.curly += 1
            elif ch == "}":
                self.curly = max(0, self.curly - 1)
            elif ch == "(":
                self.paren += 1
            elif ch == ")":
                self.paren = max(0, self.paren - 1)
            i += 1


# ============================================================
# Strategies
# ============================================================

@dataclass(frozen=True)
class SegmentedExample:
    """Code and remarks of one example, plus the rule that produced them."""
    code: str
    remarks: str
    mode: str


class SegmentStrategy(ABC):
    """Base class for classification strategies."""

    @property
    @abstractmethod
    def mode(self) -> str:
        """Diagnostic mode reported when this strategy decides."""
        pass

    @abstractmethod
    def segment(self, lines: list[str], allow_trailing_narrative: bool) -> Optional[SegmentedExample]:
        """
        Classify normalized lines.

        Returns None if this strategy has no opinion.
        """
        pass


class PromptPriorityStrategy(SegmentStrategy):
    """
    Prompt present: statement lines are code, other non-blank lines are remarks.

    A line also stays in code while the previous code line ends with a
    backtick or pipe, or while a brace, parenthesis, quote or here-string
    opened by earlier code is still open.
    """

    @property
    def mode(self) -> str:
        return MODE_PROMPT

    def segment(self, lines: list[str], allow_trailing_narrative: bool) -> Optional[SegmentedExample]:
        if not any(is_prompt_line(line) for line in lines):
            return None

        code: list[str] = []
        remarks: list[str] = []
        depth = _Depth()
        continued = False
        for line in lines:
            if not line.strip():
                continue
            if continued or not depth.balanced or looks_like_statement(line):
                code.append(line)
                depth.feed(line)
                continued = line.rstrip().endswith(CONTINUATION_SUFFIXES)
            else:
                remarks.append(line)
        return SegmentedExample("\n".join(code), "\n".join(remarks), self.mode)


class TrailingNarrativeStrategy(SegmentStrategy):
    """
    Move prose that trails the last complete statement into remarks.

    Candidate boundaries are code-looking or closing lines; a boundary is
    rejected while a brace, parenthesis, quote or here-string is still open.
    """

    @property
    def mode(self) -> str:
        return MODE_TRAILING_NARRATIVE

    def segment(self, lines: list[str], allow_trailing_narrative: bool) -> Optional[SegmentedExample]:
        if not allow_trailing_narrative:
            return None

        last = _last_non_blank(lines)
        if last is None:
            return None
        if looks_like_statement(lines[last]) or is_closing_line(lines[last]):
            return None

        depth = _Depth()
        balanced_after: list[bool] = []
        for line in lines:
            depth.feed(line)
            balanced_after.append(depth.balanced)

        for i in range(last - 1, -1, -1):
            line = lines[i]
            if not (looks_like_statement(line) or is_closing_line(line)):
                continue
            if not balanced_after[i]:
                continue
            code = "\n".join(lines[:i + 1]).strip("\n").rstrip()
            remarks = "\n".join(lines[i + 1:]).strip()
            if not code or not remarks:
                return None
            return SegmentedExample(code, remarks, self.mode)
        return None


class ConservativeFallbackStrategy(SegmentStrategy):
    """The whole block is code."""

    @property
    def mode(self) -> str:
        return MODE_ALL_CODE

    def segment(self, lines: list[str], allow_trailing_narrative: bool) -> Optional[SegmentedExample]:
        return SegmentedExample("\n".join(lines).strip("\n").rstrip(), "", self.mode)


DEFAULT_STRATEGIES: tuple[SegmentStrategy, ...] = (
    PromptPriorityStrategy(),
    TrailingNarrativeStrategy(),
    ConservativeFallbackStrategy(),
)


# ============================================================
# Segmenter
# ============================================================

class ExampleSegmenter:
    """Run the strategies in order; the first definite result wins."""

    def __init__(self, strategies: Optional[Sequence[SegmentStrategy]] = None):
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def classify(self, text: Optional[str], allow_trailing_narrative: bool = False) -> SegmentedExample:
        """
        Split an example body into code and remarks.

        Args:
            text: Raw example body
            allow_trailing_narrative: Enable trailing prose detection

        Returns:
            The split; an all-code split when no strategy decides
        """
        if text is None or not text.strip():
            return SegmentedExample("", "", MODE_EMPTY)

        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        for strategy in self.strategies:
            result = strategy.segment(lines, allow_trailing_narrative)
            if result is not None:
                return result
        return ConservativeFallbackStrategy().segment(lines, allow_trailing_narrative)


def _last_non_blank(lines: list[str]) -> Optional[int]:
    for i in range(len(lines) - 1, -1, -1):
        if lines[i].strip():
            return i
    return None

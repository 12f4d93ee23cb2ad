"""Primitive recognisers over decoded journal text.

Every recogniser either consumes input and returns a value, or leaves the
cursor where it was and returns None (or False). Composite grammars save
`scanner.pos` before trying an alternative and restore it on failure.
"""

import re
from collections.abc import Iterable

# https://en.wikipedia.org/wiki/Newline#Unicode
LINE_TERMINATORS = ("\r\n", "\n", "\r", "\u2028", "\u2029", "\u000b", "\u000c", "\u0085")

_TERMINATOR_RE = re.compile("\r\n|[\n\r\u2028\u2029\u000b\u000c\u0085]")
_REST_OF_LINE_RE = re.compile("[^\n\r\u2028\u2029\u000b\u000c\u0085]*")
_SPACE_OR_TAB_RE = re.compile(r"[ \t]*")
_DIGITS_RE = re.compile(r"[0-9]+")


def decode(data: bytes) -> str:
    """Decode raw journal bytes; invalid UTF-8 is replaced rather than rejected."""
    return data.decode("utf-8", errors="replace")


def count_line_terminators(text: str, start: int = 0, end: int | None = None) -> int:
    """Count line terminators in text[start:end]. CRLF counts once."""
    if end is None:
        end = len(text)
    return len(_TERMINATOR_RE.findall(text, start, end))


class Scanner:
    """A cursor over journal text."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos:self.pos + n]

    def _match(self, pattern: re.Pattern) -> str | None:
        m = pattern.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group()

    # ---- line structure ----

    def end_of_line(self) -> str | None:
        """Consume a single line terminator."""
        return self._match(_TERMINATOR_RE)

    def at_line_end(self) -> bool:
        """True if a terminator or end of input follows, without consuming it."""
        return self.at_end or _TERMINATOR_RE.match(self.text, self.pos) is not None

    def terminating(self) -> bool:
        """Consume a line terminator, or succeed without consuming at end of input."""
        if self.at_end:
            return True
        return self.end_of_line() is not None

    def rest_of_line(self) -> str:
        """Consume everything up to (not including) the next terminator."""
        return self._match(_REST_OF_LINE_RE) or ""

    def line(self) -> str:
        """Consume the rest of the line and its terminator; return the content."""
        content = self.rest_of_line()
        self.terminating()
        return content

    def non_empty_line(self) -> str | None:
        """Like `line`, but fail unless the content has a non-whitespace character."""
        start = self.pos
        content = self.line()
        if not content.strip():
            self.pos = start
            return None
        return content

    def finish_line(self) -> bool:
        """Accept trailing spaces/tabs then a terminator (or end of input)."""
        start = self.pos
        self.space_or_tab()
        if self.terminating():
            return True
        self.pos = start
        return False

    # ---- whitespace ----

    def space_or_tab(self) -> str:
        """Skip zero or more spaces/tabs."""
        return self._match(_SPACE_OR_TAB_RE) or ""

    def space_or_tab1(self) -> bool:
        """Skip one or more spaces/tabs."""
        return bool(self.space_or_tab())

    def whitespace(self) -> bool:
        """Consume a single whitespace character (line terminators included)."""
        c = self.peek()
        if c and c.isspace():
            self.pos += 1
            return True
        return False

    # ---- literals ----

    def literal(self, s: str, ignore_case: bool = True) -> bool:
        candidate = self.text[self.pos:self.pos + len(s)]
        if len(candidate) != len(s):
            return False
        if candidate == s or (ignore_case and candidate.lower() == s.lower()):
            self.pos += len(s)
            return True
        return False

    def one_of(self, words: Iterable[str], ignore_case: bool = True) -> str | None:
        """Match the longest of `words` at the cursor; return the word as given."""
        for word in sorted(words, key=len, reverse=True):
            if self.literal(word, ignore_case):
                return word
        return None

    # ---- numbers ----

    def decimal(self) -> int | None:
        digits = self._match(_DIGITS_RE)
        return int(digits) if digits is not None else None

    def signed_decimal(self) -> int | None:
        """Decimal with an optional leading `+` or `-`."""
        start = self.pos
        sign = 1
        if self.literal("-"):
            sign = -1
        else:
            self.literal("+")
        value = self.decimal()
        if value is None:
            self.pos = start
            return None
        return sign * value

    def digits(self, n: int) -> int | None:
        """Exactly `n` ASCII digits."""
        chunk = self.text[self.pos:self.pos + n]
        if len(chunk) == n and chunk.isascii() and chunk.isdigit():
            self.pos += n
            return int(chunk)
        return None

    def up_to_two_digits(self) -> int | None:
        value = self.digits(2)
        if value is None:
            value = self.digits(1)
        return value

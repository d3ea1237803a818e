r"""
Conch scanner: a cursor-based tokenizer over one immutable input line.

Grammar (one line is one dispatch unit)
    line          := WS* command-name (WS+ argument)* (WS+ option)* WS*
    command-name  := quoted-string | bare-token
    argument      := quoted-string | bare-token
    option        := '-' identifier ('=' WS* (quoted-string | bare-token))?
    quoted-string := '"' any-char-except-'"'* '"'     (no escapes)

    a bare token starting with '-' followed by a letter is option territory,
    not an argument; '-' followed by anything else (e.g. "-5") is plain text.

Atomicity
- Every multi-character attempt runs inside Scanner.checkpoint(). The cursor
  only moves forward when the attempt commits; a failed attempt (returning
  None, or raising) restores the cursor to where the attempt started.
- try_get_option() is atomic as a whole: when the value after '=' cannot be
  scanned, the cursor goes back to before the leading '-', not just to the '='.

Usage
    >>> scanner = Scanner('add "a b" -cc=5 -v')
    >>> scanner.get_command_name()
    'add'
    >>> scanner.skip_whitespace(); scanner.get_string()
    'a b'
    >>> scanner.skip_whitespace(); scanner.try_get_option()
    Option(name='cc', value='5')
"""
from contextlib import contextmanager
from typing import NamedTuple

QUOTE = '"'
OPTION = "-"
ASSIGN = "="


class Option(NamedTuple):
    """
    One scanned option. value is None for the flag-style form ("-verbose").
    """
    name: str
    value: str | None = None

    @property
    def is_flag(self):
        return self.value is None


class Attempt:
    """
    Handle yielded by Scanner.checkpoint(); call commit() to keep the progress.
    """
    __slots__ = ("start", "committed")

    def __init__(self, start):
        self.start = start
        self.committed = False

    def commit(self):
        self.committed = True


class Scanner:
    """
    Tokenizer state: the source line and a cursor within [0, len(source)].

    A scanner is cheap and single-use: the shell builds a fresh one for every
    dispatched line and drops it afterwards.
    """
    __slots__ = ("_source", "_cursor")

    def __init__(self, source, /):
        if not isinstance(source, str):
            raise TypeError("Scanner() argument must be a string")
        self._source = source
        self._cursor = 0

    @property
    def source(self):
        return self._source

    @property
    def cursor(self):
        return self._cursor

    @property
    def is_empty(self):
        return self._cursor >= len(self._source)

    @property
    def current(self):
        """
        The character under the cursor, or "" at the end of the input.
        """
        return self._peek()

    @property
    def remaining(self):
        """
        The unscanned tail of the source (used by intercepted commands).
        """
        return self._source[self._cursor:]

    def _peek(self, offset=0):
        index = self._cursor + offset
        return self._source[index] if index < len(self._source) else ""

    @contextmanager
    def checkpoint(self):
        """
        Run a token-level attempt; rewind the cursor unless it commits.

            with self.checkpoint() as attempt:
                ...                     # move the cursor
                if failed:
                    return None         # cursor restored to attempt.start
                attempt.commit()
                return token
        """
        attempt = Attempt(self._cursor)
        try:
            yield attempt
        finally:
            if not attempt.committed:
                self._cursor = attempt.start

    def skip_whitespace(self):
        while not self.is_empty and self.current.isspace():
            self._cursor += 1

    def _get_run(self):
        # maximal run of non-whitespace characters; None when the run is empty
        with self.checkpoint() as attempt:
            start = self._cursor
            while not self.is_empty and not self.current.isspace():
                self._cursor += 1
            if self._cursor == start:
                return None
            attempt.commit()
            return self._source[start:self._cursor]

    def get_command_name(self):
        if self.current == QUOTE:
            return self._get_quoted()
        return self._get_run()

    def get_bare_token(self):
        return self._get_run()

    def _at_option(self):
        return self.current == OPTION and self._peek(1).isalpha()

    def _get_quoted(self):
        with self.checkpoint() as attempt:
            start = self._cursor + 1
            end = self._source.find(QUOTE, start)
            if end == -1:
                return None
            self._cursor = end + 1
            attempt.commit()
            return self._source[start:end]

    def get_string(self):
        """
        Scan one argument: a quoted string (quotes stripped) or a bare token.

        returns None, with the cursor untouched, at the end of the input, on an
        unterminated quote, or when the next token is an option ('-' + letter).
        """
        if self.is_empty or self._at_option():
            return None
        if self.current == QUOTE:
            return self._get_quoted()
        return self.get_bare_token()

    def _at_assignment(self):
        # lookahead only: never commits
        with self.checkpoint():
            self.skip_whitespace()
            return self.current == ASSIGN

    def try_get_option(self):
        """
        Scan one option: "-name" (flag-style) or "-name=value".

        whitespace is allowed around '='. the option name must start with a
        letter. returns None with the cursor restored to before the '-' when no
        complete option can be scanned.
        """
        if self.current != OPTION:
            return None

        with self.checkpoint() as attempt:
            self._cursor += 1
            start = self._cursor
            while not self.is_empty and not self.current.isspace() and self.current != ASSIGN:
                self._cursor += 1
            name = self._source[start:self._cursor]
            if not name[:1].isalpha():
                return None

            if not self._at_assignment():
                attempt.commit()
                return Option(name)

            self.skip_whitespace()
            self._cursor += 1
            self.skip_whitespace()
            value = self.get_string()
            if value is None:
                return None
            attempt.commit()
            return Option(name, value)

    def __repr__(self):
        return f"{type(self).__name__}(source={self._source!r}, cursor={self._cursor})"


__all__ = (
    "Option",
    "Scanner",
)

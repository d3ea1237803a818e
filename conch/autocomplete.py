"""
Conch autocomplete: cycle through completions of the last word of the input.

How it works
- reset_current_input(text) splits the text at its last whitespace character:
  everything up to and including it is the fixed prefix, the rest is the
  partial word being completed.
- Candidates come from Shell.matching_words(partial): "$name" references for
  a "$..." partial, command names otherwise, both when the partial is empty.
- Candidates are sorted by length (stable, so equal lengths keep the shell's
  order) and the partial word itself is appended when it is not a candidate,
  so cycling always leads back to what the user typed.
- match is fixed_prefix + matches[index]; move_match(+1/-1) cycles with wraparound.

Example
    >>> completion = Autocomplete(shell)
    >>> completion.reset_current_input("he")
    >>> completion.matches
    ['help', 'hello', 'he']
    >>> completion.move_match(1)
    'hello'
"""
from .utils import Unset


class Autocomplete:
    """
    Completion state for one input line.

    Attributes
    - matches: list[str] of candidates (plus the partial word, see above).
    - index: position of the current candidate in matches.
    - partial_word / fixed_prefix: the two halves of the input text.
    """

    def __init__(self, shell, /):
        self._shell = shell
        self.matches = []
        self._index = 0
        self._partial_word = ""
        self._fixed_prefix = ""
        self._matching = False

    @property
    def is_matching(self):
        return self._matching

    @property
    def index(self):
        return self._index

    @property
    def partial_word(self):
        return self._partial_word

    @property
    def fixed_prefix(self):
        return self._fixed_prefix

    @property
    def match(self):
        """
        The full completed text (fixed prefix + current candidate); Unset when not matching.
        """
        if not self._matching:
            return Unset
        return self._fixed_prefix + self.matches[self._index]

    def reset_current_input(self, text, /):
        split = next((index for index in range(len(text) - 1, -1, -1) if text[index].isspace()), -1)
        self._fixed_prefix = text[:split + 1]
        self._partial_word = text[split + 1:]
        self.reset_matches()
        self._index = 0
        self._matching = True

    def reset_matches(self):
        words = list(self._shell.matching_words(self._partial_word))
        self.matches = sorted(words, key=len)
        if self._partial_word not in words:
            self.matches.append(self._partial_word)

    def move_match(self, direction, /):
        """
        Step `direction` candidates forward (negative: backward) with wraparound
        and return the new full match.
        """
        assert self._matching, "move_match() requires reset_current_input() first"
        return self.move_to(self._index + direction)

    def move_to(self, index, /):
        assert self._matching, "move_to() requires reset_current_input() first"
        self._index = index % len(self.matches)
        return self.match

    def listing(self):
        """
        The candidates joined for display on one log line.
        """
        return "    ".join(self.matches)

    def reset(self):
        self._matching = False

    def __repr__(self):
        return f"{type(self).__name__}(matches={self.matches!r}, index={self._index}, matching={self._matching})"


__all__ = (
    "Autocomplete",
)

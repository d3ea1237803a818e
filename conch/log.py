"""
Conch message log: a fixed-capacity ring buffer of severity-tagged messages.

Scope
- Severity: the kinds of messages the shell records (errors, warnings, plain
  output, echoed input, ...).
- Message: one immutable log entry (text, severity, optional trace and fault code).
- RingBuffer: fixed-capacity FIFO store; once full, every add evicts the oldest entry.
- CommandLog: the ring buffer specialized for Message entries, with logging
  shortcuts and rich rendering.

Indexing
- Logical index 0 is always the oldest entry still retained, regardless of
  where it physically sits in the backing list.
- Indexing outside [0, len(buffer)) is a programmer error. The check runs only
  under __debug__ (it disappears with `python -O`), the same way assertions do.

Rendering
- Message.__rich__ returns a styled rich renderable; CommandLog.render(console) prints
  all entries oldest to newest. Colors come from a default style table and can
  be overridden by the host application through a __styles__ mapping in __main__.
  render(colorful=False) strips styles; render(fancy=True) frames faults in panels.
"""
import enum
import io
from collections import defaultdict
from typing import NamedTuple

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


def capture(renderable, /, *, width=100):
    """
    Render a rich renderable (usually a Table) to plain text for the log.

    trailing whitespace of every line is stripped so entries compare cleanly.
    """
    recorder = Console(file=io.StringIO(), width=width, color_system=None, highlight=False)
    with recorder.capture() as captured:
        recorder.print(renderable)
    return "\n".join(line.rstrip() for line in captured.get().rstrip("\n").splitlines())


class Severity(enum.Enum):
    """
    kind of a logged message.

    the context keeps a set of the severities seen since its last reset and
    tests it against its "counts as error" set (see InvocationContext.has_errors).
    """
    ERROR = "error"
    ASSERT = "assert"
    WARNING = "warning"
    MESSAGE = "message"
    EXCEPTION = "exception"
    INPUT = "input"
    SHELL = "shell"


class Message(NamedTuple):
    """
    One log entry.

    Fields
    - text: the message body.
    - severity: Severity of the entry (MESSAGE when omitted).
    - trace: optional traceback text (kept for handler faults).
    - code: optional FaultCode when the entry was produced by a fault.
    - title: optional short fault title shown in the rendered header.
    - hint: optional one-line suggestion rendered under the message.
    """
    text: str
    severity: Severity = Severity.MESSAGE
    trace: str = ""
    code: object = None
    title: str = ""
    hint: str = ""

    def __rich__(self):
        return self.renderable()

    def renderable(self, *, colorful=True, fancy=False):
        """
        Build the rich renderable for this entry.

        - colorful=False drops every style (plain terminal output).
        - fancy=True wraps fault entries in a titled Panel.
        - the fault header reads "[ <prog> — <code> | <Title> ]" when the host
          sets __prog__ in __main__, "[ <code> | <Title> ]" otherwise.
        """
        main = __import__("__main__")

        styles = defaultdict(str, {
            "error": "bold #FF4DA6",
            "assert": "bold #FF4DA6",
            "exception": "#FF4DA6",
            "warning": "#FFB400",
            "message": "#C8C8D0",
            "input": "dim #E6E6F0",
            "shell": "#E6E6F0",
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "trace": "dim #9CE19C",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        style = styler(self.severity.value)
        body = Text(("> " if self.severity is Severity.INPUT else "") + self.text, style)

        renders = [body]
        if self.hint:
            renders.append(Text.assemble((" → ", styler("hint-arrow")), (self.hint, styler("hint"))))
        if self.trace:
            renders.append(Text(self.trace.rstrip(), styler("trace")))

        if self.code is None:
            return Group(*renders) if len(renders) > 1 else body

        prog = getattr(main, "__prog__", None)
        header = Text.assemble(
            "[ ",
            *(((prog, styler("prog-name")), " — ") if prog else ()),
            (str(self.code.normalize()), styler("code")),
            " | ",
            (self.title.title() or self.severity.value.title(), style),
            " ]",
        )
        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __str__(self):
        return self.text


class RingBuffer:
    """
    Fixed-capacity circular buffer.

    Layout
    - _items is a list of `capacity` slots.
    - _cursor is the physical slot of the newest entry (-1 when empty).
    - logical index i maps to physical slot (_cursor - _count + 1 + i) % capacity.
    """

    def __init__(self, capacity, /):
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TypeError("RingBuffer() capacity must be an integer")
        if capacity <= 0:
            raise ValueError("RingBuffer() capacity must be positive")
        self._items = [None] * capacity
        self._cursor = -1
        self._count = 0

    @property
    def capacity(self):
        return len(self._items)

    @property
    def is_full(self):
        return self._count == self.capacity

    @property
    def last(self):
        """
        The newest entry; IndexError when the buffer is empty.
        """
        if not self._count:
            raise IndexError("last entry of an empty buffer")
        return self._items[self._cursor]

    def _map(self, index):
        if __debug__ and not (isinstance(index, int) and 0 <= index < self._count):
            raise IndexError(f"trying to index with {index!r} on a {self._count}-length buffer")
        return (self._cursor - self._count + 1 + index) % self.capacity

    def __getitem__(self, index, /):
        return self._items[self._map(index)]

    def __setitem__(self, index, value, /):
        self._items[self._map(index)] = value

    def __len__(self):
        return self._count

    def __iter__(self):
        start = self._cursor - self._count + 1
        for index in range(self._count):
            yield self._items[(start + index) % self.capacity]

    def add(self, item, /):
        self._cursor = (self._cursor + 1) % self.capacity
        self._items[self._cursor] = item
        if self._count < self.capacity:
            self._count += 1

    def clear(self):
        self._items = [None] * self.capacity
        self._cursor = -1
        self._count = 0

    def __repr__(self):
        return f"{type(self).__name__}({list(self)!r}, capacity={self.capacity})"


class CommandLog(RingBuffer):
    """
    Message sink used by the shell and the invocation context.

    The log only stores; the context is the one that remembers which
    severities were seen during a dispatch.
    """

    def log(self, text, /, severity=Severity.SHELL, *, trace="", code=None, title="", hint=""):
        message = Message(str(text), severity, trace, code, title, hint)
        self.add(message)
        return message

    def log_error(self, text, /):
        return self.log(text, Severity.ERROR)

    def log_warning(self, text, /):
        return self.log(text, Severity.WARNING)

    def texts(self):
        """
        Plain message texts, oldest to newest.
        """
        return [message.text for message in self]

    def render(self, console=console, /, *, start=0, colorful=True, fancy=False):
        """
        Print entries from logical index `start` to the newest one.
        """
        for index in range(start, len(self)):
            console.print(self[index].renderable(colorful=colorful, fancy=fancy))


__all__ = (
    "Severity",
    "Message",
    "RingBuffer",
    "CommandLog",
    "capture",
    "console",
)

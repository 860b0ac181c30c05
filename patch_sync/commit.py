"""
Commit model for patch_sync.

A Commit is an immutable snapshot of one change: its header (identity,
parentage, authorship, message) and its payload as per-file diff bodies.
Filters never mutate a Commit; they build a new one with dataclasses.replace.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

# Field separator used in the header format passed to `git show`
HEADER_SEPARATOR = "\x00"
HEADER_FORMAT = "%x00".join(["%H", "%P", "%an", "%ae", "%aI", "%B"])

DIFF_MARKER = "diff --git "

# C-style escapes git uses for quoted path names
_ESCAPES = {
    "\a": "a",
    "\b": "b",
    "\t": "t",
    "\n": "n",
    "\v": "v",
    "\f": "f",
    "\r": "r",
    "\"": "\"",
    "\\": "\\",
}
_UNESCAPES = {code: char for char, code in _ESCAPES.items()}


@dataclass(frozen=True)
class CommitHeader:
    """Identity and metadata of a commit."""

    id: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    timestamp: datetime
    message: str

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"


@dataclass(frozen=True)
class FileDiff:
    """The diff body for a single file."""

    path: str
    body: str


@dataclass(frozen=True, eq=False)
class Commit:
    """A single unit of change that can be replayed as a patch."""

    header: CommitHeader
    diffs: tuple[FileDiff, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.header.id

    @property
    def short_id(self) -> str:
        return self.header.id[:8]

    @property
    def is_merge(self) -> bool:
        return self.header.is_merge

    @property
    def patch(self) -> str:
        """The full patch text, suitable for `git apply`."""
        return "".join(diff.body for diff in self.diffs)

    @property
    def paths(self) -> list[str]:
        return [diff.path for diff in self.diffs]

    def is_valid(self) -> bool:
        """Whether the commit still carries a change worth applying."""
        return any(diff.body.strip() for diff in self.diffs)

    def with_diffs(self, diffs: Iterable[FileDiff]) -> "Commit":
        return replace(self, diffs=tuple(diffs))

    def with_message(self, message: str) -> "Commit":
        return replace(self, header=replace(self.header, message=message))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def parse_header(raw: str) -> CommitHeader:
    """Parse the output of `git show -s --format=HEADER_FORMAT`."""
    commit_id, parents, name, email, date, message = raw.split(HEADER_SEPARATOR, 5)
    return CommitHeader(
        id=commit_id.strip(),
        parents=tuple(parents.split()),
        author_name=name,
        author_email=email,
        timestamp=datetime.fromisoformat(date.strip()),
        message=message.strip(),
    )


def needs_quoting(name: str) -> bool:
    return any(char in _ESCAPES or ord(char) < 0x20 or char == "\x7f" for char in name)


def quote_path(name: str) -> str:
    """Quote a path name the way git does in diff headers."""
    quoted = bytearray(b'"')
    for byte in name.encode("utf-8", "surrogateescape"):
        char = chr(byte)
        if char in _ESCAPES:
            quoted += f"\\{_ESCAPES[char]}".encode()
        elif byte < 0x20 or byte == 0x7F:
            quoted += f"\\{byte:03o}".encode()
        else:
            quoted.append(byte)
    quoted += b'"'
    return quoted.decode("utf-8", "surrogateescape")


def unquote_path(quoted: str) -> str:
    """Reverse quote_path. The surrounding double quotes are optional."""
    if len(quoted) >= 2 and quoted.startswith('"') and quoted.endswith('"'):
        quoted = quoted[1:-1]
    raw = quoted.encode("utf-8", "surrogateescape")
    name = bytearray()
    i = 0
    while i < len(raw):
        byte = raw[i]
        if byte == ord("\\") and i + 1 < len(raw):
            code = chr(raw[i + 1])
            if code in "01234567":
                name.append(int(raw[i + 1:i + 4].decode("ascii"), 8) & 0xFF)
                i += 4
                continue
            name += _UNESCAPES.get(code, code).encode()
            i += 2
            continue
        name.append(byte)
        i += 1
    return name.decode("utf-8", "surrogateescape")


def format_path(prefix: str, name: str) -> str:
    """Render `<prefix><name>` for a diff header, quoted when git would quote it."""
    if needs_quoting(name):
        return quote_path(prefix + name)
    return prefix + name


def _read_quoted(text: str) -> str:
    # text starts with an opening quote; return up to and including the closing one
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
        elif text[i] == '"':
            return text[: i + 1]
        else:
            i += 1
    return text


def _path_from_diff_line(line: str) -> str:
    rest = line[len(DIFF_MARKER):].rstrip("\n")
    if rest.startswith('"'):
        # Quoted form: "a/<path>" "b/<path>"
        return unquote_path(_read_quoted(rest))[2:]
    # Unquoted form: a/<path> b/<path>, both halves equal without renames
    return rest[: (len(rest) - 1) // 2][2:]


def split_diff(text: str) -> tuple[FileDiff, ...]:
    """Split a multi-file git diff into one FileDiff per file."""
    diffs: list[FileDiff] = []
    current: list[str] = []

    for line in text.splitlines(keepends=True):
        if line.startswith(DIFF_MARKER):
            if current:
                diffs.append(FileDiff(_path_from_diff_line(current[0]), "".join(current)))
            current = [line]
        elif current:
            current.append(line)

    if current:
        diffs.append(FileDiff(_path_from_diff_line(current[0]), "".join(current)))
    return tuple(diffs)

"""Parse delimiter-separated ``git log --numstat`` output into Commit records.

The log is produced with ``--format=LOG_FORMAT --numstat``. Every commit
starts with RECORD_SEPARATOR followed by ten header columns joined with
FIELD_SEPARATOR, then one numstat line per touched file::

    \\x1e<hash>\\x1f<short>\\x1f<author>\\x1f<email>\\x1f<date>\\x1f<committer>
    \\x1f<committer email>\\x1f<subject>\\x1f<body>\\x1f<parents>

    3\\t1\\tsrc/app.ts
    -\\t-\\tassets/logo.png
    0\\t0\\tsrc/{old => new}/util.ts

The body may span several lines; it can never contain the record
separator, which is what delimits the fragment.
"""

import re
from datetime import datetime
from typing import Optional

from ..exceptions import NoCommitsError
from ..logging_config import get_logger
from .models import Commit, FileChange, FileStatus, Person

logger = get_logger(__name__)

RECORD_SEPARATOR = "\x1e"
FIELD_SEPARATOR = "\x1f"

# full hash, short hash, author name, author email, author date (ISO 8601),
# committer name, committer email, subject, body, parent hashes
LOG_FIELDS = ("%H", "%h", "%an", "%ae", "%aI", "%cn", "%ce", "%s", "%b", "%P")
LOG_FORMAT = RECORD_SEPARATOR + FIELD_SEPARATOR.join(LOG_FIELDS)
HEADER_COLUMNS = len(LOG_FIELDS)

_NUMSTAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")
_RENAME_ARROW = " => "
_BRACE_RENAME_RE = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")
_QUOTE = '"'
_OCTAL_RE = re.compile(r"[0-7]{3}")
# escapes produced by git's C-style path quoting
_C_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}


def parse_log(raw: str) -> list[Commit]:
    """Parse a complete log blob into commits, preserving input order.

    Malformed fragments are skipped.

    Raises:
        NoCommitsError: If no fragment yields a commit.
    """
    commits = []
    skipped = 0

    for fragment in raw.split(RECORD_SEPARATOR):
        if not fragment.strip():
            continue
        commit = parse_commit(fragment)
        if commit is None:
            skipped += 1
            continue
        commits.append(commit)

    if skipped:
        logger.debug("Skipped %d malformed log fragment(s)", skipped)

    if not commits:
        raise NoCommitsError("log output contained no parseable commits")

    logger.debug("Parsed %d commits", len(commits))
    return commits


def parse_commit(fragment: str) -> Optional[Commit]:
    """Parse one record-separated fragment. Returns None when malformed.

    The header ends on the line holding the last field separator, so a
    body line that looks like numstat output stays part of the body.
    """
    lines = fragment.split("\n")

    header_end = None
    separators = 0
    for i, line in enumerate(lines):
        separators += line.count(FIELD_SEPARATOR)
        if separators >= HEADER_COLUMNS - 1:
            header_end = i + 1
            break

    if header_end is None:
        logger.debug("Dropping fragment with %d header columns", separators + 1)
        return None

    header = "\n".join(lines[:header_end])
    fields = header.split(FIELD_SEPARATOR)

    (
        full_hash,
        short_hash,
        author_name,
        author_email,
        date_str,
        committer_name,
        committer_email,
        subject,
        body,
        parent_hashes,
    ) = fields[:HEADER_COLUMNS]

    full_hash = full_hash.strip()
    if not full_hash:
        logger.debug("Dropping fragment without a commit hash")
        return None

    try:
        timestamp = datetime.fromisoformat(_normalize_iso(date_str.strip()))
    except ValueError:
        logger.debug("Dropping commit %s with unparsable date %r", full_hash[:12], date_str)
        return None

    files = []
    for line in lines[header_end:]:
        change = parse_numstat_line(line)
        if change is not None:
            files.append(change)

    return Commit(
        hash=full_hash,
        short_hash=short_hash.strip(),
        author=Person(name=author_name.strip(), email=author_email.strip()),
        committer=Person(name=committer_name.strip(), email=committer_email.strip()),
        timestamp=timestamp,
        subject=subject.strip(),
        body=body.strip(),
        parents=tuple(p for p in parent_hashes.split() if p),
        files=tuple(files),
    )


def parse_numstat_line(line: str) -> Optional[FileChange]:
    """Parse ``<added>\\t<deleted>\\t<path>``. A dash in either column means binary."""
    match = _NUMSTAT_RE.match(line.rstrip("\r"))
    if not match:
        return None

    add_str, del_str, path_part = match.groups()
    binary = add_str == "-" or del_str == "-"
    additions = 0 if binary else int(add_str)
    deletions = 0 if binary else int(del_str)

    if _QUOTE in path_part:
        path, old_path = decode_quoted_path(path_part)
    else:
        path, old_path = decode_rename_path(path_part)
    status = FileStatus.RENAMED if old_path is not None else FileStatus.MODIFIED

    return FileChange(
        path=path,
        additions=additions,
        deletions=deletions,
        binary=binary,
        status=status,
        old_path=old_path,
    )


def decode_rename_path(path_part: str) -> tuple[str, Optional[str]]:
    """Decode a numstat path column into ``(new_path, old_path)``.

    Supports ``old/path => new/path`` and ``prefix/{old => new}/suffix``.
    More than one brace group or arrow is not decodable unambiguously;
    such paths are returned verbatim with no old path.
    """
    arrows = path_part.count(_RENAME_ARROW)
    if arrows == 0:
        return path_part, None
    if arrows > 1:
        return path_part, None

    if "{" in path_part or "}" in path_part:
        if path_part.count("{") != 1 or path_part.count("}") != 1:
            return path_part, None
        match = _BRACE_RENAME_RE.match(path_part)
        if not match:
            return path_part, None
        prefix, old_name, new_name, suffix = match.groups()
        old_path = _collapse_slashes(f"{prefix}{old_name}{suffix}")
        new_path = _collapse_slashes(f"{prefix}{new_name}{suffix}")
        return new_path, old_path

    old_path, new_path = path_part.split(_RENAME_ARROW, 1)
    return new_path, old_path


def decode_quoted_path(path_part: str) -> tuple[str, Optional[str]]:
    """Decode a numstat path column that git C-quoted.

    Git quotes a path that holds a double quote, a backslash or a control
    character (and every non-ASCII byte unless ``core.quotePath`` is off).
    A quoted rename is printed as ``"old" => "new"`` with full paths on
    both sides, either of which may be unquoted. Undecodable columns are
    returned verbatim with no old path.
    """
    left, rest = _read_path_token(path_part)
    if left is None:
        return path_part, None
    if not rest:
        return left, None
    if not rest.startswith(_RENAME_ARROW):
        return path_part, None

    right, tail = _read_path_token(rest[len(_RENAME_ARROW):], to_end=True)
    if right is None or tail:
        return path_part, None
    return right, left


def unquote_c_path(text: str) -> Optional[tuple[str, str]]:
    """Read one ``"..."`` token from the start of ``text``.

    Returns ``(decoded, remainder)``, or None when the quote is never
    closed. Octal escapes are raw bytes and are decoded as UTF-8.
    """
    out = bytearray()
    i = 1
    while i < len(text):
        ch = text[i]
        if ch == _QUOTE:
            return out.decode("utf-8", errors="replace"), text[i + 1:]
        if ch == "\\" and i + 1 < len(text):
            octal = _OCTAL_RE.match(text, i + 1)
            if octal:
                out.append(int(octal.group(), 8) & 0xFF)
                i = octal.end()
                continue
            out.extend(_C_ESCAPES.get(text[i + 1], text[i + 1]).encode("utf-8"))
            i += 2
            continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return None


def _read_path_token(text: str, to_end: bool = False) -> tuple[Optional[str], str]:
    if text.startswith(_QUOTE):
        token = unquote_c_path(text)
        if token is None:
            return None, ""
        return token
    if to_end:
        return text, ""
    arrow = text.find(_RENAME_ARROW)
    if arrow < 0:
        return text, ""
    return text[:arrow], text[arrow:]


def _collapse_slashes(path: str) -> str:
    # "src/{ => lib}/a.ts" decodes to "src//a.ts" on the empty side
    while "//" in path:
        path = path.replace("//", "/")
    return path.lstrip("/")


def _normalize_iso(value: str) -> str:
    # datetime.fromisoformat only accepts a trailing "Z" from Python 3.11
    if value.endswith("Z"):
        return value[:-1] + "+00:00"
    return value

# ABOUTME: Translates the user query language into an FTS5 MATCH expression.
# ABOUTME: Supports field:value scoping, +required and -excluded clauses, quoted phrases, prefix*.

import re
import shlex

from shelfwise.errors import QuerySyntaxError
from shelfwise.index.schema import INDEX_FIELDS

_FIELD_RE = re.compile(r"^(?P<field>[A-Za-z_]+):(?P<value>.*)$", re.DOTALL)


def _phrase(value: str) -> str:
    """Quote a value as an FTS5 string; a trailing * becomes a prefix query."""
    prefix = value.endswith("*")
    value = value.rstrip("*")
    quoted = '"' + value.replace('"', '""') + '"'
    return f"{quoted} *" if prefix else quoted


def _clause(token: str) -> str | None:
    m = _FIELD_RE.match(token)
    if m is None:
        return _phrase(token) if token.strip("*") else None
    field = m.group("field").lower()
    if field not in INDEX_FIELDS:
        raise QuerySyntaxError(f"Unknown search field: {field}")
    value = m.group("value")
    if not value.strip("*"):
        return None
    return f"{field} : {_phrase(value)}"


def to_fts_query(text: str) -> str | None:
    """Build an FTS5 expression, or None when nothing positive is asked for.

    Bare clauses are alternatives; ``+`` clauses are all required (and make
    bare clauses irrelevant to matching); ``-`` clauses exclude.

    Raises:
        QuerySyntaxError: Unbalanced quotes or an unknown field.
    """
    try:
        tokens = shlex.split(text)
    except ValueError as exc:
        raise QuerySyntaxError(f"Invalid query {text!r}: {exc}") from exc

    required: list[str] = []
    optional: list[str] = []
    excluded: list[str] = []
    for token in tokens:
        bucket = optional
        if token[:1] == "+":
            bucket, token = required, token[1:]
        elif token[:1] == "-":
            bucket, token = excluded, token[1:]
        clause = _clause(token)
        if clause is not None:
            bucket.append(clause)

    if required:
        expression = " AND ".join(required)
    elif optional:
        expression = " OR ".join(optional)
    else:
        return None
    if excluded:
        expression = f"({expression}) NOT ({' OR '.join(excluded)})"
    return expression

"""SQL migration script parser.

A migration script is plain SQL annotated with directive comments:

    -- +goose Up
    CREATE TABLE post (id INTEGER PRIMARY KEY, title TEXT);

    -- +goose StatementBegin
    CREATE TRIGGER post_touch AFTER UPDATE ON post BEGIN
        UPDATE post SET title = title WHERE id = NEW.id;
    END;
    -- +goose StatementEnd

    -- +goose Down
    DROP TABLE post;

Statements end at a line whose last token ends with ';'. Lines between
StatementBegin and StatementEnd form a single statement regardless of the
semicolons they contain. ``-- +goose NO TRANSACTION`` anywhere in the file
makes the whole migration non-transactional.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.exceptions import MalformedScriptError
from ..core.types import Direction

DIRECTIVE_MARKER = "+goose"

UP = "Up"
DOWN = "Down"
STATEMENT_BEGIN = "StatementBegin"
STATEMENT_END = "StatementEnd"
NO_TRANSACTION = "NO TRANSACTION"


@dataclass
class ParsedScript:
    """Statements of one direction of a migration script."""

    statements: list[str] = field(default_factory=list)
    use_tx: bool = True

    @property
    def empty(self) -> bool:
        return not self.statements


def parse_script(text: str, direction: Direction) -> ParsedScript:
    """Split a migration script into statements for one direction.

    The whole script is validated on every call, so the result for one
    direction never depends on which direction was asked for first.

    Args:
        text: Full text of the migration script.
        direction: Section to return statements for.

    Returns:
        ParsedScript with the ordered statements and the transaction flag.
        An empty or missing Down section yields no statements.

    Raises:
        MalformedScriptError: If the directive structure is invalid.
    """
    up, down, use_tx = _parse(text)
    statements = up if direction is Direction.UP else down
    return ParsedScript(statements=list(statements), use_tx=use_tx)


def render_script(up: list[str], down: list[str], use_tx: bool = True) -> str:
    """Serialize statement lists back into migration script text.

    Statements that would not parse back unchanged as plain lines are
    wrapped in StatementBegin/StatementEnd.

    Raises:
        ValueError: If a statement contains a directive line.
    """
    lines: list[str] = []
    if not use_tx:
        lines.append(_directive(NO_TRANSACTION))

    lines.append(_directive(UP))
    for statement in up:
        lines.extend(_render_statement(statement))

    lines.append(_directive(DOWN))
    for statement in down:
        lines.extend(_render_statement(statement))

    return "\n".join(lines) + "\n"


def _directive(name: str) -> str:
    return f"-- {DIRECTIVE_MARKER} {name}"


def _render_statement(statement: str) -> list[str]:
    for line in statement.split("\n"):
        if _directive_name(line.strip()) is not None:
            raise ValueError(f"statement contains a directive line: {line.strip()!r}")
    if _is_plain(statement):
        return [statement]
    return [_directive(STATEMENT_BEGIN), statement, _directive(STATEMENT_END)]


def _is_plain(statement: str) -> bool:
    """Check whether a statement survives parsing without brackets."""
    if statement != statement.strip():
        return False

    lines = statement.split("\n")
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith("--") or line != line.rstrip():
            return False
        last = i == len(lines) - 1
        if _ends_with_semicolon(line) != last:
            return False
    return True


def _directive_name(stripped: str) -> str | None:
    """Get the directive named on a line, or None for ordinary lines."""
    if not stripped.startswith("--"):
        return None
    rest = stripped[2:].strip()
    if not rest.startswith(DIRECTIVE_MARKER):
        return None
    return " ".join(rest[len(DIRECTIVE_MARKER):].split())


def _ends_with_semicolon(line: str) -> bool:
    """Check whether the last token before any trailing comment ends with ';'."""
    prev = ""
    for word in line.split():
        if word.startswith("--"):
            break
        prev = word
    return prev.endswith(";")


def _parse(text: str) -> tuple[list[str], list[str], bool]:
    sections: dict[str, list[str]] = {UP: [], DOWN: []}
    section: str | None = None
    use_tx = True

    buf: list[str] = []
    buf_start = 0
    block_start: int | None = None

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        stripped = line.strip()
        name = _directive_name(stripped)

        if name is None:
            if block_start is not None:
                buf.append(line)
                continue
            if not stripped or stripped.startswith("--"):
                continue
            if section is None:
                raise MalformedScriptError(
                    "statement outside of an Up or Down section", number, raw
                )
            if not buf:
                buf_start = number
            buf.append(line)
            if _ends_with_semicolon(line):
                sections[section].append("\n".join(buf).strip())
                buf = []
            continue

        if name in (UP, DOWN):
            if block_start is not None:
                raise MalformedScriptError(
                    f"'{_directive(STATEMENT_BEGIN)}' at line {block_start} "
                    f"has no matching '{_directive(STATEMENT_END)}'",
                    number,
                    raw,
                )
            if buf:
                raise MalformedScriptError(
                    "unfinished statement, missing semicolon?", buf_start, buf[0]
                )
            if name == UP and section is not None:
                reason = "duplicate Up section" if section == UP else "Up section after Down"
                raise MalformedScriptError(reason, number, raw)
            if name == DOWN and section != UP:
                reason = "duplicate Down section" if section == DOWN else "Down section before Up"
                raise MalformedScriptError(reason, number, raw)
            section = name

        elif name == STATEMENT_BEGIN:
            if section is None:
                raise MalformedScriptError(
                    "StatementBegin outside of an Up or Down section", number, raw
                )
            if block_start is not None:
                raise MalformedScriptError("nested StatementBegin", number, raw)
            if buf:
                raise MalformedScriptError(
                    "unfinished statement, missing semicolon?", buf_start, buf[0]
                )
            block_start = number

        elif name == STATEMENT_END:
            if block_start is None:
                raise MalformedScriptError(
                    "StatementEnd without StatementBegin", number, raw
                )
            statement = "\n".join(buf).strip()
            if statement:
                sections[section].append(statement)
            buf = []
            block_start = None

        elif name == NO_TRANSACTION:
            use_tx = False

        else:
            raise MalformedScriptError(f"unknown directive {name!r}", number, raw)

    if block_start is not None:
        raise MalformedScriptError(
            f"'{_directive(STATEMENT_BEGIN)}' has no matching "
            f"'{_directive(STATEMENT_END)}'",
            block_start,
        )
    if buf:
        raise MalformedScriptError(
            "unfinished statement, missing semicolon?", buf_start, buf[0]
        )
    if section is None:
        raise MalformedScriptError(f"no '{_directive(UP)}' directive found")

    return sections[UP], sections[DOWN], use_tx

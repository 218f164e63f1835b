"""Разбор текстового ответа модели на отдельные замечания.

Ожидаемый формат — повторяющиеся блоки, разделённые пустой строкой:

    File: src/app.py
    Line: 42
    Issue: описание проблемы, может занимать
    несколько строк

File можно опустить: тогда используется файл из последнего блока, где он был
указан. Блоки, которые не удалось разобрать, пропускаются, разбор остальных
продолжается.
"""

import re

from rich.console import Console
from rich.markup import escape

from review_bot.review.schemas import Finding, ParseResult, ParseSkip

console = Console()

# "- **File:** `a.py`", "* line: 12", "Lines: 3-5"
_MARKER_RE = re.compile(
    r"^\s*(?:[-*]\s+)?\**\s*(?P<key>file|lines?|issue)\s*\**\s*:\s*\**\s*(?P<value>.*)$",
    re.IGNORECASE,
)
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_NUMBER_RE = re.compile(r"\d+")


def _marker(line: str) -> tuple[str, str] | None:
    match = _MARKER_RE.match(line)
    if not match:
        return None
    key = match.group("key").lower()
    if key == "lines":
        key = "line"
    return key, match.group("value").strip()


def _split_blocks(text: str) -> list[str]:
    """Разбить текст на блоки по пустым строкам и по началу нового замечания после Issue."""
    blocks = []
    for chunk in _BLANK_LINE_RE.split(text.replace("\r\n", "\n")):
        current: list[str] = []
        seen_issue = False
        for line in chunk.split("\n"):
            marker = _marker(line)
            if marker and marker[0] in ("file", "line") and seen_issue:
                blocks.append("\n".join(current))
                current, seen_issue = [], False
            if marker and marker[0] == "issue":
                seen_issue = True
            current.append(line)
        if any(line.strip() for line in current):
            blocks.append("\n".join(current))
    return blocks


def _clean_file(value: str) -> str:
    return value.strip().strip("`*'\"").strip()


def _parse_block(block: str, last_file: str | None) -> tuple[Finding | ParseSkip, str | None]:
    """Разобрать один блок. Возвращает результат и файл для следующих блоков."""
    file = None
    line_value = None
    issue_lines: list[str] = []
    in_issue = False

    for line in block.split("\n"):
        marker = _marker(line)
        if marker is None:
            if in_issue:
                issue_lines.append(line.rstrip())
            continue

        key, value = marker
        in_issue = key == "issue"
        if key == "file":
            file = _clean_file(value) or None
        elif key == "line":
            line_value = value
        else:
            issue_lines = [value]

    if file:
        last_file = file

    if line_value is None:
        return ParseSkip(block, "нет строки Line:"), last_file

    issue = "\n".join(issue_lines).strip()
    if not issue:
        return ParseSkip(block, "нет описания Issue:"), last_file

    number = _NUMBER_RE.search(line_value)
    if number is None or int(number.group()) < 1:
        return ParseSkip(block, f"некорректный номер строки: {line_value!r}"), last_file

    resolved = file or last_file
    if resolved is None:
        return ParseSkip(block, "не указан файл и нет предыдущего File:"), last_file

    return Finding(file=resolved, line=int(number.group()), issue=issue), last_file


def parse_review_text(text: str) -> ParseResult:
    result = ParseResult()
    if not text or not text.strip():
        return result

    last_file: str | None = None
    for block in _split_blocks(text.strip()):
        parsed, last_file = _parse_block(block, last_file)
        if isinstance(parsed, ParseSkip):
            result.skipped.append(parsed)
            console.print(f"[dim]Пропущен блок ответа модели ({escape(parsed.reason)})[/dim]")
        else:
            result.findings.append(parsed)

    return result


def parse_findings(text: str) -> list[Finding]:
    """Замечания в порядке появления в тексте. Никогда не бросает исключений."""
    return parse_review_text(text).findings

"""Поиск позиции строки внутри patch для inline-комментариев GitHub.

GitHub привязывает комментарий к позиции в теле diff, а не к номеру строки
файла. Позиция считается от нуля по всем строкам тела patch (контекст,
добавленные и удалённые строки), заголовки ханков не учитываются и счётчик
не сбрасывается между ханками.
"""

import re

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def map_line_to_position(patch: str | None, target_line: int) -> int | None:
    """Вернуть позицию строки target_line (1-based, новая версия файла) или None."""
    if not patch or target_line < 1:
        return None

    position = 0
    new_line: int | None = None
    in_hunk = False

    # Строки patch разделяет только \n
    lines = patch.split("\n")
    if lines[-1] == "":
        lines.pop()

    for raw in lines:
        if raw.startswith("@@"):
            in_hunk = True
            match = HUNK_HEADER_RE.match(raw)
            # Нераспознанный заголовок: строки ханка занимают позиции, но не сопоставляются
            new_line = int(match.group(3)) - 1 if match else None
            continue

        # Заголовки файлов до первого ханка и "\ No newline at end of file"
        if not in_hunk or raw.startswith("\\"):
            continue

        if not raw.startswith("-") and new_line is not None:
            new_line += 1
            if new_line == target_line:
                return position

        position += 1

    return None

from review_bot.review.parser import parse_findings, parse_review_text
from review_bot.review.schemas import Finding


class TestParseFindings:
    def test_single_block(self):
        findings = parse_findings("File: a.js\nLine: 3\nIssue: bug")
        assert findings == [Finding(file="a.js", line=3, issue="bug")]

    def test_sticky_file(self):
        text = "File: a.js\nLine: 3\nIssue: bug\n\nLine: 9\nIssue: another bug"
        findings = parse_findings(text)
        assert [(f.file, f.line) for f in findings] == [("a.js", 3), ("a.js", 9)]

    def test_sticky_file_switches(self):
        text = (
            "File: a.js\nLine: 1\nIssue: one\n\n"
            "File: b.py\nLine: 2\nIssue: two\n\n"
            "Line: 3\nIssue: three"
        )
        assert [f.file for f in parse_findings(text)] == ["a.js", "b.py", "b.py"]

    def test_block_without_line_is_skipped(self):
        text = "File: a.js\nLine: 3\nIssue: bug\n\nFile: a.js\nIssue: no line here"
        result = parse_review_text(text)
        assert len(result.findings) == 1
        assert len(result.skipped) == 1
        assert "Line" in result.skipped[0].reason

    def test_block_without_file_and_no_previous_file(self):
        result = parse_review_text("Line: 3\nIssue: orphan\n\nFile: b.js\nLine: 4\nIssue: ok")
        assert [f.file for f in result.findings] == ["b.js"]
        assert len(result.skipped) == 1

    def test_multiline_issue(self):
        text = "File: a.js\nLine: 5\nIssue: missing null check\nx may be undefined here"
        findings = parse_findings(text)
        assert findings[0].issue == "missing null check\nx may be undefined here"

    def test_blocks_without_blank_line(self):
        text = "File: a.js\nLine: 1\nIssue: first\nFile: b.js\nLine: 2\nIssue: second\nLine: 3\nIssue: third"
        findings = parse_findings(text)
        assert [(f.file, f.line, f.issue) for f in findings] == [
            ("a.js", 1, "first"),
            ("b.js", 2, "second"),
            ("b.js", 3, "third"),
        ]

    def test_markdown_decoration(self):
        text = "- **File:** `src/app.py`\n- **Line:** 12\n- **Issue:** SQL-инъекция в запросе"
        assert parse_findings(text) == [Finding(file="src/app.py", line=12, issue="SQL-инъекция в запросе")]

    def test_case_insensitive_and_line_range(self):
        findings = parse_findings("file: a.js\nLINES: 14-18\nissue: дублирование кода")
        assert findings[0].line == 14

    def test_file_only_block_sets_sticky_file(self):
        text = "File: a.js\n\nLine: 2\nIssue: bug"
        assert parse_findings(text) == [Finding(file="a.js", line=2, issue="bug")]

    def test_line_zero_is_skipped(self):
        result = parse_review_text("File: a.js\nLine: 0\nIssue: bug")
        assert result.findings == []
        assert len(result.skipped) == 1

    def test_non_numeric_line_is_skipped(self):
        assert parse_findings("File: a.js\nLine: unknown\nIssue: bug") == []

    def test_empty_issue_is_skipped(self):
        assert parse_findings("File: a.js\nLine: 4\nIssue:") == []

    def test_intro_text_is_ignored(self):
        text = "Вот найденные проблемы:\n\nFile: a.js\nLine: 3\nIssue: bug"
        assert len(parse_findings(text)) == 1

    def test_no_findings(self):
        assert parse_findings("Замечаний нет.") == []

    def test_empty_text(self):
        assert parse_findings("") == []
        assert parse_findings("   \n\n ") == []

    def test_crlf_line_endings(self):
        text = "File: a.js\r\nLine: 3\r\nIssue: bug\r\n\r\nLine: 4\r\nIssue: bug2"
        assert [f.line for f in parse_findings(text)] == [3, 4]

import pytest

from mdlint_engine.checks import BUILTIN_CHECKS, CallableCheck, create_check, default_checks
from mdlint_engine.document import build_document
from mdlint_engine.models import RuleConfiguration, Severity, Violation


def run(rule_id: str, text: str, **config_kwargs) -> list[Violation]:
    check = create_check(rule_id)
    config = RuleConfiguration(**config_kwargs)
    return list(check.analyze(build_document(text), config))


def test_factory_accepts_aliases_and_rejects_unknown():
    assert create_check("no_hard_tabs").descriptor.id == "MD010"
    with pytest.raises(ValueError):
        create_check("MD004")
    with pytest.raises(ValueError):
        create_check("not-a-rule")


def test_default_checks_are_unique_and_ordered():
    checks = default_checks()
    assert [c.descriptor.id for c in checks] == [cls.rule_id for cls in BUILTIN_CHECKS]
    assert len({c.descriptor.id for c in checks}) == len(checks)


def test_violations_carry_configured_severity():
    violations = run("MD010", "a\tb\n", severity=Severity.ERROR)
    assert violations[0].severity is Severity.ERROR


def test_heading_increment():
    violations = run("MD001", "# Title\n\n### Skipped\n\n#### Fine\n")
    assert [(v.line, v.message) for v in violations] == [
        (2, "Heading level should increment by one level at a time (expected h2, found h3)")
    ]
    assert violations[0].column_start == 0
    assert violations[0].column_end == len("### Skipped")


def test_heading_increment_front_matter_title_counts_as_h1():
    assert len(run("MD001", "---\ntitle: Doc\n---\n### Deep\n")) == 1
    assert run("MD001", "---\nauthor: me\n---\n### Deep\n") == []
    assert run("MD001", "---\ntitle: Doc\n---\n## Sub\n") == []


def test_heading_style_consistent():
    violations = run("MD003", "# A\n\nB\n=\n")
    assert [(v.line, v.message) for v in violations] == [
        (2, "Heading style should be consistent (expected atx, found setext)")
    ]


def test_heading_style_explicit_value():
    violations = run("MD003", "Title\n=====\n\n## Next ##\n", value="atx")
    assert [v.message for v in violations] == [
        "Heading style should be atx (found setext)",
        "Heading style should be atx (found atx_closed)",
    ]
    assert run("MD003", "Title\n=====\n\n### Deep\n", parameters={"style": "setext_with_atx"}) == []


def test_ul_indent_uses_parameter_then_indent_size():
    text = "- a\n    - b\n"
    assert [v.line for v in run("MD007", text)] == [1]
    assert run("MD007", text, indent_size=4) == []
    assert run("MD007", text, indent_size=2, parameters={"indent": "4"}) == []


def test_ul_indent_start_indented():
    violations = run("MD007", "- a\n", parameters={"start_indented": "true", "start_indent": "2"})
    assert violations[0].message == "Unordered list indentation should be 2 spaces (found 0)"


def test_ul_indent_ignores_ordered_lists():
    assert run("MD007", "1. a\n     - b\n") == []


def test_trailing_spaces():
    violations = run("MD009", "a  \nb   \n")
    assert [(v.line, v.column_start, v.column_end) for v in violations] == [(1, 1, 4)]
    assert violations[0].message == "Trailing spaces (3 found)"
    assert len(run("MD009", "a  \n", parameters={"strict": "true"})) == 1


def test_hard_tabs():
    violations = run("MD010", "a\tb\t\n")
    assert [(v.column_start, v.column_end) for v in violations] == [(1, 2), (3, 4)]
    assert violations[0].message == "Hard tabs"
    assert violations[0].fix_hint == "Replace tab with 1 spaces"


def test_hard_tabs_in_code_blocks():
    text = "```make\nall:\n\techo hi\n```\n"
    assert len(run("MD010", text)) == 1
    assert run("MD010", text, parameters={"ignore_code_languages": "make"}) == []
    assert run("MD010", text, parameters={"code_blocks": "false"}) == []


def test_multiple_blanks():
    violations = run("MD012", "a\n\n\n\nb\n")
    assert [v.line for v in violations] == [2, 3]
    assert violations[0].message == "Multiple consecutive blank lines (2 found, maximum 1 allowed)"
    assert run("MD012", "a\n\n\nb\n", parameters={"maximum": "2"}) == []


def test_line_length():
    long_prose = "word " * 20
    violations = run("MD013", long_prose + "\n")
    assert len(violations) == 1
    assert violations[0].column_start == 80
    assert run("MD013", "x" * 100 + "\n") == []
    assert len(run("MD013", "x" * 100 + "\n", parameters={"strict": "true"})) == 1
    assert run("MD013", long_prose + "\n", value="120") == []


def test_missing_space_atx():
    violations = run("MD018", "#Heading\n\n# Fine\n\n```\n#comment\n```\n")
    assert [v.line for v in violations] == [0]


def test_single_title():
    violations = run("MD025", "# A\n\n# B\n\n## C\n")
    assert [v.line for v in violations] == [2]


def test_fenced_code_language():
    violations = run("MD040", "```\ncode\n```\n\n```js\nx\n```\n")
    assert [v.line for v in violations] == [0]
    restricted = run("MD040", "```js\nx\n```\n", parameters={"allowed_languages": "python, bash"})
    assert restricted[0].message == "Language 'js' is not in the allowed list"


def test_first_line_heading():
    assert [v.line for v in run("MD041", "\nIntro\n\n# Title\n")] == [1]
    assert run("MD041", "# Title\n") == []
    assert run("MD041", "---\ntitle: Doc\n---\nText\n") == []
    assert run("MD041", "\n\n") == []
    wrong_level = run("MD041", "## Sub\n")
    assert wrong_level[0].message == "First heading should be level 1 (found h2)"


def test_single_trailing_newline():
    assert [v.line for v in run("MD047", "text")] == [0]
    multiple = run("MD047", "text\n\n")
    assert multiple[0].message.endswith("(multiple found)")
    assert run("MD047", "text\n") == []


def test_callable_check_adapts_function():
    check = create_check("MD010")

    def find_todo(document, config):
        for number, line in document.iter_lines():
            if "TODO" in line:
                yield check.violation(config, number, line.index("TODO"), len(line), "TODO found")

    adapter = CallableCheck(check.descriptor, find_todo)
    violations = list(adapter.analyze(build_document("ok\nTODO later\n"), RuleConfiguration()))
    assert [(v.line, v.column_start) for v in violations] == [(1, 0)]

from mdlint_engine.catalog import DEFAULT_CATALOG
from mdlint_engine.suppression import parse_directive, parse_suppressions


def _lines(text: str) -> list[str]:
    return text.split("\n")


def test_no_directives_means_no_suppressions():
    suppressions = parse_suppressions(_lines("# Title\n\nBody text\n"))
    assert not suppressions.has_any_suppressions
    assert not suppressions.is_suppressed(0, "MD001")


def test_unknown_directive_is_ignored():
    suppressions = parse_suppressions(_lines("<!-- markdownlint-silence MD001 -->\ntext"))
    assert parse_directive(0, "<!-- markdownlint-silence MD001 -->") is None
    assert not suppressions.has_any_suppressions


def test_bare_disable_file_suppresses_everything():
    lines = _lines(
        "# Title\n<!-- markdownlint-enable -->\n### Skipped\n<!-- markdownlint-disable-file -->"
    )
    suppressions = parse_suppressions(lines)
    for line in range(len(lines)):
        assert suppressions.all_suppressed(line)


def test_disable_file_rules_apply_to_earlier_lines():
    lines = _lines("\tTab\ntext\n<!-- markdownlint-disable-file MD010 -->")
    suppressions = parse_suppressions(lines)
    assert suppressions.is_suppressed(0, "MD010")
    assert not suppressions.is_suppressed(0, "MD001")


def test_configure_file_and_disable_file_rules_are_combined():
    lines = _lines(
        "<!-- markdownlint-configure-file MD013 -->\ntext\n<!-- markdownlint-disable-file no-hard-tabs -->"
    )
    suppressions = parse_suppressions(lines)
    assert suppressions.suppressed_rules(1) == frozenset({"md013", "no-hard-tabs"})


def test_scoped_disable_and_enable():
    lines = _lines(
        "# Title\n\n<!-- markdownlint-disable MD001 -->\n### Skipped Level\n<!-- markdownlint-enable -->\n### After"
    )
    suppressions = parse_suppressions(lines)
    assert not suppressions.is_suppressed(0, "MD001")
    assert suppressions.is_suppressed(2, "MD001")
    assert suppressions.is_suppressed(3, "MD001")
    assert not suppressions.is_suppressed(4, "MD001")
    assert not suppressions.is_suppressed(5, "MD001")


def test_enable_with_rules_keeps_disable_all():
    lines = _lines("<!-- markdownlint-disable -->\n<!-- markdownlint-enable MD001 -->\ntext")
    suppressions = parse_suppressions(lines)
    assert suppressions.all_suppressed(2)


def test_enable_rules_removes_only_listed():
    lines = _lines("<!-- markdownlint-disable MD001 MD010 -->\n<!-- markdownlint-enable MD010 -->\ntext")
    suppressions = parse_suppressions(lines)
    assert suppressions.is_suppressed(2, "MD001")
    assert not suppressions.is_suppressed(2, "MD010")


def test_disable_line_and_next_line():
    lines = _lines(
        "a <!-- markdownlint-disable-line MD009 -->\n"
        "<!-- markdownlint-disable-next-line -->\n"
        "b\n"
        "c"
    )
    suppressions = parse_suppressions(lines)
    assert suppressions.is_suppressed(0, "MD009")
    assert not suppressions.is_suppressed(0, "MD010")
    assert not suppressions.all_suppressed(1)
    assert suppressions.all_suppressed(2)
    assert not suppressions.is_suppressed(3, "MD009")


def test_disable_next_line_on_last_line_is_ignored():
    suppressions = parse_suppressions(["text", "<!-- markdownlint-disable-next-line -->"])
    assert not suppressions.has_any_suppressions
    assert suppressions.line_count == 2


def test_capture_restore_round_trips_state():
    lines = _lines(
        "<!-- markdownlint-disable MD001 -->\n"
        "<!-- markdownlint-capture -->\n"
        "<!-- markdownlint-disable MD010 -->\n"
        "inside\n"
        "<!-- markdownlint-restore -->\n"
        "after"
    )
    suppressions = parse_suppressions(lines)
    assert suppressions.is_suppressed(3, "MD001")
    assert suppressions.is_suppressed(3, "MD010")
    assert suppressions.is_suppressed(5, "MD001")
    assert not suppressions.is_suppressed(5, "MD010")


def test_nested_capture_restore():
    lines = _lines(
        "<!-- markdownlint-capture -->\n"
        "<!-- markdownlint-disable MD001 -->\n"
        "<!-- markdownlint-capture -->\n"
        "<!-- markdownlint-disable -->\n"
        "all\n"
        "<!-- markdownlint-restore -->\n"
        "one\n"
        "<!-- markdownlint-restore -->\n"
        "none"
    )
    suppressions = parse_suppressions(lines)
    assert suppressions.all_suppressed(4)
    assert not suppressions.all_suppressed(6)
    assert suppressions.is_suppressed(6, "MD001")
    assert not suppressions.is_suppressed(8, "MD001")


def test_restore_without_capture_resets_to_default():
    lines = _lines("<!-- markdownlint-disable -->\nhidden\n<!-- markdownlint-restore -->\nvisible")
    suppressions = parse_suppressions(lines)
    assert suppressions.all_suppressed(1)
    assert not suppressions.all_suppressed(2)
    assert not suppressions.all_suppressed(3)
    assert not suppressions.suppressed_rules(3)


def test_rule_tokens_are_case_and_separator_insensitive():
    lines = _lines("<!-- MarkdownLint-Disable md010, No_Hard_Tabs heading-increment -->\ntext")
    suppressions = parse_suppressions(lines)
    md010 = DEFAULT_CATALOG.lookup("MD010")
    md001 = DEFAULT_CATALOG.lookup("MD001")
    assert suppressions.is_rule_suppressed(1, md010)
    assert suppressions.is_rule_suppressed(1, md001)
    assert suppressions.is_suppressed(1, "no-hard-tabs")


def test_only_first_directive_per_line_counts():
    lines = _lines("<!-- markdownlint-disable MD001 --> <!-- markdownlint-disable MD010 -->\ntext")
    suppressions = parse_suppressions(lines)
    assert suppressions.is_suppressed(1, "MD001")
    assert not suppressions.is_suppressed(1, "MD010")

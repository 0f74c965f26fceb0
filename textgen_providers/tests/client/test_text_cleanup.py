from textgen_providers.client import clean_generated_text


def test_removes_headings_fences_and_emphasis():
    text = "## Chapter One\n\n```text\nThe **rain** fell on `stone`.\n```\n> _quiet_ night"
    assert clean_generated_text(text) == "Chapter One\n\nThe rain fell on stone.\n\nquiet night"  # nosec B101


def test_keeps_identifiers_and_bullets():
    text = "* item one\n* item two with snake_case_name"
    assert clean_generated_text(text) == text  # nosec B101


def test_collapses_blank_runs_and_trims_lines():
    assert clean_generated_text("  a  \n\n\n\n   b  ") == "a\n\nb"  # nosec B101


def test_empty_input_is_returned_unchanged():
    assert clean_generated_text("") == ""  # nosec B101

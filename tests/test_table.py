from xcli.styles import strip_ansi, style_text, visible_len
from xcli.table import fit_widths, minimum_widths, render_table, wrap_text


def test_render_table_natural_widths():
    lines = render_table(["ID", "Name"], [["1", "Alice"], ["22", "Bob"]])
    assert lines == [
        "ID  Name ",
        "--  -----",
        "1   Alice",
        "22  Bob  ",
    ]


def test_styling_does_not_affect_layout():
    styled = style_text("Name", bold=True)
    plain = render_table(["ID", "Name"], [["1", "Alice"]])
    colored = render_table(["ID", styled], [["1", style_text("Alice", color="green")]])
    assert [strip_ansi(line) for line in colored] == plain


def test_wrap_text_hard_splits_long_words():
    assert wrap_text("abcdefghij kl", 4) == ["abcd", "efgh", "ij", "kl"]
    assert wrap_text("", 5) == [""]


def test_shrinks_to_max_width_and_wraps():
    text = "the quick brown fox jumps over the lazy dog"
    lines = render_table(["ID", "Text"], [["1", text]], max_width=20)
    assert all(visible_len(line) <= 20 for line in lines)
    body = " ".join(line[4:].strip() for line in lines[2:])
    assert body == text


def test_minimum_respected_while_others_have_slack():
    headers = ["Name", "Text"]
    natural = [30, 30]
    minimums = minimum_widths(headers, natural, min_widths=[None, 24])
    assert minimums == [6, 24]
    widths = fit_widths(natural, minimums, 40)
    assert widths[1] >= 24
    assert sum(widths) + 2 <= 40


def test_fit_is_best_effort_when_no_slack():
    assert fit_widths([6, 6], [6, 6], 5) == [6, 6]


def test_rendering_is_idempotent():
    rows = [["1", "some long text that wraps around"], ["2", "short"]]
    first = render_table(["ID", "Text"], rows, max_width=18)
    second = render_table(["ID", "Text"], rows, max_width=18)
    assert first == second


def test_empty_cell_takes_one_line():
    lines = render_table(["A", "B"], [["", ""]])
    assert len(lines) == 3

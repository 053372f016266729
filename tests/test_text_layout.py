import pytest

from conftest import FixedWidthFont
from certpress.shared.certificates_layout import StyledSegment, TextBlock
from certpress.shared.text_layout import (
    break_lines,
    draw_text_block,
    render_text_block,
    tokenize,
)
from certpress.shared.typefaces import FontHandle, MissingFontError

FONTS = {"Sans": FixedWidthFont(), "Bold": FixedWidthFont(advance=0.6)}


def _texts(lines):
    return [line.text for line in lines]


@pytest.mark.parametrize(
    "text",
    [
        "",
        " ",
        "word",
        "  leading",
        "trailing   ",
        "two  words\tand more",
        " \t mixed \n whitespace \t ",
    ],
)
def test_tokenize_round_trip(text):
    tokens = tokenize(StyledSegment(text, "Sans"), FONTS["Sans"], 10)

    assert "".join(t.text for t in tokens) == text
    assert all(t.text for t in tokens)
    for token in tokens:
        assert token.is_whitespace == token.text.isspace()
        assert token.font == "Sans"


def test_tokenize_measures_each_token():
    tokens = tokenize(StyledSegment("ab  cde", "Sans"), FONTS["Sans"], 10)

    assert [(t.text, t.width) for t in tokens] == [("ab", 10), ("  ", 10), ("cde", 15)]


def test_tokenize_uses_real_font_metrics(vera_bytes):
    font = FontHandle("Vera", vera_bytes["Vera"])

    narrow = tokenize(StyledSegment("iiii", "Vera"), font, 12)[0]
    wide = tokenize(StyledSegment("WWWW", "Vera"), font, 12)[0]

    assert 0 < narrow.width < wide.width


def test_wraps_greedily_and_trims_trailing_space():
    lines = break_lines([StyledSegment("Hello world again", "Sans")], FONTS, 10, 60)

    assert _texts(lines) == ["Hello world", "again"]
    assert lines[0].width == 55


def test_segments_stay_separate_tokens():
    segments = [
        StyledSegment("Dear ", "Sans"),
        StyledSegment("Jane", "Bold"),
        StyledSegment(".", "Sans"),
    ]

    lines = break_lines(segments, FONTS, 10, 500)

    assert _texts(lines) == ["Dear Jane."]
    assert [(t.text, t.font) for t in lines[0].tokens] == [
        ("Dear", "Sans"),
        (" ", "Sans"),
        ("Jane", "Bold"),
        (".", "Sans"),
    ]


def test_overlong_word_gets_its_own_line():
    lines = break_lines(
        [StyledSegment("a supercalifragilistic b", "Sans")], FONTS, 10, 30
    )

    assert _texts(lines) == ["a", "supercalifragilistic", "b"]
    assert lines[1].width == 100


@pytest.mark.parametrize("max_width", [0, -5, 1])
def test_degenerate_width_still_terminates(max_width):
    lines = break_lines(
        [StyledSegment("one two  three", "Sans")], FONTS, 10, max_width
    )

    assert _texts(lines) == ["one", "two", "three"]


def test_sealed_lines_never_start_or_end_with_whitespace():
    segments = [
        StyledSegment("  for successfully completing our   program ", "Sans"),
        StyledSegment(" as an ", "Bold"),
        StyledSegment("Interaction Designer  ", "Sans"),
    ]

    for max_width in (20, 45, 80, 130, 1000):
        lines = break_lines(segments, FONTS, 10, max_width)
        assert lines
        for line in lines:
            assert not line.tokens[0].is_whitespace
            assert not line.tokens[-1].is_whitespace
            assert line.width == sum(t.width for t in line.tokens)


def test_empty_and_whitespace_only_input_produce_no_lines():
    assert break_lines([], FONTS, 10, 100) == []
    assert break_lines([StyledSegment("", "Sans")], FONTS, 10, 100) == []
    assert break_lines([StyledSegment("   ", "Sans")], FONTS, 10, 100) == []


def test_newline_is_plain_whitespace():
    lines = break_lines([StyledSegment("one\ntwo", "Sans")], FONTS, 10, 500)

    assert _texts(lines) == ["one\ntwo"]


def test_center_alignment_origin(recorder):
    render_text_block(
        recorder,
        [StyledSegment("abcdefghijklmnopqrst", "Sans")],
        x=50,
        y=500,
        size=12,
        max_width=200,
        align="center",
        fonts=FONTS,
    )

    (call,) = recorder.texts
    assert call[5] == 90
    assert call[6] == 500


def test_right_alignment_hangs_trailing_period(recorder):
    render_text_block(
        recorder,
        [StyledSegment("Done.", "Sans")],
        x=50,
        y=500,
        size=12,
        max_width=200,
        align="right",
        fonts=FONTS,
    )

    (call,) = recorder.texts
    assert call[5] == pytest.approx(50 + (200 - 30) + 3.6)


def test_right_alignment_without_optical_margin(recorder):
    render_text_block(
        recorder,
        [StyledSegment("Done.", "Sans")],
        x=50,
        y=500,
        size=12,
        max_width=200,
        align="right",
        optical_margin=False,
        fonts=FONTS,
    )

    assert recorder.texts[0][5] == 220


def test_left_alignment_starts_at_x_and_advances_by_width(recorder):
    render_text_block(
        recorder,
        [StyledSegment("ab ", "Sans"), StyledSegment("cd", "Bold")],
        x=10,
        y=100,
        size=10,
        fonts=FONTS,
    )

    assert [(c[1], c[5]) for c in recorder.texts] == [
        ("ab", 10),
        (" ", 20),
        ("cd", 25),
    ]
    assert recorder.texts[2][2] is FONTS["Bold"]


def test_baselines_step_down_by_line_height(recorder):
    block = TextBlock(
        x=0,
        y=300,
        size=10,
        max_width=30,
        segments=(StyledSegment("one two three", "Sans"),),
    )

    draw_text_block(recorder, block, FONTS)

    assert [c[6] for c in recorder.texts] == pytest.approx([300, 286, 272])

    explicit = TextBlock(
        x=0,
        y=300,
        size=10,
        max_width=30,
        line_height=18,
        segments=(StyledSegment("one two", "Sans"),),
    )
    recorder.calls.clear()
    draw_text_block(recorder, explicit, FONTS)
    assert [c[6] for c in recorder.texts] == [300, 282]


def test_every_run_uses_block_size_and_color(recorder):
    block = TextBlock(
        x=0,
        y=0,
        size=9,
        color=(0.2, 0.4, 0.6),
        segments=(StyledSegment("a b", "Sans"), StyledSegment("c", "Bold")),
    )

    draw_text_block(recorder, block, FONTS)

    assert {(c[3], c[4]) for c in recorder.texts} == {(9, (0.2, 0.4, 0.6))}


def test_whitespace_only_block_paints_nothing(recorder):
    block = TextBlock(x=0, y=0, segments=(StyledSegment("   ", "Sans"),))

    lines = draw_text_block(recorder, block, FONTS)

    assert lines == []
    assert recorder.calls == []


def test_unknown_font_in_block_raises(recorder):
    block = TextBlock(x=0, y=0, segments=(StyledSegment("hi", "Serif"),))

    with pytest.raises(MissingFontError) as excinfo:
        draw_text_block(recorder, block, FONTS)

    assert excinfo.value.font_name == "Serif"
    assert recorder.calls == []

from xcli.output import OutputConfig, resolve_output_config_from_options, resolve_output_mode, status_prefix
from xcli.styles import pad_visible, strip_ansi, style_text, visible_len


def test_plain_disables_emoji_and_color():
    cfg = resolve_output_config_from_options({"plain": True}, {"FORCE_COLOR": "1"}, True)
    assert cfg == OutputConfig(plain=True, emoji=False, color=False)
    assert status_prefix("err", cfg) == "[err] "


def test_color_follows_tty_and_env():
    assert resolve_output_config_from_options({}, {}, True).color
    assert not resolve_output_config_from_options({}, {}, False).color
    assert not resolve_output_config_from_options({}, {"NO_COLOR": ""}, True).color
    assert not resolve_output_config_from_options({}, {"TERM": "dumb"}, True).color
    assert resolve_output_config_from_options({}, {"FORCE_COLOR": "1"}, False).color
    assert not resolve_output_config_from_options({}, {"FORCE_COLOR": "0"}, True).color
    assert not resolve_output_config_from_options({"color": False}, {"FORCE_COLOR": "1"}, True).color


def test_status_prefix_variants():
    assert status_prefix("ok", OutputConfig(plain=False, emoji=True, color=False)) == "✅ "
    assert status_prefix("warn", OutputConfig(plain=False, emoji=False, color=False)) == "Warning: "


def test_output_mode():
    assert resolve_output_mode(json_output=False, json_pretty=False) == "human"
    assert resolve_output_mode(json_output=True, json_pretty=False) == "json"
    assert resolve_output_mode(json_output=True, json_pretty=True) == "json-pretty"


def test_ansi_helpers():
    styled = style_text("hi", color="red", bold=True)
    assert styled != "hi"
    assert strip_ansi(styled) == "hi"
    assert visible_len(styled) == 2
    assert strip_ansi(pad_visible(styled, 4)) == "hi  "
    assert style_text("hi", color="red", enabled=False) == "hi"

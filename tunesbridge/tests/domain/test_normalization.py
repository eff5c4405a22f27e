import pytest

from tunesbridge.domain.vocabulary import PlayerState, RepeatMode
from tunesbridge.tests.fakes import FakeKeyword


def test_symbol_text_accepts_keywords_strings_and_prefixed_forms():
    from tunesbridge.domain.normalization import symbol_text

    assert symbol_text(FakeKeyword('Playing')) == "playing"
    assert symbol_text("k.all") == "all"
    assert symbol_text("  OFF ") == "off"
    assert symbol_text(2) == "2"


def test_player_state_from_symbol():
    from tunesbridge.domain.normalization import player_state_from_symbol

    assert player_state_from_symbol(FakeKeyword('fast_forwarding')) is PlayerState.FAST_FORWARDING
    assert player_state_from_symbol("k.paused") is PlayerState.PAUSED
    assert player_state_from_symbol("fast forwarding") is PlayerState.FAST_FORWARDING


def test_coarse_player_state_folds_stopped_and_paused():
    from tunesbridge.domain.normalization import coarse_player_state

    assert coarse_player_state(PlayerState.STOPPED) == 0
    assert coarse_player_state(PlayerState.PAUSED) == 0
    assert coarse_player_state(PlayerState.PLAYING) == 1
    assert coarse_player_state(PlayerState.FAST_FORWARDING) == 2
    assert coarse_player_state(PlayerState.REWINDING) == 3


def test_repeat_mode_numeric_encoding():
    from tunesbridge.domain.normalization import repeat_mode_from_index, repeat_mode_index

    assert [repeat_mode_from_index(i) for i in range(3)] == [RepeatMode.OFF, RepeatMode.ONE, RepeatMode.ALL]
    assert repeat_mode_index(RepeatMode.ALL) == 2
    with pytest.raises(IndexError):
        repeat_mode_from_index(3)


@pytest.mark.parametrize("value, expected", [
    (RepeatMode.ONE, RepeatMode.ONE),
    ("all", RepeatMode.ALL),
    ("ALL", RepeatMode.ALL),
    ("k.one", RepeatMode.ONE),
    (FakeKeyword('off'), RepeatMode.OFF),
    (0, RepeatMode.OFF),
    ("1", RepeatMode.ONE),
    (2, RepeatMode.ALL),
])
def test_parse_repeat_mode_recognised_forms(value, expected):
    from tunesbridge.domain.normalization import parse_repeat_mode

    assert parse_repeat_mode(value) is expected


@pytest.mark.parametrize("value", ["bogus", 7, "", None])
def test_parse_repeat_mode_unrecognised_returns_none(value):
    from tunesbridge.domain.normalization import parse_repeat_mode

    assert parse_repeat_mode(value) is None


def test_next_repeat_mode_follows_button_cycle():
    from tunesbridge.domain.normalization import next_repeat_mode

    assert next_repeat_mode(RepeatMode.OFF) is RepeatMode.ALL
    assert next_repeat_mode(RepeatMode.ALL) is RepeatMode.ONE
    assert next_repeat_mode(RepeatMode.ONE) is RepeatMode.OFF


def test_special_kind_index_normalises_separators_and_picks_first_duplicate():
    from tunesbridge.domain.normalization import special_kind_index

    assert special_kind_index("none") == 0
    assert special_kind_index(FakeKeyword('party_shuffle')) == 2
    assert special_kind_index("TV Shows") == 8
    assert special_kind_index("k.audiobooks") == 9
    # "music" is listed twice; lookups land on the first entry
    assert special_kind_index("music") == 1


def test_special_kind_index_unlisted_is_none():
    from tunesbridge.domain.normalization import special_kind_index, special_kind_name

    assert special_kind_index("genius") is None
    assert special_kind_name(None) is None
    assert special_kind_name(4) == "folder"


def test_resolve_special_kind():
    from tunesbridge.domain.normalization import resolve_special_kind

    assert resolve_special_kind(3) == 3
    assert resolve_special_kind("movies") == 7
    with pytest.raises(ValueError):
        resolve_special_kind(10)
    with pytest.raises(ValueError):
        resolve_special_kind(-1)
    with pytest.raises(ValueError):
        resolve_special_kind("genius")

"""Marker-based language guessing."""

from __future__ import annotations

from services.sentiment import analyze, detect_language, marker_counts


def test_portuguese_needs_three_markers_and_a_lead() -> None:
    text = "Não gostei muito, obrigado."

    assert marker_counts(text) == {"portuguese": 3, "spanish": 0}
    assert detect_language(text) == "portuguese"


def test_spanish_detected() -> None:
    text = "Muchas gracias, muy bien, yo"

    assert marker_counts(text)["spanish"] == 4
    assert detect_language(text) == "spanish"


def test_two_markers_each_defaults_to_english() -> None:
    text = "sim obrigado gracias muy"

    assert marker_counts(text) == {"portuguese": 2, "spanish": 2}
    assert detect_language(text) == "english"


def test_tie_above_threshold_defaults_to_english() -> None:
    # "está" and "para" belong to both marker sets
    text = "está para bem bien"

    assert marker_counts(text) == {"portuguese": 3, "spanish": 3}
    assert detect_language(text) == "english"


def test_markers_match_inside_longer_words() -> None:
    assert marker_counts("know")["spanish"] == 1
    assert marker_counts("Europe")["portuguese"] == 1


def test_each_marker_counts_once() -> None:
    assert marker_counts("muito muito muito muito")["portuguese"] == 1
    assert detect_language("muito muito muito muito") == "english"


def test_language_uses_raw_text_not_cleaned_tokens() -> None:
    # Cleaning would turn "bem-vindo" into "bemvindo"; detection still sees "bem".
    result = analyze("Não, para, bem-vindo!")

    assert result.language == "portuguese"


def test_plain_english() -> None:
    assert detect_language("What a lovely afternoon") == "english"
    assert detect_language("") == "english"

from __future__ import annotations

from lakach.shared.fuzzy import fuzzy_filter, fuzzy_score


def test_empty_query_keeps_everything_in_order() -> None:
    names = ["b", "a", "c"]
    assert fuzzy_filter(names, "") == ["b", "a", "c"]
    assert fuzzy_score("anything", "") == 0


def test_non_subsequence_is_dropped() -> None:
    assert fuzzy_score("photos", "xyz") is None
    assert fuzzy_filter(["photos", "music"], "pht") == ["photos"]


def test_smart_case() -> None:
    assert fuzzy_score("Photos", "pho") is not None
    assert fuzzy_score("photos", "Pho") is None
    assert fuzzy_score("Photos", "Pho") is not None


def test_prefix_and_consecutive_matches_rank_first() -> None:
    ranked = fuzzy_filter(["xbackup", "backups", "b_a_c_k"], "back")
    assert ranked[0] == "backups"
    assert set(ranked) == {"xbackup", "backups", "b_a_c_k"}


def test_word_boundary_beats_scattered_match() -> None:
    assert fuzzy_score("old-music", "mu") > fuzzy_score("museum-x", "mx")


def test_ties_keep_original_order() -> None:
    assert fuzzy_filter(["ab1", "ab2", "ab3"], "ab") == ["ab1", "ab2", "ab3"]

import pytest

from where2watch.services.normalizers import (
    normalization_failures,
    normalize,
    normalize_cast,
    normalize_embed_videos,
    normalize_images,
    normalize_seasons,
    normalize_watch_providers,
)


def test_none_gives_fallback():
    assert normalize(None) == []
    assert normalize(None, [{"id": "x"}]) == [{"id": "x"}]


def test_invalid_json_gives_fallback():
    assert normalize("not json") == []


def test_json_array_string_is_parsed():
    assert normalize('[{"a":1}]') == [{"a": 1}]


def test_list_is_returned_as_is():
    raw = [{"name": "Netflix"}, "not even a dict"]
    assert normalize(raw) is raw


@pytest.mark.parametrize("raw", ['{"a": 1}', "42", "null", {"a": 1}, 3.5])
def test_non_array_values_fall_back(raw):
    assert normalize(raw) == []


def test_blank_string_falls_back_without_counting():
    before = normalization_failures["blank"]
    assert normalize("   ", field="blank") == []
    assert normalization_failures["blank"] == before


def test_failures_are_counted_per_field(caplog):
    before = normalization_failures["seasons"]
    assert normalize_seasons("{broken") == []
    assert normalization_failures["seasons"] == before + 1
    assert "seasons" in caplog.text


@pytest.mark.parametrize(
    "raw",
    [None, "", "not json", "[]", '[{"a":1}]', '{"a":1}', [1, 2], {"k": "v"}, 7],
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


@pytest.mark.parametrize(
    "normalizer",
    [
        normalize_watch_providers,
        normalize_cast,
        normalize_seasons,
        normalize_images,
        normalize_embed_videos,
    ],
)
def test_field_normalizers_share_the_contract(normalizer):
    assert normalizer(None) == []
    assert normalizer("oops") == []
    assert normalizer('[{"id": "1"}]') == [{"id": "1"}]

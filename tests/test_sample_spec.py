"""Tests for $sample specification parsing."""

from __future__ import annotations

from pathlib import Path

import pytest
from omegaconf import OmegaConf

from docsample.config import (
    RandomCursorSpec,
    SampleSpec,
    load_sample_config,
    parse_sample_spec,
    parse_stage,
)
from docsample.errors import (
    ConfigurationError,
    MissingSizeError,
    NegativeSizeError,
    NonNumericSizeError,
    NonObjectSpecError,
    UnknownOptionError,
)
from docsample.reservoir.sample import SampleStage


@pytest.mark.parametrize("spec", [1, "string", [1, 2], None])
def test_non_object(spec: object) -> None:
    with pytest.raises(NonObjectSpecError) as exc_info:
        parse_sample_spec(spec)
    assert exc_info.value.code == 28745


@pytest.mark.parametrize("size", ["string", True, None, [3], float("nan")])
def test_non_numeric_size(size: object) -> None:
    with pytest.raises(NonNumericSizeError) as exc_info:
        parse_sample_spec({"size": size})
    assert exc_info.value.code == 28746


@pytest.mark.parametrize("size", [-1, -1.0])
def test_negative_size(size: float) -> None:
    with pytest.raises(NegativeSizeError) as exc_info:
        parse_sample_spec({"size": size})
    assert exc_info.value.code == 28747


def test_extra_option() -> None:
    with pytest.raises(UnknownOptionError) as exc_info:
        parse_sample_spec({"size": 1, "extra": 2})
    assert exc_info.value.code == 28748


def test_missing_size() -> None:
    with pytest.raises(MissingSizeError) as exc_info:
        parse_sample_spec({})
    assert exc_info.value.code == 28749


def test_config_errors_share_base_class() -> None:
    for error in (NonObjectSpecError, NonNumericSizeError, NegativeSizeError,
                  UnknownOptionError, MissingSizeError):
        assert issubclass(error, ConfigurationError)


@pytest.mark.parametrize("size,expected", [(0, 0), (5, 5), (5.0, 5), (2.7, 2)])
def test_valid_sizes(size: float, expected: int) -> None:
    assert parse_sample_spec({"size": size}) == SampleSpec(expected)


def test_accepts_dictconfig() -> None:
    cfg = OmegaConf.create({"size": 12})
    assert parse_sample_spec(cfg).size == 12


def test_serialized_stage_parses_back() -> None:
    stage = SampleStage.create_from_spec({"size": 4})
    assert parse_stage(stage.serialize()) == SampleSpec(4)


def test_parse_stage_requires_sample_key() -> None:
    with pytest.raises(NonObjectSpecError):
        parse_stage({"$limit": 3})


def test_error_to_dict() -> None:
    with pytest.raises(UnknownOptionError) as exc_info:
        parse_sample_spec({"size": 1, "bogus": True})
    payload = exc_info.value.to_dict()
    assert payload["error_type"] == "UnknownOptionError"
    assert payload["code"] == 28748
    assert payload["details"] == {"option": "bogus"}


def test_load_sample_config_stage_document(tmp_path: Path) -> None:
    path = tmp_path / "sample.yaml"
    path.write_text("$sample:\n  size: 9\n", encoding="utf-8")
    assert load_sample_config(path) == SampleSpec(9)


def test_load_sample_config_bare_options(tmp_path: Path) -> None:
    path = tmp_path / "sample.yaml"
    path.write_text("size: 3\n", encoding="utf-8")
    assert load_sample_config(path) == SampleSpec(3)


def test_load_sample_config_rejects_bad_file(tmp_path: Path) -> None:
    path = tmp_path / "sample.yaml"
    path.write_text("size: 3\nextra: 1\n", encoding="utf-8")
    with pytest.raises(UnknownOptionError):
        load_sample_config(path)
    with pytest.raises(FileNotFoundError):
        load_sample_config(tmp_path / "missing.yaml")


def test_default_config_ships_with_repo() -> None:
    path = Path(__file__).resolve().parents[1] / "configs" / "sample" / "default.yaml"
    assert load_sample_config(path).size == 100


def test_random_cursor_spec_defaults() -> None:
    spec = RandomCursorSpec(size=2, population_estimate=10)
    assert spec.id_field == "_id"
    assert spec.max_consecutive_duplicates == 500

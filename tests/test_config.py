"""Tests for RunConfig validation."""

from pathlib import Path

import pytest

from tracklab.config import DEFAULT_DATA_PATH, THRESHOLD_GRID, RunConfig
from tracklab.errors import InvalidFractionError, InvalidRangeError, SchemaError, TracklabError


class TestRunConfig:
    def test_defaults(self):
        config = RunConfig()
        assert config.train_fraction == 0.8
        assert config.threshold == 0.5
        assert config.threshold_grid == THRESHOLD_GRID
        assert config.resolved_data_path == Path(DEFAULT_DATA_PATH)

    @pytest.mark.parametrize("kwargs,error", [
        ({"train_fraction": 1.0}, InvalidFractionError),
        ({"train_fraction": 0.0}, InvalidFractionError),
        ({"validation_fraction": 1.2}, InvalidFractionError),
        ({"threshold": 1.0}, InvalidRangeError),
        ({"threshold_grid": [0.5, 0.0]}, InvalidRangeError),
    ])
    def test_invalid_settings(self, kwargs, error):
        with pytest.raises(error):
            RunConfig(**kwargs)

    def test_data_path_override(self, tmp_path):
        config = RunConfig(data_path=str(tmp_path / "x.csv"))
        assert config.resolved_data_path == tmp_path / "x.csv"


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(SchemaError, TracklabError)
        assert issubclass(SchemaError, ValueError)
        assert issubclass(InvalidFractionError, ValueError)

    def test_schema_error_names_column(self):
        error = SchemaError("year", "missing")
        assert error.column == "year"
        assert str(error) == "Column 'year': missing"

"""Unit tests for the Result type."""

import pytest

from infraview.core.exceptions import GraphNotFoundError
from infraview.core.result import Err, Ok, map_ok


class TestResult:
    def test_ok(self):
        result = Ok(3)
        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 3
        assert result.unwrap_or(0) == 3

    def test_err_unwrap_raises_contained_exception(self):
        result = Err(GraphNotFoundError("graph.json"))
        assert result.is_err()
        with pytest.raises(GraphNotFoundError):
            result.unwrap()

    def test_err_unwrap_plain_value(self):
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_unwrap_or(self):
        assert Err("boom").unwrap_or(7) == 7

    def test_map_ok(self):
        assert map_ok(Ok(2), lambda v: v * 10) == Ok(20)
        err = Err("boom")
        assert map_ok(err, lambda v: v * 10) is err

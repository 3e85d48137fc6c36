"""Tests for distui.core.result module."""

import pytest

from distui.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_value(self) -> None:
        """Ok carries its value."""
        assert Ok(42).value == 42

    def test_predicates(self) -> None:
        """Ok reports ok, not err."""
        result = Ok("x")
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap(self) -> None:
        """unwrap and unwrap_or return the value."""
        assert Ok(3).unwrap() == 3
        assert Ok(3).unwrap_or(0) == 3

    def test_map(self) -> None:
        """map transforms the value; map_err leaves Ok alone."""
        assert Ok(21).map(lambda x: x * 2) == Ok(42)
        assert Ok(1).map_err(lambda e: f"wrapped {e}") == Ok(1)

    def test_frozen(self) -> None:
        """Ok is immutable."""
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]

    def test_repr(self) -> None:
        """Ok has a readable repr."""
        assert repr(Ok("a")) == "Ok('a')"


class TestErr:
    """Tests for Err type."""

    def test_error(self) -> None:
        """Err carries its error."""
        assert Err("boom").error == "boom"

    def test_predicates(self) -> None:
        """Err reports err, not ok."""
        result = Err("boom")
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_unwrap_raises(self) -> None:
        """unwrap on Err raises ValueError with the error text."""
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_unwrap_or(self) -> None:
        """unwrap_or returns the default."""
        assert Err("boom").unwrap_or(7) == 7

    def test_map(self) -> None:
        """map leaves Err alone; map_err transforms the error."""
        assert Err("e").map(lambda x: x) == Err("e")
        assert Err("e").map_err(str.upper) == Err("E")


class TestNarrowing:
    """Tests for is_ok / is_err and match-based narrowing."""

    def test_type_guards(self) -> None:
        """is_ok and is_err agree with the variant."""
        good: Result[int, str] = Ok(1)
        bad: Result[int, str] = Err("no")
        assert is_ok(good) and not is_err(good)
        assert is_err(bad) and not is_ok(bad)

    def test_match(self) -> None:
        """Results can be destructured with match."""
        result: Result[int, str] = Err("missing")
        match result:
            case Ok(value):
                pytest.fail(f"unexpected Ok({value})")
            case Err(error):
                assert error == "missing"

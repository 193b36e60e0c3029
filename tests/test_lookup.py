"""Test ``swfini.lookup``."""

from swfini import lookup as tscr
import pytest
from unittest import mock
import swfini


class TestExecutableLookup:
    """Test ``swfini.lookup.ExecutableLookup``."""
    @pytest.fixture
    def executables(self):
        """Example executables."""
        return {"spam": mock.Mock(), "bla": mock.Mock()}

    @pytest.fixture
    def lookup(self, executables):
        """An example ExecutableLookup instance."""
        lookup = tscr.ExecutableLookup()
        [lookup.add(n, e) for n, e in executables.items()]
        return lookup

    def test_init(self):
        """Empty lookup."""
        lookup = tscr.ExecutableLookup()
        assert len(lookup) == 0
        assert lookup.names == []

    def test_repr(self, lookup):
        """ExecutableLookup string representation."""
        assert repr(lookup) == "ExecutableLookup(['bla', 'spam'])"

    def test_contains(self, lookup):
        """Membership by name."""
        assert "spam" in lookup
        assert "eggs" not in lookup

    def test_names(self, lookup):
        """Registered names are sorted."""
        assert len(lookup) == 2
        assert lookup.names == ["bla", "spam"]

    def test_find(self, lookup, executables):
        """Executable retrieval."""
        assert lookup.find("spam") is executables["spam"]
        assert lookup.find("eggs") is None

    def test_add_duplicate(self, lookup, executables):
        """Name already registered."""
        with pytest.raises(ValueError):
            lookup.add("spam", mock.Mock())
        assert lookup.find("spam") is executables["spam"]


class TestErrors:
    """Test ``swfini.errors``."""
    @pytest.mark.parametrize(
        ("exc_class", "kind"),
        [
            (swfini.errors.ActivityNotRegistered, "Activity"),
            (swfini.errors.WorkflowNotRegistered, "Workflow")])
    def test_not_registered(self, exc_class, kind):
        """Executable not found in lookup."""
        exc = exc_class("spam")
        assert isinstance(exc, swfini.errors.SwfiniError)
        assert exc.name == "spam"
        assert str(exc) == "%s 'spam' is not registered with this worker" % (
            kind)

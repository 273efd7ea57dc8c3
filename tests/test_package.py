"""Tests for tabby package exports and metadata."""

import tabby


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(tabby.__version__, str)
        assert "0.1.0" in tabby.__version__

    def test_free_threading_declaration(self) -> None:
        assert tabby._Py_mod_gil == 0

    def test_all_exports_resolvable(self) -> None:
        for name in tabby.__all__:
            getattr(tabby, name)

    def test_lazy_exports(self) -> None:
        from tabby.export import Exporter

        assert tabby.Exporter is Exporter

    def test_invalid_attribute_raises(self) -> None:
        import pytest

        with pytest.raises(AttributeError, match="no attribute"):
            tabby.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018

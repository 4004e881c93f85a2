"""Unit tests for database name resolution."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from db_launcher.domain.services import resolve, storage_prefix
from db_launcher.domain.value_objects import FILE_PREFIX, MEMORY_PREFIX, URL_PROPERTIES


@pytest.mark.unit
class TestResolve:
    """Examples from the launcher documentation."""

    def test_plain_name(self) -> None:
        identity = resolve("testdb", is_transient=True)

        assert identity.name == "testdb"
        assert identity.storage_prefix == "mem:"
        assert identity.connection_url == "mem:testdb;sql.enforce_strict_size=true"
        assert identity.is_transient

    def test_path_name_is_shortened(self) -> None:
        identity = resolve("data/testdb", is_transient=False)

        assert identity.name == "testdb"
        assert identity.storage_prefix == "file:"
        # The URL keeps the full path
        assert identity.connection_url == "file:data/testdb;sql.enforce_strict_size=true"
        assert not identity.is_transient

    def test_last_separator_wins(self) -> None:
        assert resolve("a/b/c/db", is_transient=False).name == "db"

    def test_trailing_separator_gives_empty_name(self) -> None:
        assert resolve("data/", is_transient=False).name == ""

    def test_no_trimming(self) -> None:
        identity = resolve(" spaced db ", is_transient=True)
        assert identity.name == " spaced db "
        assert identity.connection_url == "mem: spaced db ;sql.enforce_strict_size=true"

    def test_storage_prefix(self) -> None:
        assert storage_prefix(True) == "mem:"
        assert storage_prefix(False) == "file:"


name_segment = st.text(alphabet=st.characters(exclude_characters="/"), max_size=20)


@pytest.mark.property
class TestResolveProperties:
    """Property-based tests for resolve()."""

    @given(head=st.text(max_size=20), tail=name_segment, transient=st.booleans())
    def test_name_is_text_after_last_separator(self, head: str, tail: str, transient: bool) -> None:
        identity = resolve(head + "/" + tail, transient)
        assert identity.name == tail

    @given(db_name=name_segment, transient=st.booleans())
    def test_name_without_separator_is_unchanged(self, db_name: str, transient: bool) -> None:
        assert resolve(db_name, transient).name == db_name

    @given(db_name=st.text(max_size=40), transient=st.booleans())
    def test_url_uses_full_name(self, db_name: str, transient: bool) -> None:
        identity = resolve(db_name, transient)
        expected_prefix = MEMORY_PREFIX if transient else FILE_PREFIX

        assert identity.storage_prefix == expected_prefix
        assert identity.connection_url == expected_prefix + db_name + URL_PROPERTIES

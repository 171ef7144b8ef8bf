"""Tests for ItemRegistry."""

import pytest

from readtrack.db.schemas import ReadingItemCreate, ReadingItemUpdate
from readtrack.library.registry import ItemRegistry, compute_pages_read
from readtrack.errors import NotFoundError, ValidationError


@pytest.fixture
def registry(db):
    """Create an ItemRegistry with test database."""
    return ItemRegistry(db)


class TestComputePagesRead:
    """Tests for the page delta rule."""

    def test_forward(self):
        """Test a forward move."""
        assert compute_pages_read(100, 150) == 50

    def test_first_update(self):
        """Test a first update with no previous page."""
        assert compute_pages_read(None, 40) == 40

    def test_backward_clamps_to_zero(self):
        """Test that moving backwards reads zero pages."""
        assert compute_pages_read(150, 100) == 0

    def test_same_page(self):
        """Test an unchanged page."""
        assert compute_pages_read(80, 80) == 0


class TestUpsertOnProgress:
    """Tests for upsert_on_progress."""

    def test_creates_item(self, registry, user_id):
        """Test that the first update creates the item."""
        item, pages_read = registry.upsert_on_progress(
            user_id, "Sapiens", 100, author="Yuval Noah Harari", total_pages=443
        )

        assert item.id is not None
        assert item.title == "Sapiens"
        assert item.current_page == 100
        assert item.total_pages == 443
        assert pages_read == 100

    def test_updates_existing_item(self, registry, user_id):
        """Test that a second update reuses the item."""
        first, _ = registry.upsert_on_progress(user_id, "Sapiens", 100, author="Harari")
        second, pages_read = registry.upsert_on_progress(user_id, "Sapiens", 160, author="Harari")

        assert second.id == first.id
        assert second.current_page == 160
        assert pages_read == 60
        assert len(registry.list_for_user(user_id)) == 1

    def test_backward_move_sets_current_page(self, registry, user_id):
        """Test that the current page follows a backwards move."""
        registry.upsert_on_progress(user_id, "Sapiens", 150)
        item, pages_read = registry.upsert_on_progress(user_id, "Sapiens", 100)

        assert item.current_page == 100
        assert pages_read == 0

    def test_total_pages_only_when_positive(self, registry, user_id):
        """Test that zero or missing totals keep the stored value."""
        registry.upsert_on_progress(user_id, "Sapiens", 10, total_pages=443)
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 20, total_pages=0)
        assert item.total_pages == 443

        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 30)
        assert item.total_pages == 443

        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 40, total_pages=500)
        assert item.total_pages == 500

    def test_new_item_without_total(self, registry, user_id):
        """Test that a new item without a page count has zero total."""
        item, _ = registry.upsert_on_progress(user_id, "Untitled Notes", 5, total_pages=-3)

        assert item.total_pages == 0

    def test_author_is_part_of_identity(self, registry, user_id):
        """Test that the same title by different authors is two items."""
        a, _ = registry.upsert_on_progress(user_id, "Meditations", 10, author="Marcus Aurelius")
        b, _ = registry.upsert_on_progress(user_id, "Meditations", 10, author="Descartes")

        assert a.id != b.id
        assert len(registry.list_for_user(user_id)) == 2

    def test_missing_author_matches_empty(self, registry, user_id):
        """Test that no author and an empty author are the same item."""
        a, _ = registry.upsert_on_progress(user_id, "Zine", 5)
        b, _ = registry.upsert_on_progress(user_id, "Zine", 9, author="  ")

        assert a.id == b.id
        assert b.author == ""

    def test_users_are_isolated(self, registry, user_id, other_user_id):
        """Test that two users never share an item."""
        mine, _ = registry.upsert_on_progress(user_id, "Sapiens", 100)
        theirs, pages_read = registry.upsert_on_progress(other_user_id, "Sapiens", 20)

        assert mine.id != theirs.id
        assert pages_read == 20

    def test_blank_title_rejected(self, registry, user_id):
        """Test that a blank title is rejected."""
        with pytest.raises(ValidationError):
            registry.upsert_on_progress(user_id, "  ", 10)

    def test_page_beyond_total_is_stored(self, registry, user_id, caplog):
        """Test that a page past the end is kept and warned about."""
        item, _ = registry.upsert_on_progress(user_id, "Short Book", 120, total_pages=100)

        assert item.current_page == 120
        assert "exceeds total pages" in caplog.text


class TestDirectEdits:
    """Tests for create_or_update_direct, update_item and delete_item."""

    def test_create_direct(self, registry, user_id):
        """Test adding an item from the library page."""
        item = registry.create_or_update_direct(
            user_id,
            ReadingItemCreate(title="Thinking, Fast and Slow", author="Kahneman", total_pages=499),
        )

        assert item.total_pages == 499
        assert item.current_page == 0

    def test_direct_update_keeps_unsupplied_fields(self, registry, user_id):
        """Test that a partial edit leaves other fields alone."""
        registry.create_or_update_direct(
            user_id,
            ReadingItemCreate(title="Sapiens", topic="History", total_pages=443, current_page=50),
        )
        item = registry.create_or_update_direct(
            user_id, ReadingItemCreate(title="Sapiens", current_page=80)
        )

        assert item.current_page == 80
        assert item.total_pages == 443
        assert item.topic == "History"

    def test_update_item_by_id(self, registry, user_id):
        """Test updating an item by id."""
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 10)
        updated = registry.update_item(
            user_id, item.id, ReadingItemUpdate(total_pages=443, school="Big History")
        )

        assert updated.total_pages == 443
        assert updated.school == "Big History"
        assert updated.current_page == 10

    def test_update_other_users_item(self, registry, user_id, other_user_id):
        """Test that another user's item cannot be updated."""
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 10)

        with pytest.raises(NotFoundError):
            registry.update_item(other_user_id, item.id, ReadingItemUpdate(total_pages=1))

    def test_delete_item(self, registry, user_id):
        """Test deleting an item."""
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 10)
        registry.delete_item(user_id, item.id)

        assert registry.list_for_user(user_id) == []
        with pytest.raises(NotFoundError):
            registry.get_item(user_id, item.id)

    def test_delete_missing_item(self, registry, user_id):
        """Test deleting an item that does not exist."""
        with pytest.raises(NotFoundError):
            registry.delete_item(user_id, "no-such-id")


class TestLookup:
    """Tests for find_item and list_for_user."""

    def test_find_item(self, registry, user_id):
        """Test finding an item by title and author."""
        registry.upsert_on_progress(user_id, "Sapiens", 10, author="Harari")

        assert registry.find_item(user_id, "Sapiens", "Harari") is not None
        assert registry.find_item(user_id, "Sapiens") is None

    def test_list_most_recent_first(self, registry, user_id):
        """Test that the most recently updated item comes first."""
        registry.upsert_on_progress(user_id, "First", 10)
        registry.upsert_on_progress(user_id, "Second", 10)
        registry.upsert_on_progress(user_id, "First", 20)

        titles = [item.title for item in registry.list_for_user(user_id)]
        assert titles == ["First", "Second"]


class TestRenameItem:
    """Tests for changing an item's title or author by id."""

    def test_rename(self, registry, user_id):
        """Test renaming an item to a free identity."""
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 10, author="Harari")
        renamed = registry.update_item(user_id, item.id, ReadingItemUpdate(title="Homo Deus"))

        assert renamed.title == "Homo Deus"
        assert registry.find_item(user_id, "Homo Deus", "Harari") is not None

    def test_rename_onto_existing_identity(self, registry, user_id):
        """Test that taking another item's title and author is rejected."""
        registry.upsert_on_progress(user_id, "A", 10, author="X")
        b, _ = registry.upsert_on_progress(user_id, "B", 20, author="X")

        with pytest.raises(ValidationError, match="already has this title and author"):
            registry.update_item(user_id, b.id, ReadingItemUpdate(title="A"))

        unchanged = registry.get_item(user_id, b.id)
        assert unchanged.title == "B"
        assert unchanged.current_page == 20

    def test_change_author_onto_existing_identity(self, registry, user_id):
        """Test that an author change colliding with another item is rejected."""
        registry.upsert_on_progress(user_id, "Meditations", 10, author="Marcus Aurelius")
        other, _ = registry.upsert_on_progress(user_id, "Meditations", 5, author="Descartes")

        with pytest.raises(ValidationError):
            registry.update_item(
                user_id, other.id, ReadingItemUpdate(author=" Marcus Aurelius ")
            )

    def test_same_identity_other_user(self, registry, user_id, other_user_id):
        """Test that another user's item does not block a rename."""
        registry.upsert_on_progress(other_user_id, "A", 10)
        item, _ = registry.upsert_on_progress(user_id, "B", 10)

        assert registry.update_item(user_id, item.id, ReadingItemUpdate(title="A")).title == "A"

    def test_unchanged_identity(self, registry, user_id):
        """Test that resending the current title is not a conflict."""
        item, _ = registry.upsert_on_progress(user_id, "Sapiens", 10)

        updated = registry.update_item(
            user_id, item.id, ReadingItemUpdate(title="Sapiens", total_pages=443)
        )
        assert updated.total_pages == 443

"""Tests for sequence-based ID generation."""

import sqlite3
import pytest

from browserforge.persistence.sequences import SequenceService


@pytest.fixture
def conn():
    """Create in-memory database connection."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def service(conn):
    """Create sequence service with test connection."""
    return SequenceService(conn)


class TestSequenceService:
    """Tests for SequenceService."""

    def test_first_id_starts_at_1(self, service):
        assert service.next_id("Book", "BOO") == "BOO-00001"

    def test_ids_increment(self, service):
        ids = [service.next_id("Book", "BOO") for _ in range(3)]
        assert ids == ["BOO-00001", "BOO-00002", "BOO-00003"]

    def test_different_entities_have_separate_sequences(self, service):
        book_id = service.next_id("Book", "BOO")
        publication_id = service.next_id("Publication", "PUB")
        book_id2 = service.next_id("Book", "BOO")

        assert book_id == "BOO-00001"
        assert publication_id == "PUB-00001"
        assert book_id2 == "BOO-00002"

    def test_padding_grows_past_five_digits(self, service, conn):
        conn.execute("INSERT INTO _sequences (entity, next_value) VALUES ('Book', 100000)")
        assert service.next_id("Book", "BOO") == "BOO-100000"

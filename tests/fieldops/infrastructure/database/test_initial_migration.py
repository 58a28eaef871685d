"""Unit tests for the initial schema migration."""
import importlib.util
from pathlib import Path
from unittest.mock import patch

import pytest

MIGRATION_PATH = (
    Path(__file__).parents[4]
    / "fieldops_api" / "infrastructure" / "database" / "migrations" / "versions" / "0001_initial_schema.py"
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.unit
class TestInitialMigration:
    """Tests for 0001_initial_schema."""

    def test_revision_identifiers(self):
        migration = _load_migration()

        assert migration.revision == "0001"
        assert migration.down_revision is None

    def test_upgrade_creates_tables(self):
        migration = _load_migration()

        with patch.object(migration, "op") as mock_op:
            migration.upgrade()

        tables = [c.args[0] for c in mock_op.create_table.call_args_list]
        assert tables == ["property", "document", "extraction_session", "extraction_run", "extraction_run_item"]

    def test_downgrade_drops_tables(self):
        migration = _load_migration()

        with patch.object(migration, "op") as mock_op:
            migration.downgrade()

        dropped = {c.args[0] for c in mock_op.drop_table.call_args_list}
        assert dropped == {"property", "document", "extraction_session", "extraction_run", "extraction_run_item"}

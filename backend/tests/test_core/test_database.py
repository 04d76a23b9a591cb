"""
Tests for SQLite transaction handling in core.database

Reads open a plain deferred transaction and never hold the write lock;
write units opened with begin_write take it up front.
"""
import sqlite3
from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.core.database import begin_write
from storefront.models import Product
from storefront.services.checkout_service import CheckoutService
from storefront.services.reporting_service import ReportingService


@pytest.fixture
def other_writer(engine):
    """Provides a function that tries to take the write lock from another connection"""
    def _try_write_lock() -> bool:
        conn = sqlite3.connect(engine.url.database, timeout=0)
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute("ROLLBACK")
            return True
        except sqlite3.OperationalError:
            return False
        finally:
            conn.close()

    return _try_write_lock


class TestTransactions:
    """Write lock only for write units"""

    def test_read_transaction_takes_no_write_lock(self, db_session, seed, other_writer):
        db_session.execute(select(Product)).all()

        assert db_session.in_transaction()
        assert other_writer() is True

    def test_begin_write_takes_write_lock(self, db_session, seed, other_writer):
        begin_write(db_session)

        assert other_writer() is False

        db_session.rollback()
        assert other_writer() is True

    def test_begin_write_discards_open_read(self, db_session, seed, other_writer):
        db_session.execute(select(Product)).all()

        begin_write(db_session)

        assert db_session.in_transaction()
        assert other_writer() is False
        db_session.rollback()

    def test_checkout_succeeds_while_report_session_is_open(self, session_factory, seed, stock_of):
        report_session = session_factory()
        try:
            report = ReportingService(report_session).get_stock_health()
            assert report_session.in_transaction()

            with session_factory() as session:
                order = CheckoutService(session).create_order(seed.alice, [(seed.brew, 2)])

            assert order.total == Decimal("14.50")
            assert stock_of(seed.brew) == 18
            assert len(report.items) == 4
        finally:
            report_session.close()

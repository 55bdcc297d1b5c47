"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from justping.models import Business
from justping.uow import SQLAlchemyUnitOfWork
from tests.factories.business import BusinessFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a business via the repo and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = session.query(Business).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.businesses.add(BusinessFactory.build())

        session.rollback()
        assert session.query(Business).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN nothing is persisted.
        """
        initial = session.query(Business).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.businesses.add(BusinessFactory.build())
            raise RuntimeError("boom")

        assert session.query(Business).count() == initial

    def test_repositories_share_the_session(self, app, db):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.businesses.session is uow.roles.session
            assert uow.token_blacklist.session is uow.session

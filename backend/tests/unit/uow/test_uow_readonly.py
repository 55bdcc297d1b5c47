import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from justping.models import Business
from justping.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from justping.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.business import BusinessFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(BusinessFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, app, db):
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("INSERT INTO business (id, name) VALUES (:id, :name)"),
                {"id": "b-1", "name": "Sneaky"},
            )

    def test_allows_reads(self, app, db):
        with RWuow() as uow:
            uow.businesses.add(BusinessFactory.build())

        with ROuow() as uow:
            assert uow.session.query(Business).count() >= 1

    def test_disallows_commit(self, app, db):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, app, db):
        with RWuow() as uow:
            business = uow.businesses.add(BusinessFactory.build(name="Original"))
            business_id = business.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            b = uow.session.get(Business, business_id)
            b.name = "Mutated"
            uow.session.flush()

        with RWuow() as uow:
            assert uow.session.get(Business, business_id).name == "Original"

    def test_binds_the_concrete_session(self, app, db):
        with ROuow() as uow:
            assert isinstance(uow.session, Session)
            assert uow.session is db.session()
            assert uow.users.exists_by_email("nobody@example.com") is False

    def test_attaches_to_an_open_transaction(self, app, db, session):
        session.add(BusinessFactory.build(name="Pending"))
        session.flush()
        assert session().in_transaction()

        with ROuow() as uow:
            assert uow.session.query(Business).filter_by(name="Pending").count() == 1

        # the outer transaction is neither committed nor rolled back by the read-only UoW
        assert session().in_transaction()
        session.rollback()

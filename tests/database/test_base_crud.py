"""BaseCRUD tests.

Tests for:
- get_by_id / get_all with filters and ordering
- update_by_id (updated_at bump) and delete_by_id
- _to_dict
- external session support
"""
from datetime import datetime

from database.base_crud import BaseCRUD
from database.models import Service, User


def _add_service(db, name, business_id="b1", created_at=None, active=True):
    return db.services.add(business_id, {
        "name": name,
        "is_active": active,
        "created_at": created_at or datetime.utcnow(),
    })


class TestBaseCRUD:
    """Generic CRUD operations."""

    def test_get_by_id_missing_returns_none(self, temp_db):
        crud = BaseCRUD(temp_db.conn)
        assert crud.get_by_id(User, "nobody") is None

    def test_get_all_with_filters_and_order(self, temp_db):
        _add_service(temp_db, "B", created_at=datetime(2024, 1, 2))
        _add_service(temp_db, "A", created_at=datetime(2024, 1, 1))
        _add_service(temp_db, "C", business_id="b2")

        crud = BaseCRUD(temp_db.conn)
        rows = crud.get_all(Service, filters={"business_id": "b1"},
                            order_by=Service.created_at.asc())
        assert [r.name for r in rows] == ["A", "B"]

    def test_update_by_id_bumps_updated_at(self, temp_db):
        service_id = _add_service(temp_db, "Corte", created_at=datetime(2024, 1, 1))
        crud = BaseCRUD(temp_db.conn)
        with temp_db.get_session() as session:
            session.get(Service, service_id).updated_at = datetime(2024, 1, 1)
            session.commit()

        updated = crud.update_by_id(Service, service_id, price=120.0)
        assert updated.price == 120.0
        assert updated.updated_at > datetime(2024, 1, 1)

    def test_update_by_id_missing_returns_none(self, temp_db):
        crud = BaseCRUD(temp_db.conn)
        assert crud.update_by_id(Service, 999, price=1.0) is None

    def test_delete_by_id(self, temp_db):
        service_id = _add_service(temp_db, "Corte")
        crud = BaseCRUD(temp_db.conn)
        assert crud.delete_by_id(Service, service_id) is True
        assert crud.delete_by_id(Service, service_id) is False

    def test_external_session_is_not_committed(self, temp_db):
        crud = BaseCRUD(temp_db.conn)
        with temp_db.get_session() as session:
            temp_db.users.get_or_create("u1", session=session)
            assert crud.get_by_id(User, "u1", session=session) is not None
            session.rollback()
        assert crud.get_by_id(User, "u1") is None

    def test_to_dict(self, temp_db):
        service_id = _add_service(temp_db, "Corte")
        row = BaseCRUD(temp_db.conn).get_by_id(Service, service_id)
        data = BaseCRUD._to_dict(row)
        assert data["name"] == "Corte"
        assert data["business_id"] == "b1"
        assert "created_at" in data

    def test_to_dict_none(self):
        assert BaseCRUD._to_dict(None) is None

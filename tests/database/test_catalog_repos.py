"""Catalog repository tests.

Tests for:
- business-scoped add / get / update / delete (services, employees, portfolio)
- listing order per sub-collection
- ReviewRepository.add_with_aggregate (atomic rating update, concurrent submissions)
- AppointmentRepository / CustomerRepository queries
"""
import threading
import time
from datetime import datetime

from sqlalchemy.exc import OperationalError

from tests.conftest import make_business


class TestServiceRepository:
    """Tests for ServiceRepository."""

    def test_add_and_list_oldest_first(self, temp_db):
        temp_db.services.add("b1", {"name": "Segundo", "created_at": datetime(2024, 1, 2)})
        temp_db.services.add("b1", {"name": "Primero", "created_at": datetime(2024, 1, 1)})
        names = [s.name for s in temp_db.services.get_services("b1")]
        assert names == ["Primero", "Segundo"]

    def test_active_only(self, temp_db):
        temp_db.services.add("b1", {"name": "Activo"})
        temp_db.services.add("b1", {"name": "Inactivo", "is_active": False})
        names = [s.name for s in temp_db.services.get_services("b1", active_only=True)]
        assert names == ["Activo"]

    def test_update_scoped_to_business(self, temp_db):
        service_id = temp_db.services.add("b1", {"name": "Corte"})
        assert temp_db.services.update_for("b2", service_id, {"price": 1.0}) is None
        updated = temp_db.services.update_for("b1", service_id, {"price": 150.0})
        assert updated.price == 150.0

    def test_delete_scoped_to_business(self, temp_db):
        service_id = temp_db.services.add("b1", {"name": "Corte"})
        assert temp_db.services.delete_for("b2", service_id) is False
        assert temp_db.services.delete_for("b1", service_id) is True
        assert temp_db.services.get_services("b1") == []


class TestEmployeeRepository:
    """Tests for EmployeeRepository."""

    def test_count_and_active_filter(self, temp_db):
        temp_db.employees.add("b1", {"name": "Ana"})
        temp_db.employees.add("b1", {"name": "Luis", "active": False})
        temp_db.employees.add("b2", {"name": "Otro"})
        assert temp_db.employees.count("b1") == 2
        names = [e.name for e in temp_db.employees.get_employees("b1", active_only=True)]
        assert names == ["Ana"]

    def test_availability_round_trip(self, temp_db):
        weekly = {"monday": {"enabled": True, "start": "09:00", "end": "17:00"}}
        employee_id = temp_db.employees.add("b1", {"name": "Ana", "availability_weekly": weekly})
        stored = temp_db.employees.get_for("b1", employee_id)
        assert stored.availability_weekly == weekly


class TestPortfolioRepository:
    """Tests for PortfolioRepository."""

    def test_posts_newest_first(self, temp_db):
        temp_db.portfolio.add("b1", {"image_url": "https://cdn/old.jpg",
                                     "created_at": datetime(2024, 1, 1)})
        temp_db.portfolio.add("b1", {"image_url": "https://cdn/new.jpg",
                                     "created_at": datetime(2024, 2, 1)})
        urls = [p.image_url for p in temp_db.portfolio.get_posts("b1")]
        assert urls == ["https://cdn/new.jpg", "https://cdn/old.jpg"]


class TestReviewRepository:
    """Tests for ReviewRepository.add_with_aggregate."""

    def _review(self, rating):
        return {"user_id": "u1", "user_name": "Cliente", "rating": rating,
                "comment": "Excelente servicio, muy puntual."}

    def test_first_review_sets_rating(self, temp_db):
        make_business(temp_db, "b1")
        review_id, rating, count = temp_db.reviews.add_with_aggregate("b1", self._review(5))
        assert review_id > 0
        assert rating == 5.0
        assert count == 1

    def test_aggregate_rounds_to_one_decimal(self, temp_db):
        make_business(temp_db, "b1", rating=4.0, review_count=2)
        _, rating, count = temp_db.reviews.add_with_aggregate("b1", self._review(5))
        assert rating == 4.3
        assert count == 3
        public = temp_db.get_public_business("b1")
        assert public["rating"] == 4.3
        assert public["review_count"] == 3

    def test_sequential_reviews_accumulate(self, temp_db):
        make_business(temp_db, "b1")
        for value in (5, 4, 3):
            temp_db.reviews.add_with_aggregate("b1", self._review(value))
        public = temp_db.get_public_business("b1")
        assert public["review_count"] == 3
        assert public["rating"] == 4.0
        assert len(temp_db.reviews.get_reviews("b1")) == 3

    def test_missing_business_writes_nothing(self, temp_db):
        assert temp_db.reviews.add_with_aggregate("missing", self._review(5)) is None
        assert temp_db.reviews.get_reviews("missing") == []

    def test_concurrent_reviews_keep_every_update(self, temp_db):
        """Reviews submitted from several threads are all counted."""
        make_business(temp_db, "b1")
        workers = 8
        barrier = threading.Barrier(workers)
        counts, errors = [], []

        def submit():
            barrier.wait()
            for _ in range(200):
                try:
                    _, _, count = temp_db.reviews.add_with_aggregate("b1", self._review(4))
                    counts.append(count)
                    return
                except OperationalError:
                    # SQLite allows one writer at a time
                    time.sleep(0.01)
            errors.append("gave up")

        threads = [threading.Thread(target=submit) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sorted(counts) == list(range(1, workers + 1))
        public = temp_db.get_public_business("b1")
        assert public["review_count"] == workers
        assert public["rating"] == 4.0
        assert len(temp_db.reviews.get_reviews("b1")) == workers


class TestAppointmentRepository:
    """Tests for AppointmentRepository."""

    def _add(self, db, business_id, day, **fields):
        data = {"customer_name": "Cliente", "date": datetime(2024, 5, day, 10, 0)}
        data.update(fields)
        return db.appointments.add(business_id, data)

    def test_range_is_inclusive_and_ordered(self, temp_db):
        self._add(temp_db, "b1", 12)
        self._add(temp_db, "b1", 10)
        self._add(temp_db, "b1", 20)
        self._add(temp_db, "b2", 11)
        found = temp_db.appointments.get_in_range(
            "b1", datetime(2024, 5, 10, 10, 0), datetime(2024, 5, 12, 10, 0),
        )
        assert [a.date.day for a in found] == [10, 12]

    def test_by_employee_newest_first(self, temp_db):
        self._add(temp_db, "b1", 1, employee_id=7)
        self._add(temp_db, "b1", 3, employee_id=7)
        self._add(temp_db, "b1", 2, employee_id=8)
        found = temp_db.appointments.get_by_employee("b1", 7)
        assert [a.date.day for a in found] == [3, 1]

    def test_by_customer(self, temp_db):
        self._add(temp_db, "b1", 1, customer_id=5)
        self._add(temp_db, "b1", 2)
        assert len(temp_db.appointments.get_by_customer("b1", 5)) == 1


class TestCustomerRepository:
    """Tests for CustomerRepository."""

    def test_list_sorted_by_name_without_archived(self, temp_db):
        temp_db.customers.add("b1", {"full_name": "carlos"})
        temp_db.customers.add("b1", {"full_name": "Ana"})
        temp_db.customers.add("b1", {"full_name": "Berta", "archived": True})
        names = [c.full_name for c in temp_db.customers.get_customers("b1")]
        assert names == ["Ana", "carlos"]
        all_names = [c.full_name for c in
                     temp_db.customers.get_customers("b1", include_archived=True)]
        assert all_names == ["Ana", "Berta", "carlos"]

    def test_find_duplicate_by_phone_or_email(self, temp_db):
        first = temp_db.customers.add("b1", {"full_name": "Ana", "phone": "9999",
                                             "email": "ana@example.com"})
        assert temp_db.customers.find_duplicate("b1", phone="9999").id == first
        assert temp_db.customers.find_duplicate("b1", email="ana@example.com").id == first
        assert temp_db.customers.find_duplicate("b2", phone="9999") is None
        assert temp_db.customers.find_duplicate("b1", phone="9999", exclude_id=first) is None
        assert temp_db.customers.find_duplicate("b1") is None

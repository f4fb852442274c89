"""Catalog service tests: services, employees, portfolio and reviews."""
import pytest

from business.catalog_service import (
    EmployeeService, PortfolioService, ReviewsService, ServicesService, new_rating,
)
from business.exceptions import NotFoundError, ValidationError
from tests.conftest import make_business


class TestServicesService:
    """Tests for ServicesService."""

    def test_add_and_list(self, temp_db):
        service = ServicesService(temp_db)
        service_id = service.add_service("b1", {"name": "Corte", "price": 150})
        services = service.get_services("b1")
        assert services[0]["id"] == service_id
        assert services[0]["currency"] == "HNL"
        assert services[0]["duration_minutes"] == 60

    def test_image_limit(self, temp_db):
        images = [f"https://cdn/{i}.jpg" for i in range(11)]
        with pytest.raises(ValidationError) as exc:
            ServicesService(temp_db).add_service("b1", {"name": "Corte", "images": images})
        assert str(exc.value) == "Máximo 10 imágenes por servicio."

    def test_update_partial(self, temp_db):
        service = ServicesService(temp_db)
        service_id = service.add_service("b1", {"name": "Corte", "price": 150})
        updated = service.update_service("b1", service_id, {"price": 175})
        assert updated["price"] == 175
        assert updated["name"] == "Corte"

    def test_update_image_limit(self, temp_db):
        service = ServicesService(temp_db)
        service_id = service.add_service("b1", {"name": "Corte"})
        with pytest.raises(ValidationError):
            service.update_service("b1", service_id,
                                   {"images": [f"https://cdn/{i}.jpg" for i in range(11)]})

    def test_bad_price_is_validation_error(self, temp_db):
        with pytest.raises(ValidationError):
            ServicesService(temp_db).add_service("b1", {"name": "Corte", "price": "gratis"})

    def test_update_and_delete_missing(self, temp_db):
        service = ServicesService(temp_db)
        with pytest.raises(NotFoundError):
            service.update_service("b1", 999, {"price": 1})
        with pytest.raises(NotFoundError):
            service.delete_service("b1", 999)

    def test_delete(self, temp_db):
        service = ServicesService(temp_db)
        service_id = service.add_service("b1", {"name": "Corte"})
        service.delete_service("b1", service_id)
        assert service.get_services("b1") == []

    def test_list_errors_return_empty(self, temp_db, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("db down")

        monkeypatch.setattr(temp_db.services, "get_services", fail)
        assert ServicesService(temp_db).get_services("b1") == []


class TestEmployeeService:
    """Tests for EmployeeService."""

    def test_add_with_availability(self, temp_db):
        service = EmployeeService(temp_db)
        employee_id = service.add_employee("b1", {
            "name": "Ana",
            "role_type": "manager",
            "availability_weekly": {"monday": {"enabled": True, "start": "08:00", "end": "12:00"}},
        })
        employee = service.get_employees("b1")[0]
        assert employee["id"] == employee_id
        assert employee["availability_weekly"]["monday"]["start"] == "08:00"

    def test_name_required(self, temp_db):
        with pytest.raises(ValidationError):
            EmployeeService(temp_db).add_employee("b1", {"name": "  "})

    def test_plan_limit_enforced(self, temp_db):
        make_business(temp_db, "b1")
        temp_db.profiles.set_plan_data("b1", {"plan": "plus_team", "team_member_limit": 1})
        service = EmployeeService(temp_db, enforce_plan_limits=True)
        service.add_employee("b1", {"name": "Ana"})
        with pytest.raises(ValidationError) as exc:
            service.add_employee("b1", {"name": "Luis"})
        assert str(exc.value) == "Tu plan permite un máximo de 1 miembros del equipo."

    def test_plan_limit_not_enforced_by_default(self, temp_db):
        make_business(temp_db, "b1")
        service = EmployeeService(temp_db)
        service.add_employee("b1", {"name": "Ana"})
        service.add_employee("b1", {"name": "Luis"})
        assert len(service.get_employees("b1")) == 2

    def test_update_and_delete(self, temp_db):
        service = EmployeeService(temp_db)
        employee_id = service.add_employee("b1", {"name": "Ana"})
        assert service.update_employee("b1", employee_id, {"active": False})["active"] is False
        service.delete_employee("b1", employee_id)
        with pytest.raises(NotFoundError):
            service.delete_employee("b1", employee_id)


class TestPortfolioService:
    """Tests for PortfolioService."""

    def test_add_list_delete(self, temp_db):
        service = PortfolioService(temp_db)
        post_id = service.add_post("b1", {"image_url": "https://cdn/p.jpg", "caption": "Antes"})
        assert service.get_posts("b1")[0]["caption"] == "Antes"
        service.delete_post("b1", post_id)
        assert service.get_posts("b1") == []
        with pytest.raises(NotFoundError):
            service.delete_post("b1", post_id)


class TestReviewsService:
    """Tests for ReviewsService."""

    def _review(self, **overrides):
        data = {"user_id": "u1", "user_name": "Cliente", "rating": 5,
                "comment": "Muy buen servicio, recomendado."}
        data.update(overrides)
        return data

    def test_add_review_updates_aggregate(self, temp_db):
        make_business(temp_db, "b1", rating=4.0, review_count=2)
        result = ReviewsService(temp_db).add_review("b1", self._review())
        assert result["rating"] == 4.3
        assert result["review_count"] == 3
        assert ReviewsService(temp_db).get_reviews("b1")[0]["id"] == result["id"]

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, temp_db, rating):
        make_business(temp_db, "b1")
        with pytest.raises(ValidationError) as exc:
            ReviewsService(temp_db).add_review("b1", self._review(rating=rating))
        assert str(exc.value) == "La calificación debe estar entre 1 y 5."

    def test_comment_length(self, temp_db):
        make_business(temp_db, "b1")
        with pytest.raises(ValidationError) as exc:
            ReviewsService(temp_db).add_review("b1", self._review(comment="  corto   "))
        assert str(exc.value) == "El comentario debe tener al menos 10 caracteres."

    def test_missing_business(self, temp_db):
        with pytest.raises(NotFoundError):
            ReviewsService(temp_db).add_review("missing", self._review())

    def test_missing_user_is_validation_error(self, temp_db):
        make_business(temp_db, "b1")
        data = self._review()
        del data["user_id"]
        with pytest.raises(ValidationError) as exc:
            ReviewsService(temp_db).add_review("b1", data)
        assert str(exc.value) == "Datos inválidos: user_id."

    def test_non_numeric_rating_is_validation_error(self, temp_db):
        make_business(temp_db, "b1")
        with pytest.raises(ValidationError):
            ReviewsService(temp_db).add_review("b1", self._review(rating="x"))


@pytest.mark.parametrize("current, count, rating, expected", [
    (0.0, 0, 5, 5.0),
    (4.0, 2, 5, 4.3),
    (4.5, 1, 3, 3.8),
    (5.0, 10, 1, 4.6),
])
def test_new_rating(current, count, rating, expected):
    assert new_rating(current, count, rating) == expected

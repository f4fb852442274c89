"""Service taxonomy tests."""
from config.taxonomy import (
    LOCALES, TAXONOMY, all_labels, get_all_categories, get_category_by_id, get_group,
    get_specialties, get_subcategories, is_known_category, label_for, normalize_specialty,
)


class TestTaxonomy:
    """Tests for the taxonomy table and lookups."""

    def test_groups(self):
        assert set(TAXONOMY) == {"art_design", "general_services", "beauty_wellness"}

    def test_labels_in_every_locale(self):
        for group in TAXONOMY.values():
            assert set(LOCALES) <= set(group["label"])
            for sub in group["subcategories"]:
                assert set(LOCALES) <= set(sub["label"])

    def test_subcategory_ids_unique(self):
        ids = [c["id"] for c in get_all_categories()]
        assert len(ids) == len(set(ids))

    def test_get_all_categories_includes_group(self):
        hair = next(c for c in get_all_categories() if c["id"] == "hair")
        assert hair["group_id"] == "beauty_wellness"
        assert hair["group_label"] == "Belleza y Bienestar"

    def test_lookups(self):
        assert get_group("art_design")["label"]["en"] == "Art & Design"
        assert get_group("missing") is None
        assert get_category_by_id("plumbing")["label"]["es"] == "Plomería"
        assert get_category_by_id("missing") is None
        assert [s["id"] for s in get_subcategories("beauty_wellness")][:2] == ["hair", "nails"]
        assert get_subcategories("missing") == []

    def test_specialties(self):
        assert "Corte de Caballero (Barbería)" in get_specialties("hair")
        assert get_specialties("missing") == []

    def test_is_known_category(self):
        assert is_known_category("beauty_wellness") is True
        assert is_known_category("plumbing") is True
        assert is_known_category("astrology") is False

    def test_label_for(self):
        assert label_for({"es": "Uñas", "en": "Nails"}, "en") == "Nails"
        assert label_for({"es": "Uñas"}, "pt") == "Uñas"
        assert label_for("Texto") == "Texto"
        assert label_for(None) == ""

    def test_normalize_specialty(self):
        assert normalize_specialty("Tintes") == {"es": "Tintes"}
        assert normalize_specialty({"es": "A", "en": "B"}) == {"es": "A", "en": "B"}

    def test_all_labels_unique(self):
        labels = all_labels()
        assert "Plomería" in labels
        assert len(labels) == len(set(labels))

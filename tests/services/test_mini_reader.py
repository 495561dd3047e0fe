"""MiniReader aggregation tests."""

import pytest

from minicatalog.core.errors import NotFoundError, ValidationError
from minicatalog.core.models import MiniFilter, MiniInput


@pytest.fixture()
def populated(mini_service, catalog):
    """Three minis with overlapping relations, created in id order."""
    paladin = mini_service.create(
        MiniInput(
            name="Paladin",
            location="Shelf A",
            category_ids=[catalog.hero],
            type_ids=[catalog.fighter],
            tags=["painted", "hero"],
            product_set_id=catalog.product_set,
        )
    )
    red_dragon = mini_service.create(
        MiniInput(
            name="Red Dragon",
            location="Shelf B",
            quantity=2,
            category_ids=[catalog.monster],
            type_ids=[catalog.dragon],
            proxy_type_ids=[catalog.wizard],
            tags=["huge"],
        )
    )
    wizard = mini_service.create(
        MiniInput(
            name="Archmage",
            location="Shelf A",
            category_ids=[catalog.hero, catalog.terrain],
            type_ids=[catalog.wizard],
            tags=["hero"],
        )
    )
    return paladin, red_dragon, wizard


class TestFetchOne:
    def test_round_trip(self, mini_service, reader, catalog) -> None:
        created = mini_service.create(
            MiniInput(
                name="Champion",
                location="Box",
                category_ids=[catalog.hero, catalog.monster],
                type_ids=[catalog.fighter],
                proxy_type_ids=[],
                tags=["painted", "hero"],
            )
        )
        view = reader.fetch_one(created.id)

        assert sorted(view.category_names) == ["Heroes", "Monsters"]
        assert len(view.category_names) == 2
        assert view.type_names == ["Fighter"]
        assert sorted(view.tag_names) == ["hero", "painted"]
        assert view.proxy_type_names == []

    def test_join_fan_out_collapsed(self, mini_service, reader, catalog) -> None:
        """2 categories x 2 types x 1 proxy x 3 tags = 12 joined rows, one view."""
        created = mini_service.create(
            MiniInput(
                name="Chimera",
                location="Box",
                category_ids=[catalog.monster, catalog.hero],
                type_ids=[catalog.dragon, catalog.fighter],
                proxy_type_ids=[catalog.wizard],
                tags=["c", "a", "b"],
            )
        )
        view = reader.fetch_one(created.id)
        assert view.category_names == ["Heroes", "Monsters"]
        assert view.type_names == ["Dragon", "Fighter"]
        assert view.proxy_type_names == ["Wizard"]
        assert view.tag_names == ["a", "b", "c"]
        assert view.category_ids == [catalog.hero, catalog.monster]
        assert view.type_ids == [catalog.dragon, catalog.fighter]
        assert view.proxy_type_ids == [catalog.wizard]
        assert len(view.tag_ids) == 3

    def test_product_hierarchy(self, reader, populated, catalog) -> None:
        paladin = reader.fetch_one(populated[0].id)
        assert paladin.product_set_name == "Wave 1"
        assert paladin.product_line_name == "Nolzur's Marvelous Miniatures"
        assert paladin.manufacturer_name == "WizKids"
        assert paladin.product_set_ids == [catalog.product_set]

    def test_no_product_set(self, reader, populated) -> None:
        dragon = reader.fetch_one(populated[1].id)
        assert dragon.product_set_name is None
        assert dragon.manufacturer_name is None
        assert dragon.product_set_ids == []

    def test_bare_mini(self, mini_service, reader) -> None:
        view = reader.fetch_one(mini_service.create(MiniInput(name="X", location="Y")).id)
        assert view.category_names == []
        assert view.tag_ids == []
        assert view.painted_by_name == "prepainted"

    def test_image_paths_derived(self, mini_service, reader) -> None:
        view = reader.fetch_one(mini_service.create(MiniInput(name="X", location="Y")).id)
        digits = str(view.id)
        x, y = digits[0], (digits[1] if len(digits) > 1 else "0")
        assert view.image_path == f"/images/minis/{x}/{y}/{view.id}.webp"
        assert view.original_image_path == (
            f"/images/minis/originals/{x}/{y}/{view.id}.webp"
        )

    def test_not_found(self, reader) -> None:
        with pytest.raises(NotFoundError):
            reader.fetch_one(12345)


class TestFetchMany:
    def test_newest_first(self, reader, populated) -> None:
        ids = [v.id for v in reader.fetch_many()]
        assert ids == sorted((m.id for m in populated), reverse=True)

    def test_one_view_per_mini(self, reader, populated) -> None:
        views = reader.fetch_many()
        assert len(views) == 3
        archmage = next(v for v in views if v.name == "Archmage")
        assert archmage.category_names == ["Heroes", "Terrain"]

    def test_empty(self, reader) -> None:
        assert reader.fetch_many() == []

    def test_order_by_name(self, reader, populated) -> None:
        views = reader.fetch_many(MiniFilter(order_by="name", descending=False))
        assert [v.name for v in views] == ["Archmage", "Paladin", "Red Dragon"]

    def test_bad_order(self, reader) -> None:
        with pytest.raises(ValidationError):
            reader.fetch_many(MiniFilter(order_by="secret_column"))

    def test_filter_by_category_keeps_full_lists(self, reader, populated, catalog) -> None:
        views = reader.fetch_many(MiniFilter(category_id=catalog.terrain))
        assert [v.name for v in views] == ["Archmage"]
        assert views[0].category_names == ["Heroes", "Terrain"]

    def test_filter_by_type_matches_proxy(self, reader, populated, catalog) -> None:
        views = reader.fetch_many(MiniFilter(type_id=catalog.wizard))
        assert {v.name for v in views} == {"Red Dragon", "Archmage"}

    def test_filter_by_tag(self, reader, populated) -> None:
        views = reader.fetch_many(MiniFilter(tag="hero"))
        assert {v.name for v in views} == {"Paladin", "Archmage"}

    def test_filter_by_name_and_location(self, reader, populated) -> None:
        assert [v.name for v in reader.fetch_many(MiniFilter(name="drag"))] == [
            "Red Dragon"
        ]
        assert {v.name for v in reader.fetch_many(MiniFilter(location="Shelf A"))} == {
            "Paladin",
            "Archmage",
        }

    def test_filter_by_product_set(self, reader, populated, catalog) -> None:
        views = reader.fetch_many(MiniFilter(product_set_id=catalog.product_set))
        assert [v.name for v in views] == ["Paladin"]

    def test_limit_offset(self, reader, populated) -> None:
        newest_first = [v.id for v in reader.fetch_many()]
        page = reader.fetch_many(MiniFilter(limit=1, offset=1))
        assert [v.id for v in page] == newest_first[1:2]

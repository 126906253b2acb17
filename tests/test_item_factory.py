import pytest
import tcod.ecs

from mountfeed.data_loader import get_item_def, get_item_defs
from mountfeed.ecs.components import ItemIdentity, Quantity, FoodItem
from mountfeed.item_factory import create_item, give_item

def test_food_blueprint_loads():
    item_def = get_item_def("consumables/mutton_chop")
    assert item_def.name == "Mutton Chop"
    assert item_def.food_type == 1
    assert item_def.item_level == 45
    assert get_item_def("consumables/mutton_chop") is item_def

def test_category_listing():
    ids = [d.id for d in get_item_defs("consumables")]
    assert ids == ["crunchy_spider_surprise", "mutton_chop", "sweet_nectar", "tough_jerky"]
    assert get_item_defs("no_such_category") == []

def test_missing_blueprint_raises():
    with pytest.raises(FileNotFoundError):
        get_item_def("consumables/ambrosia")

def test_create_food_item():
    registry = tcod.ecs.Registry()
    item = create_item(registry, "consumables/tough_jerky", amount=50)

    assert item.components[ItemIdentity].template_origin == "consumables/tough_jerky"
    assert item.components[Quantity].amount == 20
    assert item.components[FoodItem] == FoodItem(food_type=1, item_level=5)
    assert "food" in item.tags

def test_non_food_item_is_not_tagged():
    registry = tcod.ecs.Registry()
    item = create_item(registry, "consumables/sweet_nectar")

    assert item.components[FoodItem].food_type == 0
    assert "food" not in item.tags

def test_give_item_puts_stack_in_inventory():
    registry = tcod.ecs.Registry()
    actor = registry.new_entity()
    item = give_item(registry, actor, "consumables/mutton_chop", amount=3)

    assert item in actor.relation_tags_many["IsCarrying"]
    assert item.components[Quantity].amount == 3

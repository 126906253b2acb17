"""
MountFeed — mountfeed/item_factory.py
ECS Entity Factory for carried items.
=====================================
Version:     0.2
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Production-ready.
"""

import tcod.ecs
from mountfeed.data_loader import get_item_def
from mountfeed.ecs.components import ItemIdentity, Quantity, FoodItem

def create_item(registry: tcod.ecs.Registry, item_path: str, amount: int = 1) -> tcod.ecs.Entity:
    """Instantiates an item stack from a TOML blueprint (e.g. 'consumables/mutton_chop')."""
    item_def = get_item_def(item_path)
    entity = registry.new_entity()

    entity.components[ItemIdentity] = ItemIdentity(
        entity_id=item_def.id,
        name=item_def.name,
        description=item_def.description,
        template_origin=item_path,
        value=item_def.value
    )

    max_stack = item_def.stackable.get("max", 1) if item_def.stackable else 1
    entity.components[Quantity] = Quantity(amount=max(1, min(amount, max_stack)), max_stack=max_stack)

    # Edible items carry their food tag; the mount subsystem keys off it
    entity.components[FoodItem] = FoodItem(food_type=item_def.food_type, item_level=item_def.item_level)
    if item_def.food_type:
        entity.tags.add("food")

    return entity

def give_item(registry: tcod.ecs.Registry, actor: tcod.ecs.Entity, item_path: str, amount: int = 1) -> tcod.ecs.Entity:
    """Creates an item stack directly in an actor's inventory."""
    item = create_item(registry, item_path, amount)
    actor.relation_tags_many["IsCarrying"].add(item)
    return item

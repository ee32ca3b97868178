import logging

import pytest

from duel_framework.battle.effects import (
    PERMANENT,
    STATUS_DEFINITIONS,
    EffectBehavior,
    StatusEffect,
    StatusType,
    create_status_effect,
    status_type_from_name,
)


def test_effect_init():
    effect = StatusEffect("Stun", duration=2)
    assert effect.remaining_turns == 2
    assert not effect.is_permanent()
    assert not effect.is_expired()
    assert effect.combatant is None


def test_permanent_effect_never_counts_down(make_combatant):
    target = make_combatant()
    effect = StatusEffect("Blessing", stat_modifiers={"ATK": 1})
    target.add_status_effect(effect)

    for _ in range(5):
        target.process_status_effects_turn_end()

    assert effect.is_permanent()
    assert effect.remaining_turns == PERMANENT
    assert target.has_status("Blessing")


def test_duration_one_lasts_exactly_one_turn_end(make_combatant):
    target = make_combatant()
    effect = StatusEffect("Stun", duration=1)
    target.add_status_effect(effect)

    target.process_status_effects_turn_start()
    assert target.has_status("Stun")

    target.process_status_effects_turn_end()
    assert not target.has_status("Stun")
    assert effect.is_removed
    assert effect.combatant is None


def test_hooks_fire_in_lifecycle_order(make_combatant):
    calls = []
    behavior = EffectBehavior(
        on_apply=lambda e, c, eng: calls.append("apply"),
        on_turn_start=lambda e, c, eng: calls.append("start"),
        on_turn_end=lambda e, c, eng: calls.append("end"),
        on_remove=lambda e, c, eng: calls.append("remove"),
    )
    target = make_combatant()
    target.add_status_effect(StatusEffect("Curse", duration=1, behavior=behavior))

    target.process_status_effects_turn_start()
    target.process_status_effects_turn_end()

    assert calls == ["apply", "start", "end", "remove"]


def test_remove_is_idempotent(make_combatant):
    removed = []
    target = make_combatant()
    effect = StatusEffect("Curse", duration=3, behavior=EffectBehavior(
        on_remove=lambda e, c, eng: removed.append(c),
    ))
    target.add_status_effect(effect)

    effect.remove()
    effect.remove()

    assert removed == [target]
    assert target.get_status_effects() == ()


def test_remove_logs_with_engine(engine, hero):
    effect = StatusEffect("Curse", duration=3)
    hero.add_status_effect(effect, engine)

    effect.remove(engine)

    log = engine.get_battle_log()
    assert "Hero is affected by Curse for 3 turns!" in log
    assert log[-1] == "Hero's Curse wore off."


def test_stat_modifier():
    effect = StatusEffect("Weak", duration=2, stat_modifiers={"ATK": -3})
    assert effect.get_modified_stat("ATK", 10) == 7
    assert effect.get_modified_stat("DEF", 10) == 10


def test_refresh_extends_to_longer_duration():
    effect = StatusEffect("Burn", duration=3)
    effect.remaining_turns = 1

    assert effect.refresh(2)
    assert effect.remaining_turns == 2

    assert not effect.refresh(1)
    assert not effect.refresh(2)
    assert effect.remaining_turns == 2

    assert effect.refresh(PERMANENT)
    assert effect.is_permanent()

    assert not effect.refresh(5)
    assert effect.is_permanent()


def test_damage_over_time_ticks_at_turn_end(make_combatant):
    target = make_combatant(hp=20)
    target.add_status_effect(create_status_effect(StatusType.POISON))

    target.process_status_effects_turn_start()
    assert target.current_hp == 20

    target.process_status_effects_turn_end()
    assert target.current_hp == 16

    target.process_status_effects_turn_end()
    assert target.current_hp == 12
    assert not target.has_status("Poison")


def test_damage_over_time_can_defeat(engine, enemy):
    enemy.health.current = 3
    enemy.add_status_effect(create_status_effect(StatusType.BURN), engine)

    enemy.process_status_effects_turn_end(engine)

    assert not enemy.is_alive()
    log = engine.get_battle_log()
    assert "Goblin takes 3 damage from Burn!" in log
    assert "Goblin is defeated!" in log


def test_heal_over_time(make_combatant):
    target = make_combatant(hp=100, current_hp=50)
    target.add_status_effect(create_status_effect(StatusType.REGENERATION))

    target.process_status_effects_turn_end()

    assert target.current_hp == 55


def test_freeze_prevents_action(make_combatant):
    target = make_combatant()
    target.add_status_effect(create_status_effect(StatusType.FREEZE))

    assert target.is_action_prevented()
    target.process_status_effects_turn_end()
    assert not target.is_action_prevented()


@pytest.mark.parametrize("status_type", list(StatusType))
def test_every_status_type_has_definition(status_type):
    effect = create_status_effect(status_type)
    assert effect.status_type is status_type
    assert effect.name == STATUS_DEFINITIONS[status_type].name
    assert effect.duration == STATUS_DEFINITIONS[status_type].duration


def test_created_effects_do_not_share_modifiers():
    first = create_status_effect(StatusType.MEMORY_DRAIN)
    second = create_status_effect(StatusType.MEMORY_DRAIN)
    first.stat_modifiers["ATK"] = -10

    assert second.stat_modifiers == {"ATK": -3}


def test_duration_override():
    assert create_status_effect(StatusType.POISON, 5).remaining_turns == 5


@pytest.mark.parametrize("name, expected", [
    ("poison", StatusType.POISON),
    ("Dark Resonance", StatusType.DARK_RESONANCE),
    ("fractured-guard", StatusType.FRACTURED_GUARD),
    ("memory_drain", StatusType.MEMORY_DRAIN),
    ("unknown", None),
])
def test_status_type_from_name(name, expected):
    assert status_type_from_name(name) is expected


def test_unknown_status_name_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="duel_framework.battle.effects"):
        assert status_type_from_name("Gloom") is None

    assert "Unknown status effect 'Gloom' ignored" in caplog.text


def test_known_status_name_logs_nothing(caplog):
    with caplog.at_level(logging.WARNING):
        status_type_from_name("burn")

    assert caplog.records == []


def test_three_turn_effect_removed_after_third_turn_end(make_combatant):
    removed = []
    target = make_combatant()
    effect = StatusEffect("Hex", duration=3, behavior=EffectBehavior(
        on_remove=lambda e, c, eng: removed.append(c.name),
    ))
    target.add_status_effect(effect)

    target.process_status_effects_turn_end()
    target.process_status_effects_turn_end()
    assert target.has_status("Hex")

    target.process_status_effects_turn_end()
    assert not target.has_status("Hex")

    target.process_status_effects_turn_end()
    effect.remove()
    assert removed == ["Fighter"]

import asyncio

import pytest
from pydantic import ValidationError

from duel_engine.core.config import BattleConfig
from duel_framework.battle.actions import (
    ActionType,
    Attack,
    Item,
    ItemData,
    ItemKind,
    mystery_good_chance,
)
from duel_framework.battle.effects import StatusType, create_status_effect
from duel_framework.battle.engine import BattleEngine


def run(coro):
    return asyncio.run(coro)


def test_action_types():
    assert Attack("Strike").action_type is ActionType.ATTACK
    assert Item("Potion").action_type is ActionType.ITEM


def test_damage_formula(hero, enemy):
    strike = Attack("Strike", power=1.0)
    heavy = Attack("Heavy", power=2.0)
    config = BattleConfig()

    assert strike.calculate_damage(hero, enemy, config) == 10
    assert heavy.calculate_damage(hero, enemy, config) == 30
    assert strike.calculate_damage(enemy, hero, config) == 8


def test_damage_has_minimum(make_combatant):
    weak = make_combatant("Weak", atk=1)
    wall = make_combatant("Wall", defense=100)

    assert Attack("Poke").calculate_damage(weak, wall, BattleConfig()) == 1
    assert Attack("Poke").calculate_damage(weak, wall, BattleConfig(min_damage=0)) == 0


def test_damage_uses_modified_stats(engine, hero, enemy):
    enemy.add_status_effect(create_status_effect(StatusType.FRACTURED_GUARD))

    assert Attack("Strike").calculate_damage(hero, enemy, engine.config) == 12


def test_attack_execute(engine, hero, enemy):
    run(Attack("Strike").execute(hero, enemy, engine))

    assert enemy.current_hp == 70
    log = engine.get_battle_log()
    assert log[-2:] == ["Hero uses Strike!", "Goblin takes 10 damage!"]


def test_attack_on_dead_target_is_noop(engine, hero, enemy):
    enemy.health.current = 0
    before = engine.get_battle_log()

    run(Attack("Strike").execute(hero, enemy, engine))
    run(Attack("Strike").execute(hero, None, engine))

    assert engine.get_battle_log() == before


def test_attack_logs_defeat(engine, hero, enemy):
    enemy.health.current = 5

    run(Attack("Strike").execute(hero, enemy, engine))

    assert enemy.current_hp == 0
    assert engine.get_battle_log()[-2:] == ["Goblin takes 5 damage!", "Goblin is defeated!"]


def test_attack_status_chance(hero, enemy, scripted_rng):
    engine = BattleEngine(hero, enemy, config=BattleConfig(echo_log=False), rng=scripted_rng(rolls=[0.4, 0.6]))
    engine.start_battle()
    arrow = Attack("Poison Arrow", status_effect=StatusType.POISON, status_chance=0.5)

    run(arrow.execute(hero, enemy, engine))
    assert enemy.has_status("Poison")

    enemy.clear_status_effects()
    run(arrow.execute(hero, enemy, engine))
    assert not enemy.has_status("Poison")


def test_attack_lifesteal(engine, hero, enemy):
    hero.health.current = 50
    leech = Attack("Leech", lifesteal=0.5)

    run(leech.execute(hero, enemy, engine))

    assert hero.current_hp == 55
    assert engine.get_battle_log()[-1] == "Hero siphons 5 HP!"


def test_presentation_hook_runs_after_state_change(engine, hero, enemy):
    seen = []

    async def animate(source, target, battle):
        await asyncio.sleep(0)
        seen.append((source.name, target.current_hp, battle.get_battle_log()[-1]))

    run(Attack("Strike", presentation=animate).execute(hero, enemy, engine))

    assert seen == [("Hero", 70, "Goblin takes 10 damage!")]


def test_item_data_validation():
    assert ItemData(heal=10).stats == {}
    with pytest.raises(ValidationError):
        ItemData(heal=-5)
    with pytest.raises(ValidationError):
        ItemData(mana=5)


def test_heal_item(engine, hero):
    hero.health.current = 70
    potion = Item("Health Potion", ItemData(heal=40))
    hero.add_action(potion)

    run(potion.execute(hero, hero, engine))

    assert hero.current_hp == 100
    assert engine.get_battle_log()[-1] == "Hero recovers 30 HP!"
    assert not hero.has_action(potion)


def test_heal_at_full_hp_logs_nothing(engine, hero):
    potion = Item("Health Potion", ItemData(heal=40))

    run(potion.execute(hero, hero, engine))

    assert engine.get_battle_log()[-1] == "Hero uses Health Potion!"


def test_damage_item_bypasses_defense(engine, hero, enemy):
    flask = Item("Flask", ItemData(damage=50))

    run(flask.execute(hero, enemy, engine))

    assert enemy.current_hp == 30


def test_stat_item(engine, hero):
    elixir = Item("Elixir", ItemData(stats={"ATK": 5, "SPD": -2, "MAGIC": 3}))

    run(elixir.execute(hero, hero, engine))

    assert hero.get_stat("ATK") == 25
    assert hero.get_stat("SPD") == 12
    assert "MAGIC" not in hero.stats
    log = engine.get_battle_log()
    assert "Hero's ATK increased by 5!" in log
    assert "Hero's SPD decreased by 2!" in log


def test_reusable_item_stays(engine, hero):
    charm = Item("Charm", ItemData(heal=1), is_consumable=False)
    hero.add_action(charm)

    run(charm.execute(hero, hero, engine))

    assert hero.has_action(charm)


def test_consumable_removal_is_idempotent(hero):
    potion = Item("Potion")
    hero.add_action(potion)

    potion.remove_if_consumable(hero)
    potion.remove_if_consumable(hero)

    assert not hero.has_action(potion)
    assert hero.attacks


def test_poison_item_applies_damage_then_status(engine, hero, enemy):
    potion = Item("Poison Potion", ItemData(damage=5), kind=ItemKind.POISON)

    run(potion.execute(hero, enemy, engine))

    assert enemy.current_hp == 75
    effect = enemy.get_status_effect("Poison")
    assert effect.remaining_turns == 2
    log = engine.get_battle_log()
    assert log.index("Goblin takes 5 damage!") < log.index("Goblin is affected by Poison for 2 turns!")


def test_poison_item_duration_is_random(hero, enemy, scripted_rng):
    engine = BattleEngine(hero, enemy, config=BattleConfig(echo_log=False), rng=scripted_rng(ints=[5]))
    engine.start_battle()

    run(Item("Poison Potion", kind=ItemKind.POISON).execute(hero, enemy, engine))

    assert enemy.get_status_effect("Poison").remaining_turns == 5


def test_item_duration_override(engine, hero, enemy):
    run(Item("Fire Potion", kind=ItemKind.BURN, status_duration=1).execute(hero, enemy, engine))

    assert enemy.get_status_effect("Burn").remaining_turns == 1


def test_kind_effect_skipped_when_item_damage_defeats(engine, hero, enemy):
    enemy.health.current = 10

    run(Item("Freeze Potion", ItemData(damage=15), kind=ItemKind.FREEZE).execute(hero, enemy, engine))

    assert not enemy.is_alive()
    assert not enemy.has_status("Freeze")


@pytest.mark.parametrize("kind, status_name", [
    (ItemKind.BURN, "Burn"),
    (ItemKind.FREEZE, "Freeze"),
    (ItemKind.REGENERATION, "Regeneration"),
    (ItemKind.ADRENALINE, "Adrenaline"),
])
def test_kind_attaches_status(engine, hero, kind, status_name):
    run(Item("Potion", kind=kind).execute(hero, hero, engine))

    assert hero.has_status(status_name)


def test_mystery_good_chance(make_combatant):
    lucky = make_combatant(luck=30)
    unlucky = make_combatant(luck=10)
    nobody = make_combatant()

    assert mystery_good_chance(lucky, unlucky) == pytest.approx(0.625)
    assert mystery_good_chance(unlucky, lucky) == pytest.approx(0.375)
    assert mystery_good_chance(nobody, nobody) == 0.5


def test_mystery_heal_branch(hero, enemy, scripted_rng):
    engine = BattleEngine(hero, enemy, config=BattleConfig(echo_log=False), rng=scripted_rng(rolls=[0.1, 0.2]))
    engine.start_battle()
    hero.health.current = 30

    run(Item("Mystery Potion", kind=ItemKind.MYSTERY).execute(hero, hero, engine))

    assert hero.current_hp == 70
    assert hero.get_status_effects() == ()


@pytest.mark.parametrize("rolls, ints, status_name, turns", [
    ([0.5, 0.1], [], "Adrenaline", 2),
    ([0.9, 0.1], [4], "Regeneration", 4),
    ([0.1, 0.9], [], "Freeze", 1),
    ([0.5, 0.9], [3], "Poison", 3),
    ([0.9, 0.9], [], "Burn", 3),
])
def test_mystery_status_branches(hero, enemy, scripted_rng, rolls, ints, status_name, turns):
    engine = BattleEngine(hero, enemy, config=BattleConfig(echo_log=False), rng=scripted_rng(rolls=rolls, ints=ints))
    engine.start_battle()

    run(Item("Mystery Potion", kind=ItemKind.MYSTERY).execute(hero, enemy, engine))

    effect = enemy.get_status_effect(status_name)
    assert effect is not None
    assert effect.remaining_turns == turns

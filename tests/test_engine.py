import pytest

from adaptivefps.config import CapConfig, CapTier, ConfigPersistError, InvalidTierError
from adaptivefps.core.engine import CapEngine
from adaptivefps.ui.status import ClickKind

from conftest import FailingStore


def _resample(host, cache, **state):
    for key, value in state.items():
        setattr(host, key, value)
    cache.on_tick()


def test_apply_twice_writes_once(engine, host, cache):
    _resample(host, cache, in_combat=True, cap=int(CapTier.THIRTY))

    engine.apply_and_refresh()
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.SIXTY)]

    # the next sample sees the written value and stays quiet
    cache.on_tick()
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.SIXTY)]


def test_decision_in_and_out_of_combat(engine, host, cache):
    _resample(host, cache, in_combat=True, cap=int(CapTier.THIRTY))
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.SIXTY)]

    _resample(host, cache, in_combat=False, cap=int(CapTier.SIXTY))
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.SIXTY), int(CapTier.THIRTY)]


def test_first_apply_captures_user_cap_and_disable_restores_it(engine, host, cache, store):
    _resample(host, cache, cap=7)

    engine.apply_and_refresh()
    assert engine.config.last_user_cap == 7
    assert engine.state.override_active is True
    assert store.load().last_user_cap == 7

    engine.config.enabled = False
    engine.disable_and_refresh()
    assert host.writes[-1] == 7
    assert engine.state.override_active is False
    assert engine.config.last_user_cap is None


def test_toggle_while_enabled_restores_user_cap(engine, host, cache):
    _resample(host, cache, cap=7)
    engine.apply_and_refresh()

    assert engine.toggle_enabled() is False
    assert host.writes == [int(CapTier.THIRTY), 7]
    assert engine.state.override_active is False


def test_toggle_back_on_in_same_tick_recaptures_restored_cap(engine, host, cache):
    _resample(host, cache, cap=7)
    engine.apply_and_refresh()
    cache.on_tick()
    engine.toggle_enabled()

    # no resample between toggles, the cache still reports the overridden cap
    assert cache.current().current_cap == int(CapTier.THIRTY)
    engine.toggle_enabled()
    assert engine.config.last_user_cap == 7
    assert host.writes == [int(CapTier.THIRTY), 7, int(CapTier.THIRTY)]


def test_disabled_never_writes(engine, host, cache):
    engine.config.enabled = False
    for tick in range(6):
        _resample(host, cache, in_combat=tick % 2 == 0, cap=tick + 10)
        engine.apply_and_refresh()
    assert host.writes == []
    assert engine.config.last_user_cap is None


def test_logged_out_skips_decision(engine, host, cache):
    _resample(host, cache, logged_in=False, in_combat=True, cap=5)
    engine.apply_and_refresh()
    assert host.writes == []
    assert engine.state.override_active is False


def test_user_change_between_ticks_is_corrected(engine, host, cache):
    engine.apply_and_refresh()
    cache.on_tick()
    host.cap = int(CapTier.MAIN_REFRESH)

    _resample(host, cache)
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.THIRTY), int(CapTier.THIRTY)]


def test_rotate_out_of_combat_cycles_independently(engine):
    engine.config.out_of_combat_cap = CapTier.MAIN_REFRESH
    seen = [engine.rotate_out_of_combat_cap() for _ in range(4)]
    assert seen == [CapTier.SIXTY, CapTier.THIRTY, CapTier.MAIN_REFRESH, CapTier.SIXTY]
    assert engine.config.combat_cap == CapTier.SIXTY


def test_rotate_combat_cap_persists(engine, store):
    assert engine.rotate_combat_cap() == CapTier.THIRTY
    assert store.load().combat_cap == CapTier.THIRTY


def test_setters_reject_unknown_tiers(engine):
    with pytest.raises(InvalidTierError):
        engine.set_combat_cap(4)
    with pytest.raises(InvalidTierError):
        engine.set_out_of_combat_cap(0)
    assert engine.config.combat_cap == CapTier.SIXTY
    assert engine.config.out_of_combat_cap == CapTier.THIRTY

    assert engine.set_combat_cap(1) is CapTier.MAIN_REFRESH
    assert engine.config.combat_cap == CapTier.MAIN_REFRESH


def test_primary_click_rotates_combat_and_applies(engine, host, cache):
    _resample(host, cache, in_combat=True, cap=int(CapTier.SIXTY))
    engine.on_entry_click(ClickKind.PRIMARY)
    assert engine.config.combat_cap == CapTier.THIRTY
    assert host.writes == [int(CapTier.THIRTY)]


def test_secondary_click_rotates_out_of_combat(engine):
    engine.on_entry_click(ClickKind.SECONDARY)
    assert engine.config.out_of_combat_cap == CapTier.MAIN_REFRESH
    assert engine.config.combat_cap == CapTier.SIXTY


def test_redraw_suppressed_when_nothing_changed(engine, cache, redraws, status):
    engine.apply_and_refresh()
    cache.on_tick()
    engine.apply_and_refresh()
    cache.on_tick()
    engine.apply_and_refresh()
    # the first write changes the sampled cap once
    assert len(redraws) == 2
    assert status.text == "60 | [30]"


def test_config_change_forces_redraw(engine, redraws, status):
    engine.apply_and_refresh()
    engine.set_out_of_combat_cap(CapTier.SIXTY)
    engine.apply_and_refresh()
    assert len(redraws) == 2
    assert status.text == "60 | [60]"


def test_host_write_failure_is_retried(engine, host, cache):
    host.fail_writes = True
    engine.apply_and_refresh()
    assert host.writes == []
    assert engine.state.last_write is None

    host.fail_writes = False
    engine.apply_and_refresh()
    assert host.writes == [int(CapTier.THIRTY)]


def test_persist_failure_keeps_in_memory_change(cache, host, status, events, tmp_path):
    cache.initialize()
    store = FailingStore(tmp_path / "cfg.json")
    engine = CapEngine(CapConfig(), cache, host, store, status, events)

    with pytest.raises(ConfigPersistError):
        engine.set_combat_cap(CapTier.THIRTY)
    assert engine.config.combat_cap == CapTier.THIRTY

    # tick-driven capture only logs
    engine.apply_and_refresh()
    assert engine.state.override_active is True
    assert host.writes == [int(CapTier.THIRTY)]


def test_toggle_persist_failure_still_restores(cache, host, status, events, tmp_path):
    cache.initialize()
    engine = CapEngine(CapConfig(last_user_cap=None), cache, host, FailingStore(tmp_path / "c.json"), status, events)
    engine.apply_and_refresh()

    with pytest.raises(ConfigPersistError):
        engine.toggle_enabled()
    assert engine.config.enabled is False
    assert host.writes[-1] == int(CapTier.MAIN_REFRESH)


def test_resume_keeps_leftover_user_cap(cache, host, store, status, events):
    host.cap = int(CapTier.THIRTY)
    cache.initialize()
    engine = CapEngine(CapConfig(last_user_cap=9), cache, host, store, status, events)

    engine.resume()
    engine.apply_and_refresh()
    assert engine.config.last_user_cap == 9

    engine.release()
    assert host.writes == [9]
    assert engine.config.last_user_cap is None
    assert engine.state.override_active is False


def test_reset_caps_uses_defaults(engine, store):
    engine.set_combat_cap(CapTier.THIRTY)
    engine.set_out_of_combat_cap(CapTier.MAIN_REFRESH)
    engine.reset_caps()
    assert engine.config.combat_cap == store.defaults.combat_cap
    assert engine.config.out_of_combat_cap == store.defaults.out_of_combat_cap


def test_describe_reports_target(engine, host, cache):
    _resample(host, cache, in_combat=True, cap=int(CapTier.THIRTY))
    decision = engine.describe()
    assert decision.applicable is True
    assert decision.in_combat is True
    assert decision.current_cap == int(CapTier.THIRTY)
    assert decision.target == CapTier.SIXTY


def test_rotate_combat_cap_full_cycle(engine):
    engine.config.combat_cap = CapTier.MAIN_REFRESH
    seen = [engine.rotate_combat_cap() for _ in range(3)]
    assert seen == [CapTier.SIXTY, CapTier.THIRTY, CapTier.MAIN_REFRESH]
    assert engine.config.out_of_combat_cap == CapTier.THIRTY


def test_click_accepts_plain_string_kind(engine):
    engine.on_entry_click("primary")
    assert engine.config.combat_cap == CapTier.THIRTY
    assert engine.config.out_of_combat_cap == CapTier.THIRTY

    engine.on_entry_click("secondary")
    assert engine.config.out_of_combat_cap == CapTier.MAIN_REFRESH


def test_click_with_failing_store_only_logs(cache, host, status, events, tmp_path):
    cache.initialize()
    engine = CapEngine(CapConfig(), cache, host, FailingStore(tmp_path / "c.json"), status, events)

    engine.on_entry_click(ClickKind.SECONDARY)
    assert engine.config.out_of_combat_cap == CapTier.MAIN_REFRESH
    assert engine.state.override_active is True
    assert status.text == "60 | [144 (main)]"

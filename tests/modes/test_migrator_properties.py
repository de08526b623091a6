"""
Tests for built-in mode migration.

Property tests cover idempotence and catalog coverage; example tests cover
each reconciliation rule.
"""

import logging

import allure
from hypothesis import given, settings, strategies as st

from modeguard.modes import Mode, MigrationResult, log_migration, migrate_builtin_modes


IDS = ["default", "ask", "architect", "research", "legacy", "github"]


# Strategies for generating test data

@st.composite
def mode_strategy(draw, mode_id=None, is_built_in=None):
    return Mode(
        id=mode_id if mode_id is not None else draw(st.sampled_from(IDS)),
        name=draw(st.sampled_from(["", "One", "Two"])),
        description=draw(st.sampled_from(["", "desc"])),
        system_prompt=draw(st.sampled_from(["", "prompt a", "prompt b"])),
        preferred_model=draw(st.sampled_from(["", "model-x"])),
        allowed_tools=draw(st.lists(st.sampled_from(["a", "b", "c"]), max_size=3, unique=True)),
        allowed_categories=draw(st.lists(st.sampled_from(["X", "Y"]), max_size=2, unique=True)),
        allowed_tags=draw(st.lists(st.sampled_from(["t1", "t2"]), max_size=2, unique=True)),
        excluded_tags=draw(st.lists(st.sampled_from(["t3"]), max_size=1)),
        is_built_in=draw(st.booleans()) if is_built_in is None else is_built_in,
    )


@st.composite
def catalog_strategy(draw):
    """Catalog modes with unique ids."""
    ids = draw(st.lists(st.sampled_from(IDS), min_size=1, max_size=len(IDS), unique=True))
    return [draw(mode_strategy(mode_id=i, is_built_in=True)) for i in ids]


@st.composite
def persisted_strategy(draw):
    """Persisted modes with unique ids, some with the built-in flag cleared."""
    ids = draw(st.lists(st.sampled_from(IDS), max_size=len(IDS), unique=True))
    return [draw(mode_strategy(mode_id=i)) for i in ids]


@allure.feature("Mode Migrator")
@allure.story("Migration is idempotent")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(persisted=persisted_strategy(), catalog=catalog_strategy())
def test_second_migration_changes_nothing(persisted, catalog):
    first = migrate_builtin_modes(persisted, catalog)
    second = migrate_builtin_modes(first.modes, catalog)

    assert not second.changed, (
        f"added={second.added} updated={second.updated} removed={second.removed}"
    )
    assert [m.to_dict() for m in second.modes] == [m.to_dict() for m in first.modes]


@allure.feature("Mode Migrator")
@allure.story("Every catalog id is present after migration")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(persisted=persisted_strategy(), catalog=catalog_strategy())
def test_migration_covers_catalog_and_drops_obsolete_builtins(persisted, catalog):
    result = migrate_builtin_modes(persisted, catalog)

    migrated_keys = {m.key for m in result.modes}
    catalog_keys = {m.key for m in catalog}
    assert catalog_keys <= migrated_keys

    for mode in result.modes:
        if mode.is_built_in:
            assert mode.key in catalog_keys


@allure.feature("Mode Migrator")
@allure.story("Inputs are never mutated")
@allure.severity(allure.severity_level.NORMAL)
@settings(max_examples=50)
@given(persisted=persisted_strategy(), catalog=catalog_strategy())
def test_migration_does_not_mutate_inputs(persisted, catalog):
    persisted_before = [m.to_dict() for m in persisted]
    catalog_before = [m.to_dict() for m in catalog]

    migrate_builtin_modes(persisted, catalog)

    assert [m.to_dict() for m in persisted] == persisted_before
    assert [m.to_dict() for m in catalog] == catalog_before


def test_new_catalog_mode_is_added():
    persisted = [Mode(id="default", allowed_tools=["a"], is_built_in=True)]
    catalog = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="research", allowed_tags=["query"], is_built_in=True),
    ]

    result = migrate_builtin_modes(persisted, catalog)

    assert result.changed
    assert [m.id for m in result.modes] == ["default", "research"]
    assert result.added == ["research"]
    assert result.updated == []
    assert result.removed == []
    assert result.modes[1].is_built_in


def test_added_mode_is_marked_built_in():
    catalog = [Mode(id="default", allowed_tools=["a"], is_built_in=False)]

    result = migrate_builtin_modes([], catalog)

    assert result.modes[0].is_built_in


def test_set_valued_fields_compare_without_order():
    persisted = [Mode(id="default", allowed_tags=["a", "b"], is_built_in=True)]
    catalog = [Mode(id="default", allowed_tags=["b", "a"], is_built_in=True)]

    result = migrate_builtin_modes(persisted, catalog)

    assert not result.changed
    assert result.modes[0].allowed_tags == ["a", "b"]


def test_changed_mode_is_updated_in_place():
    persisted = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="ask", name="Ask", system_prompt="old", allowed_tags=["query"], is_built_in=True),
        Mode(id="architect", allowed_tools=["a"], is_built_in=True),
    ]
    catalog = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="architect", allowed_tools=["a"], is_built_in=True),
        Mode(id="ask", name="Ask", system_prompt="new", allowed_tags=["query", "safe"],
             preferred_model="model-x", is_built_in=True),
    ]

    result = migrate_builtin_modes(persisted, catalog)

    assert result.updated == ["ask"]
    assert [m.id for m in result.modes] == ["default", "ask", "architect"]
    ask = result.modes[1]
    assert ask.system_prompt == "new"
    assert ask.preferred_model == "model-x"
    assert sorted(ask.allowed_tags) == ["query", "safe"]


def test_updated_collections_are_not_aliased_with_catalog():
    persisted = [Mode(id="default", allowed_tools=["a"], is_built_in=True)]
    catalog = [Mode(id="default", allowed_tools=["a", "b"], is_built_in=True)]

    result = migrate_builtin_modes(persisted, catalog)
    catalog[0].allowed_tools.append("c")

    assert result.modes[0].allowed_tools == ["a", "b"]


def test_descriptive_changes_trigger_update():
    persisted = [Mode(id="default", name="Old", allowed_tools=["a"], is_built_in=True)]
    catalog = [Mode(id="default", name="New", allowed_tools=["a"], is_built_in=True)]

    result = migrate_builtin_modes(persisted, catalog)

    assert result.updated == ["default"]
    assert result.modes[0].name == "New"


def test_icon_change_triggers_update():
    persisted = [Mode(id="default", allowed_tools=["a"], is_built_in=True, icon="old")]
    catalog = [Mode(id="default", allowed_tools=["a"], is_built_in=True, icon="new")]

    result = migrate_builtin_modes(persisted, catalog)
    again = migrate_builtin_modes(result.modes, catalog)

    assert result.updated == ["default"]
    assert result.modes[0].icon == "new"
    assert not again.changed


def test_obsolete_builtin_is_removed():
    persisted = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="legacy", allowed_tools=["a"], is_built_in=True),
    ]
    catalog = [Mode(id="default", allowed_tools=["a"], is_built_in=True)]

    result = migrate_builtin_modes(persisted, catalog)

    assert [m.id for m in result.modes] == ["default"]
    assert result.removed == ["legacy"]
    assert result.changed


def test_entry_with_cleared_flag_is_never_updated_or_removed():
    persisted = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="ask", system_prompt="mine", allowed_tools=["a"], is_built_in=False),
        Mode(id="legacy", allowed_tools=["a"], is_built_in=False),
    ]
    catalog = [
        Mode(id="default", allowed_tools=["a"], is_built_in=True),
        Mode(id="ask", system_prompt="shipped", allowed_tags=["query"], is_built_in=True),
    ]

    result = migrate_builtin_modes(persisted, catalog)

    assert not result.changed
    assert [m.id for m in result.modes] == ["default", "ask", "legacy"]
    assert result.modes[1].system_prompt == "mine"


def test_ids_match_case_insensitively():
    persisted = [Mode(id="Default", allowed_tools=["a"], is_built_in=True)]
    catalog = [Mode(id="default", allowed_tools=["a"], is_built_in=True)]

    result = migrate_builtin_modes(persisted, catalog)

    assert not result.changed
    assert [m.id for m in result.modes] == ["Default"]


def test_log_migration_reports_each_change(caplog):
    result = MigrationResult(added=["research"], updated=["ask"], removed=["legacy"])

    with caplog.at_level(logging.INFO, logger="modeguard.modes.migrator"):
        log_migration(result)

    assert "Added new built-in modes: research" in caplog.text
    assert "Updated built-in modes: ask" in caplog.text
    assert "Removed obsolete built-in modes: legacy" in caplog.text


def test_log_migration_is_quiet_without_changes(caplog):
    with caplog.at_level(logging.INFO, logger="modeguard.modes.migrator"):
        log_migration(MigrationResult())

    assert caplog.records == []

from __future__ import annotations

import random

import pytest

from delve.environment.generators import (
    BuilderConfigurationError,
    BuilderSettings,
    CellularAutomataBuilder,
    DLAAlgorithm,
    DLABuilder,
    DrunkardsWalkBuilder,
    DrunkSpawnMode,
    GenerationError,
    Symmetry,
    dla,
    drunkards_walk,
)


class TestConstruct:
    def test_grid_is_wall_filled_with_requested_size(self) -> None:
        builder = CellularAutomataBuilder.construct(4, width=30, height=20)
        assert builder.grid.width == 30
        assert builder.grid.height == 20
        assert builder.grid.depth == 4
        assert (builder.grid.tiles == 0).all()

    def test_history_flag_reaches_the_grid(self) -> None:
        builder = CellularAutomataBuilder.construct(1, record_history=True)
        assert builder.grid.record_history

    def test_walker_builders_start_with_default_preset(self) -> None:
        assert DrunkardsWalkBuilder.construct(1).settings == drunkards_walk.OPEN_AREA
        assert DLABuilder.construct(1).settings == dla.WALK_INWARDS


class TestConfigure:
    """configure() returns a new builder and leaves the original alone."""

    def test_returns_copy_with_new_settings(self) -> None:
        original = DrunkardsWalkBuilder.construct(1, rng=random.Random(1))
        configured = original.configure(drunkards_walk.FAT_PASSAGES)

        assert configured is not original
        assert configured.settings == drunkards_walk.FAT_PASSAGES
        assert original.settings == drunkards_walk.OPEN_AREA
        assert configured.grid is not original.grid

    def test_building_the_copy_leaves_original_grid_untouched(self) -> None:
        original = DLABuilder.construct(1, rng=random.Random(2))
        configured = original.configure(dla.CENTRAL_ATTRACTOR)
        configured.build()
        assert (original.grid.tiles == 0).all()

    def test_missing_required_setting_raises(self) -> None:
        builder = DLABuilder.construct(1)
        incomplete = BuilderSettings(
            algorithm=DLAAlgorithm.WALK_OUTWARDS, symmetry=Symmetry.NONE
        )
        with pytest.raises(BuilderConfigurationError, match="floor_percent"):
            builder.configure(incomplete)

    def test_configuration_error_is_a_generation_error(self) -> None:
        builder = DrunkardsWalkBuilder.construct(1)
        with pytest.raises(GenerationError):
            builder.configure(BuilderSettings(spawn_mode=DrunkSpawnMode.RANDOM))
        with pytest.raises(ValueError):
            builder.configure(BuilderSettings(spawn_mode=DrunkSpawnMode.RANDOM))


def test_settings_missing_lists_unset_fields() -> None:
    settings = BuilderSettings(lifetime=10, brush_size=1)
    assert settings.missing(("lifetime", "symmetry", "brush_size")) == ["symmetry"]


def test_with_source_is_a_copy_for_plain_builders() -> None:
    builder = CellularAutomataBuilder.construct(1)
    source = CellularAutomataBuilder.construct(1).grid
    clone = builder.with_source(source)
    assert clone is not builder
    assert clone.grid is not builder.grid

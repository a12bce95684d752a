from __future__ import annotations

import random
from unittest.mock import patch

import pytest

from delve.environment.generators import (
    BUILDER_TABLE,
    BuilderConfigurationError,
    GenerationError,
    MazeBuilder,
    RoomsAndCorridorsBuilder,
    WaveFunctionCollapseBuilder,
    create_builder,
    factory,
    generate,
)
from delve.environment.map import Grid
from tests.helpers import assert_level_invariants


class TestBuilderTable:
    """The weighted table levels are drawn from."""

    def test_names_are_unique(self) -> None:
        names = factory.builder_names()
        assert len(names) == len(set(names)) == 15

    def test_weights(self) -> None:
        weights = {entry.name: entry.weight for entry in BUILDER_TABLE}
        assert weights["BSP Dungeon Builder"] == 4
        assert weights["Simple Map"] == 4
        assert weights["Maze"] == 2
        assert weights["Voronoi Map Builder"] == 1
        assert sum(weights.values()) == 39

    def test_maze_and_simple_map_skip_wfc(self) -> None:
        skipped = {entry.name for entry in BUILDER_TABLE if not entry.wfc_compatible}
        assert skipped == {"Simple Map", "Maze"}

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(BuilderConfigurationError, match="Nope"):
            factory.get_entry("Nope")

    def test_create_builder_applies_preset(self) -> None:
        builder = create_builder("DLA - Insectoid", 2, rng=random.Random(0))
        assert builder.settings == factory.dla.INSECTOID
        assert builder.grid.depth == 2

    def test_create_builder_plain(self) -> None:
        builder = create_builder("Maze", 1)
        assert isinstance(builder, MazeBuilder)


class TestGenerate:
    """The orchestrator entry point."""

    def test_random_levels_are_valid(self) -> None:
        r = random.Random(2024)
        for depth in range(1, 4):
            grid = generate(depth, rng=r, use_wfc=False)
            assert grid.depth == depth
            assert_level_invariants(grid)

    def test_named_builder_is_used(self) -> None:
        with patch.object(
            RoomsAndCorridorsBuilder,
            "build",
            autospec=True,
            side_effect=RoomsAndCorridorsBuilder.build,
        ) as build:
            generate(1, rng=random.Random(1), builder_name="Simple Map")
        assert build.call_count == 1

    def test_unknown_builder_name_raises(self) -> None:
        with pytest.raises(BuilderConfigurationError):
            generate(1, rng=random.Random(1), builder_name="Nope")

    def test_wfc_is_never_applied_to_incompatible_builders(self) -> None:
        with patch.object(factory, "_resynthesize") as resynthesize:
            generate(1, rng=random.Random(3), builder_name="Maze", use_wfc=True)
        resynthesize.assert_not_called()

    def test_forced_wfc_produces_valid_level(self) -> None:
        with patch.object(WaveFunctionCollapseBuilder, "max_attempts", 5):
            grid = generate(
                1, rng=random.Random(4), builder_name="Cellular Automata", use_wfc=True
            )
        assert_level_invariants(grid)

    def test_wfc_failure_falls_back_to_source(self) -> None:
        source = generate(
            1, rng=random.Random(5), builder_name="Cellular Automata", use_wfc=False
        )
        with patch.object(
            WaveFunctionCollapseBuilder,
            "build",
            side_effect=GenerationError("boom"),
        ):
            result = factory._resynthesize(source, random.Random(0))
        assert result is source

    def test_failures_retry_then_reraise(self) -> None:
        calls = 0

        def failing_build(self: RoomsAndCorridorsBuilder) -> Grid:
            nonlocal calls
            calls += 1
            raise GenerationError("no rooms")

        with (
            patch.object(RoomsAndCorridorsBuilder, "build", failing_build),
            pytest.raises(GenerationError, match="no rooms"),
        ):
            generate(1, rng=random.Random(6), builder_name="Simple Map")
        assert calls == factory.config.MAX_GENERATION_ATTEMPTS

    def test_recovers_after_a_failed_attempt(self) -> None:
        real_build = RoomsAndCorridorsBuilder.build
        calls = 0

        def flaky_build(self: RoomsAndCorridorsBuilder) -> Grid:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise GenerationError("first try fails")
            return real_build(self)

        with patch.object(RoomsAndCorridorsBuilder, "build", flaky_build):
            grid = generate(1, rng=random.Random(7), builder_name="Simple Map")
        assert calls == 2
        assert_level_invariants(grid)

# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for the run Configuration."""

import logging

import pytest

from groupspec.hooks.registry import HookPhase, HookScope
from groupspec.runner.configuration import Configuration


class TestDefaults:
    """A new configuration."""

    def test_defaults(self) -> None:
        """Nothing is filtered, stopped early or skipped by default."""
        config = Configuration()

        assert config.fail_fast is False
        assert config.dry_run is False
        assert config.run_all_when_everything_filtered is False
        assert config.inclusion_filter == {}
        assert config.exclusion_filter == {}
        assert 0 <= config.seed <= 0xFFFF
        assert not config.seed_used

    def test_default_warn_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        """Without a sink, diagnostics go to the groupspec.diagnostics logger."""
        with caplog.at_level(logging.WARNING, logger="groupspec.diagnostics"):
            Configuration().warn("something odd")

        assert caplog.records[-1].name == "groupspec.diagnostics"
        assert caplog.records[-1].getMessage() == "something odd"

    def test_seed_used_is_recorded(self) -> None:
        """Random ordering marks the seed as used."""
        config = Configuration()
        config.seed = 3
        config.ordering_registry.global_ordering.order([1, 2])

        assert config.seed_used

    def test_setup_does_not_use_the_seed(self) -> None:
        """Registering and describing orderings does not count as using the seed."""
        config = Configuration()
        config.order = "random:5"
        config.register_ordering("reversed", lambda items: items[::-1])
        repr(config.ordering_registry.global_ordering)
        repr(config)

        assert not config.seed_used

    def test_repr_mentions_settings(self) -> None:
        """The representation lists order, seed and fail fast."""
        config = Configuration()
        config.order = "random:11"

        assert "order='random'" in repr(config)
        assert "seed=11" in repr(config)


class TestFilterRun:
    """Low-priority defaults for filtering."""

    def test_filter_run_including(self) -> None:
        """filter_run and filter_run_including add inclusion rules."""
        config = Configuration()
        config.filter_run(focus=True)
        config.filter_run_including(db="pg")

        assert config.inclusion_filter == {"focus": True, "db": "pg"}

    def test_explicit_rules_win_over_defaults(self) -> None:
        """Existing rules are not overridden by low-priority ones."""
        config = Configuration()
        config.filter_manager.exclude({"slow": False})
        config.filter_run_excluding(slow=True, broken=True)

        assert config.exclusion_filter == {"slow": False, "broken": True}


class TestRootHooks:
    """Hooks registered on the configuration."""

    def test_direct_and_decorator_forms(self) -> None:
        """Hooks can be registered directly or as decorators."""
        config = Configuration()

        @config.before("all")
        def setup(ctx: object) -> None:
            pass

        config.after(lambda ctx: None)
        config.around(lambda ctx, run: run(), db=True)

        assert [hook.body for hook in config.hooks.hooks_for(HookPhase.BEFORE, HookScope.CONTEXT)] == [
            setup
        ]
        assert len(config.hooks.hooks_for(HookPhase.AFTER, HookScope.EXAMPLE)) == 1
        [around] = config.hooks.hooks_for(HookPhase.AROUND, HookScope.EXAMPLE)
        assert around.conditions == {"db": True}

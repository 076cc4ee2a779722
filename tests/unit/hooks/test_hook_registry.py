# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for hook registration."""

import pytest

from groupspec.core.errors import HookDefinitionError
from groupspec.groups.world import World
from groupspec.hooks.registry import (
    Hook,
    HookCollections,
    HookPhase,
    HookScope,
    register_hook,
)


def body(ctx: object) -> None:
    pass


class TestHookScope:
    """Scope names and aliases."""

    @pytest.mark.parametrize(
        ("alias", "scope"),
        [
            (None, HookScope.EXAMPLE),
            ("each", HookScope.EXAMPLE),
            ("case", HookScope.EXAMPLE),
            ("all", HookScope.CONTEXT),
            ("group", HookScope.CONTEXT),
            ("CONTEXT", HookScope.CONTEXT),
            ("suite", HookScope.SUITE),
            ("run", HookScope.SUITE),
            (HookScope.SUITE, HookScope.SUITE),
        ],
    )
    def test_parse_aliases(self, alias: str | None, scope: HookScope) -> None:
        """Every alias resolves to its scope."""
        assert HookScope.parse(alias) == scope

    def test_unknown_scope(self) -> None:
        """Unknown scope names are rejected."""
        with pytest.raises(HookDefinitionError, match="Unknown hook scope 'forever'"):
            HookScope.parse("forever")


class TestHookCollections:
    """Registration and lookup of hooks."""

    def test_hooks_kept_in_registration_order(self) -> None:
        """hooks_for returns hooks in the order they were registered."""
        hooks = HookCollections("group")
        first = hooks.register("before", "each", body)
        second = hooks.register(HookPhase.BEFORE, HookScope.EXAMPLE, body)

        assert hooks.hooks_for(HookPhase.BEFORE, HookScope.EXAMPLE) == [first, second]
        assert len(hooks) == 2
        assert first.owner == "group"

    def test_around_only_per_case(self) -> None:
        """around hooks on a group or run scope are rejected."""
        hooks = HookCollections()

        with pytest.raises(HookDefinitionError, match="around"):
            hooks.register("around", "all", body)

    def test_body_must_be_callable(self) -> None:
        """A hook needs a callable body."""
        with pytest.raises(HookDefinitionError, match="callable"):
            HookCollections().register("before", "each", "not callable")  # type: ignore[arg-type]

    def test_conditions_filter_matching_hooks(self) -> None:
        """Only hooks whose conditions match the metadata are returned."""
        hooks = HookCollections()
        always = hooks.register("before", "each", body)
        db_only = hooks.register("before", "each", body, {"db": True})

        assert hooks.matching(HookPhase.BEFORE, HookScope.EXAMPLE, {"db": True}) == [
            always,
            db_only,
        ]
        assert hooks.matching(HookPhase.BEFORE, HookScope.EXAMPLE, {}) == [always]

    def test_label(self) -> None:
        """Labels name phase and scope."""
        hook = Hook(HookScope.CONTEXT, HookPhase.AFTER, body)

        assert hook.label == "after(:context)"


class TestRegisterHook:
    """Direct and decorator registration forms."""

    def test_body_only(self) -> None:
        """A lone callable registers a per-case hook."""
        hooks = HookCollections()
        hook = register_hook(hooks, HookPhase.BEFORE, body, None, {})

        assert hook.scope == HookScope.EXAMPLE
        assert hook.body is body

    def test_decorator_form_returns_function(self) -> None:
        """The decorator form registers and returns the function unchanged."""
        hooks = HookCollections()
        decorator = register_hook(hooks, HookPhase.AFTER, "all", None, {"slow": True})

        assert decorator(body) is body
        [hook] = hooks.hooks_for(HookPhase.AFTER, HookScope.CONTEXT)
        assert hook.conditions == {"slow": True}


class TestGroupHookDefinitions:
    """Hook definitions made on groups."""

    def test_suite_hooks_rejected_on_groups(self, world: World) -> None:
        """before(:suite) is only available on the configuration."""
        group = world.describe("group")

        with pytest.raises(HookDefinitionError, match="only supported on the configuration"):
            group.before("suite", body)

    def test_around_context_rejected_on_groups(self, world: World) -> None:
        """around(:context) is rejected on groups too."""
        group = world.describe("group")

        with pytest.raises(HookDefinitionError):
            group.around("all", lambda ctx, run: run())

    def test_suite_hooks_allowed_on_configuration(self, world: World) -> None:
        """The configuration accepts suite hooks."""
        hook = world.configuration.before("suite", body)

        assert hook.scope == HookScope.SUITE

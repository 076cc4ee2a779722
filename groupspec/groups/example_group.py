# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Example groups: the definition DSL and the per-group execution protocol.

A group is created through ``World.describe`` (top level) or ``describe`` /
``context`` on another group. Its body is a function receiving the group:

    def register(world):
        @world.describe(Stack)
        def stack(group):
            group.before("each", lambda ctx: setattr(ctx, "stack", Stack()))

            @group.it("starts empty")
            def _(ctx):
                assert ctx.stack.empty()

            @group.context("with one item", slow=True)
            def one_item(group):
                ...

Running a group sends ``group_started``, runs the ``before(:context)`` chain,
its own filtered examples, then its child groups (each ordered by the group's
ordering strategy), and finally the ``after(:context)`` chain and
``group_finished``. Groups without any filtered descendant example are not run
at all, so none of their hooks fire.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from groupspec.core.errors import HookDefinitionError, SharedGroupNotFoundError, SkipExample
from groupspec.core.metadata import (
    CallerLocation,
    Metadata,
    build_group_metadata,
    caller_location,
    describe_object,
    split_description_args,
)
from groupspec.groups.context import ExampleContext
from groupspec.groups.example import Example, ExampleBody
from groupspec.groups.shared import SharedGroupDefinition, SharedGroupRegistry
from groupspec.hooks.registry import HookCollections, HookPhase, HookScope, register_hook
from groupspec.ordering.registry import OrderingStrategy
from groupspec.reporting.reporter import Reporter

if TYPE_CHECKING:
    from groupspec.groups.world import World

logger = logging.getLogger(__name__)

GroupBody = Callable[["ExampleGroup"], Any]


class ExampleGroup:
    """A named container of examples, nested groups and hooks.

    Attributes:
        world: The World owning every node
        parent: Enclosing group, None for top-level groups
        id: Stable integer id in the World's node arena
        display_name: Constant-like readable name, unique per World
        metadata: Composed metadata of the group
        examples: Examples in definition order
        children: Nested groups in definition order
        hooks: Hooks registered on this group
        shared_groups: Shared groups defined on this group
        before_context_state: State set by ``before(:context)`` hooks while
            the group runs; emptied once its ``after(:context)`` hooks ran
        shared_group_inclusion: (name, location) for groups created by
            ``it_behaves_like``
    """

    def __init__(
        self,
        world: World,
        parent: ExampleGroup | None,
        description_args: list[Any],
        user_metadata: Metadata,
        block: GroupBody | None = None,
        location: CallerLocation | None = None,
    ) -> None:
        self.world = world
        self.parent = parent
        self.metadata = build_group_metadata(
            parent.metadata if parent is not None else None,
            description_args,
            user_metadata,
            block=block,
            location=location,
            format_docstring=world.configuration.docstring_formatter,
        )
        self.id = world.register_node(self)
        self.display_name = world.assign_display_name(self)
        self.examples: list[Example] = []
        self.children: list[ExampleGroup] = []
        self.hooks = HookCollections(self.display_name)
        self.shared_groups = SharedGroupRegistry()
        self.before_context_state: dict[str, Any] = {}
        self._included_shared: dict[tuple[Any, ...], ExampleGroup | None] = {}
        self.shared_group_inclusion: tuple[Any, str] | None = None
        logger.debug(f"Defined group {self.display_name} at {self.location}")
        if block is not None:
            world.evaluate_definition(self, block)

    def __call__(self, block: GroupBody) -> ExampleGroup:
        """Evaluate ``block`` as the group body; enables decorator usage."""
        self.metadata["block"] = block
        self.world.evaluate_definition(self, block)
        return self

    # Properties

    @property
    def description(self) -> str:
        return self.metadata["description"]

    @property
    def full_description(self) -> str:
        return self.metadata["full_description"]

    @property
    def described_class(self) -> Any:
        return self.metadata.get("described_class")

    @property
    def file_path(self) -> str:
        return self.metadata["file_path"]

    @property
    def location(self) -> str:
        return self.metadata["location"]

    @property
    def is_top_level(self) -> bool:
        return self.parent is None

    @property
    def top_level_description(self) -> str:
        return self.parent_groups[-1].description

    @property
    def parent_groups(self) -> list[ExampleGroup]:
        """This group followed by its ancestors, innermost first."""
        groups: list[ExampleGroup] = []
        group: ExampleGroup | None = self
        while group is not None:
            groups.append(group)
            group = group.parent
        return groups

    def descendants(self) -> Iterator[ExampleGroup]:
        """This group and every nested group, depth first in definition order."""
        yield self
        for child in self.children:
            yield from child.descendants()

    @property
    def filtered_examples(self) -> list[Example]:
        return self.world.filtered_examples(self)

    @property
    def descendant_filtered_examples(self) -> list[Example]:
        return self.world.descendant_filtered_examples(self)

    @property
    def ordering_strategy(self) -> OrderingStrategy:
        registry = self.world.configuration.ordering_registry
        return registry.resolve(self.metadata, warn=self.world.configuration.warn)

    # Nested groups

    def describe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        """Define a nested group.

        Positional arguments are the description (a subject and/or a string);
        trailing mappings and keyword arguments are user metadata. Without a
        ``block`` the returned group can be used as a decorator.
        """
        description_args, user_metadata = split_description_args(args)
        user_metadata.update(metadata)
        child = ExampleGroup(self.world, self, description_args, user_metadata)
        self.children.append(child)
        if block is not None:
            child(block)
        return child

    context = describe
    example_group = describe

    def fdescribe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(*args, block=block, focus=True, **metadata)

    fcontext = fdescribe

    def xdescribe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(
            *args, block=block, skip="Temporarily skipped with xdescribe", **metadata
        )

    def xcontext(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(*args, block=block, skip="Temporarily skipped with xcontext", **metadata)

    # Examples

    def example(
        self, description: Any = None, body: ExampleBody | None = None, **metadata: Any
    ) -> Example:
        """Define an example.

        ``group.it("works", body)``, ``group.it(body)`` and the decorator form
        ``@group.it("works")`` are accepted. An example without a body is
        pending ("Not yet implemented").
        """
        if body is None and callable(description) and not isinstance(description, type):
            description, body = None, description
        description_args = [] if description is None else [description]
        example = Example(self, description_args, metadata, body)
        self.examples.append(example)
        return example

    it = example
    specify = example

    def fit(self, description: Any = None, body: ExampleBody | None = None, **metadata: Any) -> Example:
        return self.example(description, body, focus=True, **metadata)

    focus = fit
    fexample = fit
    fspecify = fit

    def xit(self, description: Any = None, body: ExampleBody | None = None, **metadata: Any) -> Example:
        return self.example(description, body, skip="Temporarily skipped with xit", **metadata)

    def xexample(
        self, description: Any = None, body: ExampleBody | None = None, **metadata: Any
    ) -> Example:
        return self.example(description, body, skip="Temporarily skipped with xexample", **metadata)

    def xspecify(
        self, description: Any = None, body: ExampleBody | None = None, **metadata: Any
    ) -> Example:
        return self.example(description, body, skip="Temporarily skipped with xspecify", **metadata)

    def skip(self, description: Any = None, body: ExampleBody | None = None, **metadata: Any) -> Example:
        """Define an example that is never executed."""
        metadata.setdefault("skip", True)
        return self.example(description, body, **metadata)

    def pending(
        self, description: Any = None, body: ExampleBody | None = None, **metadata: Any
    ) -> Example:
        """Define an example that is expected to fail."""
        metadata.setdefault("pending", True)
        return self.example(description, body, **metadata)

    # Hooks

    def before(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        """Register a before hook (per-case by default); decorator form supported."""
        return self._register_hook(HookPhase.BEFORE, scope, body, conditions)

    def after(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        return self._register_hook(HookPhase.AFTER, scope, body, conditions)

    def around(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        """Register ``body(ctx, run)`` wrapping each example of this group."""
        return self._register_hook(HookPhase.AROUND, scope, body, conditions)

    def _register_hook(
        self,
        phase: HookPhase,
        scope: Any,
        body: Callable[..., Any] | None,
        conditions: dict[str, Any],
    ) -> Any:
        if not callable(scope) and HookScope.parse(scope) == HookScope.SUITE:
            raise HookDefinitionError(
                f"{phase.value}(:suite) hooks are only supported on the configuration, "
                f"not on example group {self.display_name}"
            )
        return register_hook(self.hooks, phase, scope, body, conditions)

    # Shared groups

    def shared_examples(self, name: Any, body: Callable[..., Any] | None = None) -> Any:
        """Define a shared group visible to this group and its descendants."""
        location = caller_location().location

        def define(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.shared_groups.add(SharedGroupDefinition(name, fn, location))
            return fn

        if body is None:
            return define
        return define(body)

    shared_context = shared_examples
    shared_examples_for = shared_examples

    def find_shared_group(self, name: Any, label: str = "shared examples") -> SharedGroupDefinition:
        """Look ``name`` up from this group outwards, then on the World.

        Raises:
            SharedGroupNotFoundError: If no scope defines ``name``.
        """
        for group in self.parent_groups:
            definition = group.shared_groups.get(name)
            if definition is not None:
                return definition
        definition = self.world.shared_groups.get(name)
        if definition is None:
            raise SharedGroupNotFoundError(name, label)
        return definition

    def include_examples(
        self, name: Any, *args: Any, block: GroupBody | None = None, **kwargs: Any
    ) -> None:
        """Evaluate the shared group ``name`` directly into this group."""
        self._include_shared(name, args, kwargs, block, "shared examples", nested=False)

    def include_context(
        self, name: Any, *args: Any, block: GroupBody | None = None, **kwargs: Any
    ) -> None:
        self._include_shared(name, args, kwargs, block, "shared context", nested=False)

    def it_behaves_like(
        self, name: Any, *args: Any, block: GroupBody | None = None, **kwargs: Any
    ) -> ExampleGroup:
        """Evaluate the shared group ``name`` into a new nested group."""
        nested = self._include_shared(name, args, kwargs, block, "shared examples", nested=True)
        assert nested is not None
        return nested

    it_should_behave_like = it_behaves_like

    def _include_shared(
        self,
        name: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        block: GroupBody | None,
        label: str,
        nested: bool,
    ) -> ExampleGroup | None:
        site = caller_location()
        key = (name, site.location, nested, repr(args), repr(sorted(kwargs.items())))
        if key in self._included_shared:
            logger.debug(f"Shared group {name!r} already included at {site.location}")
            return self._included_shared[key]

        definition = self.find_shared_group(name, label)

        def apply(target: ExampleGroup) -> None:
            definition.body(target, *args, **kwargs)
            if block is not None:
                block(target)

        target: ExampleGroup | None = None
        if nested:
            target = ExampleGroup(
                self.world, self, [f"behaves like {describe_object(name)}"], {}, location=site
            )
            self.children.append(target)
            target.shared_group_inclusion = (name, site.location)
            self.world.evaluate_definition(target, apply)
        else:
            apply(self)
        self._included_shared[key] = target
        return target

    # Execution

    def run(self, reporter: Reporter | None = None, parent_state: dict[str, Any] | None = None) -> bool:
        """Run the group's filtered examples and nested groups.

        Returns:
            False if any example failed or the run was stopped, True otherwise.
        """
        reporter = reporter or Reporter()
        world = self.world
        if world.wants_to_quit:
            if self.is_top_level:
                world.clear_remaining_example_groups()
            return False
        if not self.descendant_filtered_examples:
            return True

        reporter.group_started(self)
        ordering = self.ordering_strategy
        context = ExampleContext(self, None, parent_state)
        try:
            try:
                world.hook_executor.run_before_context(self, context)
            finally:
                self.before_context_state = context.state()
            examples_passed = self._run_examples(ordering, reporter)
            children_passed = [
                child.run(reporter, self.before_context_state)
                for child in ordering.order(self.children)
            ]
            return examples_passed and all(children_passed)
        except SkipExample as exc:
            for example in self._unrun_examples():
                example.skip_with_exception(reporter, exc)
            return True
        except Exception as exc:
            logger.debug(f"Group {self.display_name} failed: {exc!r}")
            if world.configuration.fail_fast:
                world.wants_to_quit = True
            for example in self._unrun_examples():
                example.fail_with_exception(reporter, exc)
            return False
        finally:
            after_context = ExampleContext(self, None, self.before_context_state)
            world.hook_executor.run_after_context(self, after_context)
            self.before_context_state = {}
            reporter.group_finished(self)

    def _run_examples(self, ordering: OrderingStrategy, reporter: Reporter) -> bool:
        results: list[bool] = []
        for example in ordering.order(self.filtered_examples):
            if self.world.wants_to_quit:
                return False
            results.append(example.run(dict(self.before_context_state), reporter))
        return all(results)

    def _unrun_examples(self) -> list[Example]:
        return [
            example
            for example in self.descendant_filtered_examples
            if not example.execution_result.was_run
        ]

    def __repr__(self) -> str:
        return f"ExampleGroup({self.display_name}, location={self.location!r})"


"""
Unit tests for the pipeline helpers: context guard, override merge, attribute
enumeration, awaitable handling and option resolution.
"""

import asyncio
from dataclasses import dataclass

import pytest

from entity_seeding import InvalidOverrideError, MissingContextError, SaveOptions, expect_context
from entity_seeding.types import resolve_option
from entity_seeding.utils.attributes import entity_attributes
from entity_seeding.utils.awaitables import is_promise_like, maybe_await
from entity_seeding.utils.overrides import apply_overrides


class Profile:
    nickname = None

    def __init__(self):
        self.bio = "bio"
        self._cache = {}


@dataclass
class Point:
    x: int = 0
    y: int = 0


class Slotted:
    __slots__ = ("code", "_hidden")

    def __init__(self):
        self.code = "A1"
        self._hidden = True


class SingleSlot:
    __slots__ = "value"

    def __init__(self):
        self.value = 7


async def answer():
    return 42


# =============================================================================
# CONTEXT GUARD
# =============================================================================

class TestExpectContext:
    """Required-context validation."""

    def test_no_requirements_accepts_anything(self):
        expect_context({})
        expect_context(None)

    def test_single_key_present(self):
        expect_context({"tenant_id": 1}, "tenant_id")

    def test_key_mapped_to_none_counts_as_present(self):
        expect_context({"tenant_id": None}, "tenant_id")

    def test_single_key_missing(self):
        with pytest.raises(MissingContextError) as excinfo:
            expect_context({"other": 1}, "tenant_id")

        assert excinfo.value.missing == ["tenant_id"]

    @pytest.mark.parametrize("context", [{"tenant_id": 1}, {"tenant_slug": "acme"}, {"tenant_id": 1, "tenant_slug": "acme"}])
    def test_group_satisfied_by_any_member(self, context):
        expect_context(context, ["tenant_id", "tenant_slug"])

    def test_group_missing_reports_whole_group(self):
        with pytest.raises(MissingContextError) as excinfo:
            expect_context({}, ("tenant_id", "tenant_slug"))

        assert excinfo.value.missing == ["tenant_id", "tenant_slug"]

    def test_first_unsatisfied_entry_is_reported(self):
        with pytest.raises(MissingContextError) as excinfo:
            expect_context({"locale": "en"}, "locale", "site", ["tenant_id"])

        assert excinfo.value.missing == ["site"]

    def test_every_entry_must_be_satisfied(self):
        with pytest.raises(MissingContextError):
            expect_context({"locale": "en"}, "locale", ["tenant_id", "tenant_slug"])


# =============================================================================
# OVERRIDE MERGE
# =============================================================================

class TestApplyOverrides:

    def test_overrides_replace_values(self):
        profile = apply_overrides(Profile(), {"bio": "new bio", "nickname": "nick"})

        assert profile.bio == "new bio"
        assert profile.nickname == "nick"

    def test_empty_overrides_leave_entity_untouched(self):
        profile = Profile()

        assert apply_overrides(profile, None) is profile
        assert apply_overrides(profile, {}) is profile
        assert profile.bio == "bio"

    def test_values_are_assigned_as_given(self):
        pending = answer()
        try:
            profile = apply_overrides(Profile(), {"bio": pending})
            assert profile.bio is pending
        finally:
            pending.close()

    def test_unknown_key_raises_before_any_assignment(self):
        profile = Profile()

        with pytest.raises(InvalidOverrideError) as excinfo:
            apply_overrides(profile, {"bio": "changed", "age": 30})

        assert excinfo.value.attribute == "age"
        assert excinfo.value.entity_name == "Profile"
        assert profile.bio == "bio"


# =============================================================================
# ATTRIBUTE ENUMERATION
# =============================================================================

class TestEntityAttributes:

    def test_instance_attributes_skip_private_names(self):
        assert entity_attributes(Profile()) == [("bio", "bio")]

    def test_dataclass_fields(self):
        assert entity_attributes(Point(1, 2)) == [("x", 1), ("y", 2)]

    def test_slots(self):
        assert entity_attributes(Slotted()) == [("code", "A1")]

    def test_single_string_slot(self):
        assert entity_attributes(SingleSlot()) == [("value", 7)]


# =============================================================================
# AWAITABLES AND OPTIONS
# =============================================================================

class TestAwaitables:

    async def test_is_promise_like(self):
        pending = answer()
        future = asyncio.get_running_loop().create_future()
        future.set_result(1)

        assert is_promise_like(pending)
        assert is_promise_like(future)
        assert not is_promise_like(42)
        assert not is_promise_like(answer)

        await pending

    async def test_maybe_await(self):
        assert await maybe_await(answer()) == 42
        assert await maybe_await("plain") == "plain"


class TestResolveOption:

    def test_first_set_candidate_wins(self):
        assert resolve_option(None, "class", "default") == "class"
        assert resolve_option("instance", "class") == "instance"

    def test_falsy_values_still_count_as_set(self):
        assert resolve_option([], ["class"]) == []
        assert resolve_option(0, 5) == 0

    def test_default_when_nothing_is_set(self):
        assert resolve_option(None, None, default="fallback") == "fallback"
        assert resolve_option() is None


class TestSaveOptions:

    def test_defaults(self):
        options = SaveOptions()

        assert options.transaction is True
        assert options.chunk is None
        assert options.reload is True

    @pytest.mark.parametrize("chunk", [0, -3])
    def test_chunk_must_be_positive(self, chunk):
        with pytest.raises(ValueError):
            SaveOptions(chunk=chunk)

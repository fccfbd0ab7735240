"""
Tests for predicates, combinators (any_of / all_of / negate) and gates (when / when_not).
"""

import inspect
import re
import unittest
from unittest.mock import MagicMock

import pytest

from request_locale.models import Locale, Request, RequestContext
from request_locale.predicates import (
    all_of,
    any_of,
    is_local,
    is_preview_domain,
    negate,
    when,
    when_not,
)

FR = Locale("FR", "FR")


def make_ctx(url="https://my-store.com/"):
    return RequestContext.from_request(Request(url=url))


def always(ctx):
    return True


def never(ctx):
    return False


async def async_always(ctx):
    return True


async def async_never(ctx):
    return False


class TestIsLocal:
    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:3000/fr",
            "http://127.0.0.1:8000/",
            "http://[::1]:3000/",
            "http://shop.localhost/",
            "http://LOCALHOST/",
        ],
    )
    def test_local_hosts(self, url):
        assert is_local(make_ctx(url)) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://my-store.com/",
            "https://localhost.my-store.com/",
            "https://mylocalhost/",
            "http://127.0.0.2/",
        ],
    )
    def test_remote_hosts(self, url):
        assert is_local(make_ctx(url)) is False


class TestIsPreviewDomain:
    def test_default_patterns(self):
        predicate = is_preview_domain()
        assert predicate(make_ctx("https://abc-def.trycloudflare.com/")) is True
        assert predicate(make_ctx("https://abc123.ngrok.app/")) is True
        assert predicate(make_ctx("https://my-store.com/")) is False

    def test_default_regex_is_anchored(self):
        predicate = is_preview_domain()
        assert predicate(make_ctx("https://x.ngrok.app.my-store.com/")) is False

    def test_string_patterns_use_containment(self):
        predicate = is_preview_domain(["vercel.app"])
        assert predicate(make_ctx("https://my-store-git-main.vercel.app/")) is True
        assert predicate(make_ctx("https://abc.ngrok.app/")) is False

    def test_regex_patterns_use_search(self):
        predicate = is_preview_domain([re.compile(r"^staging\."), re.compile(r"\.preview\.")])
        assert predicate(make_ctx("https://staging.my-store.com/")) is True
        assert predicate(make_ctx("https://pr-12.preview.my-store.com/")) is True
        assert predicate(make_ctx("https://www.staging.my-store.com/")) is False

    def test_custom_patterns_replace_defaults(self):
        predicate = is_preview_domain([])
        assert predicate(make_ctx("https://abc.ngrok.app/")) is False

    def test_rejects_other_pattern_types(self):
        with pytest.raises(TypeError):
            is_preview_domain([42])


class TestSyncCombinators:
    """Combinators over synchronous predicates return plain booleans."""

    def test_any_of(self):
        ctx = make_ctx()
        assert any_of(never, always)(ctx) is True
        assert any_of(never, never)(ctx) is False
        assert any_of()(ctx) is False

    def test_all_of(self):
        ctx = make_ctx()
        assert all_of(always, always)(ctx) is True
        assert all_of(always, never)(ctx) is False
        assert all_of()(ctx) is True

    def test_negate(self):
        ctx = make_ctx()
        assert negate(always)(ctx) is False
        assert negate(never)(ctx) is True

    def test_any_of_short_circuits(self):
        skipped = MagicMock(return_value=False)
        assert any_of(always, skipped)(make_ctx()) is True
        skipped.assert_not_called()

    def test_all_of_short_circuits(self):
        skipped = MagicMock(return_value=True)
        assert all_of(never, skipped)(make_ctx()) is False
        skipped.assert_not_called()

    def test_predicates_get_the_same_context(self):
        first = MagicMock(return_value=False)
        second = MagicMock(return_value=False)
        ctx = make_ctx()
        any_of(first, second)(ctx)
        first.assert_called_once_with(ctx)
        second.assert_called_once_with(ctx)

    def test_truthy_values_count(self):
        assert any_of(lambda ctx: "yes")(make_ctx()) is True
        assert all_of(lambda ctx: 0)(make_ctx()) is False


class TestSyncGates:
    def test_when_true_delegates(self):
        strategy = MagicMock(return_value=FR)
        assert when(always, strategy)(make_ctx()) is FR
        strategy.assert_called_once()

    def test_when_true_propagates_none(self):
        assert when(always, lambda ctx: None)(make_ctx()) is None

    def test_when_false_skips_strategy(self):
        strategy = MagicMock(return_value=FR)
        assert when(never, strategy)(make_ctx()) is None
        strategy.assert_not_called()

    def test_when_not(self):
        strategy = MagicMock(return_value=FR)
        assert when_not(never, strategy)(make_ctx()) is FR
        assert when_not(always, strategy)(make_ctx()) is None
        strategy.assert_called_once()

    def test_gate_with_real_predicate(self):
        gated = when(is_local, lambda ctx: FR)
        assert gated(make_ctx("http://localhost:3000/")) is FR
        assert gated(make_ctx("https://my-store.com/")) is None

    def test_labels(self):
        from request_locale.callables import describe
        from request_locale.strategies import from_path_prefix

        gated = when_not(any_of(is_local, is_preview_domain()), from_path_prefix({"fr": FR}))
        assert describe(gated) == (
            "when_not(any_of(is_local, is_preview_domain), from_path_prefix)"
        )


class TestAsyncCombinators(unittest.IsolatedAsyncioTestCase):
    """Combinators switch to awaitables once a callback is asynchronous."""

    async def test_any_of_with_async_predicates(self):
        ctx = make_ctx()
        result = any_of(never, async_always)(ctx)
        self.assertTrue(inspect.isawaitable(result))
        self.assertIs(await result, True)
        self.assertIs(await any_of(async_never, never)(ctx), False)

    async def test_all_of_with_async_predicates(self):
        ctx = make_ctx()
        self.assertIs(await all_of(async_always, always)(ctx), True)
        self.assertIs(await all_of(always, async_never)(ctx), False)

    async def test_any_of_short_circuits_after_await(self):
        skipped = MagicMock(return_value=False)
        self.assertIs(await any_of(async_always, skipped)(make_ctx()), True)
        skipped.assert_not_called()

    async def test_all_of_short_circuits_after_await(self):
        skipped = MagicMock(return_value=True)
        self.assertIs(await all_of(async_never, skipped)(make_ctx()), False)
        skipped.assert_not_called()

    async def test_any_of_awaits_later_predicates(self):
        self.assertIs(await any_of(async_never, async_never, async_always)(make_ctx()), True)

    async def test_negate_async(self):
        self.assertIs(await negate(async_always)(make_ctx()), False)

    async def test_when_with_async_predicate(self):
        strategy = MagicMock(return_value=FR)
        self.assertIs(await when(async_always, strategy)(make_ctx()), FR)
        self.assertIsNone(await when(async_never, strategy)(make_ctx()))
        strategy.assert_called_once()

    async def test_when_with_async_strategy(self):
        async def strategy(ctx):
            return FR

        self.assertIs(await when(always, strategy)(make_ctx()), FR)

    async def test_when_async_predicate_and_async_strategy(self):
        async def strategy(ctx):
            return FR

        self.assertIs(await when(async_always, strategy)(make_ctx()), FR)

    async def test_when_not_with_async_predicate(self):
        strategy = MagicMock(return_value=FR)
        self.assertIsNone(await when_not(async_always, strategy)(make_ctx()))
        strategy.assert_not_called()


if __name__ == "__main__":
    unittest.main()

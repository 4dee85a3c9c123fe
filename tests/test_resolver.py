"""
Tests for VoyageResolver — Finding a voyage from what the user typed
"""

import pytest

from helm.core.resolver import ResolveStatus, VoyageResolver, format_resolve_prompt


@pytest.fixture
def voyages(helm_factory):
    """Three voyages with distinct intents."""
    return [
        helm_factory.create_voyage("Fix the login bug", "11111111-aaaa-4000-8000-000000000001"),
        helm_factory.create_voyage("Review the login docs", "11112222-bbbb-4000-8000-000000000002"),
        helm_factory.create_voyage("Upgrade dependencies", "33333333-cccc-4000-8000-000000000003"),
    ]


@pytest.fixture
def resolver(helm_factory):
    return VoyageResolver(helm_factory.storage)


class TestResolve:
    def test_full_id(self, resolver, voyages):
        result = resolver.resolve(voyages[0].voyage_id)
        assert result.status == ResolveStatus.FOUND
        assert result.voyage.id == voyages[0].voyage_id

    def test_full_id_upper_case(self, resolver, voyages):
        result = resolver.resolve(voyages[2].voyage_id.upper())
        assert result.voyage.id == voyages[2].voyage_id

    def test_unique_prefix(self, resolver, voyages):
        result = resolver.resolve("3333")
        assert result.status == ResolveStatus.FOUND
        assert result.voyage.intent == "Upgrade dependencies"

    def test_ambiguous_prefix(self, resolver, voyages):
        result = resolver.resolve("1111")
        assert result.status == ResolveStatus.AMBIGUOUS
        assert len(result.candidates) == 2

    @pytest.mark.parametrize("prefix", ["3", "33", "333"])
    def test_short_unique_prefix(self, resolver, voyages, prefix):
        result = resolver.resolve(prefix)
        assert result.status == ResolveStatus.FOUND
        assert result.voyage.id == voyages[2].voyage_id

    def test_short_ambiguous_prefix(self, resolver, voyages):
        result = resolver.resolve("111")
        assert result.status == ResolveStatus.AMBIGUOUS
        assert len(result.candidates) == 2

    def test_prefix_before_keyword(self, helm_factory, resolver):
        """A query that is both an id prefix and an intent word resolves by id."""
        by_id = helm_factory.create_voyage("Tidy up", "abc00000-aaaa-4000-8000-000000000001")
        helm_factory.create_voyage("Learn the abc of it", "99999999-aaaa-4000-8000-000000000002")

        result = resolver.resolve("abc")
        assert result.status == ResolveStatus.FOUND
        assert result.voyage.id == by_id.voyage_id

    def test_keyword(self, resolver, voyages):
        result = resolver.resolve("upgrade")
        assert result.status == ResolveStatus.FOUND
        assert result.voyage.id == voyages[2].voyage_id

    def test_ambiguous_keyword(self, resolver, voyages):
        result = resolver.resolve("login")
        assert result.status == ResolveStatus.AMBIGUOUS

    def test_not_found_suggests_recent(self, resolver, voyages):
        result = resolver.resolve("kubernetes")
        assert result.status == ResolveStatus.NOT_FOUND
        assert len(result.candidates) == 3

    def test_empty_storage(self, resolver):
        result = resolver.resolve("anything")
        assert result.status == ResolveStatus.NOT_FOUND
        assert result.candidates == []


class TestFormatPrompt:
    def test_found(self, resolver, voyages):
        text = format_resolve_prompt(resolver.resolve("upgrade"))
        assert "[33333333]" in text

    def test_ambiguous_lists_candidates(self, resolver, voyages):
        text = format_resolve_prompt(resolver.resolve("login"))
        assert "Multiple voyages" in text
        assert "1." in text and "2." in text

    def test_not_found_hint(self, resolver, voyages):
        text = format_resolve_prompt(resolver.resolve("kubernetes"))
        assert "No voyage matches" in text
        assert "helm voyage list" in text

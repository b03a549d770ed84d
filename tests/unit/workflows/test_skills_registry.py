"""Unit tests for the read-only skill registry."""

from __future__ import annotations

import logging

import pytest

from skillpack.workflows.skills.contracts import Skill
from skillpack.workflows.skills.registry import (
    NotFoundError,
    SkillRegistry,
    SkillRegistryError,
)

NEXTJS_STEPS = [
    "nextjs-security-overview",
    "nextjs-auth",
    "nextjs-input-validation",
    "nextjs-csrf",
    "nextjs-security-headers",
    "nextjs-rate-limiting",
    "nextjs-payment-security",
    "nextjs-dependency-security",
    "nextjs-security-operations",
    "nextjs-security-testing",
]


def test_resolve_unknown_skill_raises_not_found(catalog_registry):
    with pytest.raises(NotFoundError) as excinfo:
        catalog_registry.resolve("does-not-exist")

    assert excinfo.value.name == "does-not-exist"


def test_dependencies_are_returned_in_document_order(catalog_registry):
    names = [skill.name for skill in catalog_registry.dependencies_of("nextjs-security")]

    assert names == NEXTJS_STEPS


def test_leaf_skill_has_no_dependencies(catalog_registry):
    assert catalog_registry.dependencies_of("nextjs-csrf") == []


def test_every_orchestrator_dependency_is_registered(catalog_registry):
    for orchestrator in catalog_registry.orchestrators():
        for dependency in catalog_registry.dependencies_of(orchestrator.name):
            assert dependency.name in catalog_registry


def test_recommendations_skip_unregistered_names(caplog):
    skills = [
        Skill(name="root", purpose="p", recommends=("helper", "ghost")),
        Skill(name="helper", purpose="p"),
    ]

    with caplog.at_level(logging.WARNING, logger="skillpack.workflows.skills.registry"):
        registry = SkillRegistry.build(skills)

    assert [skill.name for skill in registry.recommendations_of("root")] == ["helper"]
    assert "ghost" in caplog.text


def test_build_rejects_duplicates():
    with pytest.raises(SkillRegistryError, match="Duplicate"):
        SkillRegistry.build([Skill(name="a", purpose="p"), Skill(name="a", purpose="q")])


def test_build_rejects_self_reference():
    with pytest.raises(SkillRegistryError, match="requires itself"):
        SkillRegistry.build([Skill(name="a", purpose="p", requires=("a",))])


def test_build_rejects_cycles():
    skills = [
        Skill(name="a", purpose="p", requires=("b",)),
        Skill(name="b", purpose="p", requires=("c",)),
        Skill(name="c", purpose="p", requires=("a",)),
    ]

    with pytest.raises(SkillRegistryError, match="cycle"):
        SkillRegistry.build(skills)


def test_registry_iterates_sorted_by_name():
    registry = SkillRegistry.build(
        [Skill(name="zeta", purpose="p"), Skill(name="alpha", purpose="p")]
    )

    assert [skill.name for skill in registry] == ["alpha", "zeta"]
    assert registry.names() == ["alpha", "zeta"]
    assert len(registry) == 2

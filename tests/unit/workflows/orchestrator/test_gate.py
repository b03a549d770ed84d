"""Unit tests for checkpoint directive parsing and evaluation."""

from __future__ import annotations

import pytest

from skillpack.workflows.orchestrator.gate import (
    CheckpointGate,
    Directive,
    DirectiveError,
    DirectiveKind,
    parse_directive,
)
from skillpack.workflows.skills.registry import UnknownSkillError


@pytest.mark.parametrize("text", ["confirm", "Yes", "looks good.", "  continue  "])
def test_parse_confirm(text):
    assert parse_directive(text) == Directive.confirm()


@pytest.mark.parametrize("text", ["auto-accept", "Auto Accept", "just go", "run all!"])
def test_parse_auto_accept(text):
    assert parse_directive(text).kind is DirectiveKind.AUTO_ACCEPT


@pytest.mark.parametrize("text", ["abort", "STOP", "cancel"])
def test_parse_abort(text):
    assert parse_directive(text).kind is DirectiveKind.ABORT


def test_parse_adjust_with_commas_and_spaces():
    directive = parse_directive("adjust: nextjs-csrf, nextjs-auth  Nextjs-Security-Testing")

    assert directive.kind is DirectiveKind.ADJUST
    assert directive.subset == (
        "nextjs-csrf",
        "nextjs-auth",
        "nextjs-security-testing",
    )


def test_parse_adjust_without_colon():
    assert parse_directive("adjust nextjs-csrf").subset == ("nextjs-csrf",)


def test_parse_adjust_requires_names():
    with pytest.raises(DirectiveError, match="at least one skill"):
        parse_directive("adjust:")


@pytest.mark.parametrize("text", ["", "   ", "maybe later", "adjusting things"])
def test_parse_rejects_unrecognized_text(text):
    with pytest.raises(DirectiveError):
        parse_directive(text)


def test_gate_confirm_proceeds(catalog_registry):
    decision = CheckpointGate(catalog_registry).evaluate(Directive.confirm())

    assert decision.proceed is True
    assert decision.replacement is None
    assert decision.set_auto_accept is False


def test_gate_auto_accept_sets_flag(catalog_registry):
    decision = CheckpointGate(catalog_registry).evaluate("just go")

    assert decision.proceed is True
    assert decision.set_auto_accept is True


def test_gate_abort_does_not_proceed(catalog_registry):
    decision = CheckpointGate(catalog_registry).evaluate(Directive.abort())

    assert decision.kind is DirectiveKind.ABORT
    assert decision.proceed is False


def test_gate_adjust_returns_validated_subset(catalog_registry):
    decision = CheckpointGate(catalog_registry).evaluate(
        Directive.adjust("nextjs-csrf", "nextjs-auth", "nextjs-csrf")
    )

    assert decision.replacement == ("nextjs-csrf", "nextjs-auth")


def test_gate_adjust_rejects_unknown_skill(catalog_registry):
    with pytest.raises(UnknownSkillError):
        CheckpointGate(catalog_registry).evaluate("adjust: nextjs-csrf, ghost")

"""Unit tests for sub-skill invocation dispatchers."""

from __future__ import annotations

import pytest

from skillpack.workflows.orchestrator.dispatcher import (
    CallableDispatcher,
    CompletionSignal,
    DispatchError,
    HandoffDispatcher,
    render_invocation_request,
)
from skillpack.workflows.skills.contracts import Skill

STRIPE = Skill(
    name="stripe-integration",
    purpose="Wire billing through Stripe.",
    tool="stripe",
    body="- Verify webhook signatures.",
)


def test_callable_dispatcher_wraps_mapping_output():
    dispatcher = CallableDispatcher(lambda skill, context: {"seen": context["run_id"]})

    signal = dispatcher.invoke(STRIPE, {"run_id": "r1"})

    assert signal == CompletionSignal(skill="stripe-integration", output={"seen": "r1"})


def test_callable_dispatcher_passes_signal_through():
    expected = CompletionSignal(skill="stripe-integration", message="done")
    dispatcher = CallableDispatcher(lambda skill, context: expected)

    assert dispatcher.invoke(STRIPE, {}) is expected


def test_callable_dispatcher_converts_unexpected_errors():
    def explode(skill, context):
        raise ValueError("boom")

    with pytest.raises(DispatchError) as excinfo:
        CallableDispatcher(explode).invoke(STRIPE, {})

    assert excinfo.value.code == "dispatch_failed"
    assert "boom" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_render_invocation_request_includes_guidance_and_context():
    text = render_invocation_request(STRIPE, {"run_id": "r1", "position": 3})

    assert text.startswith("# Invoke skill: stripe-integration")
    assert "Requires external tool: `stripe`" in text
    assert '"position": 3' in text
    assert "- Verify webhook signatures." in text


def test_handoff_dispatcher_writes_request_file(tmp_path):
    dispatcher = HandoffDispatcher(tmp_path)

    signal = dispatcher.invoke(STRIPE, {"run_id": "run-9", "position": 3})

    request = tmp_path / "run-9" / "03-stripe-integration.md"
    assert request.is_file()
    assert signal.output == {"request": str(request)}
    assert "Verify webhook signatures" in request.read_text(encoding="utf-8")


def test_handoff_dispatcher_rejects_unavailable_tool(tmp_path):
    dispatcher = HandoffDispatcher(tmp_path, available_tools=["github"])

    with pytest.raises(DispatchError) as excinfo:
        dispatcher.invoke(STRIPE, {"run_id": "run-9", "position": 1})

    assert excinfo.value.code == "skill_unavailable"
    assert not (tmp_path / "run-9").exists()


def test_handoff_dispatcher_accepts_available_tool(tmp_path):
    dispatcher = HandoffDispatcher(tmp_path, available_tools=[" Stripe "])

    signal = dispatcher.invoke(STRIPE, {"run_id": "run-9", "position": 1})

    assert signal.skill == "stripe-integration"

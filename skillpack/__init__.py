"""Skill registry and checkpoint-gated orchestrator for assistant skill packs."""

__version__ = "0.1.0"

"""Skill registry and orchestrator workflows."""

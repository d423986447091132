"""
Tai Deployment Orchestrator
===========================

Deploys the Tai on-chain modules in dependency order and wires them together.

Structure:
- config: run settings loaded from the environment
- store: line-oriented KEY=value store of produced addresses
- network: network identity and allow-list guard
- resolver / validation: constructor and action parameter resolution
- estimator: gas budgets with per-unit fallback
- executor / transactions: contract creation and confirmation
- actions: post-deployment wiring (roles, ownership, initialization)
- persistence: idempotent store writes and deployment records
- orchestrator: per-unit pipeline and whole-system runs
- units: static registry of Tai deployment units
"""

__version__ = "1.0.0"
__author__ = "Tai Protocol Team"

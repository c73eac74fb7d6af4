"""Sandbox module: protocol deployment and scenario simulation."""

from .deployment import DomainStack, deploy_stack, deploy_token, link_bridge
from .scenario import (
    ScenarioConfig,
    ScenarioResult,
    ScenarioStep,
    run_cross_domain_scenario,
)

__all__ = [
    "DomainStack",
    "deploy_stack",
    "deploy_token",
    "link_bridge",
    "ScenarioConfig",
    "ScenarioResult",
    "ScenarioStep",
    "run_cross_domain_scenario",
]

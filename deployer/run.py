#!/usr/bin/env python3
"""
Deploys the Tai Protocol modules against the node at RPC_URL.

    python -m deployer.run                      # every registered unit
    python -m deployer.run TaiVault TaiDAO      # selected units
    DRY_RUN=true python -m deployer.run         # validate only

Exit codes: 0 success, 1 halted, 2 finished with partially wired units.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .actions import PostDeployActionsRunner
from .artifacts import ArtifactLoader
from .config import DeployerSettings
from .errors import DeploymentError
from .estimator import GasEstimator
from .executor import DeploymentExecutor
from .network import NetworkGuard, detect_profile
from .notifier import AlertNotifier
from .orchestrator import Orchestrator, PlanReport, RunReport
from .persistence import PersistenceWriter, RecordWriter
from .resolver import ParameterResolver
from .store import ConfigStore
from .transactions import TransactionSender
from .units import REGISTRY, get_units

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_HALTED = 1
EXIT_PARTIAL = 2


def configure_logging(log_file: Optional[str] = "deployment.log") -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


class DeploymentRunner:
    """Wires the pipeline stages together for one connected node and deployer key."""

    def __init__(self, settings: DeployerSettings, w3: Optional[Web3] = None, account=None, notifier=None):
        self.settings = settings
        self.w3 = w3 or self._initialize_web3()
        self.account = account or self._load_account()
        self.notifier = notifier or AlertNotifier.from_settings(settings)

    def _initialize_web3(self) -> Web3:
        w3 = Web3(Web3.HTTPProvider(self.settings.rpc_url))
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise ConnectionError(f"Could not connect to RPC URL: {self.settings.rpc_url}")
        logger.info(f"Connected to blockchain at {self.settings.rpc_url}")
        return w3

    def _load_account(self):
        if not self.settings.private_key:
            raise ValueError("DEPLOYER_PRIVATE_KEY must be set")
        account = self.w3.eth.account.from_key(self.settings.private_key)
        logger.info(f"Deployer: {account.address}")
        return account

    def log_balance(self) -> int:
        balance = self.w3.eth.get_balance(self.account.address)
        logger.info(f"Deployer balance: {Web3.from_wei(balance, 'ether')} ETH")
        if balance == 0:
            logger.warning("⚠️ Deployer account has no funds")
        return balance

    def build_orchestrator(self, profile, external=None) -> Orchestrator:
        settings = self.settings
        gas_price = Web3.to_wei(settings.gas_price_gwei, "gwei") if settings.gas_price_gwei else None
        artifacts = ArtifactLoader(settings.artifacts_dir)
        sender = TransactionSender(
            self.w3,
            self.account,
            confirmations=settings.confirmations,
            timeout=settings.confirmation_timeout,
            poll_latency=settings.poll_latency,
            gas_price=gas_price,
        )
        estimator = GasEstimator(self.w3, artifacts, self.account.address)
        return Orchestrator(
            store=ConfigStore(settings.store_path),
            guard=NetworkGuard(settings.allowed_chain_ids),
            resolver=ParameterResolver(),
            estimator=estimator,
            executor=DeploymentExecutor(sender, artifacts, profile),
            runner=PostDeployActionsRunner(sender, estimator),
            artifacts=artifacts,
            writer=PersistenceWriter(),
            records=RecordWriter(settings.records_dir),
            external=dict(os.environ) if external is None else external,
            deployer=self.account.address,
            halt_on_partial=settings.halt_on_partial,
            resume_wiring=settings.resume_wiring,
        )

    def run(self, names: Optional[List[str]] = None) -> int:
        units = get_units(names or self.settings.units or None)
        profile = detect_profile(self.w3, self.settings.production_chain_ids)
        orchestrator = self.build_orchestrator(profile)

        if self.settings.dry_run:
            logger.info("DRY_RUN set: validating only, nothing will be sent")
            return exit_code_for_plan(orchestrator.plan(units, profile))

        self.log_balance()
        report = orchestrator.run(units, profile)
        self.notifier.notify_run(report)
        return exit_code_for(report)


def exit_code_for(report: RunReport) -> int:
    if report.halted:
        return EXIT_HALTED
    if report.partial:
        return EXIT_PARTIAL
    return EXIT_OK


def exit_code_for_plan(plan: PlanReport) -> int:
    return EXIT_OK if plan.ok else EXIT_HALTED


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tai-deploy", description="Deploy Tai Protocol modules")
    parser.add_argument("units", nargs="*", help="Units to deploy (default: DEPLOY_UNITS or all)")
    parser.add_argument("--dry-run", action="store_true", help="Validate the run without sending transactions")
    parser.add_argument("--list", action="store_true", help="List registered units and exit")
    parser.add_argument("--env-file", default=None, help="Load environment from this file instead of .env")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    if args.list:
        for name, unit in REGISTRY.items():
            print(f"{name:<28} -> {unit.output_key}")
        return EXIT_OK

    try:
        settings = DeployerSettings.from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_HALTED
    if args.dry_run:
        settings.dry_run = True
    configure_logging(settings.log_file)

    try:
        runner = DeploymentRunner(settings)
        return runner.run(args.units)
    except KeyError as e:
        logger.error(f"❌ {e.args[0]}")
        return EXIT_HALTED
    except (DeploymentError, ConnectionError, ValueError) as e:
        logger.error(f"❌ Deployment aborted: {e}")
        return EXIT_HALTED
    except KeyboardInterrupt:
        logger.info("Deployment stopped by user")
        return EXIT_HALTED


if __name__ == "__main__":
    sys.exit(main())

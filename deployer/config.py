"""
Run settings, read from the environment (and a .env file via python-dotenv).
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Set

from .network import parse_chain_ids


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    value = value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got '{value}'")


def _env_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        number = int(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'") from None
    if number < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {number}")
    return number


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        number = float(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{value}'") from None
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


def _env_list(environ: Mapping[str, str], name: str) -> List[str]:
    return [item.strip() for item in (environ.get(name) or "").split(",") if item.strip()]


def _env_chain_ids(environ: Mapping[str, str], name: str, default: str) -> Set[int]:
    try:
        return parse_chain_ids(environ.get(name, default))
    except ValueError as e:
        raise ValueError(f"{name}: {e}") from None


@dataclass
class DeployerSettings:
    rpc_url: str = "http://localhost:8545"
    private_key: Optional[str] = field(default=None, repr=False)
    allowed_chain_ids: Set[int] = field(default_factory=lambda: {31337})
    production_chain_ids: Set[int] = field(default_factory=lambda: {1})
    store_path: str = "deployments.env"
    records_dir: str = "deployments"
    artifacts_dir: str = "artifacts"
    confirmations: int = 1
    confirmation_timeout: float = 300
    poll_latency: float = 2.0
    gas_price_gwei: Optional[int] = None
    halt_on_partial: bool = False
    resume_wiring: bool = True
    units: List[str] = field(default_factory=list)
    dry_run: bool = False
    log_file: str = "deployment.log"

    # Alerting
    slack_webhook: Optional[str] = None
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = field(default=None, repr=False)
    notification_email: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeployerSettings":
        env = os.environ if environ is None else environ
        gas_price = _env_int(env, "GAS_PRICE_GWEI", 0, minimum=0)
        return cls(
            rpc_url=env.get("RPC_URL", "http://localhost:8545"),
            private_key=env.get("DEPLOYER_PRIVATE_KEY") or None,
            allowed_chain_ids=_env_chain_ids(env, "ALLOWED_CHAIN_IDS", "31337"),
            production_chain_ids=_env_chain_ids(env, "PRODUCTION_CHAIN_IDS", "1"),
            store_path=env.get("CONFIG_STORE_PATH", "deployments.env"),
            records_dir=env.get("DEPLOYMENT_RECORDS_DIR", "deployments"),
            artifacts_dir=env.get("ARTIFACTS_DIR", "artifacts"),
            confirmations=_env_int(env, "CONFIRMATIONS", 1, minimum=1),
            confirmation_timeout=_env_float(env, "CONFIRMATION_TIMEOUT", 300),
            poll_latency=_env_float(env, "POLL_LATENCY", 2.0),
            gas_price_gwei=gas_price or None,
            halt_on_partial=_env_bool(env, "HALT_ON_PARTIAL", False),
            resume_wiring=_env_bool(env, "RESUME_WIRING", True),
            units=_env_list(env, "DEPLOY_UNITS"),
            dry_run=_env_bool(env, "DRY_RUN", False),
            log_file=env.get("LOG_FILE", "deployment.log"),
            slack_webhook=env.get("SLACK_WEBHOOK") or None,
            smtp_server=env.get("SMTP_SERVER", "smtp.gmail.com"),
            smtp_port=_env_int(env, "SMTP_PORT", 587, minimum=1),
            smtp_username=env.get("SMTP_USERNAME") or None,
            smtp_password=env.get("SMTP_PASSWORD") or None,
            notification_email=env.get("NOTIFICATION_EMAIL") or None,
        )

"""
snippy.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for **infrastructure-only** settings (SMTP relay,
sender identity, feedback routing, public pool size).  Secrets such as
``ADMIN_SECRET``, ``SMTP_USER``/``SMTP_PASS`` and ``RECAPTCHA_SECRET`` stay
in the environment (``.env``) and are never written to this file.

Usage::

    from snippy.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.product_name)      # "Snippy"
    print(cfg.smtp_host)         # "smtp.zoho.com"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from snippy.constants import MAX_APPROVED_POOL


# ---------------------------------------------------------------------------
# Typed settings object — infrastructure/identity only.
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SnippyConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    product_name: str

    # Outbound mail
    smtp_host: str
    smtp_port: int
    smtp_use_ssl: bool
    mail_from_name: str

    # Feedback routing
    feedback_bug_address: str
    feedback_idea_address: str

    # Public insult pool
    approved_pool_size: int = MAX_APPROVED_POOL


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def default_config_path() -> Path:
    """``$SNIPPY_CONFIG`` if set, else ``config.yaml`` in the working directory."""
    return Path(os.getenv("SNIPPY_CONFIG", "config.yaml"))


def load_config(path: str | Path | None = None) -> SnippyConfig:
    """Read *path* and return a :class:`SnippyConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to :func:`default_config_path`.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    smtp: dict = raw["smtp"]
    feedback: dict = raw["feedback"]

    return SnippyConfig(
        product_name=raw["product_name"],
        smtp_host=smtp["host"],
        smtp_port=int(smtp["port"]),
        smtp_use_ssl=bool(smtp.get("use_ssl", True)),
        mail_from_name=smtp.get("from_name", f"{raw['product_name']} Bot"),
        feedback_bug_address=feedback["bug_address"],
        feedback_idea_address=feedback["idea_address"],
        approved_pool_size=min(
            int(raw.get("approved_pool_size", MAX_APPROVED_POOL)), MAX_APPROVED_POOL
        ),
    )

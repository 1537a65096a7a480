"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import TreasuryConfig
from .settings import TreasurySettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed to the CLI commands to avoid global state and enable testing.
    """

    settings: TreasurySettings
    config: TreasuryConfig
    logger: logging.Logger

"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class SchedulerConfig:
    """Daily run-time gate settings for the periodic trigger."""

    run_time: time
    timezone: Optional[str]
    misfire_grace_seconds: int


@dataclass(frozen=True)
class MailConfig:
    """Mail transport settings consumed by the mail adapters."""

    method: str
    host: str
    port: int
    security: str
    username: Optional[str]
    from_address: str
    timeout: int
    html: bool

"""YAML-backed configuration.

Every section has defaults, so a missing file or a partial one is fine.
Command-line flags are applied on top by the scripts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from bagchal.ai import Difficulty
from bagchal.orchestration import GameMode, GameOrchestratorConfig
from bagchal.session import Role, TimerSettings
from bagchal.timer import DEFAULT_SYNC_INTERVAL, TIMER_CHOICES, TurnTimer

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


@dataclass
class AIConfig:
    difficulty: str = Difficulty.MEDIUM.value
    seed: Optional[int] = None
    # Per-difficulty think delays in seconds; missing entries use the built-in profile.
    think_delays: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Difficulty(self.difficulty)
        for name, delay in self.think_delays.items():
            Difficulty(name)
            if delay < 0:
                raise ValueError(f"think delay for {name} must be non-negative")


@dataclass
class TimerConfig:
    enabled: bool = False
    seconds: int = 30
    sync_interval: int = DEFAULT_SYNC_INTERVAL

    def __post_init__(self) -> None:
        if self.seconds not in TIMER_CHOICES:
            raise ValueError(f"timer seconds must be one of {TIMER_CHOICES}, got {self.seconds}")
        if self.sync_interval < 1:
            raise ValueError("sync_interval must be >= 1")

    def settings(self) -> TimerSettings:
        return TimerSettings(enabled=self.enabled and self.seconds > 0, seconds=self.seconds)

    def turn_timer(self) -> TurnTimer:
        settings = self.settings()
        return TurnTimer(settings.seconds, enabled=settings.enabled, sync_interval=self.sync_interval)


@dataclass
class SessionConfig:
    role: str = Role.TIGER.value
    display_name: str = ""

    def __post_init__(self) -> None:
        if Role(self.role) == Role.SPECTATOR:
            raise ValueError("a hosted game needs tiger or goat as the host role")


@dataclass
class GameConfig:
    mode: str = GameMode.VS_TIGER.value
    ai: AIConfig = field(default_factory=AIConfig)
    timer: TimerConfig = field(default_factory=TimerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    def __post_init__(self) -> None:
        GameMode(self.mode)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GameConfig":
        data = dict(data or {})
        return cls(
            mode=data.get("mode", GameMode.VS_TIGER.value),
            ai=AIConfig(**(data.get("ai") or {})),
            timer=TimerConfig(**(data.get("timer") or {})),
            session=SessionConfig(**(data.get("session") or {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "ai": {"difficulty": self.ai.difficulty, "seed": self.ai.seed, "think_delays": dict(self.ai.think_delays)},
            "timer": {"enabled": self.timer.enabled, "seconds": self.timer.seconds, "sync_interval": self.timer.sync_interval},
            "session": {"role": self.session.role, "display_name": self.session.display_name},
        }

    def orchestrator_config(self) -> GameOrchestratorConfig:
        return GameOrchestratorConfig(
            mode=GameMode(self.mode),
            difficulty=Difficulty(self.ai.difficulty),
            think_delays={Difficulty(name): float(delay) for name, delay in self.ai.think_delays.items()},
            seed=self.ai.seed,
        )


def load_config(path: Optional[Union[str, Path]] = None) -> GameConfig:
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        logger.debug("No config at %s; using defaults", cfg_path)
        return GameConfig()
    data = yaml.safe_load(cfg_path.read_text()) or {}
    return GameConfig.from_dict(data)

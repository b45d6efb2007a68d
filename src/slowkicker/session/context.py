"""Process-wide state built once at startup and handed to every component."""

from __future__ import annotations

from dataclasses import dataclass

from slowkicker.actions.audit import AuditLog
from slowkicker.actions.kick import KickAction
from slowkicker.actions.undupe import UndupeCommand
from slowkicker.capture.base import SessionSource
from slowkicker.capture.shm import SharedMemorySessions
from slowkicker.config import SlowKickerConfig
from slowkicker.policy.evaluator import DirectoryPolicyTable, SpeedEvaluator
from slowkicker.policy.history import ViolationHistory
from slowkicker.resolve import GroupResolver, PathResolver


@dataclass
class KickerContext:
    """Everything one poll loop needs: policy, history and collaborators."""

    config: SlowKickerConfig
    policy: DirectoryPolicyTable
    history: ViolationHistory
    source: SessionSource
    paths: PathResolver
    evaluator: SpeedEvaluator
    kicker: KickAction
    groups: GroupResolver | None = None

    @classmethod
    def from_config(
        cls,
        config: SlowKickerConfig,
        source: SessionSource | None = None,
    ) -> KickerContext:
        policy = DirectoryPolicyTable(config.directories)
        history = ViolationHistory(capacity=config.history_size)
        groups = GroupResolver(config.group_file) if config.group_lookup else None
        kicker = KickAction(
            root=config.glftpd_root,
            undupe=UndupeCommand(config.undupe_binary, timeout=config.undupe_timeout),
            audit=AuditLog(config.audit_log_file, categorized=config.audit_categories),
            groups=groups,
        )
        return cls(
            config=config,
            policy=policy,
            history=history,
            source=source or SharedMemorySessions(ipc_key=config.ipc_key),
            paths=PathResolver(root=config.glftpd_root),
            evaluator=SpeedEvaluator(policy, history),
            kicker=kicker,
            groups=groups,
        )

"""Application services for the devinit CLI.

Services implement the bootstrap itself, coordinating between the domain
layer (core/) and the external tools reached through platform/.
"""

from devinit.services.checkers import (
    CheckResult,
    CheckStatus,
    HostChecker,
    RequiredFilesChecker,
)

__all__ = [
    # Result types
    "CheckResult",
    "CheckStatus",
    # Checkers
    "HostChecker",
    "RequiredFilesChecker",
]

"""Training Service models package.

Re-exports every model so ``Base.metadata`` sees all tables once this
package is imported.
"""

from services.training_service.models.drill import DrillCompletion  # noqa: F401
from services.training_service.models.progress import (  # noqa: F401
    MemberProgress,
    PhaseProgress,
)

__all__ = [
    "DrillCompletion",
    "MemberProgress",
    "PhaseProgress",
]

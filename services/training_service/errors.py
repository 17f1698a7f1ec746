"""Training-progress failures."""

from libs.common.errors import Conflict, InvalidRequest, NotFound


class AdvanceNotAllowed(Conflict):
    code = "advance_not_allowed"
    default_message = "Complete all priority drills to advance"


class ProgressConflict(Conflict):
    code = "progress_conflict"
    default_message = "Progress was updated elsewhere. Refresh and try again."


class UnknownPhase(InvalidRequest):
    code = "unknown_phase"
    default_message = "Phase is not part of the curriculum"


class DrillNotFound(NotFound):
    code = "drill_not_found"
    default_message = "Drill not found"

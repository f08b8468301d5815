"""
Modification-time maintenance.

Before any ORM update of a profile, project or task row, ``updated_at`` is
overwritten with the current time, whatever value the caller put there.
Bulk ``UPDATE`` statements bypass mapper events, so services always update
through loaded instances.
"""

from sqlalchemy import event

from app.models.columns import utcnow
from app.models.profile import Profile
from app.models.project import Project
from app.models.task import Task

TIMESTAMPED_MODELS = (Profile, Project, Task)


def touch_updated_at(mapper, connection, target) -> None:
    target.updated_at = utcnow()


def register_timestamp_hooks() -> None:
    for model in TIMESTAMPED_MODELS:
        if not event.contains(model, "before_update", touch_updated_at):
            event.listen(model, "before_update", touch_updated_at)

from spatialexistence.db.database import get_session, init_db
from spatialexistence.db.operations import (
    apply_and_record,
    event_to_record,
    get_latest_deployment,
    list_events,
    list_events_after,
    load_engine,
    record_events,
    record_to_event,
    save_deployment,
)

__all__ = [
    "apply_and_record",
    "event_to_record",
    "get_latest_deployment",
    "get_session",
    "init_db",
    "list_events",
    "list_events_after",
    "load_engine",
    "record_events",
    "record_to_event",
    "save_deployment",
]

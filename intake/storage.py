"""
Storage backend selection.

A store is any object (module or instance) exposing:
    find_scholarship(id) -> ScholarshipRule | None
    count_applications(scholarship_id) -> int
    application_exists(scholarship_id, email) -> bool
    insert_application(record) -> int
    try_reserve_slot(scholarship_id) -> bool
    release_slot(scholarship_id) -> None
    get_application(application_id) -> dict | None
"""

import logging

from intake.config import get_settings

logger = logging.getLogger(__name__)


def get_store():
    """Return the configured store module (sqlite by default, supabase in production)."""
    settings = get_settings()
    if settings.storage_backend == "supabase":
        from intake import supabase_db
        return supabase_db

    from intake import database
    database.init_database()
    return database

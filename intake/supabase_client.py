"""
Supabase client initialization for server-side intake operations.
"""

import logging
import os
from typing import Optional

from supabase import create_client, Client
from yarl import URL

logger = logging.getLogger(__name__)


def normalize_supabase_url(url: Optional[str]) -> Optional[str]:
    """Ensure Supabase URL ends with a trailing slash to satisfy storage client."""
    if not url:
        return None
    return url if url.endswith("/") else f"{url}/"


def get_service_client() -> Optional[Client]:
    """
    Return a Supabase client using the service role key (bypasses RLS).

    Requires:
        - SUPABASE_URL: Your Supabase project URL
        - SUPABASE_SERVICE_ROLE_KEY: service role key

    Returns:
        Supabase client instance, or None if credentials are missing
    """
    supabase_url = normalize_supabase_url(os.environ.get("SUPABASE_URL"))
    service_key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    if not supabase_url or not service_key:
        logger.warning("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set")
        return None

    client: Client = create_client(supabase_url, service_key)

    # Ensure storage_url ends with a slash to avoid storage3 warnings.
    try:
        storage_url = str(client.storage_url)
        if not storage_url.endswith("/"):
            client.storage_url = URL(f"{storage_url}/")
    except AttributeError:
        pass

    return client

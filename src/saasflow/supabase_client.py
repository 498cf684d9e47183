import logging

from supabase import acreate_client, AsyncClient

from saasflow.config import settings
from saasflow.services import IdentityError

logger = logging.getLogger(__name__)

_admin_client: AsyncClient | None = None


async def get_supabase() -> AsyncClient:
    """Get or create the async Supabase client (service_role for admin auth ops)."""
    global _admin_client
    if _admin_client is None:
        try:
            _admin_client = await acreate_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
            )
        except Exception as e:
            logger.exception("Failed to initialize Supabase client")
            raise IdentityError(str(e)) from e
    return _admin_client


async def create_public_client() -> AsyncClient:
    """A fresh anon-key client per call, so user sessions never leak between requests."""
    try:
        return await acreate_client(settings.supabase_url, settings.supabase_anon_key)
    except Exception as e:
        logger.exception("Failed to initialize Supabase client")
        raise IdentityError(str(e)) from e

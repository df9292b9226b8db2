import logging
from typing import Optional

from fastapi import Header, HTTPException, Path

from .shared.validators import validate_uuid

logger = logging.getLogger(__name__)


def _resolve_agent_id(agent_id: Optional[str]) -> str:
    if not agent_id or not agent_id.strip():
        logger.warning("⚠️ Request without agent id")
        raise HTTPException(status_code=400, detail="Agent ID is required")

    agent_id = agent_id.strip()
    if not validate_uuid(agent_id):
        logger.warning(f"⚠️ Malformed agent id: {agent_id[:40]}")
        raise HTTPException(status_code=400, detail="Invalid agent ID format")
    return agent_id


async def get_agent_id(x_agent_id: Optional[str] = Header(None, alias="X-Agent-Id")) -> str:
    """Agent id from the X-Agent-Id header"""
    return _resolve_agent_id(x_agent_id)


async def get_path_agent_id(
    agent_id: str = Path(...),
    x_agent_id: Optional[str] = Header(None, alias="X-Agent-Id"),
) -> str:
    """Agent id from the URL path, falling back to the X-Agent-Id header"""
    return _resolve_agent_id(agent_id or x_agent_id)

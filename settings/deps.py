from __future__ import annotations

import uuid

from fastapi import Header, HTTPException, status


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> uuid.UUID:
	"""
	Resolve the acting user from the request.
	The gateway in front of this service authenticates the caller and forwards
	its id in the `X-User-ID` header.
	"""
	if not x_user_id:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-ID header")
	try:
		return uuid.UUID(x_user_id)
	except ValueError:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid X-User-ID header")

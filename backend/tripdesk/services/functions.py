"""Client for the hosted serverless functions (create-agent, update-vendor-ratings).

Both functions are opaque: they run with their own credentials and return
``{"error": ...}`` with a non-2xx status on failure. Calls are made with the
caller's bearer token so the function can apply its own authorization.
"""
import logging
import uuid
from typing import Any

import httpx

from tripdesk.core.config import settings

logger = logging.getLogger(__name__)


class FunctionError(Exception):
    def __init__(self, function: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.function = function
        self.status_code = status_code


class FunctionsClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.FUNCTIONS_URL).rstrip("/")
        self.api_key = settings.FUNCTIONS_API_KEY if api_key is None else api_key
        self.timeout = timeout or settings.FUNCTIONS_TIMEOUT_SECONDS
        self._transport = transport

    async def invoke(self, function: str, body: dict[str, Any], access_token: str) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(f"/{function}", json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Function %s unreachable: %s", function, exc)
            raise FunctionError(function, f"Function {function} unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {"data": payload}

        if response.is_error or "error" in payload:
            message = payload.get("error") or f"Function {function} returned HTTP {response.status_code}"
            logger.warning("Function %s failed (%s): %s", function, response.status_code, message)
            raise FunctionError(function, message, status_code=response.status_code)
        return payload

    async def create_agent(
        self,
        access_token: str,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str,
    ) -> dict[str, Any]:
        return await self.invoke(
            "create-agent",
            {
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
                "role": role,
            },
            access_token,
        )

    async def update_vendor_rating(self, access_token: str, vendor_id: uuid.UUID) -> dict[str, Any]:
        return await self.invoke("update-vendor-ratings", {"vendor_id": str(vendor_id)}, access_token)


def get_functions_client() -> FunctionsClient:
    return FunctionsClient()

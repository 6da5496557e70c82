"""
CiviCRM API client - the wire to the remote CRM.

Every call goes through APIv4's AJAX endpoint:

    POST {base_url}/civicrm/ajax/api4/{Entity}/{action}
    params=<json>&_authx=Bearer <api key>

The response body is JSON with a "values" list (get/create/update/delete) or
an "error_message" when CiviCRM refused the request.
"""

import json
import logging
from typing import Optional, Dict, Any

import httpx

from civicrm_mcp import __version__
from civicrm_mcp.config import Config
from civicrm_mcp.errors import CiviCRMAPIError

logger = logging.getLogger("civicrm_mcp.client")


class CiviCRMClient:
    """Thin async wrapper around the APIv4 AJAX endpoint.

    Usage:
        client = CiviCRMClient(config)
        result = await client.api_v4("Contact", "get", {"limit": 5})
        await client.aclose()
    """

    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": f"CiviCRM-MCP-Server/{__version__}",
        }
        if config.site_key:
            headers["X-Civi-Key"] = config.site_key

        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.request_timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def api_v4(self, entity: str, action: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call one APIv4 action.

        Args:
            entity: APIv4 entity name, e.g. "Contact"
            action: "get", "create", "update", "delete", ...
            params: select/where/values/orderBy/limit/join

        Returns:
            The decoded response body

        Raises:
            CiviCRMAPIError: on transport failure, non-2xx status, or an
                error_message in the body
        """
        url = f"/civicrm/ajax/api4/{entity}/{action}"
        data = {
            "params": json.dumps(params or {}),
            "_authx": f"Bearer {self.config.api_key}",
        }

        logger.debug(f"{entity}.{action} {data['params']}")

        try:
            response = await self._http.post(url, data=data)
        except httpx.HTTPError as e:
            raise CiviCRMAPIError(str(e) or type(e).__name__, entity=entity, action=action) from e

        body = self._decode(response)

        if response.is_error:
            message = body.get("error_message") if body else None
            raise CiviCRMAPIError(
                message or f"HTTP {response.status_code}",
                entity=entity,
                action=action,
                status_code=response.status_code,
            )

        if body is None:
            raise CiviCRMAPIError(
                "Response was not JSON", entity=entity, action=action,
                status_code=response.status_code,
            )

        if body.get("error_message"):
            raise CiviCRMAPIError(
                body["error_message"], entity=entity, action=action,
                status_code=response.status_code,
            )

        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else {"values": body}

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CiviCRMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from hackmate.gateway.base import Gateway, GatewayError, JoinSpec, require_table
from hackmate.schemas.auth import AuthSession, Identity


logger = logging.getLogger(__name__)

# PostgREST answers 406 unless exactly one row matches.
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or response.reason_phrase or f"HTTP {response.status_code}"


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.warning("gateway.response unreadable status=%s", response.status_code)
        raise GatewayError("Gateway returned an unreadable response", status_code=502) from exc


def _rows(body: Any) -> list[dict[str, Any]]:
    if not isinstance(body, list) or not all(isinstance(row, Mapping) for row in body):
        raise GatewayError("Expected a list of rows", status_code=502)
    return [dict(row) for row in body]


def _row(body: Any) -> dict[str, Any]:
    if not isinstance(body, Mapping):
        raise GatewayError("Expected a single row", status_code=502)
    return dict(body)


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _identity(payload: Mapping[str, Any]) -> Identity:
    user = payload.get("user") if "user" in payload else payload
    if not isinstance(user, Mapping) or not user.get("id"):
        raise GatewayError("Auth response did not include a user", status_code=502)
    return Identity(id=str(user["id"]), email=str(user.get("email") or ""))


class RestGateway(Gateway):
    """Client for a hosted Postgres REST + auth API (``/rest/v1`` and ``/auth/v1``)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        access_token: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)
        self._access_token = access_token

    def bind(self, access_token: str | None) -> RestGateway:
        return RestGateway(
            self._base_url,
            self._api_key,
            timeout=self._timeout,
            client=self._client,
            access_token=access_token,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, access_token: str | None = None, **extra: str) -> dict[str, str]:
        bearer = access_token or self._access_token or self._api_key
        headers = {"apikey": self._api_key, "Authorization": f"Bearer {bearer}"}
        headers.update(extra)
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("gateway.request failed method=%s path=%s error=%s", method, path, exc)
            raise GatewayError(str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            message = _error_message(response)
            logger.info("gateway.response method=%s path=%s status=%s", method, path, response.status_code)
            raise GatewayError(message, status_code=response.status_code)
        return response

    # --- auth -------------------------------------------------------------

    async def auth_sign_up(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        payload = _json(response)
        if not isinstance(payload, Mapping):
            raise GatewayError("Gateway returned an unreadable response", status_code=502)
        token = payload.get("access_token")
        if not token:
            # Email confirmation is enabled on the project; there is no session yet.
            raise GatewayError("Check your email to confirm your account", status_code=202)
        return AuthSession(access_token=token, identity=_identity(payload))

    async def auth_sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        payload = _json(response)
        if not isinstance(payload, Mapping) or not payload.get("access_token"):
            raise GatewayError("Auth response did not include a session", status_code=502)
        return AuthSession(access_token=payload["access_token"], identity=_identity(payload))

    async def auth_sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", headers=self._headers(access_token))

    async def auth_current_user(self, access_token: str | None) -> Identity | None:
        if not access_token:
            return None
        try:
            response = await self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        except GatewayError as exc:
            if exc.status_code in (401, 403):
                return None
            raise
        payload = _json(response)
        if not isinstance(payload, Mapping):
            raise GatewayError("Auth response did not include a user", status_code=502)
        return _identity(payload)

    # --- data -------------------------------------------------------------

    async def select_all(self, table: str, order_by: str | None = None) -> list[dict[str, Any]]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.asc"
        response = await self._request("GET", self._table_path(table), params=params, headers=self._headers())
        return _rows(_json(response))

    async def select_one_by_id(self, table: str, id: str) -> dict[str, Any]:
        response = await self._request(
            "GET",
            self._table_path(table),
            params={"select": "*", "id": _eq(id)},
            headers=self._headers(Accept=SINGLE_OBJECT),
        )
        return _row(_json(response))

    async def select_joined(
        self,
        table: str,
        join: JoinSpec,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": join.to_select()}
        params.update({name: _eq(value) for name, value in (filters or {}).items()})
        response = await self._request("GET", self._table_path(table), params=params, headers=self._headers())
        return _rows(_json(response))

    async def insert(self, table: str, record: Mapping[str, Any]) -> None:
        await self._request(
            "POST",
            self._table_path(table),
            json=dict(record),
            headers=self._headers(Prefer="return=minimal"),
        )

    async def update(self, table: str, id: str, partial: Mapping[str, Any]) -> None:
        await self._request(
            "PATCH",
            self._table_path(table),
            params={"id": _eq(id)},
            json=dict(partial),
            headers=self._headers(Prefer="return=minimal"),
        )

    async def delete_by_keys(self, table: str, keys: Mapping[str, Any]) -> None:
        if not keys:
            raise GatewayError("DELETE requires a WHERE clause", status_code=400)
        await self._request(
            "DELETE",
            self._table_path(table),
            params={name: _eq(value) for name, value in keys.items()},
            headers=self._headers(Prefer="return=minimal"),
        )

    @staticmethod
    def _table_path(table: str) -> str:
        return f"/rest/v1/{require_table(table)}"

"""WebUntis JSON-RPC Client.

Spricht ``{url}/WebUntis/jsonrpc.do?school=<schule>`` über ``requests`` an.
Die Session-ID kommt als Cookie zurück und wird von ``requests.Session``
mitgeführt. Alle öffentlichen Methoden sind Coroutinen; die blockierenden
HTTP-Aufrufe laufen in einem Worker-Thread.

Kein automatisches Retry: jeder Fehler bricht den Lauf der Schule ab.
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

import requests

from config.defaults import WEBUNTIS_CLIENT_ID
from sync.errors import AuthenticationFailed, UpstreamUnavailable

logger = logging.getLogger(__name__)

# JSON-RPC-Fehlercodes von WebUntis
ERR_BAD_CREDENTIALS = -8504
ERR_NOT_AUTHENTICATED = -8520


class WebUntisClient:
    """Dünner Client für die benötigten WebUntis-Methoden."""

    def __init__(
        self,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        client_id: str = WEBUNTIS_CLIENT_ID,
    ) -> None:
        self.timeout = timeout
        self.client_id = client_id
        self._http = session or requests.Session()
        self._ids = itertools.count(1)
        self._endpoint: Optional[str] = None
        self._school: Optional[str] = None
        self._session_id: Optional[str] = None

    @property
    def is_logged_in(self) -> bool:
        return self._session_id is not None

    # ─── Sitzung ───

    async def login(self, url: str, institution: str, user: str, password: str) -> None:
        """Meldet sich am WebUntis-System der Schule ``institution`` an."""
        self._endpoint = f"{url.rstrip('/')}/WebUntis/jsonrpc.do"
        self._school = institution
        result = await self._call("authenticate", {
            "user": user,
            "password": password,
            "client": self.client_id,
        })
        if not isinstance(result, dict) or not result.get("sessionId"):
            raise AuthenticationFailed(f"WebUntis-Login für '{institution}' ohne Session-ID")
        self._session_id = result["sessionId"]
        logger.info(f"WebUntis-Login erfolgreich: {institution} ({url})")

    async def logout(self) -> None:
        """Meldet die aktuelle Sitzung ab (ohne Wirkung, wenn nicht angemeldet)."""
        if self._session_id is None:
            return
        try:
            await self._call("logout", {})
        finally:
            self._session_id = None
            self._http.cookies.clear()
        logger.info(f"WebUntis-Logout: {self._school}")

    # ─── Abfragen ───

    async def get_current_schoolyear(self) -> dict:
        return await self._call("getCurrentSchoolyear")

    async def get_timegrid(self) -> list[dict]:
        return await self._call("getTimegridUnits")

    async def get_classes(self, schoolyear_id: int) -> list[dict]:
        return await self._call("getKlassen", {"schoolyearId": schoolyear_id})

    async def get_rooms(self) -> list[dict]:
        return await self._call("getRooms")

    async def get_customizable_timetable_for(
        self, element_type: int, element_id: int, options: dict
    ) -> list[dict]:
        """Stundenplan eines Elements (Klasse, Lehrer, Fach, Raum, Schüler)."""
        opts = {"element": {"id": element_id, "type": element_type}}
        opts.update(options)
        return await self._call("getTimetable", {"options": opts})

    # ─── JSON-RPC ───

    async def _call(self, method: str, params: Optional[dict] = None) -> Any:
        return await asyncio.to_thread(self._post, method, params or {})

    def _post(self, method: str, params: dict) -> Any:
        if self._endpoint is None:
            raise UpstreamUnavailable(f"WebUntis-Aufruf '{method}' ohne Login")

        payload = {
            "id": str(next(self._ids)),
            "method": method,
            "params": params,
            "jsonrpc": "2.0",
        }
        logger.debug(f"WebUntis → {method}")
        try:
            resp = self._http.post(
                self._endpoint,
                params={"school": self._school},
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            raise UpstreamUnavailable(f"WebUntis-Aufruf '{method}' fehlgeschlagen: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable(f"WebUntis-Antwort auf '{method}' ist kein JSON: {e}") from e

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            code = error.get("code")
            message = f"WebUntis-Fehler bei '{method}': {error.get('message', '')} ({code})"
            if code in (ERR_BAD_CREDENTIALS, ERR_NOT_AUTHENTICATED):
                raise AuthenticationFailed(message)
            raise UpstreamUnavailable(message)
        if not isinstance(body, dict) or "result" not in body:
            raise UpstreamUnavailable(f"WebUntis-Antwort auf '{method}' ohne Ergebnis")
        return body["result"]

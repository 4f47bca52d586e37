"""
Live change notifications pushed by the ingestion API.

The API publishes an ``ImportacaoChanged`` message on its import hub whenever
a job moves. The hub speaks the SignalR JSON protocol over a websocket:
an HTTP negotiate call returns a connection token, the client sends a
handshake, and every message afterwards is a JSON object terminated by the
record separator character.
"""

import asyncio
import json
from enum import Enum
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlencode

import httpx
from loguru import logger
from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import WebSocketException

from importacoes.config import IngestionApiConfig, LiveUpdatesConfig
from importacoes.exceptions import LiveUpdatesError
from importacoes.observability import (
    record_live_update_message,
    set_live_update_connected,
)

RECORD_SEPARATOR = "\x1e"
CHANGED_TARGET = "ImportacaoChanged"
SUBSCRIBE_TARGET = "SubscribeEmpresas"

# Hub protocol message types
INVOCATION = 1
PING = 6
CLOSE = 7

PING_INTERVAL_SECONDS = 15

CONNECTION_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    httpx.HTTPError,
    WebSocketException,
    LiveUpdatesError,
)


class ConnectionStatus(Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def _frame(message: dict) -> str:
    return json.dumps(message) + RECORD_SEPARATOR


class ImportacaoLiveUpdates:
    """
    Keeps one hub connection open and forwards changed job ids.

    A first connection that fails ends in DISCONNECTED. A connection that
    drops after being established is retried once per configured delay,
    and the delay sequence starts over after every successful reconnect.
    """

    def __init__(
        self,
        api_config: IngestionApiConfig,
        live_config: LiveUpdatesConfig,
        on_changed: Callable[[str], None],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connect=None,
    ):
        """
        Args:
            api_config: Ingestion API location and credentials
            live_config: Hub path, reconnect delays and empresa subscription
            on_changed: Called with the id of every job reported as changed
            transport: Optional httpx transport for the negotiate call
            connect: Websocket connect function (defaults to websockets)
        """
        self.api_config = api_config
        self.live_config = live_config
        self.on_changed = on_changed
        self.empresa_ids: List[str] = list(live_config.empresa_ids)
        self.status = ConnectionStatus.DISCONNECTED
        self._transport = transport
        self._connect = connect or websocket_connect
        self._websocket = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> bool:
        """Start the connection loop in the background. Returns True if started."""
        if self._task is not None and not self._task.done():
            return False
        self._task = asyncio.create_task(self.run())
        return True

    async def close(self) -> None:
        """Stop the connection loop and release the websocket."""
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Live updates task cancelled")
        self._set_status(ConnectionStatus.DISCONNECTED)

    async def subscribe(self, empresa_ids: Sequence[str]) -> None:
        """Follow changes for these empresas, now and after every reconnect."""
        self.empresa_ids = [empresa_id for empresa_id in empresa_ids if empresa_id]
        websocket = self._websocket
        if self.status is ConnectionStatus.CONNECTED and websocket is not None:
            await self._send_subscribe(websocket)

    async def run(self) -> None:
        """Connect and forward notifications until the connection is lost for good."""
        self._set_status(ConnectionStatus.CONNECTING)
        if not await self._session():
            self._set_status(ConnectionStatus.DISCONNECTED)
            return

        delays = self.live_config.reconnect_delays
        attempt = 0
        while attempt < len(delays):
            self._set_status(ConnectionStatus.CONNECTING)
            await asyncio.sleep(delays[attempt])
            if await self._session():
                attempt = 0
            else:
                attempt += 1

        logger.warning("Live updates gave up reconnecting")
        self._set_status(ConnectionStatus.DISCONNECTED)

    def handle_message(self, message) -> bool:
        """
        Process one websocket message, which may hold several frames.

        Returns False when the hub asked to close the connection.
        """
        if isinstance(message, bytes):
            message = message.decode("utf-8")

        for raw in message.split(RECORD_SEPARATOR):
            if not raw:
                continue
            try:
                frame = json.loads(raw)
            except ValueError:
                logger.warning(f"Ignoring malformed hub frame: {raw[:80]}")
                continue

            kind = frame.get("type")
            if kind == INVOCATION and frame.get("target") == CHANGED_TARGET:
                self._dispatch(frame.get("arguments") or [])
            elif kind == CLOSE:
                logger.info(f"Hub closed the connection: {frame.get('error')}")
                return False
        return True

    async def _session(self) -> bool:
        """Run one connection. Returns False when it could not be established."""
        try:
            websocket = await self._open()
        except CONNECTION_ERRORS as e:
            logger.warning(f"Live updates connection failed: {e}")
            return False

        self._websocket = websocket
        self._set_status(ConnectionStatus.CONNECTED)
        keepalive = asyncio.create_task(self._keepalive(websocket))
        try:
            if self.empresa_ids:
                await self._send_subscribe(websocket)
            async for message in websocket:
                if not self.handle_message(message):
                    break
        except CONNECTION_ERRORS as e:
            logger.warning(f"Live updates connection lost: {e}")
        finally:
            self._websocket = None
            keepalive.cancel()
            await asyncio.gather(keepalive, return_exceptions=True)
            await websocket.close()
        return True

    async def _open(self):
        token = await self._negotiate()
        websocket = await self._connect(
            self._socket_url(token), additional_headers=self._headers()
        )
        try:
            await websocket.send(_frame({"protocol": "json", "version": 1}))
            reply = await websocket.recv()
        except CONNECTION_ERRORS:
            await websocket.close()
            raise

        if isinstance(reply, bytes):
            reply = reply.decode("utf-8")
        handshake, _, rest = reply.partition(RECORD_SEPARATOR)
        error = json.loads(handshake or "{}").get("error")
        if error:
            await websocket.close()
            raise LiveUpdatesError(f"Hub handshake refused: {error}")

        # Frames may arrive in the same message as the handshake reply
        if rest:
            self.handle_message(rest)
        return websocket

    async def _negotiate(self) -> str:
        async with httpx.AsyncClient(
            base_url=self.api_config.base_url,
            timeout=self.api_config.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            response = await client.post(
                f"{self.live_config.hub_path}/negotiate",
                params={"negotiateVersion": 1},
            )
            response.raise_for_status()

        try:
            body = response.json()
        except ValueError as e:
            raise LiveUpdatesError("Hub negotiate returned invalid JSON", e)
        token = body.get("connectionToken") or body.get("connectionId")
        if not token:
            raise LiveUpdatesError("Hub negotiate returned no connection token")
        return token

    def _socket_url(self, token: str) -> str:
        base = self.api_config.base_url.rstrip("/")
        if base.startswith("https://"):
            base = "wss://" + base[len("https://"):]
        elif base.startswith("http://"):
            base = "ws://" + base[len("http://"):]
        return f"{base}{self.live_config.hub_path}?{urlencode({'id': token})}"

    def _headers(self) -> dict:
        if self.api_config.token:
            return {"Authorization": f"Bearer {self.api_config.token}"}
        return {}

    async def _send_subscribe(self, websocket) -> None:
        await websocket.send(
            _frame(
                {
                    "type": INVOCATION,
                    "target": SUBSCRIBE_TARGET,
                    "arguments": [list(self.empresa_ids)],
                }
            )
        )
        logger.info(f"Subscribed to empresas {self.empresa_ids}")

    async def _keepalive(self, websocket) -> None:
        while True:
            await asyncio.sleep(PING_INTERVAL_SECONDS)
            await websocket.send(_frame({"type": PING}))

    def _dispatch(self, arguments: list) -> None:
        if not arguments:
            return
        payload = arguments[0]
        if isinstance(payload, dict):
            importacao_id = payload.get("importacaoId") or payload.get("ImportacaoId")
        else:
            importacao_id = payload
        if not importacao_id:
            return

        record_live_update_message()
        logger.debug(f"Importacao {importacao_id} changed")
        self.on_changed(str(importacao_id))

    def _set_status(self, status: ConnectionStatus) -> None:
        if status is self.status:
            return
        self.status = status
        set_live_update_connected(status is ConnectionStatus.CONNECTED)
        logger.info(f"Live updates {status.value}")

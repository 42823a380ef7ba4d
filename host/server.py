from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import websockets

from holdem.game import GameEngine, InvalidActionError
from holdem.models import Player, PlayType, TableConfig

LOGGER = logging.getLogger("poker_host")

# HostServer glues one GameEngine table to WebSocket clients. The engine stays
# pure; sockets, seating and prompting live here.


@dataclass
class ClientSession:
    player_id: str
    name: str
    websocket: Any


class HostServer:
    def __init__(self, config: TableConfig) -> None:
        self.config = config
        self.lobby: List[Player] = []
        self.engine: Optional[GameEngine] = None
        self.sessions: Dict[str, ClientSession] = {}
        self.lock = asyncio.Lock()

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("Host server listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: Any) -> None:
        # First message must be "hello" so we know who we are talking to.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        name_raw = hello.get("name")
        name = name_raw.strip() if isinstance(name_raw, str) else ""
        if not name:
            await self._send_error(websocket, code="BAD_SCHEMA", msg="name required")
            await websocket.close()
            return

        session = await self.join(name, websocket)
        if session is None:
            return

        try:
            async for raw in websocket:
                await self.handle_message(session, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.sessions.pop(session.player_id, None)
            LOGGER.info("%s disconnected", session.name)
            if self._is_waiting_on(session.player_id):
                await self._prompt_next_actor()

    def _is_waiting_on(self, player_id: str) -> bool:
        engine = self.engine
        if engine is None or not engine.hand or engine.is_hand_complete() or engine.current_turn is None:
            return False
        return engine.players[engine.current_turn].id == player_id

    async def join(self, name: str, websocket: Any) -> Optional[ClientSession]:
        async with self.lock:
            if self.engine is not None:
                error = ("TABLE_STARTED", "Table already started")
            elif len(self.lobby) >= self.config.max_players:
                error = ("TABLE_FULL", "No seats available")
            else:
                error = None
                player = Player(name=name, chips=self.config.starting_stack, position=len(self.lobby))
                self.lobby.append(player)
        if error is not None:
            await self._send_error(websocket, code=error[0], msg=error[1])
            await websocket.close()
            return None

        session = ClientSession(player_id=player.id, name=name, websocket=websocket)
        self.sessions[player.id] = session
        LOGGER.info("Seat %s claimed by %s (stack=%s)", player.position, name, player.chips)
        await self._send_json(
            websocket,
            "welcome",
            {
                "player_id": player.id,
                "seat": player.position,
                "config": {
                    "max_players": self.config.max_players,
                    "starting_stack": self.config.starting_stack,
                    "sb": self.config.sb,
                    "bb": self.config.bb,
                },
            },
        )
        return session

    async def handle_message(self, session: ClientSession, message: Dict[str, Any]) -> None:
        msg_type = message.get("type")
        if msg_type == "start":
            await self._start_hand(session)
        elif msg_type == "action":
            await self._handle_action(session, message)
        elif msg_type == "state":
            async with self.lock:
                state = self.engine.table_state() if self.engine else {"lobby": [p.name for p in self.lobby]}
            await self._send_json(session.websocket, "state", state)
        else:
            await self._send_error(session.websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")

    async def _start_hand(self, session: ClientSession) -> None:
        error: Optional[Tuple[str, str]] = None
        start_payload: Dict[str, object] = {}
        pre_events: List[Dict[str, object]] = []
        async with self.lock:
            if self.engine is None and len(self.lobby) >= 2:
                self.engine = GameEngine(self.lobby, self.config)
            engine = self.engine
            if engine is None:
                error = ("NOT_ENOUGH_PLAYERS", "Need at least two players")
            elif engine.hand and not engine.is_hand_complete():
                error = ("HAND_IN_PROGRESS", "Finish the current hand first")
            elif engine.is_match_over():
                error = ("MATCH_OVER", "Only one player has chips left")
            else:
                removed, first_actor = engine.next_hand()
                assert engine.hand is not None
                start_payload = {
                    "hand_id": engine.hand.hand_id,
                    "removed": removed,
                    "first_actor": first_actor,
                    "state": engine.table_state(),
                }
                pre_events = engine.consume_pre_events()

        if error is not None:
            await self._send_error(session.websocket, code=error[0], msg=error[1])
            return
        LOGGER.info("Starting hand %s", start_payload["hand_id"])
        await self._broadcast("start_hand", start_payload)
        await self._broadcast_events(pre_events)
        await self._prompt_next_actor()

    async def _handle_action(self, session: ClientSession, message: Dict[str, Any]) -> None:
        amount = message.get("amount")
        if amount is not None and not isinstance(amount, int):
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="amount must be an integer")
            return
        try:
            play = PlayType(message.get("play"))
        except ValueError:
            await self._send_error(session.websocket, code="INVALID_ACTION", msg="Unknown play")
            return

        async with self.lock:
            engine = self.engine
            if engine is None or not engine.hand or engine.is_hand_complete():
                events = None
                reason = ("NO_HAND", "No hand in progress")
            elif engine.current_turn is None or engine.players[engine.current_turn].id != session.player_id:
                events = None
                reason = ("OUT_OF_TURN", "Not your turn")
            else:
                try:
                    events = engine.apply_move(session.player_id, play, amount)
                    reason = None
                except InvalidActionError as exc:
                    LOGGER.warning("Rejected action player=%s play=%s amount=%s reason=%s", session.name, play, amount, exc)
                    events = None
                    reason = ("INVALID_ACTION", str(exc))

        if events is None:
            assert reason is not None
            await self._send_error(session.websocket, code=reason[0], msg=reason[1])
            return
        await self._broadcast_events(events)
        await self._prompt_next_actor()

    async def _prompt_next_actor(self) -> None:
        while True:
            request = None
            folded: List[Dict[str, object]] = []
            async with self.lock:
                engine = self.engine
                assert engine is not None and engine.hand is not None
                if engine.is_hand_complete():
                    result = engine.last_result
                    end_payload = result.to_payload() if result else {}
                    end_payload["stacks"] = engine.stacks()
                    match_over = engine.is_match_over()
                    actor = None
                else:
                    end_payload = None
                    match_over = False
                    actor = engine.players[engine.current_turn] if engine.current_turn is not None else None
                    if actor is not None and actor.id not in self.sessions:
                        # Nobody can rejoin a running table, so a missing actor folds.
                        LOGGER.info("%s is disconnected; folding", actor.name)
                        folded = engine.apply_move(actor.id, PlayType.FOLD)
                    elif actor is not None:
                        request = engine.build_act_request(actor)

            if folded:
                await self._broadcast_events(folded)
                continue

            if end_payload is not None:
                # Hand is over; clients send "start" for the next one.
                LOGGER.info("Hand %s finished; stacks=%s", end_payload.get("hand_id"), end_payload["stacks"])
                await self._broadcast("end_hand", end_payload)
                if match_over:
                    await self._broadcast("match_end", {"stacks": end_payload["stacks"]})
                return

            if actor is None or request is None:
                return
            session = self.sessions.get(actor.id)
            if session is None:
                continue
            payload = request.to_payload()
            payload["hand_id"] = engine.hand.hand_id
            await self._send_json(session.websocket, "act", payload)
            return

    async def _broadcast(self, msg_type: str, payload: Dict[str, object]) -> None:
        targets = [session.websocket for session in self.sessions.values()]
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _broadcast_events(self, events: List[Dict[str, object]]) -> None:
        for event in events:
            await self._broadcast("event", event)

    async def _send_json(self, websocket: Any, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: Any, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: Any) -> Optional[Dict[str, Any]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: str) -> Dict[str, Any]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}

"""WebSocket endpoint and ConnectionManager. Route: /ws."""
import asyncio
import json
import logging
from typing import Any, Dict, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ws"])


class ConnectionManager:
	def __init__(self) -> None:
		self._clients: Set[WebSocket] = set()
		self._lock = asyncio.Lock()

	@property
	def client_count(self) -> int:
		return len(self._clients)

	async def connect(self, websocket: WebSocket) -> None:
		await websocket.accept()
		async with self._lock:
			self._clients.add(websocket)

	async def disconnect(self, websocket: WebSocket) -> None:
		async with self._lock:
			self._clients.discard(websocket)

	async def broadcast_json(self, message: Dict[str, Any]) -> None:
		payload = json.dumps(message, separators=(",", ":"), ensure_ascii=False)
		async with self._lock:
			if not self._clients:
				return
			send_tasks = []
			for ws in list(self._clients):
				send_tasks.append(self._send(ws, payload))
			await asyncio.gather(*send_tasks, return_exceptions=True)

	async def _send(self, ws: WebSocket, payload: str) -> None:
		try:
			await ws.send_text(payload)
		except Exception as e:
			logger.debug("Dropping websocket client after send failure: %r", e)
			self._clients.discard(ws)
			try:
				await ws.close()
			except RuntimeError:
				pass


def feedback_message(feedback: Any) -> Dict[str, Any]:
	"""Wire shape of a feedback broadcast."""
	return {"type": "feedback", **feedback.to_dict()}


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
	state = websocket.app.state.state
	manager: ConnectionManager = state.manager
	await manager.connect(websocket)
	try:
		if state.orchestrator is not None:
			await websocket.send_text(json.dumps(feedback_message(state.orchestrator.feedback), ensure_ascii=False))
		while True:
			await websocket.receive_text()
	except WebSocketDisconnect:
		pass
	finally:
		await manager.disconnect(websocket)

"""Mouse input for a CDP page session."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cdp_use.cdp.input.commands import DispatchMouseEventParameters
	from cdp_use.cdp.input.types import MouseButton
	from cdp_use.client import CDPClient


class Mouse:
	"""Dispatches trusted mouse events to one attached session."""

	def __init__(self, client: 'CDPClient', session_id: str):
		self._client = client
		self._session_id = session_id

	async def move(self, x: float, y: float) -> None:
		params: 'DispatchMouseEventParameters' = {'type': 'mouseMoved', 'x': x, 'y': y}
		await self._client.send.Input.dispatchMouseEvent(params, session_id=self._session_id)

	async def click(self, x: float, y: float, button: 'MouseButton' = 'left', click_count: int = 1) -> None:
		"""Move to the point, then press and release."""
		await self.move(x, y)

		press_params: 'DispatchMouseEventParameters' = {
			'type': 'mousePressed',
			'x': x,
			'y': y,
			'button': button,
			'clickCount': click_count,
		}
		await self._client.send.Input.dispatchMouseEvent(press_params, session_id=self._session_id)

		release_params: 'DispatchMouseEventParameters' = {
			'type': 'mouseReleased',
			'x': x,
			'y': y,
			'button': button,
			'clickCount': click_count,
		}
		await self._client.send.Input.dispatchMouseEvent(release_params, session_id=self._session_id)

"""
Memoized asynchronous loading of images and fonts.
"""

# Standard Library
import asyncio
import dataclasses
from typing import Any, Awaitable, Callable


@dataclasses.dataclass
class AssetEntry:
	kind: str
	key: str
	task: asyncio.Future

	@property
	def done(self) -> bool:
		return self.task.done()

	@property
	def failed(self) -> bool:
		return self.task.done() and not self.task.cancelled() and self.task.exception() is not None


#============================================
def _mark_retrieved(task: asyncio.Future) -> None:
	"""
	Consume a task outcome so unawaited failures stay quiet.

	Args:
		task: Finished load task.
	"""
	if not task.cancelled():
		task.exception()


class AssetCache:
	"""
	Keyed store of in-flight and finished asset loads.

	The first request for a (kind, key) pair starts the loader; every
	later request observes the same entry. The lookup and insert happen
	without yielding to the event loop, so interleaved coroutines never
	start a second load for the same key. Failed loads stay failed until
	the cache is cleared. A load cancelled before it finished, for
	example when an earlier event loop shut down, is started again by
	the next request.
	"""

	def __init__(self) -> None:
		self.entries: dict[tuple[str, str], AssetEntry] = {}

	def __len__(self) -> int:
		return len(self.entries)

	def has(self, kind: str, key: str) -> bool:
		return (kind, key) in self.entries

	#============================================
	def request(self, kind: str, key: str, loader: Callable[[], Awaitable[Any]]) -> AssetEntry:
		"""
		Start a load unless one already exists for the key.

		Args:
			kind: Asset kind, image or font.
			key: Source identifier.
			loader: Zero-argument coroutine function doing the load.

		Returns:
			Cache entry for the key.
		"""
		entry = self.entries.get((kind, key))
		# loads cancelled with a finished event loop start over
		if entry is not None and not entry.task.cancelled():
			return entry
		task = asyncio.ensure_future(loader())
		task.add_done_callback(_mark_retrieved)
		entry = AssetEntry(kind=kind, key=key, task=task)
		self.entries[(kind, key)] = entry
		return entry

	#============================================
	async def wait_ready(self, kind: str, key: str) -> Any:
		"""
		Wait for a requested asset.

		Args:
			kind: Asset kind.
			key: Source identifier.

		Returns:
			Loaded resource handle. Load errors are re-raised.
		"""
		entry = self.entries.get((kind, key))
		if entry is None:
			raise KeyError(f"{kind} asset was never requested: {key}")
		return await entry.task

	def clear(self) -> None:
		self.entries.clear()

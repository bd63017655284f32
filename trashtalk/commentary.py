"""
Trash-talk commentary.

Terminal outcomes get a canned line. Ordinary human moves are sent to a
chat-completion endpoint from a worker thread; whatever goes wrong there
turns into a fallback line and never reaches the game.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import aiohttp
from PySide6.QtCore import QObject, Signal, Slot

from .config import Settings
from .game_logic import GameStatus, Mark

log = logging.getLogger(__name__)

GREETING = "Ready to be schooled in Tic Tac Toe? Let's play!"
SYSTEM_PROMPT = "You're a trash-talking, gloating AI Tic Tac Toe opponent. Never break character."

TERMINAL_TAUNTS = {
    GameStatus.DRAW: "It's a draw! Not bad, but not good enough to beat me.",
    GameStatus.WON_BY_X: "Impossible! Did you cheat? Ugh. Well played, human.",
    GameStatus.WON_BY_O: "Another win for the AI mastermind. Try again?",
}

API_ERROR_REPLY = "AI error: Could not get a roast."
TRANSPORT_ERROR_REPLY = "You got off easy this turn - OpenAI dropped the ball."
EMPTY_REPLY = "No response."


class CommentaryError(Exception):
    """
    the endpoint answered, but not with a usable taunt
    """


@dataclass(frozen=True)
class Taunt:
    text: str
    error: Optional[str] = None


def _cell(mark: Mark) -> str:
    return mark.value or "."


def format_board(board: Sequence[Mark]) -> str:
    """
    three rows of X / O / . for the prompt
    """
    rows = [" ".join(_cell(board[r * 3 + c]) for c in range(3)) for r in range(3)]
    return "\n" + "\n".join(rows)


def describe_move(index: Optional[int], mark: Mark = Mark.X) -> str:
    if index is None:
        return "(no move found)"
    return f"Player {mark.value} to ({index // 3 + 1},{index % 3 + 1})"


def highlight_move(board: Sequence[Mark], index: Optional[int]) -> Optional[str]:
    # flat board string with the new cell bracketed
    if index is None:
        return None
    return "".join(f"[{_cell(m)}]" if i == index else _cell(m) for i, m in enumerate(board))


def build_prompt(board: Sequence[Mark], last_move: Optional[int]) -> str:
    return "\n".join([
        "You're an arrogant, witty, trash-talking AI playing Tic Tac Toe (your symbol: O) against a human (X).",
        "Comment on their recent move or the board, roast them playfully, gloat if winning, "
        "talk smack if drawing, and taunt especially when they mess up.",
        f"Board: {format_board(board)}",
        f"Previous moves: {describe_move(last_move)}",
        f"User's move: {highlight_move(board, last_move)}",
        "Rules: Be clever, concise, and always in-character. 2-3 sentences max. Don't repeat yourself.",
        "Ready? Respond with your best trash talk NOW.",
    ])


async def fetch_taunt(session: aiohttp.ClientSession, prompt: str, settings: Settings) -> str:
    """
    one chat-completion round trip.

    raises CommentaryError on a missing key, an error status or a reply
    without content; transport problems surface as aiohttp / timeout errors
    """
    if not settings.api_key:
        raise CommentaryError("Missing OpenAI API key in .env (OPENAI_API_KEY)")

    payload = {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "max_tokens": settings.max_tokens,
        "temperature": settings.temperature,
    }
    headers = {"Authorization": f"Bearer {settings.api_key}"}
    async with session.post(settings.api_url, json=payload, headers=headers) as resp:
        if resp.status >= 400:
            try:
                err = await resp.json()
                message = (err.get("error") or {}).get("message")
            except (aiohttp.ContentTypeError, ValueError, AttributeError):
                message = None
            raise CommentaryError(message or f"OpenAI API failure (status {resp.status}).")
        try:
            data = await resp.json()
        except (aiohttp.ContentTypeError, ValueError) as e:
            raise CommentaryError("OpenAI API sent a malformed reply.") from e

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    return (content or "").strip() or EMPTY_REPLY


async def produce_taunt(board: Sequence[Mark], last_move: Optional[int], settings: Settings) -> Taunt:
    """
    never raises: failures come back as a fallback line plus the error text
    """
    prompt = build_prompt(board, last_move)
    timeout = aiohttp.ClientTimeout(total=settings.timeout)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return Taunt(await fetch_taunt(session, prompt, settings))
    except CommentaryError as e:
        log.warning("commentary api error: %s", e)
        return Taunt(API_ERROR_REPLY, error=str(e))
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        log.warning("commentary request failed: %r", e)
        return Taunt(TRANSPORT_ERROR_REPLY, error="OpenAI API request failed.")


def terminal_taunt(outcome: GameStatus) -> str:
    """
    canned closing line; no round trip needed
    """
    return TERMINAL_TAUNTS.get(outcome, EMPTY_REPLY)


class CommentaryWorker(QObject):
    """
    qt worker that answers move commentary off the gui thread.

    requests older than the current cutoff epoch are skipped, and the
    one in flight is cancelled when the cutoff passes it.
    """
    taunt_ready = Signal(int, int, str)   # ticket, epoch, text
    error_changed = Signal(int, str)      # epoch, "" once a request succeeds

    def __init__(self, settings: Settings):
        super().__init__()
        self.settings = settings
        self._lock = threading.Lock()
        self._loop = None
        self._task = None
        self._task_epoch = None
        self._min_epoch = 0
        self._closed = False

    @Slot(object)
    def produce(self, request):
        """
        answer one move CommentaryRequest
        """
        with self._lock:
            if self._closed or request.epoch < self._min_epoch:
                log.debug("skipping commentary ticket %d (epoch %d)", request.ticket, request.epoch)
                return
            loop = asyncio.new_event_loop()
            task = loop.create_task(produce_taunt(request.board, request.last_move, self.settings))
            self._loop, self._task, self._task_epoch = loop, task, request.epoch

        try:
            taunt = loop.run_until_complete(task)
        except asyncio.CancelledError:
            log.debug("commentary ticket %d cancelled", request.ticket)
            return
        finally:
            with self._lock:
                self._loop = self._task = self._task_epoch = None
            loop.close()

        self.error_changed.emit(request.epoch, taunt.error or "")
        self.taunt_ready.emit(request.ticket, request.epoch, taunt.text)

    def cancel_before(self, epoch: int):
        """
        drop queued and in-flight requests older than `epoch`; any thread
        """
        with self._lock:
            self._min_epoch = max(self._min_epoch, epoch)
            if self._task is not None and self._task_epoch < epoch:
                self._loop.call_soon_threadsafe(self._task.cancel)

    def shutdown(self):
        # cancel whatever is running and refuse anything queued behind it
        with self._lock:
            self._closed = True
            if self._task is not None:
                self._loop.call_soon_threadsafe(self._task.cancel)

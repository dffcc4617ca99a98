"""
Single-slot human input broker.

One HumanInputRequest may be outstanding at a time. Installing a new one
first cancels the old one, so the previous waiter sees HumanInputCancelled
before any subscriber can observe the replacement. The broker is an
ordinary object owned by the application root and handed to both the
pipeline and whichever UI surface answers requests.
"""
import asyncio
import uuid
from typing import Callable, Generator, List, Optional

from playground.models.human_input import HumanInputAnswer, HumanInputField, HumanInputView
from playground.utils.custom_exceptions import HumanInputCancelled, RequestAlreadySettled
from playground.utils.logging_utils import logger

Subscriber = Callable[[Optional["HumanInputRequest"]], None]


def _consume_outcome(future: asyncio.Future) -> None:
    # Mark cancellation exceptions as retrieved when nobody awaits the request
    if not future.cancelled():
        future.exception()


class HumanInputRequest:
    """
    One question put to the human, and the handle that resumes its waiter.

    Awaiting the request yields the answer bag, or raises HumanInputCancelled.
    Once resolved or cancelled the request is dead; settling it again raises
    RequestAlreadySettled.
    """

    def __init__(self, question: str, fields: Optional[List[HumanInputField]] = None):
        self.id = str(uuid.uuid4())
        self.question = question
        self.fields = list(fields or [])
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._future.add_done_callback(_consume_outcome)

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, answer: HumanInputAnswer) -> None:
        if self._future.done():
            raise RequestAlreadySettled(f"Human input request {self.id} is already settled")
        self._future.set_result(dict(answer))

    def cancel(self) -> None:
        if self._future.done():
            raise RequestAlreadySettled(f"Human input request {self.id} is already settled")
        self._future.set_exception(HumanInputCancelled())

    def view(self) -> HumanInputView:
        return HumanInputView(id=self.id, question=self.question, fields=self.fields)

    def __await__(self) -> Generator:
        return asyncio.shield(self._future).__await__()


class HumanInputBroker:

    def __init__(self):
        self._active: Optional[HumanInputRequest] = None
        self._subscribers: List[Subscriber] = []

    @property
    def active(self) -> Optional[HumanInputRequest]:
        return self._active

    def request(self, question: str, fields: Optional[List[HumanInputField]] = None) -> HumanInputRequest:
        """
        Install a new request and return it. Await the result for the answer.

        Must be called from a running event loop.
        """
        previous = self._active
        if previous is not None:
            self._active = None
            previous.cancel()
            logger.info(f"Evicted human input request {previous.id}")
            self._notify()

        request = HumanInputRequest(question, fields)
        self._active = request
        logger.info(f"Awaiting human input: {question!r} ({request.id})")
        self._notify()
        return request

    async def ask(self, question: str, fields: Optional[List[HumanInputField]] = None) -> HumanInputAnswer:
        return await self.request(question, fields)

    def resolve(self, answer: HumanInputAnswer, request_id: Optional[str] = None) -> bool:
        """
        Answer the outstanding request. The answer is not validated here.

        Returns False when nothing is outstanding or request_id is stale.
        """
        request = self._take(request_id)
        if request is None:
            return False
        request.resolve(answer)
        logger.info(f"Human input resolved ({request.id})")
        self._notify()
        return True

    def cancel(self, request_id: Optional[str] = None) -> bool:
        request = self._take(request_id)
        if request is None:
            return False
        request.cancel()
        logger.info(f"Human input cancelled ({request.id})")
        self._notify()
        return True

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register an observer. It is called at once with the current request
        (or None) and again on every change. Returns an unsubscribe function.
        """
        self._subscribers.append(callback)
        callback(self._active)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _take(self, request_id: Optional[str]) -> Optional[HumanInputRequest]:
        request = self._active
        if request is None or (request_id is not None and request.id != request_id):
            return None
        self._active = None
        return request

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._active)
            except Exception as e:
                logger.error(f"Human input subscriber failed: {e}")

# Topic-based pub/sub mixin: on / off / one / emit.
from dataclasses import dataclass
from typing import Callable, Dict, List


@dataclass(eq=False)
class _Subscriber:
    fn: Callable
    typed: bool = False     # pass topic name as first arg
    one: bool = False       # drop after first call
    busy: bool = False      # call is on the stack
    removed: bool = False   # taken out of the registry


class Observable:
    """
    Mixin giving any object topic-based publish/subscribe.

    Topics are plain strings. `on` and `off` accept a whitespace-separated
    list of topics; a subscriber registered under more than one topic in a
    single call receives the topic name as its first argument.

    All four operations return the host so calls can be chained, and none
    of them raise on malformed input.
    """

    @property
    def _callbacks(self) -> Dict[str, List[_Subscriber]]:
        # Created lazily so hosts don't need to call Observable.__init__
        try:
            return self.__dict__["_observable_callbacks"]
        except KeyError:
            return self.__dict__.setdefault("_observable_callbacks", {})

    def on(self, topics: str, fn: Callable, _one: bool = False):
        if not callable(fn) or not isinstance(topics, str):
            return self
        names = topics.split()
        typed = len(names) > 1
        for name in names:
            sub = _Subscriber(fn, typed=typed, one=_one)
            self._callbacks.setdefault(name, []).append(sub)
        return self

    def off(self, topics: str, fn: Callable = None):
        if topics == "*":
            for subs in self._callbacks.values():
                _drop(subs)
            self._callbacks.clear()
        elif not isinstance(topics, str):
            return self
        elif fn is not None:
            for name in topics.split():
                subs = self._callbacks.get(name)
                if subs:
                    _drop([s for s in subs if s.fn == fn])
                    subs[:] = [s for s in subs if not s.removed]
        else:
            for name in topics.split():
                _drop(self._callbacks.get(name, ()))
                self._callbacks[name] = []
        return self

    def one(self, topic: str, fn: Callable):
        """Register `fn` for a single call of `topic`."""
        return self.on(topic, fn, _one=True)

    def emit(self, topic: str, *args):
        live = self._callbacks.get(topic)
        if not live:
            return self

        # Iterate a snapshot; the live list may change under us
        for sub in list(live):
            # removed flag covers removal by an earlier subscriber in this pass
            if sub.busy or sub.removed:
                continue

            sub.busy = True
            try:
                if sub.typed:
                    sub.fn(topic, *args)
                else:
                    sub.fn(*args)
            finally:
                if sub.one:
                    sub.removed = True
                    current = self._callbacks.get(topic, [])
                    current[:] = [s for s in current if s is not sub]
                sub.busy = False
        return self


def _drop(subs) -> None:
    for s in subs:
        s.removed = True

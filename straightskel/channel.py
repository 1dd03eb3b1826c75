from typing import Callable, Dict


class SimpleLogger:
    def __init__(self, name: str):
        self.name = name

    def warning(self, message: str):
        print(f"[{self.name}-Warning] {message}")


logger = SimpleLogger(__name__)


class Channel:
    """
    Named message stream for skeleton construction and offset extraction.

    Every message goes to every watcher. A channel without watchers is false, so
    senders test it before composing a message nobody would read.

    Usage:
        skeleton_channel = channel("skeleton")
        skeleton_channel.watch(print)
        skeleton_channel("Split event at t=0.5")
    """

    def __init__(self, name: str):
        self.name = name
        self.watchers = []

    def __repr__(self):
        return f"Channel({self.name!r}, watchers={len(self.watchers)})"

    def __call__(self, message: str):
        for watcher in self.watchers[:]:
            try:
                watcher(message)
            except Exception as e:
                # A failing watcher must not stop the construction it reports on.
                logger.warning(f"Watcher {watcher} failed on channel '{self.name}': {e}")

    def __bool__(self):
        return bool(self.watchers)

    def __iadd__(self, other):
        self.watch(other)
        return self

    def __isub__(self, other):
        self.unwatch(other)
        return self

    def watch(self, monitor_function: Callable):
        if any(w is monitor_function for w in self.watchers):
            return
        self.watchers.append(monitor_function)

    def unwatch(self, monitor_function: Callable):
        for w in self.watchers:
            if w is monitor_function:
                self.watchers.remove(w)
                return
        logger.warning(f"Watcher {monitor_function} not found in channel '{self.name}'")


_channels: Dict[str, Channel] = {}


def channel(name: str) -> Channel:
    """Return the shared channel of the given name, creating it on first request."""
    try:
        return _channels[name]
    except KeyError:
        chan = _channels[name] = Channel(name)
        return chan

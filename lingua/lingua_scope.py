"""
Frames and the scope stack.

A Frame is one lexical scope: a mapping of names to runtime values, a
diagnostic name, and a link to the frame that lexically encloses it. Frames
form shared chains; a closure holds on to the frame it was defined in, and
every call pushes one child frame under that handle.

The Environment tracks which chain is active. Its "stack" is the chain from
the active frame up to the global frame, which is always consulted last.
"""
from typing import Any, Dict, Iterator, List, Optional

from lingua.lingua_errors import LinguaNameError


class Frame:
    """A single scope: bindings plus a diagnostic name and a parent link."""

    def __init__(self, name: str, parent: Optional['Frame'] = None):
        self.name = name
        self.parent = parent
        self.bindings: Dict[str, Any] = {}

    def __getitem__(self, key: str) -> Any:
        return self.bindings[key]

    def __setitem__(self, key: str, value: Any):
        self.bindings[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.bindings

    def define(self, name: str, value: Any):
        self.bindings[name] = value

    def chain(self) -> Iterator['Frame']:
        """Yields this frame, then each enclosing frame outwards."""
        frame = self
        while frame is not None:
            yield frame
            frame = frame.parent

    def find_owner(self, name: str) -> Optional['Frame']:
        """Finds the innermost frame in this chain that binds name."""
        for frame in self.chain():
            if name in frame.bindings:
                return frame
        return None

    def keys(self):
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent = f", parent={self.parent.name!r}" if self.parent else ""
        return f"<Frame {self.name!r} bindings=[{keys}]{parent}>"


class Environment:
    """The active scope stack of an interpreter.

    The global frame is created by the caller and handed in; it outlives
    every other frame and is never popped.
    """

    def __init__(self, globals_frame: Optional[Frame] = None):
        self.globals = globals_frame if globals_frame is not None else Frame("<globals>")
        self._top: Frame = self.globals

    @property
    def top(self) -> Frame:
        return self._top

    def push_frame(self, name: str) -> Frame:
        """Pushes a fresh frame on top of the active chain and returns it."""
        frame = Frame(name, self._top)
        self._top = frame
        return frame

    def pop_frame(self) -> Frame:
        """Removes the top frame. Popping past the bottom is a programmer error."""
        frame = self._top
        if frame is self.globals or frame.parent is None:
            raise RuntimeError(f"pop_frame called on an empty scope stack (top is {frame.name!r})")
        self._top = frame.parent
        return frame

    def define(self, name: str, value: Any):
        """Binds name in the top frame, shadowing enclosing bindings."""
        self._top.define(name, value)

    def find_owner(self, name: str) -> Optional[Frame]:
        owner = self._top.find_owner(name)
        if owner is None and name in self.globals:
            return self.globals
        return owner

    def lookup(self, name: str, interpreter=None) -> Any:
        """Searches the active chain innermost-first, then the global frame."""
        owner = self.find_owner(name)
        if owner is None:
            raise LinguaNameError(f"undefined variable {name}", interpreter)
        return owner[name]

    def assign(self, name: str, value: Any):
        """Rebinds name where it is already bound, else defines it in the top frame."""
        owner = self.find_owner(name)
        if owner is None:
            owner = self._top
        owner[name] = value

    def get_stack(self) -> Frame:
        """Returns the head of the active chain."""
        return self._top

    def set_stack(self, frame: Frame) -> Frame:
        """Makes frame the head of the active chain; returns the previous head."""
        previous = self._top
        self._top = frame
        return previous

    def frame_names(self) -> List[str]:
        return [frame.name for frame in self._top.chain()]

    def __repr__(self) -> str:
        return f"<Environment stack={self.frame_names()!r}>"

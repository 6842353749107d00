"""Consumer port of the tokenizer.

The tokenizer delivers structural events by calling methods of a sink object,
synchronously and in document order. ``TokenSink`` defines the methods as
no-ops so a consumer overrides only what it needs; ``CallbackSink`` adapts
plain callables and ``EventCollector`` records everything as ``Event`` values.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from .entities import decode_charref, decode_entityref


class Attribute(NamedTuple):
    """Attribute of a start tag: lowercased name and decoded value."""

    name: str
    value: str


class EventType(Enum):
    """Kinds of events produced by the tokenizer."""

    START_TAG = auto()
    END_TAG = auto()
    DATA = auto()
    COMMENT = auto()
    PROCESSING_INSTRUCTION = auto()
    CHAR_REF = auto()
    ENTITY_REF = auto()
    DECLARATION = auto()            # DOCTYPE
    UNKNOWN_DECLARATION = auto()    # other declarations, marked sections


@dataclass(frozen=True)
class Event:
    """Single event as recorded by ``EventCollector``.

    Tag and reference events carry ``name``; text-bearing events carry
    ``text``. Start tags also carry ``attrs``.
    """

    type: EventType
    name: Optional[str] = None
    text: Optional[str] = None
    attrs: Tuple[Attribute, ...] = ()

    @property
    def decoded(self) -> Optional[str]:
        """Character a reference event stands for, if it can be decoded."""
        if self.type == EventType.CHAR_REF and self.name:
            try:
                return decode_charref(self.name)
            except (ValueError, OverflowError):
                return None
        if self.type == EventType.ENTITY_REF and self.name:
            return decode_entityref(self.name)
        return None


class TokenSink:
    """Receiver of tokenizer events. Every handler defaults to a no-op."""

    def handle_starttag(self, name: str, attrs: List[Attribute]) -> None:
        pass

    def handle_endtag(self, name: str) -> None:
        pass

    def handle_data(self, text: str) -> None:
        pass

    def handle_comment(self, text: str) -> None:
        pass

    def handle_pi(self, data: str) -> None:
        pass

    def handle_charref(self, name: str) -> None:
        pass

    def handle_entityref(self, name: str) -> None:
        pass

    def handle_decl(self, text: str) -> None:
        pass

    def unknown_decl(self, text: str) -> None:
        pass


class CallbackSink(TokenSink):
    """Sink that forwards events to optional callables."""

    def __init__(
        self,
        on_start_tag: Optional[Callable[[str, List[Attribute]], None]] = None,
        on_end_tag: Optional[Callable[[str], None]] = None,
        on_data: Optional[Callable[[str], None]] = None,
        on_comment: Optional[Callable[[str], None]] = None,
        on_processing_instruction: Optional[Callable[[str], None]] = None,
        on_char_ref: Optional[Callable[[str], None]] = None,
        on_entity_ref: Optional[Callable[[str], None]] = None,
        on_declaration: Optional[Callable[[str], None]] = None,
        on_unknown_declaration: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.on_start_tag = on_start_tag
        self.on_end_tag = on_end_tag
        self.on_data = on_data
        self.on_comment = on_comment
        self.on_processing_instruction = on_processing_instruction
        self.on_char_ref = on_char_ref
        self.on_entity_ref = on_entity_ref
        self.on_declaration = on_declaration
        self.on_unknown_declaration = on_unknown_declaration

    def handle_starttag(self, name: str, attrs: List[Attribute]) -> None:
        if self.on_start_tag:
            self.on_start_tag(name, attrs)

    def handle_endtag(self, name: str) -> None:
        if self.on_end_tag:
            self.on_end_tag(name)

    def handle_data(self, text: str) -> None:
        if self.on_data:
            self.on_data(text)

    def handle_comment(self, text: str) -> None:
        if self.on_comment:
            self.on_comment(text)

    def handle_pi(self, data: str) -> None:
        if self.on_processing_instruction:
            self.on_processing_instruction(data)

    def handle_charref(self, name: str) -> None:
        if self.on_char_ref:
            self.on_char_ref(name)

    def handle_entityref(self, name: str) -> None:
        if self.on_entity_ref:
            self.on_entity_ref(name)

    def handle_decl(self, text: str) -> None:
        if self.on_declaration:
            self.on_declaration(text)

    def unknown_decl(self, text: str) -> None:
        if self.on_unknown_declaration:
            self.on_unknown_declaration(text)


class EventCollector(TokenSink):
    """Sink that records every event in order."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    @property
    def events(self) -> List[Event]:
        """Recorded events, oldest first."""
        return list(self._events)

    def clear(self) -> None:
        """Forget all recorded events."""
        self._events.clear()

    def drain(self) -> List[Event]:
        """Return the recorded events and forget them."""
        events, self._events = self._events, []
        return events

    def coalesced(self) -> List[Event]:
        """Recorded events with runs of adjacent DATA events merged.

        Data may be split differently depending on how input was chunked;
        the merged sequence is the same for every chunking.
        """
        return coalesce_data(self._events)

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        """Get all recorded events of a specific type."""
        return [event for event in self._events if event.type == event_type]

    def handle_starttag(self, name: str, attrs: List[Attribute]) -> None:
        self._events.append(Event(EventType.START_TAG, name=name, attrs=tuple(attrs)))

    def handle_endtag(self, name: str) -> None:
        self._events.append(Event(EventType.END_TAG, name=name))

    def handle_data(self, text: str) -> None:
        self._events.append(Event(EventType.DATA, text=text))

    def handle_comment(self, text: str) -> None:
        self._events.append(Event(EventType.COMMENT, text=text))

    def handle_pi(self, data: str) -> None:
        self._events.append(Event(EventType.PROCESSING_INSTRUCTION, text=data))

    def handle_charref(self, name: str) -> None:
        self._events.append(Event(EventType.CHAR_REF, name=name))

    def handle_entityref(self, name: str) -> None:
        self._events.append(Event(EventType.ENTITY_REF, name=name))

    def handle_decl(self, text: str) -> None:
        self._events.append(Event(EventType.DECLARATION, text=text))

    def unknown_decl(self, text: str) -> None:
        self._events.append(Event(EventType.UNKNOWN_DECLARATION, text=text))


def coalesce_data(events: Sequence[Event]) -> List[Event]:
    """Merge runs of adjacent DATA events into one."""
    merged: List[Event] = []
    for event in events:
        if (
            event.type == EventType.DATA
            and merged
            and merged[-1].type == EventType.DATA
        ):
            merged[-1] = Event(EventType.DATA, text=(merged[-1].text or "") + (event.text or ""))
        else:
            merged.append(event)
    return merged

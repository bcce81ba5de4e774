# logic/gpx_parser.py

import enum
import logging
from typing import NamedTuple

from lxml import etree

from logic.config import MIN_BUFFER_SIZE
from logic.errors import BufferUnavailable, XmlSyntaxError
from logic.track_point import TrackPointBuilder, to_utc

logger = logging.getLogger(__name__)


class StartElement(NamedTuple):
    name: str
    attributes: tuple = ()


class EndElement(NamedTuple):
    name: str


class Text(NamedTuple):
    text: str


class Classification(enum.Enum):
    NONE = 0
    TIME = 1
    ELEVATION = 2


_CHILD_ELEMENTS = {
    "time": Classification.TIME,
    "ele": Classification.ELEVATION,
}


class ParserContext:
    def __init__(self):
        self.points = []
        self.builder = TrackPointBuilder()
        self.classification = Classification.NONE


class GpxTrack:
    """Immutable, ordered track points of one parsed GPX document."""

    def __init__(self, points):
        self._points = tuple(points)

    @property
    def points(self):
        if self._points is None:
            raise ValueError("GPX-Track wurde bereits freigegeben")
        return self._points

    @property
    def closed(self):
        return self._points is None

    @property
    def start_time(self):
        return self.points[0].timestamp if self.points else None

    @property
    def end_time(self):
        return self.points[-1].timestamp if self.points else None

    def points_between(self, start, end):
        start, end = to_utc(start), to_utc(end)
        return [p for p in self.points if start <= p.timestamp <= end]

    def close(self):
        self._points = None

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        if self.closed:
            return "<GpxTrack (freigegeben)>"
        return f"<GpxTrack {len(self._points)} Punkte>"


def _local_name(tag):
    # '{http://www.topografix.com/GPX/1/1}trkpt' -> 'trkpt'
    return tag.rsplit("}", 1)[-1]


def handle_event(context, event):
    builder = context.builder

    if isinstance(event, StartElement):
        name = _local_name(event.name)
        if name == "trkpt":
            if builder.in_progress:
                logger.warning("Defekte GPX-Datei: neues trkpt-Element vor dem Ende des vorherigen.")
                builder.discard()
            context.classification = Classification.NONE
            builder.begin(event.attributes)
        elif name in _CHILD_ELEMENTS:
            if not builder.in_progress:
                logger.warning("Defekte GPX-Datei: Element '%s' außerhalb von trkpt.", name)
                return
            context.classification = _CHILD_ELEMENTS[name]

    elif isinstance(event, EndElement):
        if _local_name(event.name) == "trkpt":
            point = builder.finish()
            if point is not None:
                context.points.append(point)
        # jedes schließende Element setzt die Klassifizierung zurück
        context.classification = Classification.NONE

    elif isinstance(event, Text):
        if not builder.in_progress:
            return
        if context.classification is Classification.TIME:
            builder.set_time(event.text)
        elif context.classification is Classification.ELEVATION:
            builder.set_elevation(event.text)

    else:
        raise TypeError(f"unbekanntes Parser-Ereignis: {event!r}")


def interpret(events, context=None):
    if context is None:
        context = ParserContext()
    for event in events:
        handle_event(context, event)
    return context


def xml_events(buffer):
    """Yield StartElement/Text/EndElement events of an XML document in document order.

    lxml only reports start and end of elements. Character data between two
    markup events is the .text of the element just opened or the .tail of the
    element just closed, and it is complete once the following event arrives.
    """
    # ohne Kommentare und PIs landet ihr Folgetext im .text des Elements
    parser = etree.XMLPullParser(
        events=("start", "end"),
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    pending = None

    def drain():
        nonlocal pending
        for action, elem in parser.read_events():
            if pending is not None:
                text = getattr(*pending)
                if text:
                    yield Text(text)
            if action == "start":
                yield StartElement(elem.tag, tuple(elem.attrib.items()))
                pending = (elem, "text")
            else:
                yield EndElement(elem.tag)
                pending = (elem, "tail")

    try:
        parser.feed(buffer)
        yield from drain()
        parser.close()
        yield from drain()
    except etree.XMLSyntaxError as err:
        raise XmlSyntaxError(str(err)) from err


def parse(buffer):
    if isinstance(buffer, str):
        buffer = buffer.encode("utf-8")

    if buffer is None or len(buffer) < MIN_BUFFER_SIZE:
        logger.error("GPX-Daten fehlen oder sind zu kurz für ein XML-Dokument.")
        raise BufferUnavailable("GPX-Daten fehlen oder sind zu kurz")

    try:
        context = interpret(xml_events(bytes(buffer)))
    except XmlSyntaxError as err:
        logger.error("GPX-Datei ist kein gültiges XML: %s", err)
        raise

    logger.debug("GPX-Datei gelesen: %d Trackpunkte", len(context.points))
    return GpxTrack(context.points)


def destroy(track):
    track.close()

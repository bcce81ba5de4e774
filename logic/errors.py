# logic/errors.py


class GpxError(Exception):
    pass


class BufferUnavailable(GpxError):
    pass


class XmlSyntaxError(GpxError):
    pass


class InsufficientTrackPoints(GpxError):
    pass


class ResolverError(GpxError):
    pass

"""Error taxonomy for the shorts rendering engine.

Three families matter to callers:

- FatalInputError: the run cannot produce a video (zero-duration narration,
  no usable footage). Aborts the render, never retried.
- RecoverableResourceError: a single optional resource failed (background
  music, one clip). Logged inside the engine; the run continues.
- UpstreamError: a collaborator (script, narration, footage, upload) failed.
  Propagated unchanged so the orchestrating layer can decide on retries.
"""


class ShortsEngineError(Exception):
    """Base class for all engine errors"""


class FatalInputError(ShortsEngineError):
    """Input that makes the whole render impossible"""


class RecoverableResourceError(ShortsEngineError):
    """An optional resource could not be used"""


class MusicUnavailableError(RecoverableResourceError):
    pass


class ClipUnavailableError(RecoverableResourceError):
    pass


class UpstreamError(ShortsEngineError):
    """A collaborator outside the engine failed"""


class ScriptGenerationError(UpstreamError):
    pass


class NarrationError(UpstreamError):
    pass


class FootageError(UpstreamError):
    pass


class DeliveryError(UpstreamError):
    pass


class EncoderError(ShortsEngineError):
    """The encoder process failed or produced no output"""

"""Speech-to-Text clients."""

from voiceproviders.core.protocols import STTProvider

from .buffered import BufferedSTTProvider

__all__ = ["BufferedSTTProvider", "STTProvider"]

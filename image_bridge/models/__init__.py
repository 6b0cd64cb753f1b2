from .candidate import ImageCandidate
from .dimensions import Dimensions
from .host_message import HostMessage
from .transfer import TranscodeResult, TransferReport, TransferStatus

__all__ = [
    "ImageCandidate",
    "Dimensions",
    "HostMessage",
    "TranscodeResult",
    "TransferReport",
    "TransferStatus",
]

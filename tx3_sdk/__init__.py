"""
tx3 SDK - turn tx3 transaction templates into submittable transactions.
"""
from .core import ArgMap, BytesEncoding, BytesEnvelope, DecodingError, TirEnvelope
from .tii import Invocation, Protocol
from .tii.exceptions import ReduceError, TiiError
from .trp import Client, ClientOptions, ResolveParams, SubmitParams, TrpError
from .version import __version__

__all__ = [
    "ArgMap", "BytesEncoding", "BytesEnvelope", "DecodingError", "TirEnvelope",
    "Protocol", "Invocation", "TiiError", "ReduceError",
    "Client", "ClientOptions", "ResolveParams", "SubmitParams", "TrpError",
    "__version__",
]

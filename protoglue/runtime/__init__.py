"""Runtime wire codec for protoglue generated modules."""

from .wire import DecodeError as DecodeError
from .wire import EncodeError as EncodeError
from .wire import Fixed32 as Fixed32
from .wire import Fixed64 as Fixed64
from .wire import LengthEncoded as LengthEncoded
from .wire import Varint as Varint
from .wire import WireEntry as WireEntry
from .wire import WireError as WireError
from .wire import cast as cast
from .wire import decode as decode
from .wire import encode as encode
from .wire import encode_packed as encode_packed

"""protoglue codec generator."""

from .dispatch import DecodeClause as DecodeClause
from .dispatch import EmitContext as EmitContext
from .dispatch import decode_clauses as decode_clauses
from .dispatch import emit_field as emit_field
from .dispatch import encode_fragment as encode_fragment
from .errors import DescriptorError as DescriptorError
from .errors import GeneratorError as GeneratorError
from .errors import UnsupportedFieldError as UnsupportedFieldError
from .loader import load as load
from .loader import load_descriptor_set as load_descriptor_set
from .loader import load_json as load_json
from .loader import validate as validate
from .naming import Naming as Naming
from .options import GeneratorOptions as GeneratorOptions
from .options import GroupPolicy as GroupPolicy
from .pool import DescriptorPool as DescriptorPool
from .python import render as render
from .types import *

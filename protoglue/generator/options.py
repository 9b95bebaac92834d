"""Code generation options."""

from argparse import ArgumentParser
from dataclasses import dataclass
from enum import StrEnum, auto
from shlex import shlex

from .errors import GeneratorError
from .naming import DEFAULT_MODULE_SUFFIX


class GroupPolicy(StrEnum):
    """What to do with group fields, which the generator cannot handle."""

    IGNORE = auto()  # Leave the field out of decode and encode
    WARN = auto()  # Leave it out and log a warning
    REJECT = auto()  # Fail generation of the whole file


@dataclass(frozen=True)
class GeneratorOptions:
    """Options shared by the CLI and the protoc plugin."""

    runtime_import: str = "protoglue.runtime"
    group_policy: GroupPolicy = GroupPolicy.IGNORE
    module_suffix: str = DEFAULT_MODULE_SUFFIX


class _ArgumentParser(ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise GeneratorError(f"invalid plugin parameter: {message}")


def parse_parameter(parameter: str) -> GeneratorOptions:
    """Parse the parameter string protoc passes to the plugin.

    Options arrive comma-separated via --protoglue_opt, for example
    "--runtime-import=myapp.wire,--group-policy=warn".
    """
    parser = _ArgumentParser(prog="protoc-gen-protoglue", add_help=False)
    parser.add_argument("--runtime-import", default=GeneratorOptions.runtime_import)
    parser.add_argument(
        "--group-policy",
        choices=[p.value for p in GroupPolicy],
        default=GeneratorOptions.group_policy.value,
    )
    parser.add_argument("--module-suffix", default=GeneratorOptions.module_suffix)

    # protoc passes the arguments in shell quoted form, separated by commas
    lex = shlex(parameter)
    lex.whitespace_split = True
    lex.whitespace = ","
    lex.commenters = ""
    args = parser.parse_args(list(lex))

    return GeneratorOptions(
        runtime_import=args.runtime_import,
        group_policy=GroupPolicy(args.group_policy),
        module_suffix=args.module_suffix,
    )

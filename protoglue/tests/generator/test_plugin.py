"""Tests for the protoc plugin and its parameters."""

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2
from pytest import raises

from protoglue.generator import GeneratorError, GeneratorOptions, GroupPolicy
from protoglue.generator.options import parse_parameter
from protoglue.generator.plugin import process_proto_request

_Field = descriptor_pb2.FieldDescriptorProto


def _request(parameter=""):
    base = descriptor_pb2.FileDescriptorProto(name="base.proto", package="base")
    base.message_type.add(name="Id").field.add(name="value", number=1, type=_Field.TYPE_UINT64)

    user = descriptor_pb2.FileDescriptorProto(
        name="app/user.proto", package="app", dependency=["base.proto"]
    )
    message = user.message_type.add(name="User")
    message.field.add(name="id", number=1, type=_Field.TYPE_MESSAGE, type_name=".base.Id")
    message.field.add(name="legacy", number=2, type=_Field.TYPE_GROUP)

    return plugin_pb2.CodeGeneratorRequest(
        file_to_generate=["app/user.proto"], proto_file=[base, user], parameter=parameter
    )


def describe_process_proto_request():
    def generates_requested_files_only(expect):
        res = plugin_pb2.CodeGeneratorResponse()
        process_proto_request(_request(), res)
        expect(res.HasField("error")) == False
        expect([f.name for f in res.file]) == ["user_codec.py"]
        expect("import base_codec" in res.file[0].content) == True
        expect("base_codec.decode_id(data)" in res.file[0].content) == True

    def applies_parameters(expect):
        res = plugin_pb2.CodeGeneratorResponse()
        process_proto_request(_request("--runtime-import=myapp.wire,--module-suffix=_pg"), res)
        expect([f.name for f in res.file]) == ["user_pg.py"]
        expect("import myapp.wire as _wire" in res.file[0].content) == True

    def reports_errors_without_files(expect):
        res = plugin_pb2.CodeGeneratorResponse()
        process_proto_request(_request("--group-policy=reject"), res)
        expect("legacy" in res.error) == True
        expect(len(res.file)) == 0

    def reports_bad_parameters(expect):
        res = plugin_pb2.CodeGeneratorResponse()
        process_proto_request(_request("--colour=blue"), res)
        expect("invalid plugin parameter" in res.error) == True


def describe_parse_parameter():
    def defaults_when_empty(expect):
        expect(parse_parameter("")) == GeneratorOptions()

    def reads_comma_separated_options(expect):
        options = parse_parameter("--group-policy=warn,--runtime-import=pkg.rt")
        expect(options.group_policy) == GroupPolicy.WARN
        expect(options.runtime_import) == "pkg.rt"

    def rejects_unknown_policies(expect):
        with raises(GeneratorError):
            parse_parameter("--group-policy=explode")

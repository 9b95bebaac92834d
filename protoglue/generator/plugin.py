"""protoglue compiler plugin.

Implements a protoc plugin (protoc-gen-protoglue) that generates a Python
codec module for every file named in the request:

    protoc --plugin=protoc-gen-protoglue --protoglue_out=out/ addressbook.proto
"""

import logging
import sys

from google.protobuf.compiler import plugin_pb2

from protoglue.generator import python
from protoglue.generator.errors import GeneratorError
from protoglue.generator.loader import from_file_descriptor
from protoglue.generator.options import parse_parameter
from protoglue.generator.pool import DescriptorPool

logger = logging.getLogger(__name__)


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> None:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. A failure is reported through the
    response's error field, and no files are returned in that case.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    try:
        options = parse_parameter(req.parameter)
        # proto_file holds the requested files and everything they import
        pool = DescriptorPool(from_file_descriptor(f) for f in req.proto_file)

        outputs = [
            python.process_proto_file(pool.file(name), pool, options)
            for name in req.file_to_generate
        ]
    except GeneratorError as e:
        res.error = str(e)
        return

    for output in outputs:
        fd = res.file.add()
        fd.name = output.name()
        fd.content = output.content()


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    # protoc reads the response from stdout, so logs go to stderr
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr, format="%(name)s: %(message)s")

    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= response.FEATURE_PROTO3_OPTIONAL

    process_proto_request(request, response)
    if response.HasField("error"):
        logger.error("failed to generate code: %s", response.error)

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == "__main__":
    sys.exit(main())

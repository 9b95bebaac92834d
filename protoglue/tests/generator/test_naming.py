"""Tests for generated identifier naming."""

from protoglue.generator import Naming, ProtoField, WireType
from protoglue.generator.naming import to_identifier, to_snake_case


def describe_to_snake_case():
    def splits_camel_case(expect):
        expect(to_snake_case("PhoneNumber")) == "phone_number"
        expect(to_snake_case("Person")) == "person"

    def keeps_acronyms_together(expect):
        expect(to_snake_case("HTTPRequest")) == "http_request"
        expect(to_snake_case("Utf8String")) == "utf8_string"

    def leaves_snake_case_alone(expect):
        expect(to_snake_case("already_snake")) == "already_snake"


def describe_to_identifier():
    def escapes_keywords(expect):
        expect(to_identifier("class")) == "class_"
        expect(to_identifier("None")) == "None_"

    def keeps_soft_keywords(expect):
        expect(to_identifier("type")) == "type"
        expect(to_identifier("match")) == "match"

    def replaces_invalid_characters(expect):
        expect(to_identifier("my-file")) == "my_file"
        expect(to_identifier("3d")) == "_3d"


def describe_naming():
    def names_modules_after_file_stems(expect, addressbook):
        naming = Naming(addressbook)
        expect(naming.module_name(addressbook.file("tutorial/addressbook.proto"))) == (
            "addressbook_codec"
        )
        custom = Naming(addressbook, module_suffix="_pb")
        expect(custom.module_name(addressbook.file("common.proto"))) == "common_pb"

    def drops_the_package_from_type_names(expect, addressbook):
        naming = Naming(addressbook)
        expect(naming.type_name(".tutorial.Person")) == "Person"
        expect(naming.type_name(".tutorial.Node.Meta.Tag")) == "Node_Meta_Tag"

    def joins_nesting_levels_in_function_names(expect, addressbook):
        naming = Naming(addressbook)
        full_name = ".tutorial.Person.PhoneNumber"
        expect(naming.encode_name(full_name)) == "encode_person__phone_number"
        expect(naming.decode_name(full_name)) == "decode_person__phone_number"
        expect(naming.dispatch_name(full_name)) == "_decode_person__phone_number_field"

    def names_enum_functions(expect, addressbook):
        naming = Naming(addressbook)
        expect(naming.to_symbol_name(".tutorial.Person.PhoneType")) == (
            "person__phone_type_to_symbol"
        )
        expect(naming.from_symbol_name(".common.Status")) == "status_from_symbol"

    def escapes_field_names(expect, addressbook):
        naming = Naming(addressbook)
        expect(naming.field_name(ProtoField(name="class", number=1, type=WireType.STRING))) == (
            "class_"
        )

    def qualifies_references_across_files(expect, addressbook):
        naming = Naming(addressbook)
        current = addressbook.file("tutorial/addressbook.proto")
        expect(naming.reference("decode_timestamp", ".common.Timestamp", current)) == (
            "common_codec.decode_timestamp"
        )
        expect(naming.reference("decode_person", ".tutorial.Person", current)) == "decode_person"

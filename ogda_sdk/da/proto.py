"""Protobuf messages for the ``disperser.Disperser`` gRPC service.

The DA client node does not ship a Python package, so the messages are built
at import time from a descriptor equivalent to::

    service Disperser {
      rpc DisperseBlob(DisperseBlobRequest) returns (DisperseBlobReply);
      rpc RetrieveBlob(RetrieveBlobRequest) returns (RetrieveBlobReply);
      rpc GetBlobStatus(BlobStatusRequest) returns (BlobStatusReply);
    }
"""
from typing import List, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "disperser"
SERVICE = "Disperser"
SERVICE_NAME = f"{PACKAGE}.{SERVICE}"

_FIELD = descriptor_pb2.FieldDescriptorProto

# message name -> [(field name, type, label)], field numbers follow list order
_MESSAGES: List[Tuple[str, List[Tuple[str, int, int]]]] = [
    ("DisperseBlobRequest", [
        ("data", _FIELD.TYPE_BYTES, _FIELD.LABEL_OPTIONAL),
        ("custom_quorum_numbers", _FIELD.TYPE_UINT32, _FIELD.LABEL_REPEATED),
    ]),
    ("DisperseBlobReply", [
        ("result", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
        ("request_id", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
    ]),
    ("RetrieveBlobRequest", [
        ("batch_header_hash", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
        ("blob_index", _FIELD.TYPE_UINT32, _FIELD.LABEL_OPTIONAL),
    ]),
    ("RetrieveBlobReply", [
        ("data", _FIELD.TYPE_BYTES, _FIELD.LABEL_OPTIONAL),
    ]),
    ("BlobStatusRequest", [
        ("request_id", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
    ]),
    ("BlobStatusReply", [
        ("status", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
        ("info", _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
    ]),
]

_METHODS = [
    ("DisperseBlob", "DisperseBlobRequest", "DisperseBlobReply"),
    ("RetrieveBlob", "RetrieveBlobRequest", "RetrieveBlobReply"),
    ("GetBlobStatus", "BlobStatusRequest", "BlobStatusReply"),
]


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="ogda_sdk/disperser.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _MESSAGES:
        message = file_proto.message_type.add(name=message_name)
        for number, (field_name, field_type, label) in enumerate(fields, start=1):
            message.field.add(name=field_name, number=number, type=field_type, label=label)

    service = file_proto.service.add(name=SERVICE)
    for method_name, request_type, reply_type in _METHODS:
        service.method.add(
            name=method_name,
            input_type=f".{PACKAGE}.{request_type}",
            output_type=f".{PACKAGE}.{reply_type}",
        )
    return file_proto


# Private pool so the definitions never clash with another disperser.proto
_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


DisperseBlobRequest = _message_class("DisperseBlobRequest")
DisperseBlobReply = _message_class("DisperseBlobReply")
RetrieveBlobRequest = _message_class("RetrieveBlobRequest")
RetrieveBlobReply = _message_class("RetrieveBlobReply")
BlobStatusRequest = _message_class("BlobStatusRequest")
BlobStatusReply = _message_class("BlobStatusReply")


def method_path(method: str) -> str:
    """Full gRPC method path, e.g. ``/disperser.Disperser/DisperseBlob``."""
    return f"/{SERVICE_NAME}/{method}"


DISPERSE_BLOB = method_path("DisperseBlob")
RETRIEVE_BLOB = method_path("RetrieveBlob")
GET_BLOB_STATUS = method_path("GetBlobStatus")

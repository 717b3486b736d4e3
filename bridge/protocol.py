"""WebSocket wire format — protobuf chat.ChatMessage {role, content}.

The message type is built at import time from the same definition as
proto/chat.proto, so no generated *_pb2 module is needed.
"""
from typing import Optional

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


def _build_chat_message_class():
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="chat.proto",
        package="chat",
        syntax="proto3",
    )
    msg = file_proto.message_type.add(name="ChatMessage")
    for number, field_name in ((1, "role"), (2, "content")):
        msg.field.add(
            name=field_name,
            number=number,
            type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
            label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
            json_name=field_name,
        )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName("chat.ChatMessage"))


ChatMessage = _build_chat_message_class()


def encode_message(role: str, content: str) -> bytes:
    return ChatMessage(role=role, content=content).SerializeToString()


def decode_message(data) -> Optional["ChatMessage"]:
    """Parse a binary frame. Returns None if the frame is not a ChatMessage."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        return None
    msg = ChatMessage()
    try:
        msg.ParseFromString(bytes(data))
    except DecodeError:
        return None
    return msg

import asyncio
import struct

import pytest

from labanalyser.interface_data import InterfaceData
from labanalyser.kinds import DataPair, GuiSelection, ValueKind
from labanalyser.remote_control import (
    FrameBuffer,
    RemoteControlServer,
    Request,
    apply_set,
    encode_get_response,
    encode_request,
)


def make(value, kind):
    data = InterfaceData()
    data.set_value(value, kind)
    return data


def test_encode_request_header_layout():
    frame = encode_request("get", "Dev::x", b"abc")
    size, command, id_length, data_length = struct.unpack_from("<I3sII", frame)
    assert size == len(frame)
    assert command == b"get"
    assert id_length == len("Dev::x") + 1
    assert data_length == 3
    assert frame[15:15 + id_length] == b"Dev::x\0"


def test_encode_request_rejects_bad_command():
    with pytest.raises(ValueError):
        encode_request("gets", "x")


def test_feed_round_trip():
    frame = encode_request("set", "Dev::x", b"payload")
    assert FrameBuffer().feed(frame) == [Request("set", "Dev::x", b"payload")]


def test_feed_byte_by_byte():
    frame = encode_request("get", "Dev::y")
    buffer = FrameBuffer()
    collected = []
    for byte in frame:
        collected.extend(buffer.feed(bytes([byte])))
    assert collected == [Request("get", "Dev::y", b"")]


def test_feed_two_frames_in_one_chunk():
    chunk = encode_request("get", "a") + encode_request("set", "b", b"zz")
    assert FrameBuffer().feed(chunk) == [Request("get", "a"), Request("set", "b", b"zz")]


def test_feed_incomplete_frame_waits():
    frame = encode_request("get", "Dev::x")
    buffer = FrameBuffer()
    assert buffer.feed(frame[:-1]) == []
    assert buffer.feed(frame[-1:]) == [Request("get", "Dev::x")]


def test_feed_rejects_short_length():
    with pytest.raises(ValueError):
        FrameBuffer().feed(struct.pack("<I", 3) + b"\0" * 12)


def test_apply_set_numeric_keeps_kind():
    original = make(5, ValueKind.INT32)
    updated = apply_set(original, struct.pack("<d", 42.0))
    assert updated.get(ValueKind.INT32) == 42
    assert original.get(ValueKind.INT32) == 5


def test_apply_set_numeric_needs_eight_bytes():
    with pytest.raises(ValueError):
        apply_set(make(1.0, ValueKind.DOUBLE), b"\0\0")


def test_apply_set_string_drops_terminator():
    updated = apply_set(make("old", ValueKind.STRING), b"hello\0")
    assert updated.get(ValueKind.STRING) == "hello"


def test_apply_set_selection_only_to_option():
    data = make(GuiSelection("a", ("a", "b")), ValueKind.GUI_SELECTION)
    assert apply_set(data, b"b\0").value.selected == "b"
    assert apply_set(data, b"c\0").value.selected == "a"


def test_get_response_unknown():
    assert encode_get_response(None) == b"\0" + struct.pack("<I", 0)


def test_get_response_numeric():
    reply = encode_get_response(make(2.5, ValueKind.DOUBLE))
    assert reply[0] == 0
    assert struct.unpack_from("<Id", reply, 1) == (1, 2.5)


def test_get_response_string():
    reply = encode_get_response(make("volt", ValueKind.STRING))
    assert reply[0] == 1
    (elements,) = struct.unpack_from("<I", reply, 1)
    assert elements == len("volt") + 1
    body = reply[5:]
    assert len(body) == elements * 8
    assert body.startswith(b"volt\0")
    assert set(body[elements:]) <= {0}


def test_get_response_selection_sends_selected():
    reply = encode_get_response(make(GuiSelection("on", ("on", "off")), ValueKind.GUI_SELECTION))
    assert reply[0] == 1
    assert reply[5:8] == b"on\0"


def test_get_response_data_pair():
    pair = DataPair(first=[0.0, 1.0], second=[3.0, 4.0])
    reply = encode_get_response(make(pair, ValueKind.DATA_PAIR))
    (elements,) = struct.unpack_from("<I", reply, 1)
    assert elements == 4
    assert struct.unpack_from("<4d", reply, 5) == (0.0, 1.0, 3.0, 4.0)


def test_get_response_data_pair_without_series():
    reply = encode_get_response(make(DataPair(), ValueKind.DATA_PAIR))
    assert reply == b"\0" + struct.pack("<I", 0)


def test_get_response_string_list_is_flag_only():
    assert encode_get_response(make(["a"], ValueKind.STRING_LIST)) == b"\0"


def test_handle_get_unknown_id():
    server = RemoteControlServer({})
    assert server.handle(Request("get", "missing")) == encode_get_response(None)


def test_handle_set_stores_without_sender():
    container = {"Dev::x": make(1.0, ValueKind.DOUBLE)}
    server = RemoteControlServer(container)
    assert server.handle(Request("set", "Dev::x", struct.pack("<d", 9.5))) is None
    assert container["Dev::x"].as_float() == 9.5


def test_handle_set_goes_to_sender():
    sent = []
    container = {"Dev::x": make(1.0, ValueKind.DOUBLE)}
    server = RemoteControlServer(container, lambda c, i, d: sent.append((c, i, d.as_float())))
    server.handle(Request("set", "Dev::x", struct.pack("<d", 4.0)))
    assert sent == [("set", "Dev::x", 4.0)]
    assert container["Dev::x"].as_float() == 1.0


def test_handle_set_unknown_id_is_ignored():
    container = {}
    server = RemoteControlServer(container)
    server.handle(Request("set", "nothing", struct.pack("<d", 1.0)))
    assert container == {}


@pytest.mark.asyncio
async def test_server_answers_over_tcp():
    server = RemoteControlServer({"Dev::x": make(6.25, ValueKind.DOUBLE)}, first_port=0)
    port = await server.start()
    assert server.port == port
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        writer.write(encode_request("get", "Dev::x"))
        await writer.drain()
        reply = await asyncio.wait_for(reader.readexactly(13), timeout=5)
        writer.close()
        await writer.wait_closed()
    finally:
        await server.stop()
    assert reply == encode_get_response(make(6.25, ValueKind.DOUBLE))
    assert server.port is None
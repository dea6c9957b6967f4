"""Tests for the wire codec: signatures, answers and safe rendering."""

import json

import pytest

from ipdis.core.codec import (
    Answer,
    Signature,
    decode_answer,
    decode_signature,
    format_answer_bytes,
    render,
    safe_format_bytes,
    truncate,
)


class TestSafeFormatBytes:
    def test_valid_utf8_is_returned_as_is(self):
        assert safe_format_bytes("ipdis café".encode("utf-8")) == "ipdis café"

    def test_invalid_utf8_is_rendered_as_hex(self):
        assert safe_format_bytes(b"\x1f\x20\xff") == "INVALID UTF-8: [1F, 20, FF]"

    def test_empty(self):
        assert safe_format_bytes(b"") == ""


class TestSignature:
    def test_from_str_encodes_utf8(self):
        assert Signature.from_str("café").raw == b"caf\xc3\xa9"

    def test_equality_is_byte_exact(self):
        assert Signature(b"ipdisbeacon") == Signature.from_str("ipdisbeacon")
        assert Signature(b"ipdisbeacon") != Signature(b"IPDISBEACON")

    def test_hashable(self):
        accepted = frozenset([Signature(b"a"), Signature(b"b")])
        assert Signature(b"a") in accepted

    def test_rejects_str(self):
        with pytest.raises(TypeError):
            Signature("ipdisbeacon")

    def test_render(self):
        assert str(Signature(b"ipdisbeacon")) == "ipdisbeacon"
        assert str(Signature(b"\xff")) == "INVALID UTF-8: [FF]"

    def test_decode_wraps_bytes(self):
        assert decode_signature(bytearray(b"abc")) == Signature(b"abc")


class TestAnswerRendering:
    def test_valid_json_is_compacted(self):
        payload = b'{ "hostname" : "kitchen",\n "disks": [1, 2] }'
        assert render(Answer(payload)) == '{"hostname":"kitchen","disks":[1,2]}'

    def test_valid_json_keeps_structure(self):
        payload = {"a": {"b": [1, 2.5, None, True]}, "c": "x"}
        rendered = render(Answer.from_str(json.dumps(payload, indent=4)))
        assert json.loads(rendered) == payload

    def test_non_ascii_kept_unescaped(self):
        assert render(Answer.from_str('{"name": "café"}')) == '{"name":"café"}'

    def test_plain_text_falls_back_to_info(self):
        assert render(Answer(b"hello")) == '{"info":"hello"}'

    def test_empty_answer(self):
        assert render(Answer()) == '{"info":""}'

    def test_invalid_utf8_falls_back_to_hex(self):
        assert render(Answer(b"\x1f\xff")) == '{"info":"INVALID UTF-8: [1F, FF]"}'

    def test_nan_is_not_json(self):
        assert render(Answer(b"NaN")) == '{"info":"NaN"}'

    def test_number_overflowing_a_double_falls_back_to_info(self):
        def reject(name):
            raise ValueError(name)

        rendered = render(Answer(b'{"a":1e400}'))
        assert json.loads(rendered, parse_constant=reject) == {"info": '{"a":1e400}'}
        assert "Infinity" not in render(Answer(b"[-1e999]"))

    def test_quotes_in_fallback_are_escaped(self):
        rendered = format_answer_bytes(b'say "hi"')
        assert json.loads(rendered) == {"info": 'say "hi"'}

    def test_deeply_nested_json_never_raises(self):
        rendered = format_answer_bytes(b"[" * 100000)
        assert json.loads(rendered)["info"].startswith("[[[")

    def test_plain_bytes_render_as_answers(self):
        assert render(b"x") == '{"info":"x"}'
        assert str(decode_answer(b"[1, 2]")) == "[1,2]"

    def test_other_types_are_rejected(self):
        with pytest.raises(TypeError):
            render(42)


class TestTruncate:
    def test_shorter_payload_is_unchanged(self):
        assert truncate(b"abc", 128) == b"abc"

    def test_longer_payload_is_cut(self):
        assert truncate(b"x" * 200, 128) == b"x" * 128

    def test_answer_length(self):
        assert len(Answer(truncate(b"y" * 2000, 1024))) == 1024

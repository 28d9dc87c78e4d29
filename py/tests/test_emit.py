"""Tests for the GBLN serializer."""

import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from gbln import g, field, parse, serialize, to_string_pretty
from gbln.emit import emit_float, escape_literal, emit_comments
from gbln.errors import ErrorKind, GblnError, SerialiseError, ConfigError
from gbln.parse import MAX_DEPTH
from gbln.types import GType


class TestEmitScalars:

    def test_null(self):
        assert serialize(g.null()) == "<n>()"

    def test_bool_short_forms(self):
        assert serialize(g.bool(True)) == "<b>(t)"
        assert serialize(g.bool(False)) == "<b>(f)"

    def test_ints(self):
        assert serialize(g.i8(-5)) == "<i8>(-5)"
        assert serialize(g.u64(2**64 - 1)) == "<u64>(18446744073709551615)"

    def test_string(self):
        assert serialize(g.str("Alice", 64)) == "<s64>(Alice)"
        assert serialize(g.str("", 2)) == "<s2>()"

    def test_string_escapes(self):
        assert serialize(g.str("a(b)\\c")) == "<s64>(a\\(b\\)\\\\c)"
        assert escape_literal("f(x)") == "f\\(x\\)"

    def test_string_unicode(self):
        assert serialize(g.str("北京", 2)) == "<s2>(北京)"


class TestEmitFloat:

    @pytest.mark.parametrize("value,expected", [
        (3.14, "3.14"),
        (2.0, "2.0"),
        (-0.5, "-0.5"),
        (1e20, "1e+20"),
        (float("inf"), "inf"),
        (float("-inf"), "-inf"),
        (float("nan"), "nan"),
    ])
    def test_f64(self, value, expected):
        assert emit_float(value, GType.F64) == expected

    def test_f32_shortest(self):
        assert serialize(g.f32(3.14)) == "<f32>(3.14)"
        assert serialize(g.f32(0.1)) == "<f32>(0.1)"
        assert serialize(g.f32(100.0)) == "<f32>(100.0)"

    def test_f32_max(self):
        v = g.f32(3.4028234663852886e38)
        assert serialize(v) == "<f32>(3.4028235e+38)"
        assert parse(serialize(v)) == v

    def test_f32_reads_back(self):
        v = g.f32(1.1)
        assert parse(serialize(v)) == v


class TestEmitMini:

    def test_object(self):
        v = parse("user{id<u32>(12345) name<s64>(Alice) active<b>(t)}")
        assert serialize(v) == "{user{id<u32>(12345)name<s64>(Alice)active<b>(t)}}"

    def test_insertion_order(self):
        v = g.object(field("b", g.i8(1)), field("a", g.i8(2)))
        assert serialize(v) == "{b<i8>(1)a<i8>(2)}"

    def test_empty_containers(self):
        v = g.object(field("o", g.object()), field("xs", g.array()))
        assert serialize(v) == "{o{}xs[]}"

    def test_typed_array(self):
        assert serialize(g.array(g.i8(1), g.i8(2), g.i8(3))) == "<i8>[1 2 3]"
        assert serialize(g.array(g.bool(True), g.bool(False))) == "<b>[t f]"
        assert serialize(g.array(g.null(), g.null())) == "<n>[null null]"

    def test_typed_string_array(self):
        v = g.object(field("tags", g.array(g.str("rust", 16), g.str("python", 16))))
        assert serialize(v) == "{tags<s16>[rust python]}"

    def test_mixed_widths_untyped(self):
        assert serialize(g.array(g.i8(1), g.i16(2))) == "[<i8>(1)<i16>(2)]"

    def test_mixed_capacities_untyped(self):
        assert serialize(g.array(g.str("a", 2), g.str("b", 4))) == "[<s2>(a)<s4>(b)]"

    def test_strings_needing_parens(self):
        v = g.array(g.str("a b"), g.str("c"))
        assert serialize(v) == "[<s64>(a b)<s64>(c)]"
        assert serialize(g.array(g.str(""))) == "[<s64>()]"
        assert serialize(g.array(g.str("x]"))) == "[<s64>(x])]"

    def test_array_of_objects(self):
        v = g.array(g.object(field("id", g.u8(1))), g.object(field("id", g.u8(2))))
        assert serialize(v) == "[{id<u8>(1)}{id<u8>(2)}]"

    def test_mini_idempotent(self):
        text = "cfg{name<s32>(demo) ports<u16>[80 443] nested{deep[<i8>(1){}]}}"
        once = serialize(parse(text))
        assert serialize(parse(once)) == once


class TestEmitPretty:

    def test_nested_object(self):
        v = parse("user{id<u32>(1) tags<s16>[a b] empty{}}")
        assert serialize(v, mini=False) == (
            "{\n"
            "  user{\n"
            "    id<u32>(1)\n"
            "    tags<s16>[a b]\n"
            "    empty{}\n"
            "  }\n"
            "}"
        )

    def test_indent_width(self):
        v = g.object(field("a", g.object(field("b", g.i8(1)))))
        assert to_string_pretty(v, indent=4) == "{\n    a{\n        b<i8>(1)\n    }\n}"

    def test_untyped_array(self):
        v = g.object(field("xs", g.array(g.object(field("a", g.i8(1))))))
        assert to_string_pretty(v) == (
            "{\n"
            "  xs[\n"
            "    {\n"
            "      a<i8>(1)\n"
            "    }\n"
            "  ]\n"
            "}"
        )

    def test_empty_bodies(self):
        assert to_string_pretty(g.object()) == "{}"
        assert to_string_pretty(g.array()) == "[]"

    def test_scalar(self):
        assert to_string_pretty(g.i32(7)) == "<i32>(7)"

    def test_order_matches_mini(self):
        v = g.object(field("b", g.i8(1)), field("a", g.i8(2)))
        assert to_string_pretty(v).index("b<i8>") < to_string_pretty(v).index("a<i8>")

    def test_round_trip(self):
        v = parse("x{a<s8>(hi there) b[<i8>(1) <f64>(2.5)] c<u8>[1 2]}")
        assert parse(to_string_pretty(v)) == v


class TestEmitErrors:

    def test_not_a_value(self):
        with pytest.raises(SerialiseError) as exc:
            serialize("plain string")
        assert exc.value.kind == ErrorKind.SERIALISE
        assert "unsupported type" in exc.value.message

    def test_foreign_object_in_tree(self):
        v = g.object()
        v.as_object()["k"] = 5
        with pytest.raises(SerialiseError):
            serialize(v)

    def test_int_escaped_bounds(self):
        v = g.i8(1)
        v._int = 1000
        with pytest.raises(SerialiseError) as exc:
            serialize(v)
        assert exc.value.kind == ErrorKind.SERIALISE

    def test_string_escaped_bounds(self):
        v = g.str("ab", 2)
        v._str = "abc"
        with pytest.raises(GblnError) as exc:
            serialize(g.array(v))
        assert exc.value.kind == ErrorKind.SERIALISE

    def test_bad_indent(self):
        with pytest.raises(ConfigError):
            serialize(g.null(), mini=False, indent=-1)


def nested_arrays(levels, inner=None):
    v = inner if inner is not None else g.array()
    for _ in range(levels - 1):
        v = g.array(v)
    return v


class TestEmitDepth:

    @pytest.mark.parametrize("mini", [True, False])
    def test_at_limit_reads_back(self, mini):
        v = nested_arrays(MAX_DEPTH)
        text = serialize(v, mini=mini)
        assert parse(text) == v

    @pytest.mark.parametrize("mini", [True, False])
    def test_past_limit(self, mini):
        with pytest.raises(SerialiseError) as exc:
            serialize(nested_arrays(MAX_DEPTH + 1), mini=mini)
        assert exc.value.kind == ErrorKind.SERIALISE
        assert str(MAX_DEPTH) in exc.value.message

    def test_objects_count(self):
        v = g.object()
        for _ in range(MAX_DEPTH):
            v = g.object(field("a", v))
        with pytest.raises(SerialiseError):
            to_string_pretty(v)

    def test_typed_array_is_not_a_level(self):
        v = nested_arrays(MAX_DEPTH + 1, g.array(g.i8(1), g.i8(2)))
        text = serialize(v)
        assert text.endswith("<i8>[1 2]" + "]" * MAX_DEPTH)
        assert parse(text) == v

    def test_very_deep_tree(self):
        with pytest.raises(SerialiseError):
            serialize(nested_arrays(3000))


class TestEmitComments:

    def test_lines(self):
        assert emit_comments(["generated", "do not edit"]) == ":| generated\n:| do not edit"

    def test_multiline_and_blank(self):
        assert emit_comments(["a\nb", ""]) == ":| a\n:| b\n:|"

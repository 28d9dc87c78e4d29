#!/usr/bin/env python3
"""
GBLN Golden Vector Test

Fixed input/output pairs for the serializer and parser. Any implementation of
the format must produce exactly these texts and values; a change here is a
wire-format change.

Runs under pytest, or standalone: python tests/golden_vectors_test.py
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "py"))

from gbln import GblnError, ErrorKind, dumps, loads, g, field, serialize, to_string_pretty


# (name, python_data, expected_mini)
MINI_VECTORS = [
    ("empty_object", {}, "{}"),
    ("empty_array", [], "[]"),
    ("null", None, "<n>()"),
    ("bool_true", True, "<b>(t)"),
    ("bool_false", False, "<b>(f)"),
    ("simple_scalars", {"a": 1, "b": "hello", "c": True}, "{a<i8>(1)b<s64>(hello)c<b>(t)}"),
    ("negative_and_float", {"neg": -42, "pi": 3.14}, "{neg<i8>(-42)pi<f64>(3.14)}"),
    ("string_escapes", {"s": "f(x) \\ y"}, "{s<s64>(f\\(x\\) \\\\ y)}"),
    ("unicode", {"greeting": "你好"}, "{greeting<s64>(你好)}"),
    ("mixed_array", [1, "two", True, None], "[<i8>(1)<s64>(two)<b>(t)<n>()]"),
    ("nested_object", {"outer": {"inner": 42}}, "{outer{inner<i8>(42)}}"),
    ("nested_lists", [[1, 2], [3, 4]], "[<i8>[1 2]<i8>[3 4]]"),
    ("key_ordering_kept", {"z": 1, "a": 2, "m": 3}, "{z<i8>(1)a<i8>(2)m<i8>(3)}"),
    ("object_with_nulls", {"a": 1, "b": None, "c": 3}, "{a<i8>(1)b<n>()c<i8>(3)}"),
    ("array_of_nulls", [None, None], "<n>[null null]"),
    ("array_of_strings", ["rust", "python"], "<s64>[rust python]"),
    ("array_needing_parens", ["a b", "c"], "[<s64>(a b)<s64>(c)]"),
    ("array_of_objects", [{"id": 1}, {"id": 2}], "[{id<i8>(1)}{id<i8>(2)}]"),

    # Integer width boundaries
    ("i8_max", 127, "<i8>(127)"),
    ("i16_min_positive", 128, "<i16>(128)"),
    ("i8_min", -128, "<i8>(-128)"),
    ("i16_min_negative", -129, "<i16>(-129)"),
    ("i32", 40000, "<i32>(40000)"),
    ("i64_max", 2**63 - 1, "<i64>(9223372036854775807)"),

    # Numbers edge cases
    ("negative_zero", -0.0, "<f64>(-0.0)"),
    ("integral_float", 2.0, "<f64>(2.0)"),
    ("exponent_small", 1e-10, "<f64>(1e-10)"),
    ("exponent_large", 1e20, "<f64>(1e+20)"),

    # String capacity classes
    ("s64_boundary", "x" * 64, "<s64>(" + "x" * 64 + ")"),
    ("s256_boundary", "x" * 65, "<s256>(" + "x" * 65 + ")"),
    ("s1024_boundary", "x" * 1024, "<s1024>(" + "x" * 1024 + ")"),
    ("cjk_counts_characters", "北" * 65, "<s256>(" + "北" * 65 + ")"),
]

# (name, value, expected_pretty)
PRETTY_VECTORS = [
    ("flat", g.object(field("a", g.i8(1)), field("b", g.str("x", 8))), "{\n  a<i8>(1)\n  b<s8>(x)\n}"),
    ("nested", g.object(field("user", g.object(field("id", g.u32(7))))), "{\n  user{\n    id<u32>(7)\n  }\n}"),
    ("empty_bodies", g.object(field("o", g.object()), field("xs", g.array())), "{\n  o{}\n  xs[]\n}"),
    ("typed_array_inline", g.object(field("p", g.array(g.u16(80), g.u16(443)))), "{\n  p<u16>[80 443]\n}"),
    ("untyped_array", g.array(g.i8(1), g.str("a", 2)), "[\n  <i8>(1)\n  <s2>(a)\n]"),
    ("scalar", g.f32(1.5), "<f32>(1.5)"),
]

# (name, text, expected_python)
PARSE_VECTORS = [
    ("user_record", "user{id<u32>(12345) name<s64>(Alice) age<i8>(25) active<b>(t)}",
     {"user": {"id": 12345, "name": "Alice", "age": 25, "active": True}}),
    ("typed_array", "tags<s16>[rust python golang]", {"tags": ["rust", "python", "golang"]}),
    ("long_bools", "a<b>(true) b<b>(false)", {"a": True, "b": False}),
    ("nulls", "a<n>() b<n>(null) c<n>[null]", {"a": None, "b": None, "c": [None]}),
    ("comments", ":| head\na<i8>(1) :| tail\n", {"a": 1}),
    ("pretty_layout", "{\n  a{\n    b<u8>[1 2]\n  }\n}", {"a": {"b": [1, 2]}}),
    ("empty_object", "empty{}", {"empty": {}}),
    ("empty_array", "empty[]", {"empty": []}),
    ("anonymous_scalar", "<s8>(hi)", "hi"),
    ("emoji", "m<s2>(🔥🚀)", {"m": "🔥🚀"}),
]

# (name, text, kind, line, column)
ERROR_VECTORS = [
    ("int_out_of_range", "age<i8>(999)", ErrorKind.INT_OUT_OF_RANGE, 1, 9),
    ("string_too_long", "c<s2>(abc)", ErrorKind.STRING_TOO_LONG, 1, 7),
    ("duplicate_key", "user{id<u32>(1)id<u32>(2)}", ErrorKind.DUPLICATE_KEY, 1, 16),
    ("missing_brace", "user{\n  id<u32>(1)\n", ErrorKind.INVALID_SYNTAX, 1, 5),
    ("missing_bracket", "a<i8>(1)\nxs[<i8>(1)", ErrorKind.INVALID_SYNTAX, 2, 3),
    ("bad_hint", "x<i12>(1)", ErrorKind.INVALID_TYPE_HINT, 1, 2),
    ("bad_bool", "x<b>(yes)", ErrorKind.TYPE_MISMATCH, 1, 6),
    ("bad_int", "x<i32>(4.5)", ErrorKind.TYPE_MISMATCH, 1, 8),
    ("unexpected_char", "x=1", ErrorKind.UNEXPECTED_CHAR, 1, 2),
    ("unterminated", "x<s8>(abc", ErrorKind.UNTERMINATED_STRING, 1, 6),
    ("missing_hint", "x(1)", ErrorKind.UNEXPECTED_TOKEN, 1, 2),
    ("unexpected_eof", "x", ErrorKind.UNEXPECTED_EOF, 1, 2),
]


# =============================================================================
# pytest
# =============================================================================

@pytest.mark.parametrize("name,data,expected", MINI_VECTORS, ids=[v[0] for v in MINI_VECTORS])
def test_mini_vectors(name, data, expected):
    assert dumps(data) == expected
    assert dumps(loads(expected)) == expected


@pytest.mark.parametrize("name,value,expected", PRETTY_VECTORS, ids=[v[0] for v in PRETTY_VECTORS])
def test_pretty_vectors(name, value, expected):
    assert to_string_pretty(value) == expected
    assert serialize(value, mini=False, indent=2) == expected


@pytest.mark.parametrize("name,text,expected", PARSE_VECTORS, ids=[v[0] for v in PARSE_VECTORS])
def test_parse_vectors(name, text, expected):
    assert loads(text) == expected


@pytest.mark.parametrize("name,text,kind,line,column", ERROR_VECTORS, ids=[v[0] for v in ERROR_VECTORS])
def test_error_vectors(name, text, kind, line, column):
    with pytest.raises(GblnError) as exc:
        loads(text)
    assert exc.value.kind == kind
    assert (exc.value.line, exc.value.column) == (line, column)


# =============================================================================
# Standalone runner
# =============================================================================

def _report(title, results):
    print("=" * 70)
    print(title)
    print("=" * 70)
    failed = 0
    for name, ok, detail in results:
        if ok:
            print(f"✅ {name}")
        else:
            print(f"❌ {name}")
            print(f"   {detail}")
            failed += 1
    print(f"\n{len(results) - failed} passed, {failed} failed\n")
    return failed == 0


def run_mini_vectors():
    results = []
    for name, data, expected in MINI_VECTORS:
        actual = dumps(data)
        results.append((name, actual == expected, f"Expected: {expected}\n   Actual:   {actual}"))
    return _report("MINI VECTORS", results)


def run_pretty_vectors():
    results = []
    for name, value, expected in PRETTY_VECTORS:
        actual = to_string_pretty(value)
        results.append((name, actual == expected, f"Expected: {expected!r}\n   Actual:   {actual!r}"))
    return _report("PRETTY VECTORS", results)


def run_parse_vectors():
    results = []
    for name, text, expected in PARSE_VECTORS:
        try:
            actual = loads(text)
        except GblnError as e:
            results.append((name, False, f"ERROR: {e}"))
            continue
        results.append((name, actual == expected, f"Expected: {expected}\n   Actual:   {actual}"))
    return _report("PARSE VECTORS", results)


def run_error_vectors():
    results = []
    for name, text, kind, line, column in ERROR_VECTORS:
        try:
            loads(text)
        except GblnError as e:
            got = (e.kind, e.line, e.column)
            results.append((name, got == (kind, line, column), f"Expected: {(kind, line, column)}\n   Actual:   {got}"))
        else:
            results.append((name, False, "accepted"))
    return _report("ERROR VECTORS", results)


def main():
    all_passed = True

    all_passed &= run_mini_vectors()
    all_passed &= run_pretty_vectors()
    all_passed &= run_parse_vectors()
    all_passed &= run_error_vectors()

    print("=" * 70)
    if all_passed:
        print("✅ ALL GOLDEN VECTORS PASSED")
    else:
        print("❌ SOME VECTORS FAILED")
    print("=" * 70)

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())

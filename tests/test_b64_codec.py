import pytest
from dzcodec.b64 import ALPHABET, decode, encode
from dzcodec.errors import EncodingError


def test_b64_known_values():
    assert decode("A") == 0
    assert decode("B") == 1
    assert decode("/") == 63
    assert decode("BA") == 64
    assert decode("Po") == 1000
    # offset seen in a real dictd index line
    assert decode("3fW2") == 55 * 64**3 + 31 * 64**2 + 22 * 64 + 54
    assert decode(b"c") == 28


def test_b64_leading_zero_digits_are_ignored():
    assert decode("AAAAB") == 1
    assert decode("") == 0


def test_b64_encode_minimal():
    assert encode(0) == "A"
    assert encode(63) == "/"
    assert encode(64) == "BA"
    assert encode(1000) == "Po"
    assert not encode(123456789).startswith("A")


@pytest.mark.parametrize("n", [0, 1, 63, 64, 4095, 4096, 58315, 150_000, 2**32 + 7, 2**63 - 1])
def test_b64_roundtrip(n):
    assert decode(encode(n)) == n


def test_b64_alphabet_is_standard_order():
    assert len(ALPHABET) == 64
    assert [decode(c) for c in ALPHABET] == list(range(64))


@pytest.mark.parametrize("bad", ["AB=C", "A B", "-", "_", "é", "A\x00"])
def test_b64_illegal_character(bad):
    with pytest.raises(EncodingError):
        decode(bad)


def test_b64_overflow():
    # 12 digits = 72 bits: a non-zero most significant digit cannot fit
    with pytest.raises(EncodingError):
        decode("B" + "A" * 11)
    # "/" at shift 60 loses its two top bits
    with pytest.raises(EncodingError):
        decode("/" + "A" * 10)
    # "D" at shift 60 still fits
    assert decode("D" + "A" * 10) == 3 << 60


def test_b64_full_64_bits_reinterpreted_signed():
    assert decode("P" + "/" * 10) == -1
    assert decode("I" + "A" * 10) == -(1 << 63)


def test_b64_encode_out_of_range():
    with pytest.raises(EncodingError):
        encode(-1)
    with pytest.raises(EncodingError):
        encode(2**63)

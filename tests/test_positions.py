import pytest

from rotatonator.core.positions import decode_position, encode_position


def test_encode_digits_and_letters():
    assert encode_position(1) == "111"
    assert encode_position(9) == "999"
    assert encode_position(10) == "AAA"
    assert encode_position(35) == "ZZZ"


def test_decode_inverts_encode_for_every_slot():
    for slot in range(1, 36):
        assert decode_position(encode_position(slot)) == slot


@pytest.mark.parametrize("slot", [0, 36, -1])
def test_encode_rejects_out_of_range(slot):
    with pytest.raises(ValueError):
        encode_position(slot)


def test_decode_accepts_other_run_lengths_and_lowercase():
    assert decode_position("3") == 3
    assert decode_position("4444") == 4
    assert decode_position("ccc") == 12


@pytest.mark.parametrize("code", ["", "123", "AAB", "000", "0", "###", "1A1", "aAa", "Bb", "ııı", "ÄÄÄ"])
def test_decode_returns_none_for_malformed_codes(code):
    assert decode_position(code) is None

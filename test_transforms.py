"""
Test the header byte transforms and the signature catalog.
Covers: length preservation, self-inverse methods, bit-shift truncation,
random methods, magic-number matching and type classification.
"""
import io
import random

from PIL import Image

from bittwister import signatures, transforms
from bittwister.models import CorruptionConfig, CorruptionMethod, RecoveryConfig

PREFIX_METHODS = [m for m in CorruptionMethod if m is not CorruptionMethod.OVERWRITE_ALL]


def main():
    print("=" * 60)
    print("  BitTwister Transforms — Test Suite")
    print("=" * 60)
    print()

    test_length_preserved()
    test_header_flip_self_inverse()
    test_reverse_self_inverse()
    test_bit_shift_left()
    test_zero_fill()
    test_random_methods()
    test_overwrite_all()
    test_header_size_edges()
    test_method_parsing()
    test_signature_matching()
    test_classification()

    print()
    print("=" * 60)
    print("  ALL TESTS PASSED ✅")
    print("=" * 60)


def _sample(n: int, seed: int = 7) -> bytes:
    rnd = random.Random(seed)
    return bytes(rnd.randint(0, 255) for _ in range(n))


def test_length_preserved():
    """Every method returns exactly len(input) bytes."""
    print("── Test: length preserved ──")
    rng = random.Random(1)
    for n in (0, 1, 10, 255, 256, 257, 4096):
        data = _sample(n)
        for method in CorruptionMethod:
            out = transforms.apply(method, data, 256, rng)
            assert len(out) == n, f"{method}: {len(out)} != {n}"
    print("  ✅ length preserved: PASS")


def test_header_flip_self_inverse():
    print("── Test: header flip self-inverse ──")
    data = _sample(1000)
    once = transforms.apply(CorruptionMethod.HEADER_FLIP, data, 256)
    assert once[:256] == bytes(0xFF - b for b in data[:256])
    assert once[256:] == data[256:]
    twice = transforms.apply(CorruptionMethod.HEADER_FLIP, once, 256)
    assert twice == data
    print("  ✅ header flip: PASS")


def test_reverse_self_inverse():
    print("── Test: reverse self-inverse ──")
    data = _sample(300)
    once = transforms.apply(CorruptionMethod.REVERSE_BYTES, data, 256)
    assert once[:256] == data[:256][::-1]
    assert once[256:] == data[256:]
    assert transforms.apply(CorruptionMethod.REVERSE_BYTES, once, 256) == data

    # shorter than the header: whole file reversed
    short = b"\x01\x02\x03"
    assert transforms.apply(CorruptionMethod.REVERSE_BYTES, short, 256) == b"\x03\x02\x01"
    print("  ✅ reverse: PASS")


def test_bit_shift_left():
    """Output byte == (input * 2) mod 256; bit 7 is lost."""
    print("── Test: bit shift left ──")
    data = bytes(range(256)) + b"\xFF\x80\x7F"
    out = transforms.apply(CorruptionMethod.BIT_SHIFT_LEFT, data, 256)
    for i in range(256):
        assert out[i] == (data[i] * 2) % 256
    assert out[256:] == data[256:]
    assert out[0x80] == 0x00 and out[0xFF] == 0xFE
    print("  ✅ bit shift left: PASS")


def test_zero_fill():
    print("── Test: zero fill ──")
    data = _sample(600)
    out = transforms.apply(CorruptionMethod.ZERO_FILL, data, 256)
    assert out[:256] == b"\x00" * 256
    assert out[256:] == data[256:]
    assert transforms.apply(CorruptionMethod.ZERO_FILL, b"abc", 256) == b"\x00\x00\x00"
    print("  ✅ zero fill: PASS")


def test_random_methods():
    """Seeded random output is reproducible and never touches the suffix."""
    print("── Test: random bytes ──")
    data = _sample(512)
    a = transforms.apply(CorruptionMethod.RANDOM_BYTES, data, 256, random.Random(42))
    b = transforms.apply(CorruptionMethod.RANDOM_BYTES, data, 256, random.Random(42))
    assert a == b
    assert a[256:] == data[256:]
    assert a[:256] != data[:256]

    unseeded = transforms.apply(CorruptionMethod.RANDOM_BYTES, data, 256)
    assert len(unseeded) == 512 and unseeded[256:] == data[256:]
    print("  ✅ random bytes: PASS")


def test_overwrite_all():
    print("── Test: overwrite all ──")
    data = _sample(2048)
    out = transforms.apply(CorruptionMethod.OVERWRITE_ALL, data, 256, random.Random(3))
    assert len(out) == len(data)
    assert out[256:] != data[256:]
    assert not CorruptionMethod.OVERWRITE_ALL.is_recoverable
    assert all(m.is_recoverable for m in PREFIX_METHODS)
    print("  ✅ overwrite all: PASS")


def test_header_size_edges():
    print("── Test: header size edges ──")
    data = _sample(64)
    for method in PREFIX_METHODS:
        assert transforms.apply(method, data, 0, random.Random(0)) == data
    assert transforms.apply(CorruptionMethod.HEADER_FLIP, b"", 256) == b""

    for bad in (lambda: transforms.apply(CorruptionMethod.ZERO_FILL, data, -1),
                lambda: CorruptionConfig(header_size=-5),
                lambda: RecoveryConfig(header_size=-1)):
        try:
            bad()
        except ValueError:
            pass
        else:
            raise AssertionError("negative header size accepted")

    assert CorruptionConfig().header_size == 256
    assert CorruptionConfig().keep_original is True
    assert RecoveryConfig().header_size == 256
    print("  ✅ header size edges: PASS")


def test_method_parsing():
    print("── Test: method parsing ──")
    assert CorruptionMethod.parse("zero-fill") is CorruptionMethod.ZERO_FILL
    assert CorruptionMethod.parse("ZeroFill") is CorruptionMethod.ZERO_FILL
    assert CorruptionMethod.parse("Header Flip") is CorruptionMethod.HEADER_FLIP
    assert CorruptionMethod.parse("BIT_SHIFT_LEFT") is CorruptionMethod.BIT_SHIFT_LEFT
    assert CorruptionMethod.parse("overwriteall") is CorruptionMethod.OVERWRITE_ALL
    try:
        CorruptionMethod.parse("shred")
    except ValueError as e:
        assert "shred" in str(e)
    else:
        raise AssertionError("unknown method accepted")
    assert CorruptionMethod.REVERSE_BYTES.label == "Reverse Bytes"
    print("  ✅ method parsing: PASS")


def test_signature_matching():
    print("── Test: signature matching ──")
    png = b"\x89PNG\r\n\x1A\n" + b"\x00" * 20
    assert signatures.matches(png, "png")
    assert signatures.matches(png, "PNG")
    assert signatures.matches(png, ".png")
    assert not signatures.matches(png, "jpg")
    assert not signatures.matches(png, "xyz")
    assert not signatures.matches(b"\x89P", "png")

    assert signatures.matches(b"\xFF\xD8\xFF\xE0", "jpg")
    assert signatures.matches(b"\xFF\xD8\xFF\xE0", "JPEG")
    assert signatures.matches(b"PK\x03\x04", "zip")
    assert signatures.matches(b"PK\x03\x04", "docx")
    assert signatures.matches(b"%PDF-1.7", "pdf")
    assert signatures.matches(b"GIF89a", "gif")

    assert signatures.extension_of("/tmp/Photo.JPG") == "jpg"
    assert signatures.extension_of("/tmp/README") == ""
    print("  ✅ signature matching: PASS")


def test_classification():
    print("── Test: classification ──")
    assert signatures.classify_extension("jpg") == "jpeg"
    assert signatures.classify_extension("JPEG") == "jpeg"
    assert signatures.classify_extension("docx") == "zip"
    assert signatures.classify_extension("xyz") is None
    # not in the catalog, known to Pillow
    assert signatures.classify_extension("ico") == "ico"

    buf = io.BytesIO()
    Image.new("RGB", (16, 16), (10, 200, 30)).save(buf, "PNG")
    assert signatures.classify_content(buf.getvalue()) == "png"

    buf = io.BytesIO()
    Image.new("RGB", (32, 32), (0, 0, 255)).save(buf, "ICO")
    assert signatures.classify_content(buf.getvalue()) == "ico"

    assert signatures.classify_content(b"\x13\x37\xC0\xDE" * 64) is None
    assert signatures.classify_content(b"") is None
    print("  ✅ classification: PASS")


if __name__ == "__main__":
    main()

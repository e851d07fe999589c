import pytest


def test_encrypt_grants_minter_and_decrypts(engine):
    handle = engine.encrypt(value=42, bits=32, signer="alice")

    assert handle.startswith("0x") and len(handle) == 66
    assert engine.is_allowed(handle=handle, principal="alice")
    assert engine.bit_width(handle=handle) == 32
    assert engine.decrypt(handle=handle, signer="alice") == 42


def test_handles_are_unique_per_mint(engine):
    first = engine.encrypt(value=1, bits=8, signer="alice")
    second = engine.encrypt(value=1, bits=8, signer="alice")
    assert first != second


def test_decrypt_without_grant_is_unauthorized(engine):
    handle = engine.encrypt(value=7, bits=64, signer="alice")

    with pytest.raises(AssertionError, match="Unauthorized"):
        engine.decrypt(handle=handle, signer="bob")


def test_zero_handle_cannot_be_decrypted(engine, helper_module):
    with pytest.raises(AssertionError, match="Unauthorized"):
        engine.decrypt(handle=helper_module.ZERO_HANDLE, signer="alice")

    assert engine.bit_width(handle=helper_module.ZERO_HANDLE) == 0


def test_encrypt_rejects_bad_width_and_range(engine):
    with pytest.raises(AssertionError, match="Unsupported bit width"):
        engine.encrypt(value=1, bits=12, signer="alice")

    with pytest.raises(AssertionError, match="Value out of range"):
        engine.encrypt(value=256, bits=8, signer="alice")

    with pytest.raises(AssertionError, match="Value out of range"):
        engine.encrypt(value=-1, bits=8, signer="alice")


def test_allow_is_idempotent(engine):
    handle = engine.encrypt(value=9, bits=32, signer="alice")

    engine.allow(handle=handle, principal="bob", signer="alice")
    once = engine.acl[handle, "bob"]
    engine.allow(handle=handle, principal="bob", signer="alice")

    assert engine.acl[handle, "bob"] == once
    assert engine.is_allowed(handle=handle, principal="bob")
    assert engine.decrypt(handle=handle, signer="bob") == 9
    assert not engine.is_allowed(handle=handle, principal="carol")


def test_allow_requires_existing_grant(engine):
    handle = engine.encrypt(value=9, bits=32, signer="alice")

    with pytest.raises(AssertionError, match="Unauthorized"):
        engine.allow(handle=handle, principal="carol", signer="bob")

    assert not engine.is_allowed(handle=handle, principal="carol")


def test_sub_and_add_mint_fresh_handles(engine):
    handle = engine.encrypt(value=500, bits=64, signer="alice")

    lower = engine.sub(handle=handle, amount=100, signer="alice")
    higher = engine.add(handle=lower, amount=30, signer="alice")

    assert len({handle, lower, higher}) == 3
    assert engine.decrypt(handle=handle, signer="alice") == 500
    assert engine.decrypt(handle=lower, signer="alice") == 400
    assert engine.decrypt(handle=higher, signer="alice") == 430
    assert engine.bit_width(handle=higher) == 64


def test_sub_wraps_at_bit_width(engine):
    handle = engine.encrypt(value=3, bits=8, signer="alice")
    wrapped = engine.sub(handle=handle, amount=5, signer="alice")
    assert engine.decrypt(handle=wrapped, signer="alice") == 254


def test_arithmetic_requires_grant(engine):
    handle = engine.encrypt(value=10, bits=32, signer="alice")

    with pytest.raises(AssertionError, match="Unauthorized"):
        engine.sub(handle=handle, amount=1, signer="bob")

    with pytest.raises(AssertionError, match="Unauthorized"):
        engine.ge(handle=handle, amount=1, signer="bob")


def test_ge_compares_against_plaintext_threshold(engine):
    handle = engine.encrypt(value=100, bits=64, signer="alice")

    enough = engine.ge(handle=handle, amount=100, signer="alice")
    short = engine.ge(handle=handle, amount=101, signer="alice")

    assert engine.bit_width(handle=enough) == 1
    assert engine.decrypt(handle=enough, signer="alice") == 1
    assert engine.decrypt(handle=short, signer="alice") == 0

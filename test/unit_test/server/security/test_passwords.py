from fauxdash.server.security.passwords import hash_password, verify_password


def test_hash_and_verify():
    hashed = hash_password("Adm1n-Passw0rd")
    assert hashed.startswith("$argon2")
    assert hashed != hash_password("Adm1n-Passw0rd")
    assert verify_password("Adm1n-Passw0rd", hashed)
    assert not verify_password("adm1n-passw0rd", hashed)


def test_missing_or_malformed_hash():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "not-a-hash")

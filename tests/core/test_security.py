from storefront.core import security


def test_password_hash_and_verify():
    raw_password = "supersecret123"
    hashed = security.get_password_hash(raw_password)

    assert isinstance(hashed, str)
    assert hashed != raw_password
    assert security.verify_password(raw_password, hashed)
    assert not security.verify_password("wrongpassword", hashed)


def test_hashes_are_salted():
    assert security.get_password_hash("same") != security.get_password_hash("same")


def test_verify_password_with_bad_hash():
    assert not security.verify_password("anything", "")
    assert not security.verify_password("anything", "not-a-bcrypt-hash")


def test_long_passwords_are_accepted():
    long_password = "x" * 100
    hashed = security.get_password_hash(long_password)

    assert security.verify_password(long_password, hashed)


def test_session_tokens_are_unique_and_opaque():
    tokens = {security.generate_session_token() for _ in range(50)}

    assert len(tokens) == 50
    assert all(len(token) >= 40 for token in tokens)

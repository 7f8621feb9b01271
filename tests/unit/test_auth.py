import uuid

import pytest

from auth.service import decode_uid, encode_uid, resolve_identity
from auth.utils import sign, verify

SECRET = "unit-secret"


def test_encode_decode_round_trip():
    uid = uuid.uuid4()
    value = encode_uid(uid, SECRET)
    assert len(value) == 96
    assert value.startswith(uid.hex)
    assert decode_uid(value, SECRET) == uid


def test_decode_rejects_tampered_uid():
    value = encode_uid(uuid.uuid4(), SECRET)
    forged = uuid.uuid4().hex + value[32:]
    with pytest.raises(ValueError, match="signature"):
        decode_uid(forged, SECRET)


def test_decode_rejects_wrong_secret():
    value = encode_uid(uuid.uuid4(), SECRET)
    with pytest.raises(ValueError):
        decode_uid(value, "other-secret")


@pytest.mark.parametrize("value", ["", "abc", "z" * 96])
def test_decode_rejects_malformed(value):
    with pytest.raises(ValueError, match="malformed"):
        decode_uid(value, SECRET)


def test_resolve_identity_reuses_valid_cookie():
    uid = uuid.uuid4()
    assert resolve_identity(encode_uid(uid, SECRET), SECRET) == (uid, False)


@pytest.mark.parametrize("cookie", [None, "", "garbage"])
def test_resolve_identity_issues_new(cookie):
    uid, issued = resolve_identity(cookie, SECRET)
    assert issued is True
    assert isinstance(uid, uuid.UUID)


def test_sign_verify():
    sig = sign(b"payload", SECRET)
    assert verify(b"payload", sig, SECRET)
    assert not verify(b"payload!", sig, SECRET)

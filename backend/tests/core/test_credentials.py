"""Credentials — verifies generator formats and constant-time comparison."""

import re

from hackshield.core.credentials import (
    INVITE_ALPHABET, PASSKEY_ALPHABET, clean_team_name, credentials_match,
    generate_access_id, generate_access_password, generate_branch_credentials,
    generate_invite_code, generate_passkey, leader_ide_username, team_ide_username,
    with_suffix,
)

HACKATHON_ID = "12345678-90ab-cdef-1234-567890abcdef"


def test_access_id_is_eight_upper_hex():
    assert re.fullmatch(r"[0-9A-F]{8}", generate_access_id())


def test_access_password_is_sixteen_lower_hex():
    assert re.fullmatch(r"[0-9a-f]{16}", generate_access_password())


def test_branch_credentials_extend_access_id():
    branch_id, password = generate_branch_credentials("AB12CD34")
    assert re.fullmatch(r"AB12CD34-[0-9A-F]{6}", branch_id)
    assert re.fullmatch(r"[0-9A-F]{16}", password)


def test_passkey_uses_readable_alphabet():
    passkey = generate_passkey()
    assert len(passkey) == 16
    assert all(c in PASSKEY_ALPHABET for c in passkey)
    assert not set("0O1Il") & set(PASSKEY_ALPHABET)


def test_invite_code_format():
    code = generate_invite_code()
    assert len(code) == 8
    assert all(c in INVITE_ALPHABET for c in code)


def test_clean_team_name_strips_non_alphanumerics():
    assert clean_team_name("The Byte-Busters #1!") == "thebytebusters1"


def test_team_username_uses_last_six_of_hackathon_id():
    assert team_ide_username("Byte Busters", HACKATHON_ID) == "team_bytebusters_abcdef"


def test_leader_username_uses_first_six_of_hackathon_id():
    assert leader_ide_username("Byte Busters", HACKATHON_ID) == "bytebusters_123456"


def test_credentials_match():
    assert credentials_match("secret", "secret")
    assert not credentials_match("secret", "Secret")
    assert not credentials_match(None, "secret")
    assert not credentials_match("secret", "")


def test_with_suffix_appends_four_hex():
    assert re.fullmatch(r"team_alpha_abc123_[0-9a-f]{4}", with_suffix("team_alpha_abc123"))

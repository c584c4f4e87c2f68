"""Credentials — generators for IDE access ids, passkeys, branch credentials and invite codes.

Invariants:
    - All randomness comes from `secrets` (never `random`)
    - Participant access id: 8 upper-case hex chars; password: 16 lower-case hex chars
    - Branch access id: "<access id>-<6 upper hex>"; branch password: 16 upper hex
    - Team passkey: 16 chars from a readable alphabet (no 0/O/1/I/l)
    - Invite code: 8 chars from A–Z0–9
    - A taken team username gets "_<4 lower hex>" appended

Design Decisions:
    - IDE credentials are stored in plaintext: organizers view and email them.
      Comparison uses secrets.compare_digest to avoid timing leaks.
"""

import re
import secrets
import string

PASSKEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789!@#$%^&*"
INVITE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 8
PASSKEY_LENGTH = 16

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def generate_access_id() -> str:
    return secrets.token_hex(4).upper()


def generate_access_password() -> str:
    return secrets.token_hex(8)


def generate_branch_credentials(access_id: str) -> tuple[str, str]:
    return (
        f"{access_id}-{secrets.token_hex(3).upper()}",
        secrets.token_hex(8).upper(),
    )


def generate_passkey(length: int = PASSKEY_LENGTH) -> str:
    return "".join(secrets.choice(PASSKEY_ALPHABET) for _ in range(length))


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def clean_team_name(name: str) -> str:
    return _NON_ALNUM.sub("", name.lower())


def team_ide_username(team_name: str, hackathon_id: str) -> str:
    """Organizer-issued username: team_<clean name>_<last 6 of hackathon id>."""
    return f"team_{clean_team_name(team_name)}_{hackathon_id.replace('-', '')[-6:]}"


def leader_ide_username(team_name: str, hackathon_id: str) -> str:
    """Leader-requested username: <clean name>_<first 6 of hackathon id>."""
    return f"{clean_team_name(team_name)}_{hackathon_id.replace('-', '')[:6]}"


def with_suffix(username: str) -> str:
    """Disambiguate a taken username: <username>_<4 lower hex>."""
    return f"{username}_{secrets.token_hex(2)}"


def credentials_match(expected: str | None, supplied: str | None) -> bool:
    if not expected or not supplied:
        return False
    return secrets.compare_digest(expected.encode(), supplied.encode())

# auth_code_api/app/core/codes.py
import re
import secrets

# Ambiguous characters (0/O, 1/I) are left out
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_GROUPS = 4
CODE_GROUP_SIZE = 4
CODE_SEPARATOR = "-"
CODE_LENGTH = CODE_GROUPS * CODE_GROUP_SIZE + (CODE_GROUPS - 1)

_GROUP_PATTERN = f"[{CODE_ALPHABET}]{{{CODE_GROUP_SIZE}}}"
CODE_REGEX = re.compile(
    rf"^{_GROUP_PATTERN}(?:{CODE_SEPARATOR}{_GROUP_PATTERN}){{{CODE_GROUPS - 1}}}$"
)


def generate_auth_code() -> str:
    """
    Generates an authorization code in the XXXX-XXXX-XXXX-XXXX format.

    No uniqueness guarantee: the auth_codes UNIQUE constraint catches collisions.
    """
    groups = [
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_SIZE))
        for _ in range(CODE_GROUPS)
    ]
    return CODE_SEPARATOR.join(groups)


def is_well_formed_code(code: str | None) -> bool:
    if not code:
        return False
    return CODE_REGEX.match(code) is not None

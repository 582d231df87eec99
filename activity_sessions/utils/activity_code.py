# activity_sessions/utils/activity_code.py
import re
import secrets
import string

from sqlalchemy.orm import Session

from activity_sessions import crud

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
_CODE_RE = re.compile(r"^[A-Z0-9]{8}$")


def generate_activity_code() -> str:
    """Random 8-character join code, e.g. "A1B2C3D4"."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def is_valid_activity_code(code: str) -> bool:
    return bool(_CODE_RE.match(code))


def format_activity_code(code: str) -> str:
    """
    Split a valid code for display: "A1B2C3D4" -> "A1B2 C3D4".
    Invalid input is returned unchanged.
    """
    if not is_valid_activity_code(code):
        return code
    return f"{code[:4]} {code[4:]}"


def sanitize_activity_code(raw: str) -> str:
    """Strip all whitespace and upper-case user input."""
    return re.sub(r"\s", "", raw).upper()


def generate_unique_activity_code(db: Session, max_attempts: int = 10) -> str:
    """
    Generate a code not yet used by any activity.

    Raises:
        RuntimeError: every attempt collided
    """
    for _ in range(max_attempts):
        code = generate_activity_code()
        if not crud.activity.code_exists(db, code=code):
            return code
    raise RuntimeError("Could not generate a unique activity code")

"""Email derivation rules for logins and registrations.

Corporate accounts log in with the part before '@'; the institutional
(Google Workspace) address is derived from the employee RE number.
"""

from __future__ import annotations


def corporate_email(login: str, domain: str) -> str:
    value = (login or "").strip()
    if "@" in value:
        return value
    return f"{value}@{domain}"


def institutional_email(re_number: str, domain: str) -> str:
    value = (re_number or "").strip()
    if not value:
        return ""
    return f"{value}@{domain}"


def email_local_part(email: str) -> str:
    return (email or "").split("@")[0]

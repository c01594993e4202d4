# tools/hash_admin_password.py
"""
Prints a PBKDF2 hash for the admin password that gates project removal.

Put the output into core/config/config.ini (or the user config.ini):

    [Security]
    admin_password_hash = pbkdf2_sha256$...
"""
import sys
from getpass import getpass

from masterdata.logic.admin_password import hash_password, verify_password


def read_input(prompt: str, hide: bool = False) -> str:
    try:
        if hide and sys.stdin.isatty() and sys.stdout.isatty():
            return getpass(prompt)
        return input(prompt)
    except (EOFError, KeyboardInterrupt):
        print("\nAborted")
        sys.exit(1)


def main() -> int:
    pw = read_input("New admin password: ", hide=True)
    while not pw:
        print("Password must not be empty.")
        pw = read_input("New admin password: ", hide=True)

    if read_input("Repeat password: ", hide=True) != pw:
        print("Passwords do not match.")
        return 1

    encoded = hash_password(pw)
    assert verify_password(pw, encoded)
    print("[Security]")
    print(f"admin_password_hash = {encoded}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

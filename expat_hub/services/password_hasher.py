from argon2 import PasswordHasher

# argon2id, fixed cost parameters
_PH = PasswordHasher(
    memory_cost=19456,
    time_cost=2,
    parallelism=1,
    hash_len=32,
)


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("password must not be empty")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    """Return True only when ``plain`` matches ``hash_value``.

    Never raises: mismatches, malformed hashes and bad argument types all
    come back as False.
    """
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except Exception:
        return False

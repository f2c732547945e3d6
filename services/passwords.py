from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    """Salted one-way hash (werkzeug picks the method and a random salt)"""
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a stored hash"""
    if not password or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Stored value is not a werkzeug hash
        return False

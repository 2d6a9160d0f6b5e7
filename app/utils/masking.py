def mask_secret(value: str) -> str:
    return f"{value[:6]}...{value[-4:]}" if value else "MISSING"

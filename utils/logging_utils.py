from typing import Optional


def mask_value(value: Optional[str]) -> Optional[str]:
    """
    Mask buyer emails, actor names and search terms before they reach the logs.

    Emails keep the first two characters and the domain; long values keep
    their ends; anything short is fully masked.
    """
    if not isinstance(value, str):
        return value
    value = value.strip()
    if not value:
        return value
    if '@' in value:  # email
        name, _, domain = value.partition('@')
        return (name[:2] + '***@' + domain) if name else '***@' + domain
    if len(value) > 12:
        return value[:4] + '...' + value[-4:]
    return '***'

import re

def sanitize_string(v):
    if not isinstance(v, str):
        return v
    # 1. Strip HTML tags
    v = re.sub(r'<[^>]*>', '', v)
    # 2. Trim whitespace
    return v.strip()


def sanitize_tags(tags):
    if tags is None:
        return []
    if not isinstance(tags, list):
        return tags
    cleaned = []
    for tag in tags:
        tag = sanitize_string(tag)
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned
